from dataclasses import dataclass
from enum import Enum


class RiskLevel(str, Enum):
    SAFE = "safe"
    CAUTION = "caution"
    DANGER = "danger"


@dataclass(frozen=True)
class RiskThresholds:
    danger_at_c: float = 47.0
    caution_at_c: float = 43.0
    relative_caution_delta_c: float = 10.0


@dataclass(frozen=True)
class RiskAssessment:
    level: RiskLevel
    score: float
    advice: str
    rule: str


DEFAULT_THRESHOLDS = RiskThresholds()

ADVICE = {
    "absolute_danger": "Battery is very hot. Move to a cooler place, close apps, reduce brightness.",
    "absolute_caution": "Battery getting warm. Take a break from charging and reduce brightness.",
    "relative_caution": "Heating faster than ambient. Avoid gaming or heavy apps.",
    "normal": "All good. Keep normal use.",
}

# Fixed meter steps; not a continuous function of temperature.
SCORES = {
    "absolute_danger": 1.0,
    "absolute_caution": 0.66,
    "relative_caution": 0.60,
    "normal": 0.25,
}


def _assessment(rule: str, level: RiskLevel) -> RiskAssessment:
    return RiskAssessment(level=level, score=SCORES[rule], advice=ADVICE[rule], rule=rule)


def classify(
    device_c: float,
    ambient_c: float,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
) -> RiskAssessment:
    """
    Rule-based risk classification of a (device, ambient) temperature pair.

    Rules, first match wins:
      - device >= danger_at_c                       -> DANGER  (1.0)
      - device >= caution_at_c                      -> CAUTION (0.66)
      - device - ambient >= relative_caution_delta  -> CAUTION (0.60)
      - otherwise                                   -> SAFE    (0.25)

    Absolute thresholds are checked before the relative one, so a device that
    is both hot and far above ambient reports the absolute condition.
    """
    th = thresholds
    if device_c >= th.danger_at_c:
        return _assessment("absolute_danger", RiskLevel.DANGER)
    if device_c >= th.caution_at_c:
        return _assessment("absolute_caution", RiskLevel.CAUTION)
    if device_c - ambient_c >= th.relative_caution_delta_c:
        return _assessment("relative_caution", RiskLevel.CAUTION)
    return _assessment("normal", RiskLevel.SAFE)
