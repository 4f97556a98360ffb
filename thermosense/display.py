from __future__ import annotations

from thermosense.risk import RiskLevel


METER_COLORS = {
    RiskLevel.SAFE: "#10b981",
    RiskLevel.CAUTION: "#f59e0b",
    RiskLevel.DANGER: "#e11d48",
}


def to_fahrenheit(c: float) -> float:
    return c * 9.0 / 5.0 + 32.0


def format_temperature(c: float, use_fahrenheit: bool = False, nd: int = 1) -> str:
    """Render-time unit conversion; stored values stay in °C."""
    if use_fahrenheit:
        return f"{to_fahrenheit(c):.{nd}f} °F"
    return f"{c:.{nd}f} °C"


def meter_percent(score: float) -> int:
    """Severity meter fill, 0..100."""
    return int(round(float(score) * 100.0))


def meter_color(level: RiskLevel) -> str:
    return METER_COLORS[RiskLevel(level)]
