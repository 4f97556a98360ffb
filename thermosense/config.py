# thermosense/config.py
from __future__ import annotations

import copy
import warnings
from pathlib import Path
from typing import Any, Dict

import yaml


DEFAULT_CONFIG_PATH = "data/params_thermosense.yaml"

DEFAULT_PARAMS: Dict[str, Any] = {
    "simulation": {
        "tick_interval_ms": 5000,
        "seed": None,
    },
    "thermal_model": {
        "t_init_c": 35.0,
        "cooling_rate": 0.06,
        "workload_min_c": 0.0,
        "workload_max_c": 6.0,
        "workload_bias_c": 2.5,
        "dampening": 0.4,
        "t_min_c": 20.0,
        "t_max_c": 55.0,
    },
    "risk": {
        "danger_at_c": 47.0,
        "caution_at_c": 43.0,
        "relative_caution_delta_c": 10.0,
    },
    "buffer": {
        "capacity": 350,
        "chart_window": 60,
    },
    "chart": {
        "width_px": 700,
        "height_px": 240,
        "pad_px": 30,
        "y_min_c": 20.0,
        "y_max_c": 55.0,
        "grid_c": [20.0, 30.0, 40.0, 50.0],
    },
    "ambient": {
        "default_c": 30.0,
        "url": "https://api.open-meteo.com/v1/forecast",
        "timeout_s": 5.0,
        "latitude": None,
        "longitude": None,
    },
    "export": {
        "filename": "thermosense_log.json",
    },
}


def _project_root() -> Path:
    # thermosense/config.py -> thermosense/ -> project root
    return Path(__file__).resolve().parents[1]


def _get(d: dict, *keys, default=None):
    cur = d
    for k in keys:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def default_params() -> Dict[str, Any]:
    """Fresh copy of the built-in parameter set."""
    return copy.deepcopy(DEFAULT_PARAMS)


def param(params: dict, *keys):
    """Nested lookup falling back to DEFAULT_PARAMS when the key is missing or null."""
    v = _get(params, *keys, default=None)
    if v is None:
        return _get(DEFAULT_PARAMS, *keys, default=None)
    return v


def _validate_params(params: dict) -> None:
    """
    Sanity-check the monitor parameters.
    Hard inconsistencies raise ValueError, soft ones emit a RuntimeWarning.
    Does not mutate params.
    """
    # --- Hard errors ---
    t_min = float(param(params, "thermal_model", "t_min_c"))
    t_max = float(param(params, "thermal_model", "t_max_c"))
    if t_min >= t_max:
        raise ValueError(f"Invalid clamp range: t_min_c ({t_min}) >= t_max_c ({t_max})")

    capacity = int(param(params, "buffer", "capacity"))
    if capacity < 1:
        raise ValueError(f"buffer.capacity must be >= 1, got {capacity}")

    window = int(param(params, "buffer", "chart_window"))
    if window < 1:
        raise ValueError(f"buffer.chart_window must be >= 1, got {window}")

    tick_ms = float(param(params, "simulation", "tick_interval_ms"))
    if tick_ms <= 0.0:
        raise ValueError(f"simulation.tick_interval_ms must be > 0, got {tick_ms}")

    y_min = float(param(params, "chart", "y_min_c"))
    y_max = float(param(params, "chart", "y_max_c"))
    if y_min >= y_max:
        raise ValueError(f"Invalid chart domain: y_min_c ({y_min}) >= y_max_c ({y_max})")

    danger = float(param(params, "risk", "danger_at_c"))
    caution = float(param(params, "risk", "caution_at_c"))
    if caution > danger:
        raise ValueError(f"risk.caution_at_c ({caution}) is above risk.danger_at_c ({danger})")

    # --- Soft warnings ---
    if window > capacity:
        warnings.warn(
            f"[params sanity-check] buffer.chart_window ({window}) exceeds buffer.capacity ({capacity}); "
            "the chart can never show a full window.",
            RuntimeWarning,
        )

    w_min = float(param(params, "thermal_model", "workload_min_c"))
    w_max = float(param(params, "thermal_model", "workload_max_c"))
    if w_max <= w_min:
        warnings.warn(
            f"[params sanity-check] workload range [{w_min}, {w_max}) is empty; workload heat is constant.",
            RuntimeWarning,
        )

    t_init = float(param(params, "thermal_model", "t_init_c"))
    if not (t_min <= t_init <= t_max):
        warnings.warn(
            f"[params sanity-check] thermal_model.t_init_c ({t_init}) is outside [{t_min}, {t_max}]; "
            "the first tick will clamp it.",
            RuntimeWarning,
        )


def load_params(path: str = DEFAULT_CONFIG_PATH, *, validate: bool = True) -> dict:
    """
    Load monitor parameters from a YAML file.

    - Resolves relative paths against the project root for robustness.
    - Optionally runs a sanity-check (warnings, no mutation).
    """
    path_obj = Path(path)
    if not path_obj.is_absolute():
        path_obj = _project_root() / path_obj

    if not path_obj.exists():
        raise FileNotFoundError(f"Config file not found: {path_obj.resolve()}")

    with path_obj.open("r", encoding="utf-8") as f:
        params = yaml.safe_load(f) or {}

    if not isinstance(params, dict):
        raise ValueError(f"Config file must contain a mapping at top level: {path_obj}")

    if validate:
        _validate_params(params)

    return params
