import math
from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass
class DeviceThermalParams:
    """Stochastic heat/cool model parameters for the device battery."""
    cooling_rate: float = 0.06      # fraction of the gap to ambient shed per tick
    workload_min_c: float = 0.0     # workload heat lower bound [°C]
    workload_max_c: float = 6.0     # workload heat upper bound (exclusive) [°C]
    workload_bias_c: float = 2.5    # workload at which the heat input is zero [°C]
    dampening: float = 0.4          # scale of the net workload contribution
    t_min_c: float = 20.0           # clamp range [°C]
    t_max_c: float = 55.0
    t_init_c: float = 35.0          # seed temperature [°C]


def _check_finite(name: str, x: float) -> float:
    x = float(x)
    if not math.isfinite(x):
        raise ValueError(f"{name} must be finite, got {x!r}")
    return x


def advance(prev_c: float, ambient_c: float, rng, params: DeviceThermalParams) -> float:
    """
    One discrete step of the device temperature.

    next = prev + (workload - bias) * dampening - max(0, (prev - ambient) * cooling_rate)

    clamped to [t_min_c, t_max_c]. The device only cools passively while it is
    warmer than ambient. ``rng`` is anything with a numpy-Generator style
    ``uniform(low, high)``.

    Raises
    ------
    ValueError
        If ``prev_c`` or ``ambient_c`` is NaN or infinite.
    """
    p = params
    prev_c = _check_finite("prev_c", prev_c)
    ambient_c = _check_finite("ambient_c", ambient_c)

    workload = float(rng.uniform(p.workload_min_c, p.workload_max_c))
    cool = -max(0.0, (prev_c - ambient_c) * p.cooling_rate)
    delta = (workload - p.workload_bias_c) * p.dampening + cool
    return max(p.t_min_c, min(p.t_max_c, prev_c + delta))


class DeviceThermalModel:
    """
    Holds the simulated device temperature and advances it once per tick.

    The random source is injectable so runs can be replayed exactly.
    """

    def __init__(self, params: DeviceThermalParams, rng=None, seed: Optional[int] = None):
        self.p = params
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.t_c = float(params.t_init_c)

    def reset(self, t_init_c: float = None) -> None:
        """Reset temperature to initial value or given value."""
        if t_init_c is None:
            self.t_c = float(self.p.t_init_c)
        else:
            self.t_c = float(t_init_c)

    def step(self, t_amb_c: float) -> float:
        """Advance by one tick against ``t_amb_c`` and return the new temperature."""
        self.t_c = advance(self.t_c, t_amb_c, self.rng, self.p)
        return self.t_c
