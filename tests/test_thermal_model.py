import math

import numpy as np
import pytest

from thermosense.risk import RiskLevel, classify
from thermosense.thermal_model import DeviceThermalModel, DeviceThermalParams, advance

from conftest import FixedRng


def test_zero_workload_drifts_toward_ambient(zero_rng):
    p = DeviceThermalParams()
    model = DeviceThermalModel(p, rng=zero_rng)
    model.reset(35.0)

    temps = [model.step(30.0) for _ in range(3)]

    # 35 -> 35 - 1.0 - 0.3 = 33.7 -> 33.7 - 1.0 - 0.222 = 32.478 ...
    assert temps[0] == pytest.approx(33.7)
    assert temps[1] == pytest.approx(32.478)
    assert temps[0] > temps[1] > temps[2] >= 30.0 - 1.0
    assert all(classify(t, 30.0).level == RiskLevel.SAFE for t in temps)
    assert zero_rng.calls == [(0.0, 6.0)] * 3


def test_no_cooling_when_colder_than_ambient():
    p = DeviceThermalParams()
    # workload == bias -> only the cooling term acts, and it is zero below ambient
    assert advance(25.0, 30.0, FixedRng(2.5), p) == pytest.approx(25.0)
    # above ambient it cools proportionally to the gap
    assert advance(40.0, 30.0, FixedRng(2.5), p) == pytest.approx(40.0 - 10.0 * 0.06)


def test_max_workload_heats():
    p = DeviceThermalParams()
    nxt = advance(30.0, 30.0, FixedRng(6.0), p)
    assert nxt == pytest.approx(30.0 + 3.5 * 0.4)


def test_clamped_to_physical_range():
    p = DeviceThermalParams()
    assert advance(55.0, 55.0, FixedRng(6.0), p) == 55.0
    assert advance(20.0, 20.0, FixedRng(0.0), p) == 20.0
    assert advance(21.0, -40.0, FixedRng(0.0), p) == 20.0


def test_output_always_in_range_with_real_rng():
    p = DeviceThermalParams()
    rng = np.random.default_rng(123)
    prev = 35.0
    for ambient in np.linspace(-20.0, 70.0, 400):
        prev = advance(prev, float(ambient), rng, p)
        assert 20.0 <= prev <= 55.0


@pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
def test_non_finite_input_rejected(bad):
    p = DeviceThermalParams()
    with pytest.raises(ValueError):
        advance(35.0, bad, FixedRng(0.0), p)
    with pytest.raises(ValueError):
        advance(bad, 30.0, FixedRng(0.0), p)


def test_seeded_models_replay_identically():
    p = DeviceThermalParams()
    a = DeviceThermalModel(p, seed=7)
    b = DeviceThermalModel(p, seed=7)
    assert [a.step(30.0) for _ in range(20)] == [b.step(30.0) for _ in range(20)]


def test_reset():
    p = DeviceThermalParams(t_init_c=36.0)
    m = DeviceThermalModel(p, seed=1)
    for _ in range(5):
        m.step(30.0)
    m.reset()
    assert m.t_c == 36.0
    m.reset(41.5)
    assert m.t_c == 41.5
