import dataclasses

import pandas as pd
import pytest

from thermosense.buffer import ObservationBuffer

from conftest import make_observation


def test_capacity_eviction_keeps_most_recent():
    buf = ObservationBuffer(capacity=350)
    appended = [make_observation(i, device_c=20.0 + (i % 30)) for i in range(360)]
    for o in appended:
        buf.append(o)

    assert len(buf) == 350
    assert buf.all()[0] is appended[10]
    assert buf.all() == appended[-350:]
    assert buf.latest() is appended[-1]


def test_size_never_exceeds_capacity():
    buf = ObservationBuffer(capacity=5)
    for i in range(23):
        buf.append(make_observation(i))
        assert len(buf) <= 5


@pytest.mark.parametrize("n,w", [(0, 60), (10, 60), (60, 60), (100, 60), (100, 1), (5, 0)])
def test_recent_window_matches_tail(n, w):
    buf = ObservationBuffer(capacity=350)
    items = [make_observation(i) for i in range(n)]
    for o in items:
        buf.append(o)

    win = buf.recent_window(w)
    assert len(win) == min(max(w, 0), n)
    assert win == (items[-w:] if w > 0 else [])
    ts = [o.timestamp for o in win]
    assert ts == sorted(ts)


def test_empty_buffer():
    buf = ObservationBuffer(capacity=3)
    assert len(buf) == 0
    assert buf.latest() is None
    assert buf.all() == []
    assert buf.recent_window(60) == []
    assert buf.to_frame().empty


def test_all_returns_a_copy():
    buf = ObservationBuffer(capacity=3)
    buf.append(make_observation(0))
    snapshot = buf.all()
    snapshot.clear()
    assert len(buf) == 1


def test_invalid_capacity():
    with pytest.raises(ValueError):
        ObservationBuffer(capacity=0)


def test_to_frame_columns():
    buf = ObservationBuffer(capacity=10)
    buf.append(make_observation(0, device_c=48.0))
    buf.append(make_observation(1, device_c=35.0))
    df = buf.to_frame()
    assert isinstance(df, pd.DataFrame)
    assert list(df.columns) == ["timestamp", "device_temp_c", "ambient_temp_c", "level", "advice"]
    assert df["level"].tolist() == ["danger", "safe"]


def test_observation_is_frozen_after_append():
    buf = ObservationBuffer(capacity=3)
    o = make_observation(0, device_c=36.0)
    buf.append(o)
    with pytest.raises(dataclasses.FrozenInstanceError):
        buf.latest().device_temp_c = 50.0
    assert buf.all()[0].device_temp_c == 36.0
