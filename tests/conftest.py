import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import requests

# Make the project root importable when running pytest without an install
THIS_DIR = Path(__file__).resolve().parent
ROOT_DIR = THIS_DIR.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from thermosense.buffer import Observation
from thermosense.risk import classify


class FixedRng:
    """Deterministic stand-in for numpy's Generator: uniform() always returns `value`."""

    def __init__(self, value: float = 0.0):
        self.value = float(value)
        self.calls = []

    def uniform(self, low, high):
        self.calls.append((low, high))
        return self.value


class FakeResponse:
    def __init__(self, payload=None, status=200, bad_json=False):
        self.payload = payload
        self.status = status
        self.bad_json = bad_json

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        if self.bad_json:
            raise ValueError("Expecting value")
        return self.payload


class FakeSession:
    """Records GET calls and replays a canned response or exception."""

    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        if self.exc is not None:
            raise self.exc
        return self.response


T0 = datetime(2026, 2, 1, 10, 0, tzinfo=timezone.utc)


def make_observation(i: int, device_c: float = 35.0, ambient_c: float = 30.0) -> Observation:
    risk = classify(device_c, ambient_c)
    return Observation(
        timestamp=T0 + timedelta(seconds=5 * i),
        device_temp_c=device_c,
        ambient_temp_c=ambient_c,
        level=risk.level,
        advice=risk.advice,
    )


@pytest.fixture()
def zero_rng():
    return FixedRng(0.0)
