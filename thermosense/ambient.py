"""
Ambient temperature acquisition.

A one-shot query to the Open-Meteo forecast API for the current 2 m air
temperature at a location. Every failure mode (network, timeout, HTTP status,
malformed payload) resolves to ``None``; the latest good reading lives in an
``AmbientCell`` that the tick loop reads without waiting on the network.
"""

from __future__ import annotations

import logging
import math
import threading
from typing import Any, Optional

import requests

logger = logging.getLogger("thermosense.ambient")

OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"
DEFAULT_AMBIENT_C = 30.0
DEFAULT_TIMEOUT_S = 5.0


def _finite_number(x: Any) -> Optional[float]:
    # bool is an int subclass; a JSON true is not a temperature
    if isinstance(x, bool) or not isinstance(x, (int, float)):
        return None
    x = float(x)
    if not math.isfinite(x):
        return None
    return x


class AmbientCell:
    """Single-slot holder for the latest ambient reading [°C]."""

    def __init__(self, default_c: float = DEFAULT_AMBIENT_C):
        value = _finite_number(default_c)
        if value is None:
            raise ValueError(f"default ambient must be a finite number, got {default_c!r}")
        self._lock = threading.Lock()
        self._value = value
        self._updates = 0

    def get(self) -> float:
        with self._lock:
            return self._value

    def set(self, value: Any) -> bool:
        """Store ``value`` if it is a finite number; return whether it was accepted."""
        v = _finite_number(value)
        if v is None:
            logger.debug(f"Ignored non-finite ambient value {value!r}")
            return False
        with self._lock:
            self._value = v
            self._updates += 1
        return True

    @property
    def has_reading(self) -> bool:
        """True once anything other than the default has been stored."""
        with self._lock:
            return self._updates > 0


def parse_current_temperature(payload: Any) -> Optional[float]:
    """Extract ``current.temperature_2m`` from an Open-Meteo response body."""
    if not isinstance(payload, dict):
        return None
    current = payload.get("current")
    if not isinstance(current, dict):
        return None
    return _finite_number(current.get("temperature_2m"))


def fetch_ambient_temperature(
    latitude: float,
    longitude: float,
    *,
    session: Optional[requests.Session] = None,
    url: str = OPEN_METEO_URL,
    timeout_s: float = DEFAULT_TIMEOUT_S,
) -> Optional[float]:
    """
    Query the current temperature at (latitude, longitude).

    Returns the reading in °C, or None on any failure. Never raises.
    """
    http = session if session is not None else requests
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "current": "temperature_2m",
    }
    try:
        resp = http.get(url, params=params, timeout=timeout_s)
        resp.raise_for_status()
        payload = resp.json()
    except requests.RequestException as e:
        logger.warning(f"Ambient fetch failed for ({latitude}, {longitude}): {e}")
        return None
    except ValueError as e:
        logger.warning(f"Ambient response was not JSON: {e}")
        return None

    value = parse_current_temperature(payload)
    if value is None:
        logger.warning("Ambient response had no numeric current.temperature_2m")
    return value


class AmbientFetcher:
    """
    Cancellable background fetch that writes its result into an AmbientCell.

    Once ``cancel()`` returns, the fetch will not write to the cell.
    """

    def __init__(
        self,
        cell: AmbientCell,
        latitude: float,
        longitude: float,
        *,
        session: Optional[requests.Session] = None,
        url: str = OPEN_METEO_URL,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ):
        self.cell = cell
        self.latitude = float(latitude)
        self.longitude = float(longitude)
        self.session = session
        self.url = url
        self.timeout_s = float(timeout_s)

        self.result: Optional[float] = None
        self._cancelled = False
        self._write_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    def _run(self) -> None:
        value = fetch_ambient_temperature(
            self.latitude,
            self.longitude,
            session=self.session,
            url=self.url,
            timeout_s=self.timeout_s,
        )
        with self._write_lock:
            if self._cancelled:
                logger.debug("Ambient fetch finished after cancel; result dropped")
                return
            self.result = value
            if value is not None and self.cell.set(value):
                logger.info(f"Ambient temperature updated to {value:.1f}°C")

    def start(self) -> "AmbientFetcher":
        if self._thread is not None:
            return self
        self._thread = threading.Thread(target=self._run, name="thermosense-ambient", daemon=True)
        self._thread.start()
        return self

    def run_now(self) -> Optional[float]:
        """Synchronous variant: fetch on the calling thread."""
        self._run()
        return self.result

    def cancel(self) -> None:
        with self._write_lock:
            self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._thread is not None and not self._thread.is_alive()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)
