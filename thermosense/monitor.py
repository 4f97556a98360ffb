from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from thermosense.ambient import AmbientCell, AmbientFetcher, DEFAULT_AMBIENT_C
from thermosense.buffer import Observation, ObservationBuffer
from thermosense.chart import ChartGeometry, ChartPaths, build_chart
from thermosense.config import default_params, param
from thermosense.display import format_temperature
from thermosense.export import export_json, write_export
from thermosense.risk import RiskAssessment, RiskThresholds, classify
from thermosense.scheduler import Ticker
from thermosense.thermal_model import DeviceThermalModel, DeviceThermalParams

logger = logging.getLogger("thermosense.monitor")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_models(params: Dict[str, Any], rng=None) -> Dict[str, Any]:
    """
    Instantiate simulator + classifier thresholds + buffer + chart geometry
    from a parameter dict. Missing keys fall back to the built-in defaults.
    """
    thermal_params = DeviceThermalParams(
        cooling_rate=float(param(params, "thermal_model", "cooling_rate")),
        workload_min_c=float(param(params, "thermal_model", "workload_min_c")),
        workload_max_c=float(param(params, "thermal_model", "workload_max_c")),
        workload_bias_c=float(param(params, "thermal_model", "workload_bias_c")),
        dampening=float(param(params, "thermal_model", "dampening")),
        t_min_c=float(param(params, "thermal_model", "t_min_c")),
        t_max_c=float(param(params, "thermal_model", "t_max_c")),
        t_init_c=float(param(params, "thermal_model", "t_init_c")),
    )
    seed = param(params, "simulation", "seed")
    thermal = DeviceThermalModel(thermal_params, rng=rng, seed=None if seed is None else int(seed))

    thresholds = RiskThresholds(
        danger_at_c=float(param(params, "risk", "danger_at_c")),
        caution_at_c=float(param(params, "risk", "caution_at_c")),
        relative_caution_delta_c=float(param(params, "risk", "relative_caution_delta_c")),
    )

    buffer = ObservationBuffer(capacity=int(param(params, "buffer", "capacity")))

    geometry = ChartGeometry(
        width=float(param(params, "chart", "width_px")),
        height=float(param(params, "chart", "height_px")),
        pad=float(param(params, "chart", "pad_px")),
        y_min=float(param(params, "chart", "y_min_c")),
        y_max=float(param(params, "chart", "y_max_c")),
        grid_c=tuple(float(g) for g in param(params, "chart", "grid_c")),
    )

    return {
        "thermal": thermal,
        "thresholds": thresholds,
        "buffer": buffer,
        "geometry": geometry,
        "chart_window": int(param(params, "buffer", "chart_window")),
        "tick_interval_s": float(param(params, "simulation", "tick_interval_ms")) / 1000.0,
        "ambient": {
            "default_c": float(param(params, "ambient", "default_c")),
            "url": str(param(params, "ambient", "url")),
            "timeout_s": float(param(params, "ambient", "timeout_s")),
            "latitude": param(params, "ambient", "latitude"),
            "longitude": param(params, "ambient", "longitude"),
        },
        "export_filename": str(param(params, "export", "filename")),
    }


@dataclass
class AppState:
    """Process-wide UI state, owned by one ThermoMonitor."""
    running: bool = False
    use_fahrenheit: bool = False
    device_temp_c: float = 35.0
    ambient: AmbientCell = field(default_factory=lambda: AmbientCell(DEFAULT_AMBIENT_C))


class ThermoMonitor:
    """
    Controller for the tick pipeline: simulate -> classify -> append.

    All mutation of the simulated temperature and of the buffer happens in
    ``tick()`` under one lock. The ambient value is read from its cell and
    never awaited.
    """

    def __init__(
        self,
        params: Optional[Dict[str, Any]] = None,
        *,
        rng=None,
        clock: Optional[Callable[[], datetime]] = None,
        session=None,
        background: bool = True,
    ) -> None:
        self.params = params if params is not None else default_params()
        self.models = build_models(self.params, rng=rng)

        self.thermal: DeviceThermalModel = self.models["thermal"]
        self.thresholds: RiskThresholds = self.models["thresholds"]
        self.buffer: ObservationBuffer = self.models["buffer"]
        self.geometry: ChartGeometry = self.models["geometry"]
        self.chart_window = int(self.models["chart_window"])
        self.tick_interval_s = float(self.models["tick_interval_s"])
        self.ambient_cfg = self.models["ambient"]
        self.export_filename = self.models["export_filename"]

        self.clock = clock if clock is not None else _utcnow
        self.session = session

        self.state = AppState(
            device_temp_c=self.thermal.t_c,
            ambient=AmbientCell(self.ambient_cfg["default_c"]),
        )

        self._lock = threading.RLock()
        # without a ticker the caller drives ticks through tick_if_due()
        self._ticker = Ticker(self.tick_interval_s, self.tick) if background else None
        self._fetcher: Optional[AmbientFetcher] = None

    # ------------------------------------------------------------------ tick
    def tick(self, now: Optional[datetime] = None) -> Observation:
        with self._lock:
            ambient_c = self.state.ambient.get()
            device_c = self.thermal.step(ambient_c)
            self.state.device_temp_c = device_c

            risk = classify(device_c, ambient_c, self.thresholds)
            obs = Observation(
                timestamp=now if now is not None else self.clock(),
                device_temp_c=device_c,
                ambient_temp_c=ambient_c,
                level=risk.level,
                advice=risk.advice,
            )
            self.buffer.append(obs)

        logger.debug(f"tick: battery={device_c:.2f}°C ambient={ambient_c:.2f}°C level={risk.level.value}")
        return obs

    def tick_if_due(self, now: Optional[datetime] = None) -> Optional[Observation]:
        """
        Tick once if running and at least one tick interval has passed since
        the latest observation. Returns the new observation, or None.
        """
        if not self.state.running:
            return None
        now = now if now is not None else self.clock()
        with self._lock:
            last = self.buffer.latest()
            if last is not None and (now - last.timestamp).total_seconds() < self.tick_interval_s:
                return None
            return self.tick(now=now)

    def current_risk(self) -> RiskAssessment:
        """Risk of the latest observation, or of the current state before any tick."""
        with self._lock:
            last = self.buffer.latest()
            if last is not None:
                return classify(last.device_temp_c, last.ambient_temp_c, self.thresholds)
            return classify(self.state.device_temp_c, self.state.ambient.get(), self.thresholds)

    # ------------------------------------------------------- run / pause
    @property
    def running(self) -> bool:
        return self.state.running

    def start(self) -> None:
        """Tick once immediately, then every tick interval."""
        if self.state.running:
            return
        self.state.running = True
        self.tick()
        if self._ticker is not None:
            self._ticker.start()
        logger.info(f"Monitoring started (every {self.tick_interval_s:g}s)")

    def pause(self) -> None:
        if not self.state.running:
            return
        self.state.running = False
        # not under self._lock: the ticker thread may be waiting on it
        if self._ticker is not None:
            self._ticker.stop()
        logger.info(f"Monitoring paused ({len(self.buffer)} observations kept)")

    def resume(self) -> None:
        self.start()

    def toggle_running(self) -> bool:
        if self.state.running:
            self.pause()
        else:
            self.resume()
        return self.state.running

    def shutdown(self) -> None:
        self.pause()
        self.cancel_ambient_request()

    # ------------------------------------------------------------ ambient
    @property
    def ambient_c(self) -> float:
        return self.state.ambient.get()

    def set_ambient(self, value: Any) -> bool:
        return self.state.ambient.set(value)

    def request_ambient(self, latitude: float, longitude: float, *, background: bool = True) -> AmbientFetcher:
        """Fetch the ambient temperature for a location; the previous request is cancelled."""
        self.cancel_ambient_request()
        fetcher = AmbientFetcher(
            self.state.ambient,
            latitude,
            longitude,
            session=self.session,
            url=self.ambient_cfg["url"],
            timeout_s=self.ambient_cfg["timeout_s"],
        )
        self._fetcher = fetcher
        if background:
            fetcher.start()
        else:
            fetcher.run_now()
        return fetcher

    def cancel_ambient_request(self) -> None:
        if self._fetcher is not None:
            self._fetcher.cancel()
            self._fetcher = None

    # ------------------------------------------------------------ display
    def toggle_units(self) -> bool:
        self.state.use_fahrenheit = not self.state.use_fahrenheit
        return self.state.use_fahrenheit

    def display_temperature(self, c: float) -> str:
        return format_temperature(c, self.state.use_fahrenheit)

    def chart(self, window: Optional[int] = None) -> ChartPaths:
        w = self.chart_window if window is None else int(window)
        with self._lock:
            recent = self.buffer.recent_window(w)
        return build_chart(recent, self.geometry)

    # ------------------------------------------------------------- export
    def export_json(self) -> str:
        with self._lock:
            observations = self.buffer.all()
        return export_json(observations)

    def export_to(self, out_path: Optional[str | Path] = None) -> Path:
        with self._lock:
            observations = self.buffer.all()
        return write_export(observations, out_path if out_path is not None else self.export_filename)
