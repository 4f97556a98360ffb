"""run_monitor.py

Headless ThermoSense run: simulate, classify and log without a browser.

Run from your project root:
    python run_monitor.py --ticks 120

Optional args:
    python run_monitor.py --ticks 60 --lat 41.01 --lon 28.98 --out results/thermosense_log.json --svg results/chart.svg
    python run_monitor.py --realtime --ticks 12      # tick on the configured interval (5 s)

Notes
- Without --realtime the ticks run back to back with synthetic timestamps
  spaced by the configured tick interval.
- The ambient fetch is best-effort; on failure the default (or --ambient) is kept.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path

from thermosense.buffer import Observation
from thermosense.chart import render_svg
from thermosense.config import DEFAULT_CONFIG_PATH, load_params
from thermosense.export import ExportError
from thermosense.monitor import ThermoMonitor


def _status_line(i: int, obs: Observation, monitor: ThermoMonitor) -> str:
    return (
        f"[{i:4d}] {obs.timestamp:%H:%M:%S} | "
        f"battery={monitor.display_temperature(obs.device_temp_c)} | "
        f"ambient={monitor.display_temperature(obs.ambient_temp_c)} | "
        f"{obs.level.value.upper():7s} | {obs.advice}"
    )


def main(argv=None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", type=str, default=DEFAULT_CONFIG_PATH, help="YAML parameter file")
    ap.add_argument("--ticks", type=int, default=60, help="Number of ticks to run")
    ap.add_argument("--realtime", action="store_true", help="Tick on the configured interval")
    ap.add_argument("--seed", type=int, default=None, help="Random seed for the workload model")

    ap.add_argument("--ambient", type=float, default=None, help="Fixed ambient temperature [°C]")
    ap.add_argument("--lat", type=float, default=None)
    ap.add_argument("--lon", type=float, default=None)

    ap.add_argument("--fahrenheit", action="store_true", help="Print temperatures in °F")
    ap.add_argument("--out", type=str, default=None, help="JSON log path (default: thermosense_log.json)")
    ap.add_argument("--svg", type=str, default=None, help="Optional SVG chart of the last window")
    ap.add_argument("-v", "--verbose", action="store_true")

    args = ap.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    params = load_params(args.config)
    if args.seed is not None:
        params.setdefault("simulation", {})["seed"] = int(args.seed)

    monitor = ThermoMonitor(params)
    if args.fahrenheit:
        monitor.toggle_units()
    if args.ambient is not None:
        monitor.set_ambient(args.ambient)

    lat = args.lat if args.lat is not None else monitor.ambient_cfg["latitude"]
    lon = args.lon if args.lon is not None else monitor.ambient_cfg["longitude"]
    if lat is not None and lon is not None:
        # blocking here so the first tick already sees the reading
        fetcher = monitor.request_ambient(float(lat), float(lon), background=False)
        if fetcher.result is None:
            print(f"Ambient fetch failed; using {monitor.ambient_c:.1f}°C")
        else:
            print(f"Ambient at ({lat}, {lon}): {fetcher.result:.1f}°C")

    n_ticks = max(0, int(args.ticks))
    if args.realtime and n_ticks > 0:
        monitor.start()
        try:
            while len(monitor.buffer) < min(n_ticks, monitor.buffer.capacity):
                time.sleep(0.1)
        except KeyboardInterrupt:
            print("\nInterrupted by user")
        finally:
            monitor.shutdown()
        for i, obs in enumerate(monitor.buffer.all(), start=1):
            print(_status_line(i, obs, monitor))
    else:
        t0 = datetime.now(timezone.utc)
        step = timedelta(seconds=monitor.tick_interval_s)
        for i in range(n_ticks):
            obs = monitor.tick(now=t0 + i * step)
            print(_status_line(i + 1, obs, monitor))

    risk = monitor.current_risk()
    print(f"\nFinal risk: {risk.level.value.upper()} (score={risk.score:.2f}) | {len(monitor.buffer)} observations")

    try:
        out = monitor.export_to(args.out)
    except ExportError as e:
        print(f"Export failed: {e}", file=sys.stderr)
        return 1
    print(f"Saved: {out}")

    if args.svg:
        svg_path = Path(args.svg)
        svg_path.parent.mkdir(parents=True, exist_ok=True)
        svg_path.write_text(render_svg(monitor.chart()), encoding="utf-8")
        print(f"Saved chart: {svg_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
