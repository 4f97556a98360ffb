from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List

from thermosense.buffer import Observation


DEFAULT_EXPORT_FILENAME = "thermosense_log.json"


class ExportError(Exception):
    """The observation log could not be serialized or written."""


def _epoch_ms(o: Observation) -> int:
    return int(round(o.timestamp.timestamp() * 1000.0))


def observations_to_records(observations: Iterable[Observation]) -> List[Dict[str, Any]]:
    """
    One dict per observation:
      t       : epoch milliseconds
      battery : device temperature [°C], 2 decimals
      ambient : ambient temperature [°C], 2 decimals
      level   : lowercase risk level
      tip     : advice text
    """
    return [
        {
            "t": _epoch_ms(o),
            "battery": round(float(o.device_temp_c), 2),
            "ambient": round(float(o.ambient_temp_c), 2),
            "level": o.level.value,
            "tip": o.advice,
        }
        for o in observations
    ]


def export_json(observations: Iterable[Observation]) -> str:
    try:
        return json.dumps(observations_to_records(observations), indent=2, allow_nan=False)
    except (TypeError, ValueError, AttributeError, OverflowError) as e:
        raise ExportError(f"Could not serialize observation log: {e}") from e


def write_export(observations: Iterable[Observation], out_path: str | Path = DEFAULT_EXPORT_FILENAME) -> Path:
    """Write the JSON log to ``out_path`` and return the path written."""
    text = export_json(observations)
    out_path = Path(out_path)
    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise ExportError(f"Could not write observation log to {out_path}: {e}") from e
    return out_path
