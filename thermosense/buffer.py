from __future__ import annotations

from collections import deque
from itertools import islice
from dataclasses import dataclass
from datetime import datetime
from typing import Deque, Iterator, List, Optional

import pandas as pd

from thermosense.risk import RiskLevel


@dataclass(frozen=True)
class Observation:
    """One tick of the monitor: both temperatures and the risk verdict."""
    timestamp: datetime
    device_temp_c: float
    ambient_temp_c: float
    level: RiskLevel
    advice: str


class ObservationBuffer:
    """
    Append-only, capacity-bounded history of observations.

    Insertion order is chronological. Once full, each append drops the oldest
    entry; retained entries are never reordered or replaced.
    """

    def __init__(self, capacity: int = 350):
        capacity = int(capacity)
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._items: Deque[Observation] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return int(self._items.maxlen)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Observation]:
        return iter(list(self._items))

    def append(self, observation: Observation) -> None:
        self._items.append(observation)

    def latest(self) -> Optional[Observation]:
        if not self._items:
            return None
        return self._items[-1]

    def recent_window(self, w: int) -> List[Observation]:
        """Last min(w, len) observations, oldest first."""
        w = int(w)
        if w <= 0:
            return []
        n = len(self._items)
        start = max(0, n - w)
        return list(islice(self._items, start, n))

    def all(self) -> List[Observation]:
        return list(self._items)

    def to_frame(self) -> pd.DataFrame:
        """Tabular view for display; one row per retained observation."""
        rows = [
            {
                "timestamp": o.timestamp,
                "device_temp_c": o.device_temp_c,
                "ambient_temp_c": o.ambient_temp_c,
                "level": o.level.value,
                "advice": o.advice,
            }
            for o in self._items
        ]
        return pd.DataFrame(rows, columns=["timestamp", "device_temp_c", "ambient_temp_c", "level", "advice"])
