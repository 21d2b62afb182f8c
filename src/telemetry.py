# src/telemetry.py

import logging
import threading
from collections import deque
from dataclasses import asdict
from typing import Deque, Dict, List, Optional

import pandas as pd

import config
from models import PerformanceMetrics

METRIC_COLUMNS = [
    "co2_emissions",
    "energy_consumption",
    "throughput",
    "temperature",
    "pressure",
    "vibration",
    "efficiency",
]


class TelemetryHistory:
    """Bounded per-facility sample history plus one baseline per facility

    Writes to a facility's history are serialized by a per-facility lock, so
    several producers may record concurrently. Reads return copies.
    """

    def __init__(self, limit: int = config.HISTORY_LIMIT):
        if limit <= 0:
            raise ValueError(f"History limit must be positive: {limit}")
        self.limit = limit
        self._history: Dict[str, Deque[PerformanceMetrics]] = {}
        self._baselines: Dict[str, PerformanceMetrics] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, facility_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(facility_id)
            if lock is None:
                lock = self._locks[facility_id] = threading.Lock()
                self._history[facility_id] = deque(maxlen=self.limit)
            return lock

    def record(self, sample: PerformanceMetrics) -> None:
        """Append a sample; the oldest one is evicted once the limit is exceeded"""
        with self._lock_for(sample.facility_id):
            self._history[sample.facility_id].append(sample)

    def history(self, facility_id: str) -> List[PerformanceMetrics]:
        """Samples for a facility, oldest first"""
        if facility_id not in self._locks:
            return []
        with self._lock_for(facility_id):
            return list(self._history[facility_id])

    def count(self, facility_id: str) -> int:
        if facility_id not in self._locks:
            return 0
        with self._lock_for(facility_id):
            return len(self._history[facility_id])

    def set_baseline(self, facility_id: str, metrics: PerformanceMetrics) -> None:
        """Replace the reference sample for a facility"""
        with self._lock_for(facility_id):
            self._baselines[facility_id] = metrics

    def get_baseline(self, facility_id: str) -> Optional[PerformanceMetrics]:
        return self._baselines.get(facility_id)

    @property
    def facility_ids(self) -> List[str]:
        with self._registry_lock:
            return list(self._locks)

    def to_frame(self, facility_id: str) -> pd.DataFrame:
        """History of a facility as a DataFrame indexed by timestamp"""
        samples = self.history(facility_id)
        if not samples:
            return pd.DataFrame(columns=["facility_id", "timestamp"] + METRIC_COLUMNS)
        df = pd.DataFrame([asdict(s) for s in samples])
        return df.set_index("timestamp")

    def summary(self, facility_id: str) -> Dict[str, float]:
        """Mean of every metric over the stored window; empty if no history"""
        df = self.to_frame(facility_id)
        if df.empty:
            return {}
        means = df[METRIC_COLUMNS].mean()
        logging.debug(f"History summary for {facility_id}: {len(df)} samples")
        return {column: float(value) for column, value in means.items()}
