# healthscan/processing/loop_stats.py
"""
Prediction loop statistics.

Moving average of cycle time plus counters for completed cycles and ticks
dropped by the in-flight guard.

Usage:
    stats = LoopStats()
    stats.record_cycle(0.042)
    stats.record_drop()
    print(stats.snapshot().avg_cycle_ms)
"""
import threading
from collections import deque
from dataclasses import dataclass, asdict
from typing import Deque


@dataclass
class LoopStatsSnapshot:
    """Point-in-time loop statistics."""
    cycles: int
    dropped_ticks: int
    avg_cycle_ms: float
    last_cycle_ms: float

    def as_dict(self) -> dict:
        return asdict(self)


class LoopStats:
    """
    Cycle timing with a fixed-size moving average.
    """

    def __init__(self, history_size: int = 30):
        # deque drops the oldest sample once full
        self._cycle_times: Deque[float] = deque(maxlen=history_size)
        self._lock = threading.Lock()
        self._cycles = 0
        self._dropped = 0
        self._last = 0.0

    def record_cycle(self, seconds: float):
        with self._lock:
            self._cycle_times.append(seconds)
            self._cycles += 1
            self._last = seconds

    def record_drop(self):
        with self._lock:
            self._dropped += 1

    def snapshot(self) -> LoopStatsSnapshot:
        with self._lock:
            avg = (
                sum(self._cycle_times) / len(self._cycle_times)
                if self._cycle_times else 0.0
            )
            return LoopStatsSnapshot(
                cycles=self._cycles,
                dropped_ticks=self._dropped,
                avg_cycle_ms=avg * 1000,
                last_cycle_ms=self._last * 1000
            )

    def reset(self):
        with self._lock:
            self._cycle_times.clear()
            self._cycles = 0
            self._dropped = 0
            self._last = 0.0
