"""Metrics collection."""

import threading
import time
from contextlib import contextmanager
from typing import Any, Dict, Mapping


class MetricsCollector:
    """Thread-safe collection of gauges, counters and timers."""

    def __init__(self):
        self._lock = threading.Lock()
        self.metrics: Dict[str, Any] = {}
        self.counters: Dict[str, int] = {}
        self.timers: Dict[str, float] = {}
        self.start_times: Dict[str, float] = {}

    def set_metric(self, name: str, value: Any):
        with self._lock:
            self.metrics[name] = value

    def record(self, values: Mapping[str, Any]):
        """Set several metrics at once."""
        with self._lock:
            self.metrics.update(values)

    def increment_counter(self, name: str, delta: int = 1):
        with self._lock:
            self.counters[name] = self.counters.get(name, 0) + delta

    def start_timer(self, name: str):
        with self._lock:
            self.start_times[name] = time.perf_counter()

    def stop_timer(self, name: str) -> float:
        """Stop a timer and record its duration; 0.0 if it was never started."""
        with self._lock:
            start = self.start_times.pop(name, None)
            if start is None:
                return 0.0
            duration = time.perf_counter() - start
            self.timers[name] = duration
            return duration

    @contextmanager
    def timer(self, name: str):
        self.start_timer(name)
        try:
            yield
        finally:
            self.stop_timer(name)

    def get_all_metrics(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "metrics": self.metrics.copy(),
                "counters": self.counters.copy(),
                "timers": self.timers.copy(),
            }

    def reset(self):
        with self._lock:
            self.metrics.clear()
            self.counters.clear()
            self.timers.clear()
            self.start_times.clear()

    def summary_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "total_metrics": len(self.metrics),
                "total_counters": len(self.counters),
                "total_timers": len(self.timers),
                "counter_sum": sum(self.counters.values()),
                "timer_total": sum(self.timers.values()),
            }
