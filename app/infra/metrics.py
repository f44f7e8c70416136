# app/infra/metrics.py
"""
In-process metrics for the facility bot.

Counters and histograms are keyed ``name{label=value,...}``; histograms keep
a bounded window of recent samples.
"""
from __future__ import annotations
import time
from collections import defaultdict, deque
from threading import Lock
from typing import Deque, Dict
from dataclasses import dataclass, field
from app.infra.logging_config import get_logger

logger = get_logger(__name__)

HISTOGRAM_WINDOW = 1000


@dataclass
class Counter:
    value: int = 0

    def inc(self, amount: int = 1) -> None:
        self.value += amount


@dataclass
class Histogram:
    """Recent samples of a value (e.g. turn processing seconds)"""
    samples: Deque[float] = field(default_factory=lambda: deque(maxlen=HISTOGRAM_WINDOW))
    total_count: int = 0

    def observe(self, value: float) -> None:
        self.samples.append(value)
        self.total_count += 1

    def get_stats(self) -> dict:
        if not self.samples:
            return {"count": 0, "min": 0, "max": 0, "avg": 0, "p50": 0, "p95": 0}

        ordered = sorted(self.samples)
        n = len(ordered)
        return {
            "count": self.total_count,
            "min": ordered[0],
            "max": ordered[-1],
            "avg": sum(ordered) / n,
            "p50": ordered[min(int(n * 0.50), n - 1)],
            "p95": ordered[min(int(n * 0.95), n - 1)],
        }


class MetricsCollector:
    """Thread-safe registry of labelled counters and histograms."""

    def __init__(self):
        self._counters: Dict[str, Counter] = defaultdict(Counter)
        self._histograms: Dict[str, Histogram] = defaultdict(Histogram)
        self._lock = Lock()

    def inc_counter(self, name: str, amount: int = 1, labels: dict | None = None) -> None:
        key = metric_key(name, labels)
        with self._lock:
            self._counters[key].inc(amount)

    def observe_histogram(self, name: str, value: float, labels: dict | None = None) -> None:
        key = metric_key(name, labels)
        with self._lock:
            self._histograms[key].observe(value)

    def counter_value(self, name: str, **labels) -> int:
        """Current value of one counter (0 if never incremented)."""
        key = metric_key(name, labels or None)
        with self._lock:
            counter = self._counters.get(key)
            return counter.value if counter else 0

    def get_metrics(self) -> dict:
        with self._lock:
            return {
                "counters": {k: c.value for k, c in self._counters.items()},
                "histograms": {k: h.get_stats() for k, h in self._histograms.items()},
            }

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._histograms.clear()
        logger.debug("Metrics reset")


def metric_key(name: str, labels: dict | None) -> str:
    """``bot_turns_total`` + ``{"intent": "FriendlyChat"}`` -> ``bot_turns_total{intent=FriendlyChat}``"""
    if not labels:
        return name
    rendered = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
    return f"{name}{{{rendered}}}"


_metrics = MetricsCollector()


def get_metrics_collector() -> MetricsCollector:
    return _metrics


def inc_counter(name: str, amount: int = 1, **labels) -> None:
    _metrics.inc_counter(name, amount, labels or None)


def observe_histogram(name: str, value: float, **labels) -> None:
    _metrics.observe_histogram(name, value, labels or None)


class Timer:
    """Context manager recording elapsed seconds into a histogram"""

    def __init__(self, metric_name: str, **labels):
        self.metric_name = metric_name
        self.labels = labels
        self._started: float | None = None

    def __enter__(self) -> "Timer":
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._started is None:
            return
        observe_histogram(self.metric_name, time.perf_counter() - self._started, **self.labels)


class AppMetrics:
    """Named metrics recorded by the turn orchestrator and adapters"""

    @staticmethod
    def turn_received(intent: str) -> None:
        inc_counter("bot_turns_total", intent=intent)

    @staticmethod
    def outcome(outcome: str) -> None:
        inc_counter("bot_turn_outcomes_total", outcome=outcome)

    @staticmethod
    def members_greeted(count: int = 1) -> None:
        inc_counter("bot_members_greeted_total", amount=count)

    @staticmethod
    def collaborator_error(collaborator: str) -> None:
        inc_counter("collaborator_errors_total", collaborator=collaborator)

    @staticmethod
    def database_error(operation: str) -> None:
        inc_counter("database_errors_total", operation=operation)

    @staticmethod
    def track_turn_time(intent: str) -> Timer:
        return Timer("bot_turn_duration_seconds", intent=intent)
