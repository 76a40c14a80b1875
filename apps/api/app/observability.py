"""Structured logging, request correlation and in-process metrics.

Log records are emitted as one JSON object per line. Metrics live in a single
process-wide store written by request handlers and the archive scheduler
thread, so every mutation happens under a lock.
"""

import json
import logging
import threading
import time
from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import NamedTuple

LOGGER_NAME = "driftsip.orders"

CONTEXT_FIELDS = ("request_id", "order_id", "count", "origin")

_request_id: ContextVar[str | None] = ContextVar("driftsip_request_id", default=None)


class JsonLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            entry[field] = getattr(record, field, None)
        if entry["request_id"] is None:
            entry["request_id"] = _request_id.get()
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(JsonLogFormatter())
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)


def set_request_id(request_id: str | None) -> None:
    _request_id.set(request_id)


def get_request_id() -> str | None:
    return _request_id.get()


def log_event(
    message: str,
    *,
    level: int = logging.INFO,
    order_id: str | None = None,
    count: int | None = None,
    origin: str | None = None,
    exc_info: bool = False,
) -> None:
    context = {
        "request_id": get_request_id(),
        "order_id": order_id,
        "count": count,
        "origin": origin,
    }
    logging.getLogger(LOGGER_NAME).log(level, message, extra=context, exc_info=exc_info)


class MetricsSnapshot(NamedTuple):
    counters: dict[str, int]
    timings: dict[str, dict[str, float]]


class MetricsStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: dict[str, int] = defaultdict(int)
        self._timings: dict[str, list[float]] = defaultdict(list)

    def increment(self, name: str, amount: int = 1) -> None:
        with self._lock:
            self._counters[name] += amount

    def observe(self, name: str, seconds: float) -> None:
        with self._lock:
            self._timings[name].append(seconds)

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._timings.clear()

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            counters = dict(self._counters)
            samples = {name: list(values) for name, values in self._timings.items() if values}
        timings = {
            name: {
                "count": len(values),
                "avg_s": sum(values) / len(values),
                "max_s": max(values),
            }
            for name, values in samples.items()
        }
        return MetricsSnapshot(counters=counters, timings=timings)


metrics_store = MetricsStore()


@contextmanager
def timed(metric_name: str) -> Iterator[None]:
    """Record the wall time of the block, including blocks that raise."""
    start = time.perf_counter()
    try:
        yield
    finally:
        metrics_store.observe(metric_name, time.perf_counter() - start)
