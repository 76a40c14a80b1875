"""Daily archive sweep.

The sweep promotes stale active orders to archived. Nobody waits on it, so it
never raises: failures are logged and counted, and the next day's run tries
again.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy.orm import sessionmaker

from app.db.session import SessionLocal, session_scope
from app.observability import log_event, metrics_store, timed
from app.services.lifecycle import DEFAULT_ARCHIVE_AFTER, now_utc
from app.services.orders_service import OrderLifecycleService


def seconds_until_next_run(now: datetime, run_hour_utc: int) -> float:
    next_run = now.replace(hour=run_hour_utc, minute=0, second=0, microsecond=0)
    if next_run <= now:
        next_run += timedelta(days=1)
    return (next_run - now).total_seconds()


def run_archive_sweep(
    session_factory: sessionmaker = SessionLocal,
    clock: Callable[[], datetime] = now_utc,
    archive_after: timedelta = DEFAULT_ARCHIVE_AFTER,
) -> int | None:
    """Archive stale orders once. Returns the archived count, or None on failure."""
    log_event("archive_sweep_started")
    try:
        with timed("archive_sweep_duration_seconds"):
            with session_scope(session_factory) as db:
                service = OrderLifecycleService(db, clock=clock, archive_after=archive_after)
                archived = service.archive_stale()
    except Exception:
        metrics_store.increment("archive_sweep_failures_total")
        log_event("archive_sweep_failed", level=logging.ERROR, exc_info=True)
        return None

    log_event("archive_sweep_completed", count=archived)
    return archived


class DailyArchiveScheduler:
    def __init__(
        self,
        sweep: Callable[[], object],
        run_hour_utc: int = 0,
        clock: Callable[[], datetime] = now_utc,
        wait: Callable[[float], bool] | None = None,
    ) -> None:
        self._sweep = sweep
        self._run_hour_utc = run_hour_utc
        self._clock = clock
        self._stop_event = threading.Event()
        self._wait = wait or self._stop_event.wait
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_loop(self) -> None:
        # wait() returns True once stop() has been requested
        while not self._wait(seconds_until_next_run(self._clock(), self._run_hour_utc)):
            self._sweep()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run_loop, name="archive-scheduler", daemon=True
        )
        self._thread.start()
        log_event("archive_scheduler_started")

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        log_event("archive_scheduler_stopped")
