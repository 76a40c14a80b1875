"""Standalone daily archive worker.

Runs the same archive sweep as the API's in-process scheduler, for
deployments that disable the scheduler (DRIFTSIP_ARCHIVE_SCHEDULER_ENABLED=false)
and run the sweep as its own process instead.
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy.orm import sessionmaker

from app.db.session import build_engine
from app.observability import configure_logging, log_event
from app.services.archive_scheduler import run_archive_sweep, seconds_until_next_run
from app.services.lifecycle import now_utc

_DEFAULT_DATABASE_URL = "sqlite+pysqlite:///./drift_and_sip.db"


@dataclass(frozen=True)
class ArchiveWorkerSettings:
    database_url: str
    run_hour_utc: int
    archive_after_hours: int
    run_on_start: bool


@dataclass(frozen=True)
class ArchiveRunResult:
    ok: bool
    archived_count: int
    ran_at: datetime


def _as_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_settings(env: dict[str, str] | None = None) -> ArchiveWorkerSettings:
    source = env if env is not None else os.environ
    database_url = source.get(
        "DRIFTSIP_ARCHIVE_WORKER_DATABASE_URL",
        source.get("DRIFTSIP_DATABASE_URL", _DEFAULT_DATABASE_URL),
    ).strip()
    run_hour_utc = int(source.get("DRIFTSIP_ARCHIVE_WORKER_RUN_HOUR_UTC", "0"))
    archive_after_hours = int(source.get("DRIFTSIP_ARCHIVE_WORKER_ARCHIVE_AFTER_HOURS", "24"))
    run_on_start = _as_bool(source.get("DRIFTSIP_ARCHIVE_WORKER_RUN_ON_START", "false"))

    if not database_url:
        raise ValueError("DRIFTSIP_ARCHIVE_WORKER_DATABASE_URL must not be empty")
    if not 0 <= run_hour_utc <= 23:
        raise ValueError("DRIFTSIP_ARCHIVE_WORKER_RUN_HOUR_UTC must be between 0 and 23")
    if archive_after_hours < 1:
        raise ValueError("DRIFTSIP_ARCHIVE_WORKER_ARCHIVE_AFTER_HOURS must be >= 1")

    return ArchiveWorkerSettings(
        database_url=database_url,
        run_hour_utc=run_hour_utc,
        archive_after_hours=archive_after_hours,
        run_on_start=run_on_start,
    )


def build_session_factory(settings: ArchiveWorkerSettings) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=build_engine(settings.database_url),
    )


def run_archive_once(
    settings: ArchiveWorkerSettings,
    session_factory: sessionmaker,
    clock: Callable[[], datetime] = now_utc,
) -> ArchiveRunResult:
    ran_at = clock()
    archived = run_archive_sweep(
        session_factory=session_factory,
        clock=lambda: ran_at,
        archive_after=timedelta(hours=settings.archive_after_hours),
    )
    return ArchiveRunResult(ok=archived is not None, archived_count=archived or 0, ran_at=ran_at)


def run_forever(
    settings: ArchiveWorkerSettings,
    session_factory: sessionmaker | None = None,
    clock: Callable[[], datetime] = now_utc,
    sleep: Callable[[float], None] = time.sleep,
    max_runs: int | None = None,
) -> None:
    factory = session_factory or build_session_factory(settings)
    runs = 0
    if settings.run_on_start:
        run_archive_once(settings, factory, clock)
        runs += 1

    while max_runs is None or runs < max_runs:
        sleep(seconds_until_next_run(clock(), settings.run_hour_utc))
        run_archive_once(settings, factory, clock)
        runs += 1


if __name__ == "__main__":
    configure_logging()
    worker_settings = load_settings()
    log_event("archive_worker_started")
    run_forever(worker_settings)
