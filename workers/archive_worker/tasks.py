"""Archive worker tasks."""

from __future__ import annotations

from workers.archive_worker.worker import (
    ArchiveRunResult,
    ArchiveWorkerSettings,
    build_session_factory,
    load_settings,
    run_archive_once,
)


def archive_tick(settings: ArchiveWorkerSettings | None = None) -> ArchiveRunResult:
    """Run a single archive sweep.

    Useful for cron-style scheduling where an external timer owns the cadence.
    """
    resolved_settings = settings or load_settings()
    return run_archive_once(resolved_settings, build_session_factory(resolved_settings))
