"""Archive worker module exports."""

from .worker import (
    ArchiveRunResult,
    ArchiveWorkerSettings,
    load_settings,
    run_archive_once,
    run_forever,
)

__all__ = [
    "ArchiveRunResult",
    "ArchiveWorkerSettings",
    "load_settings",
    "run_archive_once",
    "run_forever",
]
