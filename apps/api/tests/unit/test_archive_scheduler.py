from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import OperationalError

from app.observability import metrics_store
from app.services import archive_scheduler
from app.services.archive_scheduler import (
    DailyArchiveScheduler,
    run_archive_sweep,
    seconds_until_next_run,
)


def test_seconds_until_next_run_later_today():
    now = datetime(2026, 10, 17, 22, 30, tzinfo=timezone.utc)

    assert seconds_until_next_run(now, 23) == 30 * 60


def test_seconds_until_next_run_rolls_over_to_tomorrow():
    now = datetime(2026, 10, 17, 0, 0, tzinfo=timezone.utc)

    assert seconds_until_next_run(now, 0) == 24 * 60 * 60
    assert seconds_until_next_run(now + timedelta(minutes=1), 0) == 24 * 60 * 60 - 60


def test_run_archive_sweep_archives_stale_orders(order_service, clock):
    order_service.create_order({})
    order_service.create_order({})

    archived = run_archive_sweep(clock=lambda: clock.now + timedelta(hours=25))

    assert archived == 2
    assert order_service.list_active_orders() == []
    assert metrics_store.snapshot().counters["orders_archived_total"] == 2


def test_run_archive_sweep_logs_and_swallows_failures(monkeypatch, caplog):
    def _broken(self, now=None):
        raise OperationalError("UPDATE orders", {}, Exception("connection reset"))

    monkeypatch.setattr(archive_scheduler.OrderLifecycleService, "archive_stale", _broken)

    with caplog.at_level("ERROR"):
        assert run_archive_sweep() is None

    assert metrics_store.snapshot().counters["archive_sweep_failures_total"] == 1
    assert any(record.getMessage() == "archive_sweep_failed" for record in caplog.records)


def test_scheduler_loop_runs_sweep_until_stopped():
    calls: list[str] = []
    waits: list[float] = []
    outcomes = iter([False, False, True])

    def fake_wait(seconds: float) -> bool:
        waits.append(seconds)
        return next(outcomes)

    scheduler = DailyArchiveScheduler(
        lambda: calls.append("sweep"),
        run_hour_utc=1,
        clock=lambda: datetime(2026, 10, 17, 0, 0, tzinfo=timezone.utc),
        wait=fake_wait,
    )

    scheduler.run_loop()

    assert calls == ["sweep", "sweep"]
    assert waits == [3600.0, 3600.0, 3600.0]


def test_scheduler_thread_starts_and_stops_cleanly():
    scheduler = DailyArchiveScheduler(lambda: None, run_hour_utc=0)

    scheduler.start()
    assert scheduler.running is True

    scheduler.stop(timeout=2.0)
    assert scheduler.running is False
