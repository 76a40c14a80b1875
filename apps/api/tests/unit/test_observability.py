import json
import logging

import pytest

from app.observability import JsonLogFormatter, log_event, metrics_store, set_request_id, timed


def test_json_formatter_includes_structured_fields():
    record = logging.LogRecord(
        name="driftsip.orders",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="trash_emptied",
        args=(),
        exc_info=None,
    )
    record.count = 3
    record.origin = "admin"

    payload = json.loads(JsonLogFormatter().format(record))

    assert payload["message"] == "trash_emptied"
    assert payload["level"] == "INFO"
    assert payload["count"] == 3
    assert payload["origin"] == "admin"
    assert payload["order_id"] is None


def test_log_event_attaches_request_id(caplog):
    set_request_id("req-123")
    try:
        with caplog.at_level(logging.INFO, logger="driftsip.orders"):
            log_event("order_paid", order_id="ord-1")
    finally:
        set_request_id(None)

    record = caplog.records[-1]
    assert record.getMessage() == "order_paid"
    assert record.request_id == "req-123"
    assert record.order_id == "ord-1"


def test_request_id_header_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})

    assert response.headers["X-Request-ID"] == "abc-123"


def test_timed_records_duration_even_when_block_raises():
    with pytest.raises(ValueError):
        with timed("archive_sweep_duration_seconds"):
            raise ValueError("boom")

    stats = metrics_store.snapshot().timings["archive_sweep_duration_seconds"]
    assert stats["count"] == 1
    assert stats["max_s"] >= 0
