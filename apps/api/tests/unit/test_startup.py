import pytest

from app.main import app, find_available_port


def test_find_available_port_returns_first_free_port():
    busy = {5000, 5001}

    port = find_available_port("127.0.0.1", 5000, 5, is_free=lambda _host, p: p not in busy)

    assert port == 5002


def test_find_available_port_raises_when_range_exhausted():
    with pytest.raises(RuntimeError, match="5000-5002"):
        find_available_port("127.0.0.1", 5000, 3, is_free=lambda _host, _port: False)


def test_lifespan_skips_scheduler_when_disabled(client):
    assert app.state.archive_scheduler is None
