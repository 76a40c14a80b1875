from app.observability import metrics_store


def test_metrics_endpoint_returns_typed_payload(client):
    response = client.get("/metrics")

    assert response.status_code == 200
    payload = response.json()
    assert isinstance(payload["counters"], dict)
    assert isinstance(payload["timings"], dict)


def test_metrics_count_requests_and_created_orders(client):
    client.post("/api/orders", json={"totalAmount": 4})

    payload = client.get("/metrics").json()

    assert payload["counters"]["orders_created_total"] == 1
    assert payload["counters"]["http_requests_total"] >= 1
    assert payload["timings"]["http_request_duration_seconds"]["count"] >= 1


def test_metrics_store_reset_clears_counters_and_timings():
    metrics_store.increment("orders_archived_total")
    metrics_store.observe("archive_sweep_duration_seconds", 0.25)

    metrics_store.reset()

    snapshot = metrics_store.snapshot()
    assert snapshot.counters == {}
    assert snapshot.timings == {}


def test_metrics_endpoint_names_the_service(client):
    assert client.get("/metrics").json()["service"] == "Drift and Sip Orders Service"


def test_requests_that_raise_are_still_counted_and_timed():
    from fastapi.testclient import TestClient

    from app.main import app

    def explode():
        raise RuntimeError("store exploded")

    app.add_api_route("/explode", explode)
    try:
        with TestClient(app, raise_server_exceptions=False) as test_client:
            response = test_client.get("/explode")
    finally:
        app.router.routes.pop()

    assert response.status_code == 500
    assert response.json()["error"] == "Internal server error"
    snapshot = metrics_store.snapshot()
    assert snapshot.counters["http_requests_total"] == 1
    assert snapshot.timings["http_request_duration_seconds"]["count"] == 1
