from fastapi.testclient import TestClient

from couponme.core import metrics


def test_healthcheck(client: TestClient) -> None:
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_readiness(client: TestClient) -> None:
    response = client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready"}


def test_request_id_and_security_headers(client: TestClient) -> None:
    response = client.get("/api/v1/health")
    assert response.headers.get("X-Request-ID")
    assert response.headers.get("X-Content-Type-Options") == "nosniff"

    echoed = client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})
    assert echoed.headers["X-Request-ID"] == "req-123"


def test_metrics_snapshot(client: TestClient) -> None:
    metrics.record_signup()
    response = client.get("/api/v1/metrics")
    assert response.status_code == 200
    assert response.json()["signups"] == 1


def test_auth_responses_are_not_cached(client: TestClient) -> None:
    res = client.post("/api/v1/auth/login", json={"email": "nobody@x.com", "password": "whatever1"})
    assert res.headers.get("Cache-Control") == "no-store"
    assert "Cache-Control" not in client.get("/api/v1/health").headers
