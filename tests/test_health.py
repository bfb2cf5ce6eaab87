from __future__ import annotations

from travel_desk.core.config import get_cors_origins


def test_health_check(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["data"]["status"] == "ok"
    assert payload["pagination"] is None
    assert payload["meta"]["source"] == "system"


def test_liveness_check(client):
    response = client.get("/api/v1/healthz")
    assert response.status_code == 200
    assert response.json()["meta"]["calculationVersion"] == "v1"


def test_cors_exposes_content_disposition(client):
    origin = get_cors_origins()[0]
    response = client.get("/api/v1/health", headers={"Origin": origin})
    assert response.headers["access-control-allow-origin"] == origin
    assert "Content-Disposition" in response.headers["access-control-expose-headers"]
