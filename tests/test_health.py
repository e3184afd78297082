"""Tests for health and metrics endpoints."""
from chatlog.models import get_db_connection


def test_liveness(client):
    response = client.get("/health/live")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_readiness(client):
    response = client.get("/health/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready"}


def test_readiness_without_schema(client):
    with get_db_connection() as conn:
        conn.execute("DROP TABLE user_stats")

    response = client.get("/health/ready")
    assert response.status_code == 503
    assert response.json()["reason"] == "database not ready"


def test_metrics_exposes_webhook_outcomes(client):
    client.post("/api/webhook", json={"username": "alice", "message": "hi"})
    client.post("/api/webhook", json={"username": ""})

    response = client.get("/metrics")

    assert response.status_code == 200
    body = response.text
    assert 'webhook_requests_total{result="created"}' in body
    assert 'webhook_requests_total{result="validation_error"}' in body
    assert "stats_update_failures_total" in body
