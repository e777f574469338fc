"""
Tests for health check endpoints.
"""

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from app.main import app

client = TestClient(app)

HEALTHY_DB = {
    "healthy": True,
    "service": "database_pool",
    "connection_time_ms": 1.2,
    "pool_stats": {
        "pool_size": 3,
        "pool_available": 2,
        "pool_utilization_percent": 33.33,
        "requests_waiting": 0,
    },
}


def test_healthz_endpoint():
    """Test the basic health check endpoint."""
    response = client.get("/healthz")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"


def test_healthz_echoes_request_id():
    response = client.get("/healthz", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


def test_readyz_endpoint_all_services_healthy():
    """Test readiness endpoint when the database pool is healthy."""
    with patch("app.routes.health.db_health_check", AsyncMock(return_value=HEALTHY_DB)):
        response = client.get("/readyz")

    assert response.status_code == 200
    data = response.json()
    assert data["overall_ok"] is True
    assert data["checks"]["database"]["ok"] is True
    assert data["checks"]["database"]["pool_size"] == 3
    assert data["checks"]["configuration"]["monthly_day_limit"] == 21
    assert isinstance(data["checks"]["database"]["latency_ms"], (int, float))


def test_readyz_endpoint_database_unhealthy():
    """Test readiness endpoint when the pool is not initialized."""
    unhealthy = {"healthy": False, "error": "Pool not initialized", "service": "database_pool"}
    with patch("app.routes.health.db_health_check", AsyncMock(return_value=unhealthy)):
        response = client.get("/readyz")

    assert response.status_code == 200
    data = response.json()
    assert data["overall_ok"] is False
    assert data["checks"]["database"]["error"] == "Pool not initialized"


def test_readyz_endpoint_database_check_raises():
    with patch(
        "app.routes.health.db_health_check", AsyncMock(side_effect=RuntimeError("no route"))
    ):
        response = client.get("/readyz")

    data = response.json()
    assert data["overall_ok"] is False
    assert "RuntimeError" in data["checks"]["database"]["error"]


def test_readyz_flags_deprecated_formula():
    with (
        patch("app.routes.health.db_health_check", AsyncMock(return_value=HEALTHY_DB)),
        patch("app.routes.health.settings.RELIABILITY_SCORING_FORMULA", "legacy_completion"),
    ):
        response = client.get("/readyz")

    data = response.json()
    assert data["overall_ok"] is True
    assert "deprecated" in data["checks"]["configuration"]["issues"][0]


def test_database_health_endpoint():
    with patch("app.routes.health.db_health_check", AsyncMock(return_value=HEALTHY_DB)):
        response = client.get("/health/database")

    assert response.status_code == 200
    assert response.json()["healthy"] is True
