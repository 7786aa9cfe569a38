from __future__ import annotations

import pendulum

from conftest import BrokenRedis
from recruit.cache import get_redis
from recruit.api import app


def test_quick_health_skips_checks(client):
    for quick in ("true", "1"):
        response = client.get("/health", params={"quick": quick})
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["version"] == "0.1.0"
        assert "checks" not in body
        assert pendulum.parse(body["timestamp"])


def test_full_health_checks_database_and_redis(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["checks"]["database"]["status"] == "ok"
    assert body["checks"]["redis"]["status"] == "ok"
    assert body["checks"]["database"]["latency_ms"] >= 0


def test_health_degraded_when_redis_down(client):
    app.dependency_overrides[get_redis] = lambda: BrokenRedis()

    body = client.get("/health").json()

    assert body["status"] == "degraded"
    assert body["checks"]["database"]["status"] == "ok"
    assert body["checks"]["redis"]["status"] == "error"


def test_health_without_redis_configured(client):
    app.dependency_overrides[get_redis] = lambda: None

    body = client.get("/health").json()

    assert body["status"] == "ok"
    assert "redis" not in body["checks"]
