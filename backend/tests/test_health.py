from app.core.config import Settings
from app.core.middleware import security_headers


def test_health_endpoints(client):
    assert client.get("/api/health").json() == {"status": "ok"}

    live = client.get("/api/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"

    ready = client.get("/api/health/ready")
    assert ready.status_code in {200, 503}
    payload = ready.json()
    assert "database" in payload
    assert set(payload["database"]) >= {"ok", "schema_ok", "missing_tables", "missing_columns"}
    assert payload["allocation"]["weekly_slots"] == 36


def test_responses_carry_security_headers(client):
    response = client.get("/api/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_hsts_header_is_opt_in():
    assert "Strict-Transport-Security" not in security_headers(Settings())
    headers = security_headers(Settings(security_enable_hsts=True, security_hsts_max_age_seconds=60))
    assert headers["Strict-Transport-Security"] == "max-age=60; includeSubDomains"
