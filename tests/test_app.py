import json
import logging

from app.core.config import settings
from app.core.logging import JsonLogFormatter
from app.middlewares import request_id_ctx_var


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_request_id_is_echoed_or_generated(client):
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"
    assert response.headers["X-Response-Time"].endswith("ms")

    generated = client.get("/health").headers["X-Request-ID"]
    assert generated and generated != "abc-123"


def test_security_headers(client):
    response = client.get("/admin/logo")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["Cross-Origin-Resource-Policy"] == "cross-origin"


def test_metrics_are_exposed(client):
    client.get("/admin/logo")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "http_request" in response.text


def test_default_logo_asset_is_served(client):
    response = client.get("/logo.png")
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.json() == {"code": "http_error", "message": "Not Found"}


def test_json_log_formatter_includes_request_context():
    record = logging.LogRecord("app.test", logging.INFO, __file__, 1, "timer.started", None, None)
    record.extra_data = {"user_id": 7}
    token = request_id_ctx_var.set("req-1")
    try:
        payload = json.loads(JsonLogFormatter().format(record))
    finally:
        request_id_ctx_var.reset(token)

    assert payload["message"] == "timer.started"
    assert payload["request_id"] == "req-1"
    assert payload["user_id"] == 7
    assert payload["timestamp"].endswith("Z")


def test_domain_events_carry_principal(client, auth_headers):
    lines = []

    class Capture(logging.Handler):
        def emit(self, record):
            lines.append(json.loads(self.format(record)))

    handler = Capture()
    handler.setFormatter(JsonLogFormatter())
    timer_logger = logging.getLogger("app.crud.time_entries")
    previous_level = timer_logger.level
    timer_logger.addHandler(handler)
    timer_logger.setLevel(logging.INFO)
    try:
        assert client.post("/time/start", headers=auth_headers).status_code == 200
    finally:
        timer_logger.removeHandler(handler)
        timer_logger.setLevel(previous_level)

    started = [line for line in lines if line["message"] == "timer.started"]
    assert started
    assert started[0]["principal"].startswith("user:")
    assert started[0]["principal"] == f"user:{started[0]['user_id']}"


def test_every_route_shares_the_general_rate_limit(client, monkeypatch):
    monkeypatch.setattr(settings, "RATE_LIMIT", "3 per minute")

    for _ in range(3):
        assert client.get("/admin/logo").status_code == 200
    response = client.get("/admin/logo")

    assert response.status_code == 429
    assert response.json() == {"code": "rate_limit_exceeded", "message": "Too many requests. Try again later."}
    assert int(response.headers["Retry-After"]) > 0
