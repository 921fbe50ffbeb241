"""Integration tests for create_app(): GET /health and POST /verify."""

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app import create_app
from config import AppSettings, RecaptchaSettings
from errors import register_error_handlers
from infrastructure.http_client import HttpClient
from routes.health_routes import router as health_router


def _settings(secret: str) -> AppSettings:
    return AppSettings(recaptcha=RecaptchaSettings(recaptcha_secret=secret))


def _http(body=None, status_code=200):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(status_code, json=body or {"success": True})

    return HttpClient(transport=httpx.MockTransport(handler)), calls


class TestHealthEndpoint:
    def test_healthy_with_real_secret(self):
        http, _ = _http()
        with TestClient(create_app(_settings("live-secret"), http_client=http)) as client:
            resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy", "checks": {"recaptcha": "ok"}}

    def test_degraded_with_test_secret(self):
        http, _ = _http()
        with TestClient(create_app(_settings("test_secret"), http_client=http)) as client:
            resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "degraded"
        assert body["checks"]["recaptcha"] == "test_mode"

    def test_unhealthy_without_gate(self):
        app = FastAPI()
        register_error_handlers(app)
        app.include_router(health_router)
        with TestClient(app) as client:
            resp = client.get("/health")
        assert resp.status_code == 503
        assert resp.json()["checks"]["recaptcha"] == "not_configured"


class TestCreateApp:
    def test_startup_fails_without_secret(self):
        app = create_app(_settings(""))
        with pytest.raises(Exception):
            with TestClient(app):
                pass

    def test_verify_route_uses_app_gate(self):
        http, calls = _http({"success": True, "hostname": "example.com"})
        with TestClient(create_app(_settings("live-secret"), http_client=http)) as client:
            resp = client.post("/verify", json={"g-recaptcha-response": "tok"})
        assert resp.status_code == 200
        assert resp.json() == {
            "verified": True,
            "outcome": {"success": True, "hostname": "example.com"},
        }
        assert len(calls) == 1
        assert calls[0].url.params["secret"] == "live-secret"
        assert calls[0].url.params["response"] == "tok"

    def test_verify_route_rejects_missing_token(self):
        http, calls = _http()
        with TestClient(create_app(_settings("live-secret"), http_client=http)) as client:
            resp = client.post("/verify", json={})
        assert resp.status_code == 400
        assert calls == []

    def test_verify_route_invalid_token(self):
        http, _ = _http({"success": False, "error-codes": ["invalid-input-response"]})
        with TestClient(create_app(_settings("live-secret"), http_client=http)) as client:
            resp = client.post("/verify", headers={"g-recaptcha-response": "stale"})
        assert resp.status_code == 422
