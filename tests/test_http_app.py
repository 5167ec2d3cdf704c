# tests/test_http_app.py
"""Tests for ridr/transport/http_app.py: webhook endpoint over a RIDR app."""
from __future__ import annotations

from fastapi.testclient import TestClient

from ridr.core.app import App
from ridr.platforms import CorePlatform
from ridr.transport.http_app import create_http_app


def _build_client(main_component, **kwargs):
    ridr_app = App({"logging": False}, test_mode=True)
    ridr_app.use(CorePlatform(), main_component)
    return ridr_app, TestClient(create_http_app(ridr_app, **kwargs), raise_server_exceptions=False)


class TestWebhook:
    def test_lifespan_initializes_app(self, main_component):
        ridr_app, client = _build_client(main_component)
        with client:
            assert ridr_app.is_initialized

    def test_returns_platform_response(self, main_component, make_payload):
        _, client = _build_client(main_component)
        with client:
            resp = client.post(
                "/webhook",
                json=make_payload("HelloIntent", entities={"name": "Ada"}),
                headers={"X-Request-ID": "req-http-1"},
            )
        assert resp.status_code == 200
        data = resp.json()
        assert data["output"] == [{"message": "Hello Ada", "listen": False}]
        # The transport's request ID flows into the app's request context
        assert data["context"]["request_id"] == "req-http-1"
        assert resp.headers["X-Request-ID"] == "req-http-1"

    def test_no_response_is_204(self, main_component, make_payload):
        _, client = _build_client(main_component)
        with client:
            resp = client.post("/webhook", json=make_payload("SilentIntent"))
        assert resp.status_code == 204
        assert resp.content == b""

    def test_invalid_json_is_400(self, main_component):
        _, client = _build_client(main_component)
        with client:
            resp = client.post("/webhook", content=b"{not json", headers={"Content-Type": "application/json"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid JSON body"}

    def test_unmatched_platform_is_500(self, main_component, make_payload):
        _, client = _build_client(main_component)
        with client:
            resp = client.post("/webhook", json=make_payload("HelloIntent", platform="unknown"))
        assert resp.status_code == 500
        assert resp.json()["error"] == "Internal server error"

    def test_custom_webhook_path(self, main_component, make_payload):
        _, client = _build_client(main_component, webhook_path="/hooks/core")
        with client:
            assert client.post("/hooks/core", json=make_payload("HelloIntent")).status_code == 200
            assert client.post("/webhook", json=make_payload("HelloIntent")).status_code in (404, 405)


class TestHealth:
    def test_health(self, main_component):
        _, client = _build_client(main_component)
        with client:
            resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy"}
