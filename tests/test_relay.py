# tests/test_relay.py
"""Tests for perevod.relay.app (the upstream call is monkeypatched)"""

from __future__ import annotations

import asyncio
import json
from unittest.mock import ANY, AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient

import perevod.relay.app as relay_app
from perevod.config.settings import AppSettings
from perevod.relay.app import create_app, forward_translate

UPSTREAM_OK = {"translations": [{"text": "Комиссия", "detectedLanguageCode": "en"}]}


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(upstream_url="https://upstream.test/translate", request_timeout=7)


@pytest.fixture
def forward(monkeypatch) -> AsyncMock:
    forward = AsyncMock(return_value=(200, UPSTREAM_OK))
    monkeypatch.setattr(relay_app, "forward_translate", forward)
    return forward


@pytest.fixture
def client(settings):
    # Context manager runs the lifespan (shared httpx client)
    with TestClient(create_app(settings)) as client:
        yield client


class TestTranslateRoute:

    @pytest.mark.unit
    def test_success_passes_body_through(self, client, forward):
        response = client.post("/api/translate", json={"texts": ["Commission"], "apiKey": "k"})

        assert response.status_code == 200
        assert response.json() == UPSTREAM_OK
        forward.assert_awaited_once_with(
            ANY, ["Commission"], "k", "https://upstream.test/translate", "ru"
        )

    @pytest.mark.unit
    def test_shared_client_uses_request_timeout(self, client):
        http_client = client.app.state.http_client
        assert isinstance(http_client, httpx.AsyncClient)
        assert http_client.timeout.read == 7

    @pytest.mark.unit
    def test_options_preflight(self, client, forward):
        response = client.options("/api/translate")

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        forward.assert_not_called()

    @pytest.mark.unit
    @pytest.mark.parametrize("method", ["get", "put", "patch", "delete"])
    def test_other_methods_not_allowed(self, client, forward, method):
        response = getattr(client, method)("/api/translate")

        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed"}
        forward.assert_not_called()

    @pytest.mark.unit
    @pytest.mark.parametrize("body", [
        {"texts": ["a"]},
        {"apiKey": "k"},
        {"texts": "", "apiKey": "k"},
        {"texts": ["a"], "apiKey": ""},
        {"texts": None, "apiKey": "k"},
    ])
    def test_missing_fields(self, client, forward, body):
        response = client.post("/api/translate", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing texts or apiKey in request body"}
        forward.assert_not_called()

    @pytest.mark.unit
    def test_invalid_json_body(self, client, forward):
        response = client.post(
            "/api/translate", content=b"not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400

    @pytest.mark.unit
    def test_empty_list_is_forwarded(self, client, forward):
        forward.return_value = (400, '{"message": "texts is empty"}')

        response = client.post("/api/translate", json={"texts": [], "apiKey": "k"})

        assert response.status_code == 400
        forward.assert_awaited_once()

    @pytest.mark.unit
    def test_upstream_error_status_is_mirrored(self, client, forward):
        forward.return_value = (401, '{"code": 16, "message": "Unknown api key"}')

        response = client.post("/api/translate", json={"texts": ["a"], "apiKey": "bad"})

        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "Yandex API Error: 401"
        assert "Unknown api key" in body["details"]

    @pytest.mark.unit
    def test_transport_failure_is_500(self, client, forward):
        forward.side_effect = httpx.ConnectError("Name or service not known")

        response = client.post("/api/translate", json={"texts": ["a"], "apiKey": "k"})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Translation failed"
        assert "Name or service not known" in body["message"]

    @pytest.mark.unit
    def test_cors_headers_on_every_response(self, client, forward):
        for response in (
            client.post("/api/translate", json={"texts": ["a"], "apiKey": "k"}),
            client.post("/api/translate", json={}),
            client.get("/health"),
        ):
            assert response.headers["access-control-allow-origin"] == "*"
            assert response.headers["access-control-allow-credentials"] == "true"
            assert "POST" in response.headers["access-control-allow-methods"]

    @pytest.mark.unit
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestUpstream:
    """Relay against a mocked provider transport"""

    @staticmethod
    def _app_with_upstream(monkeypatch, settings, handler):
        transport = httpx.MockTransport(handler)
        real_client = httpx.AsyncClient

        def client_factory(*args, **kwargs):
            return real_client(*args, transport=transport, **kwargs)

        monkeypatch.setattr(relay_app.httpx, "AsyncClient", client_factory)
        return TestClient(create_app(settings))

    @pytest.mark.unit
    def test_non_json_success_reply_is_500(self, monkeypatch, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>gateway</html>")

        with self._app_with_upstream(monkeypatch, settings, handler) as client:
            response = client.post("/api/translate", json={"texts": ["a"], "apiKey": "k"})

        assert response.status_code == 500
        assert response.json()["error"] == "Translation failed"

    @pytest.mark.unit
    def test_provider_error_text_is_passed_as_details(self, monkeypatch, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, text="denied")

        with self._app_with_upstream(monkeypatch, settings, handler) as client:
            response = client.post("/api/translate", json={"texts": ["a"], "apiKey": "k"})

        assert response.status_code == 403
        assert response.json() == {"error": "Yandex API Error: 403", "details": "denied"}


class TestForwardTranslate:

    @staticmethod
    def _forward(handler, *args, **kwargs):
        async def run():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                return await forward_translate(client, *args, **kwargs)

        return asyncio.run(run())

    @pytest.mark.unit
    def test_builds_provider_request(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=UPSTREAM_OK)

        status, body = self._forward(handler, ["Commission"], "secret", "https://upstream.test/t", "ru")

        assert (status, body) == (200, UPSTREAM_OK)
        request = seen[0]
        assert str(request.url) == "https://upstream.test/t"
        assert request.headers["Authorization"] == "Api-Key secret"
        assert json.loads(request.content) == {
            "texts": ["Commission"],
            "targetLanguageCode": "ru",
        }

    @pytest.mark.unit
    def test_single_text_is_wrapped(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json=UPSTREAM_OK)

        self._forward(handler, "Commission", "secret", "https://upstream.test/t")

        assert seen[0]["texts"] == ["Commission"]

    @pytest.mark.unit
    def test_error_reply_returns_status_and_text(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, text="denied")

        assert self._forward(handler, ["a"], "k", "https://upstream.test/t") == (403, "denied")

    @pytest.mark.unit
    def test_non_json_success_reply_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="not json")

        with pytest.raises(ValueError):
            self._forward(handler, ["a"], "k", "https://upstream.test/t")
