"""
Proxy Server Tests
==================

HTTP contract of the trusted stylize proxy.
"""

import base64

import pytest
from fastapi.testclient import TestClient

from photomaton import main
from photomaton.config import settings
from photomaton.errors import AuthError
from photomaton.stylize import MockStylizeClient


@pytest.fixture
def http_client():
    """TestClient without lifespan; tests install the upstream client."""
    return TestClient(main.app)


@pytest.fixture
def payload(sample_frame):
    return {
        "image_base64": sample_frame.to_base64(),
        "mime_type": "image/jpeg",
        "instruction": "Transform this image into a Pop Art style.",
    }


class TestHealth:
    """Tests for informational endpoints."""

    def test_health_returns_descriptor(self, http_client):
        response = http_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "service": settings.service.name,
            "status": "healthy",
            "version": settings.service.version,
        }

    def test_root(self, http_client):
        assert http_client.get("/").json()["status"] == "running"

    def test_metrics(self, http_client, monkeypatch):
        monkeypatch.setattr(main, "_stylize_client", MockStylizeClient())
        body = http_client.get("/metrics").json()

        assert "requests" in body
        assert body["upstream_call_count"] == 0


class TestGenerate:
    """Tests for POST /generate."""

    def test_returns_image(self, http_client, payload, monkeypatch, fake_client_cls, sample_frame):
        monkeypatch.setattr(main, "_stylize_client", fake_client_cls())

        response = http_client.post("/generate", json=payload)

        assert response.status_code == 200
        body = response.json()
        assert base64.b64decode(body["image_base64"]) == b"styled:" + sample_frame.pixel_data
        assert body["mime_type"] == "image/png"
        assert body["text"] == "done 1"

    def test_no_output_has_text_only(self, http_client, payload, monkeypatch, fake_client_cls):
        monkeypatch.setattr(main, "_stylize_client", fake_client_cls(no_output_on={1}))

        body = http_client.post("/generate", json=payload).json()

        assert body == {"text": "I can't do that"}

    def test_missing_credential_is_401(self, http_client, payload, monkeypatch, fake_client_cls):
        client = fake_client_cls(fail_on_call=1, error=AuthError("API key not configured"))
        monkeypatch.setattr(main, "_stylize_client", client)

        response = http_client.post("/generate", json=payload)

        assert response.status_code == 401
        assert response.json() == {"error": "API key not configured"}

    def test_upstream_failure_is_502(self, http_client, payload, monkeypatch, fake_client_cls):
        monkeypatch.setattr(main, "_stylize_client", fake_client_cls(fail_on_call=1))

        response = http_client.post("/generate", json=payload)

        assert response.status_code == 502
        assert "boom" in response.json()["error"]

    def test_invalid_base64_is_400(self, http_client, payload, monkeypatch, fake_client_cls):
        client = fake_client_cls()
        monkeypatch.setattr(main, "_stylize_client", client)

        response = http_client.post("/generate", json={**payload, "image_base64": "***"})

        assert response.status_code == 400
        assert client.calls == []

    def test_missing_instruction_is_422(self, http_client, payload, monkeypatch, fake_client_cls):
        monkeypatch.setattr(main, "_stylize_client", fake_client_cls())
        del payload["instruction"]

        assert http_client.post("/generate", json=payload).status_code == 422

    def test_not_ready_is_503(self, http_client, payload, monkeypatch):
        monkeypatch.setattr(main, "_stylize_client", None)

        assert http_client.post("/generate", json=payload).status_code == 503

    def test_mock_upstream_round_trip(self, http_client, payload, monkeypatch):
        monkeypatch.setattr(main, "_stylize_client", MockStylizeClient())

        body = http_client.post("/generate", json=payload).json()

        assert body["mime_type"] == "image/png"
        assert body["image_base64"]


class TestLifespan:
    """Tests for startup and shutdown."""

    def test_lifespan_creates_and_clears_client(self, monkeypatch):
        monkeypatch.setattr(settings.stylize, "backend", "mock")

        with TestClient(main.app) as client:
            assert isinstance(main.get_stylize_client(), MockStylizeClient)
            assert client.get("/health").status_code == 200

        assert main.get_stylize_client() is None

    def test_upstream_without_key_warns(self, monkeypatch, caplog):
        monkeypatch.setattr(settings.stylize, "backend", "gemini")
        monkeypatch.setattr(settings.stylize, "api_key", "")

        with caplog.at_level("WARNING", logger="photomaton.main"):
            client = main.create_upstream_client()

        assert not client.has_credentials
        assert "No API key configured" in caplog.text
