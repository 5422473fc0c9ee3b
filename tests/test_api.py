"""Tests for the reflection route and the Claude/echo reflectors."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_reflector
from app.services.llm import ClaudeReflector, EchoReflector, build_reflector
from main import app


def claude_response(*texts):
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=text) for text in texts])


@pytest.fixture
def anthropic_client():
    client = MagicMock()
    client.messages.create.return_value = claude_response("Great job on your run!")
    return client


@pytest.fixture
def reflector(anthropic_client):
    return ClaudeReflector(
        api_key="test-key",
        model="claude-test",
        max_tokens=256,
        fallback_text="No response from Claude",
        client=anthropic_client,
    )


@pytest.fixture
def api(reflector):
    app.dependency_overrides[get_reflector] = lambda: reflector
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestClaudeReflector:
    def test_sends_prompt_as_user_message(self, reflector, anthropic_client):
        assert reflector.reflect("today I ran 5k") == "Great job on your run!"

        anthropic_client.messages.create.assert_called_once_with(
            model="claude-test",
            max_tokens=256,
            messages=[{"role": "user", "content": "today I ran 5k"}],
        )

    def test_uses_first_content_block(self, reflector, anthropic_client):
        anthropic_client.messages.create.return_value = claude_response("first", "second")

        assert reflector.reflect("x") == "first"

    @pytest.mark.parametrize("response", [
        SimpleNamespace(content=[]),
        SimpleNamespace(content=None),
        SimpleNamespace(content=[SimpleNamespace(type="tool_use")]),
        claude_response(""),
    ])
    def test_contentless_response_uses_fallback(self, reflector, anthropic_client, response):
        anthropic_client.messages.create.return_value = response

        assert reflector.reflect("x") == "No response from Claude"

    def test_api_errors_propagate(self, reflector, anthropic_client):
        anthropic_client.messages.create.side_effect = RuntimeError("overloaded")

        with pytest.raises(RuntimeError):
            reflector.reflect("x")


class TestEchoReflector:
    def test_echoes_prompt(self):
        assert EchoReflector().reflect("hello") == 'Here\'s a reflection on your entry: "hello"'

    def test_build_reflector(self):
        assert isinstance(build_reflector("Echo"), EchoReflector)
        with pytest.raises(ValueError, match="expected one of anthropic, echo"):
            build_reflector("carrier-pigeon")


class TestJournalRoute:
    def test_returns_reflection(self, api):
        response = api.post("/api/journal", json={"prompt": "today I ran 5k"})

        assert response.status_code == 200
        assert response.json() == {"result": "Great job on your run!"}

    def test_echoes_correlation_id(self, api):
        response = api.post(
            "/api/journal",
            json={"prompt": "hi"},
            headers={"X-Correlation-ID": "req-42"},
        )

        assert response.headers["X-Correlation-ID"] == "req-42"

    def test_generates_correlation_id(self, api):
        response = api.post("/api/journal", json={"prompt": "hi"})

        assert len(response.headers["X-Correlation-ID"]) == 8

    def test_fallback_text_is_a_success(self, api, anthropic_client):
        anthropic_client.messages.create.return_value = SimpleNamespace(content=[])

        response = api.post("/api/journal", json={"prompt": "hi"})

        assert response.status_code == 200
        assert response.json() == {"result": "No response from Claude"}

    def test_provider_failure_is_502(self, api, anthropic_client):
        anthropic_client.messages.create.side_effect = RuntimeError("boom")

        response = api.post("/api/journal", json={"prompt": "hi"}, headers={"X-Request-ID": "trace-7"})

        assert response.status_code == 502
        error = response.json()["error"]
        assert error["code"] == "EXTERNAL_SERVICE_ERROR"
        assert error["details"] == {"service": "anthropic"}
        assert error["correlation_id"] == "trace-7"

    def test_missing_prompt_is_400(self, api):
        response = api.post("/api/journal", json={})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_unknown_route_is_404(self, api):
        response = api.get("/api/nowhere")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"


class TestHealth:
    def test_health_reports_provider(self):
        app.dependency_overrides[get_reflector] = EchoReflector
        try:
            response = TestClient(app).get("/api/health")
        finally:
            app.dependency_overrides.clear()

        assert response.json() == {"status": "healthy", "provider": "echo"}

    def test_root(self):
        assert TestClient(app).get("/").json() == {"message": "Reflection Journal Service Running"}
