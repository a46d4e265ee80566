"""Tests for the reasoning service clients."""

import json
from types import SimpleNamespace

import httpx
import pytest

from tabletalk.core.gemini import GeminiReasoningClient
from tabletalk.core.prompt_builder import ModelIntent, SuggestInputs, build
from tabletalk.core.reasoning_client import HttpReasoningClient
from tabletalk.exceptions import TransportError

URL = "https://functions.test/ai-data-assistant"


@pytest.fixture
def request_():
    return build(ModelIntent.SUGGEST_QUESTIONS, SuggestInputs(columns=["a", "b"], summary="s"))


def _client(handler) -> HttpReasoningClient:
    return HttpReasoningClient(URL, timeout_seconds=5, transport=httpx.MockTransport(handler))


class TestHttpReasoningClient:
    @pytest.mark.asyncio
    async def test_posts_action_and_returns_text(self, request_):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"text": '["q"]'})

        text = await _client(handler).complete(request_, session_token="tok-123")

        assert text == '["q"]'
        assert seen["auth"] == "Bearer tok-123"
        assert seen["body"]["action"] == "generate-questions"
        assert seen["body"]["data"]["temperature"] == 0.8
        assert seen["body"]["data"]["max_output_tokens"] == 300
        assert seen["body"]["data"]["user_prompt"] == request_.user_prompt

    @pytest.mark.asyncio
    async def test_error_body_becomes_transport_error(self, request_):
        def handler(request):
            return httpx.Response(500, json={"error": "AI gateway error: 429"})

        with pytest.raises(TransportError) as exc_info:
            await _client(handler).complete(request_, session_token="t")

        assert exc_info.value.message == "AI gateway error: 429"
        assert exc_info.value.details["upstream_status"] == 500

    @pytest.mark.asyncio
    async def test_non_json_error_uses_default_message(self, request_):
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        with pytest.raises(TransportError) as exc_info:
            await _client(handler).complete(request_, session_token="t")

        assert exc_info.value.message == "Failed to call AI function"

    @pytest.mark.asyncio
    async def test_network_failure(self, request_):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        with pytest.raises(TransportError):
            await _client(handler).complete(request_, session_token="t")

    @pytest.mark.asyncio
    async def test_missing_text_field(self, request_):
        def handler(request):
            return httpx.Response(200, json={"questions": []})

        with pytest.raises(TransportError):
            await _client(handler).complete(request_, session_token="t")


class FakeModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.kwargs = None

    async def generate_content(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        return SimpleNamespace(text=self.text)


def _gemini(models: FakeModels) -> GeminiReasoningClient:
    return GeminiReasoningClient(model="gemini-test", client=SimpleNamespace(aio=SimpleNamespace(models=models)))


class TestGeminiReasoningClient:
    @pytest.mark.asyncio
    async def test_passes_prompt_and_generation_config(self, request_):
        models = FakeModels(text='["a"]')

        text = await _gemini(models).complete(request_, session_token="t")

        assert text == '["a"]'
        assert models.kwargs["model"] == "gemini-test"
        assert models.kwargs["contents"] == request_.user_prompt
        config = models.kwargs["config"]
        assert config.system_instruction == request_.system_instruction
        assert config.temperature == 0.8
        assert config.max_output_tokens == 300

    @pytest.mark.asyncio
    async def test_empty_response_is_empty_text(self, request_):
        assert await _gemini(FakeModels(text=None)).complete(request_, session_token="t") == ""

    @pytest.mark.asyncio
    async def test_sdk_error_becomes_transport_error(self, request_):
        models = FakeModels(error=RuntimeError("quota exceeded"))

        with pytest.raises(TransportError) as exc_info:
            await _gemini(models).complete(request_, session_token="t")

        assert exc_info.value.details["service"] == "gemini"
        assert "quota exceeded" in exc_info.value.message
