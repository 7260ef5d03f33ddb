"""Tests for the HTTP provider client and the provider registry."""

import json

import httpx
import pytest

from repairbot.providers.llm import (
    OpenAICompatibleProvider,
    ProviderMalformedOutput,
    ProviderUnavailable,
)
from repairbot.providers.registry import (
    create_default_provider,
    create_provider,
    get_registered_providers,
    register_provider,
)
from tests.conftest import FakeProvider


def _completion(content) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _provider(handler) -> OpenAICompatibleProvider:
    return OpenAICompatibleProvider(
        api_key="sk-test",
        model="gpt-test",
        base_url="https://llm.example/v1/",
        transport=httpx.MockTransport(handler),
    )


MESSAGES = [{"role": "system", "content": "prompt"}, {"role": "user", "content": "écran"}]


class TestOpenAICompatibleProvider:
    @pytest.mark.asyncio
    async def test_returns_completion_text(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_completion('{"content": "ok"}'))

        text = await _provider(handler).complete(MESSAGES)
        assert text == '{"content": "ok"}'
        assert seen["url"] == "https://llm.example/v1/chat/completions"
        assert seen["auth"] == "Bearer sk-test"
        assert seen["body"]["model"] == "gpt-test"
        assert seen["body"]["messages"] == MESSAGES
        assert seen["body"]["temperature"] == 0.3
        assert seen["body"]["max_tokens"] == 800

    @pytest.mark.asyncio
    async def test_error_status(self):
        def handler(request):
            return httpx.Response(503, json={"error": {"message": "overloaded"}})

        with pytest.raises(ProviderUnavailable, match="overloaded"):
            await _provider(handler).complete(MESSAGES)

    @pytest.mark.asyncio
    async def test_error_status_without_json(self):
        def handler(request):
            return httpx.Response(500, text="Internal Server Error")

        with pytest.raises(ProviderUnavailable, match="500"):
            await _provider(handler).complete(MESSAGES)

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ProviderUnavailable):
            await _provider(handler).complete(MESSAGES)

    @pytest.mark.asyncio
    async def test_unexpected_envelope(self):
        def handler(request):
            return httpx.Response(200, json={"choices": []})

        with pytest.raises(ProviderMalformedOutput):
            await _provider(handler).complete(MESSAGES)

    @pytest.mark.asyncio
    async def test_non_text_content(self):
        def handler(request):
            return httpx.Response(200, json=_completion(None))

        with pytest.raises(ProviderMalformedOutput):
            await _provider(handler).complete(MESSAGES)


class TestRegistry:
    def test_builtin_providers_registered(self):
        providers = get_registered_providers()
        assert "openai" in providers
        assert "openrouter" in providers

    def test_unknown_provider(self):
        with pytest.raises(KeyError, match="not registered"):
            create_provider("does-not-exist")

    def test_register_custom_provider(self):
        register_provider("fake", lambda **kwargs: FakeProvider(model_name="custom"))
        assert create_provider("fake").model_name == "custom"

    def test_openrouter_base_url(self):
        provider = create_provider("openrouter", api_key="sk-test", model="m")
        assert provider._base_url == "https://openrouter.ai/api/v1"

    def test_default_provider_needs_api_key(self, monkeypatch):
        from repairbot.providers import registry

        class NoKey:
            class model:
                api_key = ""
                provider = "openai"

        monkeypatch.setattr(registry, "settings", NoKey)
        assert create_default_provider() is None
