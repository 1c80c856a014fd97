"""
Tests for provider selection and the offline LocalProvider.
"""

from __future__ import annotations

import pytest

from toolloop.exceptions import ProviderConfigurationError
from toolloop.models import ProviderKind
from toolloop.providers import (
    PROVIDER_BUILDERS,
    AnthropicProvider,
    GeminiProvider,
    LocalProvider,
    OpenAIProvider,
    OpenRouterProvider,
    Provider,
    create_provider,
    resolve_credential,
)
from toolloop.types import FinishReason, Role, human_message


@pytest.fixture(autouse=True)
def no_generic_endpoint(monkeypatch):
    monkeypatch.delenv("LLM_PROVIDER", raising=False)
    monkeypatch.delenv("GENERIC_OPEN_AI_BASE_PATH", raising=False)


def test_every_provider_kind_has_a_builder():
    assert set(PROVIDER_BUILDERS) == set(ProviderKind)


@pytest.mark.parametrize(
    "kind, expected",
    [
        (ProviderKind.OPENAI, OpenAIProvider),
        (ProviderKind.ANTHROPIC, AnthropicProvider),
        (ProviderKind.GOOGLE, GeminiProvider),
        (ProviderKind.OPENROUTER, OpenRouterProvider),
    ],
)
def test_factory_selects_adapter_by_kind(kind, expected):
    provider = create_provider(kind, {kind: "secret"})

    assert isinstance(provider, expected)
    assert isinstance(provider, Provider)


def test_missing_credential_is_a_configuration_error():
    with pytest.raises(ProviderConfigurationError) as exc_info:
        resolve_credential(ProviderKind.ANTHROPIC, {ProviderKind.OPENAI: "sk"})

    assert "ANTHROPIC_API_KEY" in str(exc_info.value)


def test_openrouter_receives_routing_hints():
    provider = create_provider(
        ProviderKind.OPENROUTER, {ProviderKind.OPENROUTER: "or"}, provider_order=["groq", "cerebras"]
    )

    assert provider._extra_body() == {
        "reasoning": {"effort": "medium", "exclude": False},
        "provider": {"order": ["groq", "cerebras"]},
    }


def test_generic_openai_endpoint(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "generic-openai")
    monkeypatch.setenv("GENERIC_OPEN_AI_BASE_PATH", "http://localhost:1234/v1")

    provider = create_provider(ProviderKind.OPENAI, {ProviderKind.OPENAI: "local"})

    assert provider.base_url == "http://localhost:1234/v1"
    assert provider.max_tokens_param == "max_tokens"


@pytest.mark.asyncio
async def test_local_provider_echoes_last_human_message():
    provider = LocalProvider()
    reply = await provider.ainvoke(
        model="echo", system_prompt="", messages=[human_message("first"), human_message("second")]
    )

    assert reply.role == Role.AI
    assert reply.text == "[local provider: echo] second"
    assert reply.finish_reason == FinishReason.STOP
    assert reply.usage.total_tokens > 0


@pytest.mark.asyncio
async def test_default_stream_replays_a_single_call():
    provider = LocalProvider()
    chunks = [
        chunk
        async for chunk in provider.astream(
            model="echo", system_prompt="", messages=[human_message("hi")]
        )
    ]

    assert chunks[0].content == "[local provider: echo] hi"
    assert chunks[-1].message.text == "[local provider: echo] hi"
