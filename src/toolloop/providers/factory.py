"""
Provider selection keyed on the provider kind.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from ..env import CREDENTIAL_ENV_VARS, Credentials, generic_openai_base_url
from ..exceptions import ConfigurationError, ProviderConfigurationError
from ..models import ProviderKind
from .anthropic_provider import AnthropicProvider
from .base import Provider
from .gemini_provider import GeminiProvider
from .openai_provider import OpenAIProvider
from .openrouter_provider import OpenRouterProvider

logger = logging.getLogger(__name__)

ProviderBuilder = Callable[[str, Optional[List[str]]], Provider]


def _build_openai(api_key: str, provider_order: Optional[List[str]]) -> Provider:
    base_url = generic_openai_base_url()
    if base_url:
        logger.info("Using generic OpenAI provider with base URL: %s", base_url)
    return OpenAIProvider(api_key=api_key, base_url=base_url)


def _build_google(api_key: str, provider_order: Optional[List[str]]) -> Provider:
    return GeminiProvider(api_key=api_key)


def _build_anthropic(api_key: str, provider_order: Optional[List[str]]) -> Provider:
    return AnthropicProvider(api_key=api_key)


def _build_openrouter(api_key: str, provider_order: Optional[List[str]]) -> Provider:
    return OpenRouterProvider(api_key=api_key, provider_order=provider_order)


PROVIDER_BUILDERS: Dict[ProviderKind, ProviderBuilder] = {
    ProviderKind.OPENAI: _build_openai,
    ProviderKind.GOOGLE: _build_google,
    ProviderKind.ANTHROPIC: _build_anthropic,
    ProviderKind.OPENROUTER: _build_openrouter,
}


def resolve_credential(kind: ProviderKind, credentials: Credentials) -> str:
    """
    Pick the secret for ``kind``.

    Raises:
        ProviderConfigurationError: If no credential was supplied for the provider.
    """
    secret = credentials.get(kind)
    if not secret:
        raise ProviderConfigurationError(
            provider_name=kind.value,
            missing_config="credentials",
            env_var=CREDENTIAL_ENV_VARS[kind][0],
        )
    return secret


def create_provider(
    kind: ProviderKind,
    credentials: Credentials,
    provider_order: Optional[List[str]] = None,
) -> Provider:
    """
    Construct the adapter for ``kind``.

    Configuration problems surface here, before any network call.

    Raises:
        ConfigurationError: Unsupported provider kind.
        ProviderConfigurationError: Missing credential.
    """
    builder = PROVIDER_BUILDERS.get(kind)
    if builder is None:
        raise ConfigurationError(f"Unsupported model provider: {kind}")
    return builder(resolve_credential(kind, credentials), provider_order)


__all__ = ["PROVIDER_BUILDERS", "create_provider", "resolve_credential"]
