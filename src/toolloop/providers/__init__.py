"""Provider implementations for the supported model backends."""

from .anthropic_provider import AnthropicProvider
from .base import Provider, StreamChunk, normalize_provider_error
from .factory import PROVIDER_BUILDERS, create_provider, resolve_credential
from .gemini_provider import GeminiProvider
from .openai_provider import OpenAIProvider
from .openrouter_provider import OpenRouterProvider
from .stubs import LocalProvider

__all__ = [
    "Provider",
    "StreamChunk",
    "normalize_provider_error",
    "OpenAIProvider",
    "AnthropicProvider",
    "GeminiProvider",
    "OpenRouterProvider",
    "LocalProvider",
    "PROVIDER_BUILDERS",
    "create_provider",
    "resolve_credential",
]
