"""
Canonical model registry and provider kinds.

Model identifiers use the ``<provider>/<model-name>`` format, e.g.
``google/gemini-2.5-flash`` or ``openrouter/x-ai/grok-code-fast-1``. The
prefix before the first slash selects the provider adapter.

Example:
    >>> from toolloop.models import parse_model_id, ProviderKind
    >>> parse_model_id("anthropic/claude-sonnet-4-5")
    (<ProviderKind.ANTHROPIC: 'anthropic'>, 'claude-sonnet-4-5')
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple

from .exceptions import ConfigurationError


class ProviderKind(str, Enum):
    """Closed set of supported vendor backends."""

    OPENAI = "openai"
    GOOGLE = "google"
    ANTHROPIC = "anthropic"
    OPENROUTER = "openrouter"


@dataclass(frozen=True)
class ModelInfo:
    """
    Metadata for a known model.

    Attributes:
        id: Full identifier (e.g., "google/gemini-2.5-flash").
        provider: Provider kind that serves the model.
        supports_images: Whether the model accepts image input.
        image_output: Whether the model returns generated images as its response.
    """

    id: str
    provider: ProviderKind
    supports_images: bool = True
    image_output: bool = False

    @property
    def name(self) -> str:
        return self.id.split("/", 1)[1]


class OpenAI:
    """OpenAI models."""

    GPT_5 = ModelInfo(id="openai/gpt-5", provider=ProviderKind.OPENAI)
    GPT_5_MINI = ModelInfo(id="openai/gpt-5-mini", provider=ProviderKind.OPENAI)
    GPT_5_1 = ModelInfo(id="openai/gpt-5.1", provider=ProviderKind.OPENAI)
    # served through a generic OpenAI-compatible endpoint
    GLM_4_6 = ModelInfo(id="openai/glm-4.6", provider=ProviderKind.OPENAI, supports_images=False)


class Google:
    """Google Gemini models."""

    GEMINI_2_5_PRO = ModelInfo(id="google/gemini-2.5-pro", provider=ProviderKind.GOOGLE)
    GEMINI_2_5_FLASH = ModelInfo(id="google/gemini-2.5-flash", provider=ProviderKind.GOOGLE)
    GEMINI_2_5_FLASH_LITE = ModelInfo(
        id="google/gemini-2.5-flash-lite", provider=ProviderKind.GOOGLE
    )
    GEMINI_2_5_FLASH_IMAGE = ModelInfo(
        id="google/gemini-2.5-flash-image-preview",
        provider=ProviderKind.GOOGLE,
        image_output=True,
    )
    GEMINI_3_PRO_PREVIEW = ModelInfo(id="google/gemini-3-pro-preview", provider=ProviderKind.GOOGLE)


class Anthropic:
    """Anthropic Claude models."""

    CLAUDE_SONNET_4_5 = ModelInfo(
        id="anthropic/claude-sonnet-4-5", provider=ProviderKind.ANTHROPIC
    )
    CLAUDE_HAIKU_4_5 = ModelInfo(id="anthropic/claude-haiku-4-5", provider=ProviderKind.ANTHROPIC)


class OpenRouter:
    """Models routed through OpenRouter."""

    GROK_CODE_FAST_1 = ModelInfo(
        id="openrouter/x-ai/grok-code-fast-1", provider=ProviderKind.OPENROUTER
    )
    GLM_4_6 = ModelInfo(id="openrouter/z-ai/glm-4.6", provider=ProviderKind.OPENROUTER)
    CLAUDE_SONNET_4_5 = ModelInfo(
        id="openrouter/anthropic/claude-sonnet-4.5", provider=ProviderKind.OPENROUTER
    )
    GEMINI_3_PRO_PREVIEW = ModelInfo(
        id="openrouter/google/gemini-3-pro-preview", provider=ProviderKind.OPENROUTER
    )
    MORPH_V3_LARGE = ModelInfo(id="openrouter/morph/morph-v3-large", provider=ProviderKind.OPENROUTER)
    GROK_4_1_FAST = ModelInfo(id="openrouter/x-ai/grok-4.1-fast", provider=ProviderKind.OPENROUTER)
    GPT_OSS_120B = ModelInfo(id="openrouter/openai/gpt-oss-120b", provider=ProviderKind.OPENROUTER)
    DEEPSEEK_CHAT_V3_1 = ModelInfo(
        id="openrouter/deepseek/deepseek-chat-v3.1", provider=ProviderKind.OPENROUTER
    )


def _collect(*namespaces: type) -> List[ModelInfo]:
    models: List[ModelInfo] = []
    for namespace in namespaces:
        for attr in vars(namespace).values():
            if isinstance(attr, ModelInfo):
                models.append(attr)
    return models


ALL_MODELS: List[ModelInfo] = _collect(OpenAI, Google, Anthropic, OpenRouter)
MODELS_BY_ID: Dict[str, ModelInfo] = {model.id: model for model in ALL_MODELS}

DEFAULT_MODEL = Google.GEMINI_2_5_FLASH.id


def parse_model_id(model: str) -> Tuple[ProviderKind, str]:
    """
    Split a ``provider/model-name`` identifier.

    Unknown model names are allowed as long as the provider prefix is one of
    the supported kinds, so new vendor models work without a registry update.

    Raises:
        ConfigurationError: If the identifier has no provider prefix or the
            provider is unsupported.
    """
    if not model or "/" not in model:
        raise ConfigurationError(
            f"Model identifier '{model}' is missing a provider prefix",
            suggestion="Use the '<provider>/<model-name>' format, e.g. 'google/gemini-2.5-flash'",
        )
    prefix, name = model.split("/", 1)
    try:
        kind = ProviderKind(prefix)
    except ValueError:
        supported = ", ".join(kind.value for kind in ProviderKind)
        raise ConfigurationError(
            f"Unsupported model provider: {prefix}",
            suggestion=f"Supported providers: {supported}",
        ) from None
    if not name:
        raise ConfigurationError(f"Model identifier '{model}' has an empty model name")
    return kind, name


def get_model_info(model: str) -> ModelInfo:
    """Return registry metadata, synthesising an entry for unregistered ids."""
    if model in MODELS_BY_ID:
        return MODELS_BY_ID[model]
    kind, _ = parse_model_id(model)
    return ModelInfo(id=model, provider=kind)


__all__ = [
    "ProviderKind",
    "ModelInfo",
    "OpenAI",
    "Google",
    "Anthropic",
    "OpenRouter",
    "ALL_MODELS",
    "MODELS_BY_ID",
    "DEFAULT_MODEL",
    "parse_model_id",
    "get_model_info",
]
