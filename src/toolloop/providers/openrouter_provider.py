"""
OpenRouter provider adapter.

OpenRouter exposes an OpenAI-compatible API, so this adapter reuses the
OpenAI request/response mapping and adds routing hints and reasoning.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..exceptions import ProviderConfigurationError
from .openai_provider import OpenAIProvider

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterProvider(OpenAIProvider):
    """
    OpenRouter adapter.

    Args:
        api_key: OpenRouter API key.
        provider_order: Preferred upstream providers, forwarded as ``provider.order``.
        reasoning_effort: Requested reasoning effort; reasoning text is kept in
            the response and surfaced as thinking content.
    """

    name = "openrouter"

    def __init__(
        self,
        api_key: str,
        provider_order: Optional[List[str]] = None,
        reasoning_effort: str = "medium",
        base_url: str = OPENROUTER_BASE_URL,
    ):
        if not api_key:
            raise ProviderConfigurationError(
                "openrouter", "API key", env_var="OPENROUTER_API_KEY"
            )
        super().__init__(api_key=api_key, base_url=base_url)
        self.provider_order = list(provider_order or [])
        self.reasoning_effort = reasoning_effort

    def _extra_body(self) -> Optional[Dict[str, Any]]:
        body: Dict[str, Any] = {
            "reasoning": {"effort": self.reasoning_effort, "exclude": False},
        }
        if self.provider_order:
            body["provider"] = {"order": self.provider_order}
        return body


__all__ = ["OpenRouterProvider", "OPENROUTER_BASE_URL"]
