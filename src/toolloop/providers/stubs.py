"""
Local provider for offline testing and development.

This provider doesn't call any external API and simply echoes the latest
human message.
"""

from __future__ import annotations

from typing import List, Optional

from ..types import FinishReason, Message, Role
from ..usage import UsageStats
from .base import Provider


class LocalProvider(Provider):
    """
    Offline echo provider.

    This does not call a model. It never requests tools, so every run ends
    after one agent turn. Useful for wiring checks without credentials.
    """

    name = "local"

    async def ainvoke(
        self,
        *,
        model: str,
        system_prompt: str,
        messages: List[Message],
        tools=None,
        temperature: float = 0.7,
        max_tokens: int = 12800,
        timeout: Optional[float] = None,
    ) -> Message:
        last_human = next((m for m in reversed(messages) if m.role == Role.HUMAN), None)
        human_text = last_human.text if last_human else ""
        text = f"[local provider: {model}] {human_text or 'No user message provided.'}"
        words = len(text.split())
        return Message(
            role=Role.AI,
            content=text,
            usage=UsageStats(input_tokens=words, output_tokens=words, model=model, provider=self.name),
            finish_reason=FinishReason.STOP,
        )


__all__ = ["LocalProvider"]
