"""
Provider abstraction for model-agnostic tool calling.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, AsyncIterator, List, Optional, Protocol, runtime_checkable

from ..exceptions import (
    ConfigurationError,
    ProviderError,
    ProviderRequestError,
    TransientProviderError,
)
from ..types import Message

if TYPE_CHECKING:
    from ..tools import Tool


@dataclass
class StreamChunk:
    """
    One item produced by a provider's streaming variant.

    Partial ``content`` and ``thinking`` arrive as they are generated; the
    last chunk of every stream carries the assembled ``message``.
    """

    content: str = ""
    thinking: str = ""
    message: Optional[Message] = None


@runtime_checkable
class Provider(Protocol):
    """
    Interface every provider adapter must satisfy.

    Adapters hold only configuration (credential, endpoint, routing hints).
    Every call receives the model settings explicitly, so one adapter
    instance may serve concurrent executions. Passing ``tools`` binds them
    for that call and lets the model answer with structured tool calls.
    """

    name: str

    async def ainvoke(
        self,
        *,
        model: str,
        system_prompt: str,
        messages: List[Message],
        tools: Optional[List["Tool"]] = None,
        temperature: float = 0.7,
        max_tokens: int = 12800,
        timeout: Optional[float] = None,
    ) -> Message:
        """
        Return the assistant message for the given conversation state.

        The returned message carries ``tool_calls``, ``usage`` and a
        normalised ``finish_reason``.

        Raises:
            ProviderError: Normalised failure (see ``normalize_provider_error``).
        """
        ...

    async def astream(
        self,
        *,
        model: str,
        system_prompt: str,
        messages: List[Message],
        tools: Optional[List["Tool"]] = None,
        temperature: float = 0.7,
        max_tokens: int = 12800,
        timeout: Optional[float] = None,
    ) -> AsyncIterator[StreamChunk]:
        """
        Streaming variant of ``ainvoke``.

        Providers without native streaming inherit this implementation,
        which performs one ``ainvoke`` and replays its thinking and text.
        """
        message = await self.ainvoke(
            model=model,
            system_prompt=system_prompt,
            messages=messages,
            tools=tools,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )
        if message.thinking:
            yield StreamChunk(thinking=message.thinking)
        if message.text:
            yield StreamChunk(content=message.text)
        yield StreamChunk(message=message)


_TRANSIENT_STATUS_CODES = {408, 409, 425, 429}


def _status_code_of(exc: BaseException) -> Optional[int]:
    for attr in ("status_code", "code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(exc, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


def normalize_provider_error(exc: BaseException, provider: str) -> BaseException:
    """
    Map an SDK exception onto the common error taxonomy.

    - Errors already in the taxonomy are returned unchanged.
    - Timeouts, connection failures, 408/409/425/429 and 5xx become
      ``TransientProviderError``.
    - Other 4xx responses become ``ProviderRequestError``.
    - Anything unrecognised is treated as transient.
    """
    if isinstance(exc, (ProviderError, ConfigurationError)):
        return exc

    status = _status_code_of(exc)
    message = f"{provider} request failed: {exc}"

    if isinstance(exc, (asyncio.TimeoutError, TimeoutError, ConnectionError)):
        return TransientProviderError(message, provider=provider, status_code=status)

    if status is not None:
        if status in _TRANSIENT_STATUS_CODES or status >= 500:
            return TransientProviderError(message, provider=provider, status_code=status)
        if 400 <= status < 500:
            return ProviderRequestError(message, provider=provider, status_code=status)

    return TransientProviderError(message, provider=provider, status_code=status)


def new_tool_call_id() -> str:
    """Identifier for tool calls whose provider did not assign one."""
    return f"call_{uuid.uuid4().hex[:24]}"


__all__ = [
    "Provider",
    "ProviderError",
    "StreamChunk",
    "normalize_provider_error",
    "new_tool_call_id",
]
