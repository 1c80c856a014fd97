"""
Progress events delivered to an external streaming sink.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Union

logger = logging.getLogger(__name__)

LLM_START = "llm_start"
THINK = "think"
LLM_COMPLETE = "llm_complete"
TOOL_START = "tool_start"
TOOL_COMPLETE = "tool_complete"
ERROR = "error"

EVENT_KINDS = (LLM_START, THINK, LLM_COMPLETE, TOOL_START, TOOL_COMPLETE, ERROR)


@dataclass
class StreamingEvent:
    """
    One typed progress notification.

    Attributes:
        kind: One of ``EVENT_KINDS``.
        data: Kind-specific payload (model, tool name, call id, output, ...).
    """

    kind: str
    data: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.kind not in EVENT_KINDS:
            raise ValueError(f"Unknown streaming event kind: {self.kind!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, **self.data}


StreamingSink = Callable[[StreamingEvent], Union[None, Awaitable[None]]]


class StreamingEmitter:
    """
    Delivers events to the sink in call order.

    Sync and async sinks are both accepted. Delivery is awaited so ordering is
    preserved; a failing sink is logged and never interrupts the execution.
    """

    def __init__(self, sink: Optional[StreamingSink] = None):
        self.sink = sink

    @property
    def enabled(self) -> bool:
        return self.sink is not None

    async def emit(self, kind: str, **data: Any) -> None:
        if self.sink is None:
            return
        event = StreamingEvent(kind=kind, data=data)
        try:
            result = self.sink(event)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            logger.warning("Streaming sink failed on '%s' event: %s", kind, exc)

    async def llm_start(self, model: str, temperature: float) -> None:
        await self.emit(LLM_START, model=model, temperature=temperature)

    async def think(self, message_id: str, content: str) -> None:
        await self.emit(THINK, message_id=message_id, content=content)

    async def llm_complete(self, message_id: str, total_tokens: int) -> None:
        await self.emit(LLM_COMPLETE, message_id=message_id, total_tokens=total_tokens)

    async def tool_start(self, tool: str, tool_input: Any, call_id: str) -> None:
        await self.emit(TOOL_START, tool=tool, input=tool_input, call_id=call_id)

    async def tool_complete(
        self, tool: str, tool_input: Any, output: Any, call_id: str, duration: float
    ) -> None:
        await self.emit(
            TOOL_COMPLETE,
            tool=tool,
            input=tool_input,
            output=output,
            call_id=call_id,
            duration=duration,
        )

    async def error(self, error: str, recoverable: bool) -> None:
        await self.emit(ERROR, error=error, recoverable=recoverable)


__all__ = [
    "LLM_START",
    "THINK",
    "LLM_COMPLETE",
    "TOOL_START",
    "TOOL_COMPLETE",
    "ERROR",
    "EVENT_KINDS",
    "StreamingEvent",
    "StreamingSink",
    "StreamingEmitter",
]
