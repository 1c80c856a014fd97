"""
Before/after interception around each tool invocation.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from ..types import Message

logger = logging.getLogger(__name__)


@dataclass
class ToolHookContext:
    """
    What a hook sees for one tool call.

    ``tool_output`` is only set for after-hooks and holds the value the tool
    returned, before it is rendered as result text. ``messages`` is a copy of
    the working history; hooks replace history by returning new messages.
    """

    tool_name: str
    tool_input: Dict[str, Any]
    messages: List[Message] = field(default_factory=list)
    tool_output: Any = None
    call_id: Optional[str] = None


@dataclass
class BeforeToolCallResult:
    messages: Optional[List[Message]] = None
    tool_input: Optional[Dict[str, Any]] = None


@dataclass
class AfterToolCallResult:
    messages: Optional[List[Message]] = None
    should_stop: bool = False


BeforeToolCallHook = Callable[
    [ToolHookContext],
    Union[Optional[BeforeToolCallResult], Awaitable[Optional[BeforeToolCallResult]]],
]
AfterToolCallHook = Callable[
    [ToolHookContext],
    Union[Optional[AfterToolCallResult], Awaitable[Optional[AfterToolCallResult]]],
]


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class HookPipeline:
    """
    Optional hooks passed in per execution.

    Both hooks may be sync or async and may return ``None`` for "no change".
    Exceptions from the before-hook propagate to the caller, which turns them
    into an error tool result. Exceptions from the after-hook are logged and
    ignored so the tool result already produced still lands in history.
    """

    def __init__(
        self,
        before_tool_call: Optional[BeforeToolCallHook] = None,
        after_tool_call: Optional[AfterToolCallHook] = None,
    ):
        self.before_tool_call = before_tool_call
        self.after_tool_call = after_tool_call

    async def before(self, context: ToolHookContext) -> BeforeToolCallResult:
        if self.before_tool_call is None:
            return BeforeToolCallResult()
        result = await _maybe_await(self.before_tool_call(context))
        return result or BeforeToolCallResult()

    async def after(self, context: ToolHookContext) -> AfterToolCallResult:
        if self.after_tool_call is None:
            return AfterToolCallResult()
        try:
            result = await _maybe_await(self.after_tool_call(context))
        except Exception as exc:
            logger.warning("after_tool_call hook failed for '%s': %s", context.tool_name, exc)
            return AfterToolCallResult()
        return result or AfterToolCallResult()


__all__ = [
    "ToolHookContext",
    "BeforeToolCallResult",
    "AfterToolCallResult",
    "BeforeToolCallHook",
    "AfterToolCallHook",
    "HookPipeline",
]
