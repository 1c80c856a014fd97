"""
Ordered execution of one batch of tool calls.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..tools import Tool
from ..types import Message, ToolCall, tool_message
from .hooks import HookPipeline, ToolHookContext
from .streaming import StreamingEmitter

logger = logging.getLogger(__name__)


def stringify_tool_output(output: Any) -> str:
    """Render a tool's return value as tool-result text."""
    if isinstance(output, str):
        return output
    try:
        return json.dumps(output)
    except (TypeError, ValueError):
        return str(output)


def tool_not_found_message(name: str) -> str:
    return f"Error: Tool {name} not found"


@dataclass
class ToolBatchOutcome:
    """
    Result of the tools step.

    ``messages`` is the working history after the batch (including any
    rewrites made by hooks). ``should_stop`` is set when an after-hook asked
    the run to end instead of returning to the agent step.
    """

    messages: List[Message]
    should_stop: bool = False


class ToolInvoker:
    """
    Resolves and runs the tool calls of one AI message, strictly in order.

    For every call: resolve, before-hook, ``tool_start``, invoke, build the
    result message, after-hook, ``tool_complete``. Unknown tools and failing
    tools produce ``Error: ...`` results; nothing raised by a tool escapes
    the batch.
    """

    def __init__(
        self,
        tools: Dict[str, Tool],
        hooks: Optional[HookPipeline] = None,
        emitter: Optional[StreamingEmitter] = None,
    ):
        self.tools = tools
        self.hooks = hooks or HookPipeline()
        self.emitter = emitter or StreamingEmitter()

    async def execute_batch(
        self, tool_calls: List[ToolCall], messages: List[Message]
    ) -> ToolBatchOutcome:
        history = list(messages)
        should_stop = False

        for call in tool_calls:
            tool = self.tools.get(call.name)
            if tool is None:
                logger.warning("Model requested unknown tool '%s'", call.name)
                history.append(tool_message(tool_not_found_message(call.name), call.id, call.name))
                continue

            history, stop = await self._execute_one(tool, call, history)
            should_stop = should_stop or stop

        return ToolBatchOutcome(messages=history, should_stop=should_stop)

    async def _execute_one(
        self, tool: Tool, call: ToolCall, history: List[Message]
    ) -> Tuple[List[Message], bool]:
        tool_input: Dict[str, Any] = dict(call.args)
        output: Any = None
        hook_failed = False

        try:
            before = await self.hooks.before(
                ToolHookContext(
                    tool_name=call.name,
                    tool_input=dict(tool_input),
                    messages=list(history),
                    call_id=call.id,
                )
            )
        except Exception as exc:
            logger.warning("before_tool_call hook failed for '%s': %s", call.name, exc)
            output = f"Error: {exc}"
            hook_failed = True
        else:
            if before.messages is not None:
                history = list(before.messages)
            if before.tool_input is not None:
                tool_input = dict(before.tool_input)
                # The call records the arguments the tool actually ran with
                call.args = dict(tool_input)

        await self.emitter.tool_start(call.name, tool_input, call.id)
        start_time = time.time()

        if not hook_failed:
            logger.info("Calling tool '%s' with input: %s", call.name, tool_input)
            try:
                output = await tool.ainvoke(tool_input)
            except Exception as exc:
                logger.warning("Tool '%s' failed: %s", call.name, exc)
                output = f"Error: {exc}"

        duration = time.time() - start_time
        result_text = stringify_tool_output(output)
        logger.debug("Tool '%s' output preview: %s", call.name, result_text[:200])
        history.append(tool_message(result_text, call.id, call.name))

        after = await self.hooks.after(
            ToolHookContext(
                tool_name=call.name,
                tool_input=dict(tool_input),
                messages=list(history),
                tool_output=output,
                call_id=call.id,
            )
        )
        if after.messages is not None:
            history = list(after.messages)
        if after.should_stop:
            logger.info("after_tool_call hook requested stop after '%s'", call.name)

        await self.emitter.tool_complete(call.name, tool_input, output, call.id, duration)
        return history, after.should_stop


__all__ = ["ToolInvoker", "ToolBatchOutcome", "stringify_tool_output", "tool_not_found_message"]
