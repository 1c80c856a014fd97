"""
Turns the final message history into an AgentResult.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Collection, Dict, List, Optional

from ..exceptions import ContentPolicyError, ParsingError, error_summary
from ..parser import StructuredOutputParser
from ..types import AgentResult, FinishReason, Message, Role, ToolCall, ToolCallRecord
from ..usage import AgentUsage, UsageStats

logger = logging.getLogger(__name__)


def _decode_output(text: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return text


class ExecutionAccountant:
    """
    Reconciles tool calls with their results and sums token usage.

    Only calls naming one of ``tool_names`` are accounted; calls to unknown
    tools still get an error result in history but never show up in
    ``AgentResult.tool_calls``.
    """

    def __init__(
        self,
        tool_names: Collection[str],
        parser: Optional[StructuredOutputParser] = None,
    ):
        self.tool_names = set(tool_names)
        self.parser = parser or StructuredOutputParser()

    def collect_tool_calls(self, messages: List[Message]) -> List[ToolCallRecord]:
        """Pair every tool-result message with the call it answers, in history order."""
        calls: Dict[str, ToolCall] = {}
        records: List[ToolCallRecord] = []
        for message in messages:
            if message.role == Role.AI:
                for call in message.tool_calls:
                    if call.name in self.tool_names:
                        calls[call.id] = call
            elif message.role == Role.TOOL and message.tool_call_id in calls:
                call = calls.pop(message.tool_call_id)
                records.append(
                    ToolCallRecord(tool=call.name, input=call.args, output=_decode_output(message.text))
                )
        return records

    def sum_usage(self, messages: List[Message]) -> UsageStats:
        usage = AgentUsage()
        for message in messages:
            if message.role == Role.AI and message.usage is not None:
                usage.add_usage(message.usage)
        return usage.as_stats()

    def final_response(self, messages: List[Message], json_mode: bool = False) -> str:
        """
        Text of the last AI message.

        Raises:
            ContentPolicyError: The last AI message was blocked or truncated.
            ParsingError: ``json_mode`` is set and the text is not valid JSON.
        """
        final = next((m for m in reversed(messages) if m.role == Role.AI), None)
        if final is None:
            return ""

        if final.finish_reason == FinishReason.SAFETY:
            raise ContentPolicyError.safety_blocked()
        if final.finish_reason == FinishReason.LENGTH:
            raise ContentPolicyError.truncated()

        text = final.text
        if not text and final.images:
            # Image-output models answer with the generated image only
            return final.images[0].url
        if json_mode:
            return self.parser.parse(text).cleaned
        return text

    def finalize(
        self,
        messages: List[Message],
        iterations: int,
        json_mode: bool = False,
        model: Optional[str] = None,
    ) -> AgentResult:
        """
        Build the result for an execution that reached the end state.

        A JSON parse failure yields ``success=False`` with the raw text as the
        response. Content policy errors propagate to the caller.
        """
        tool_calls = self.collect_tool_calls(messages)
        usage = self.sum_usage(messages)
        logger.info(
            "Execution finished: %d iteration(s), %d tool call(s), %d tokens",
            iterations,
            len(tool_calls),
            usage.total_tokens,
        )
        try:
            response = self.final_response(messages, json_mode=json_mode)
        except ParsingError as exc:
            logger.warning("JSON mode response could not be parsed: %s", exc)
            return AgentResult(
                response=exc.raw_text,
                tool_calls=tool_calls,
                iterations=iterations,
                success=False,
                error=str(exc),
                usage=usage,
                model=model,
            )
        return AgentResult(
            response=response,
            tool_calls=tool_calls,
            iterations=iterations,
            success=True,
            usage=usage,
            model=model,
        )

    def failed(
        self,
        messages: List[Message],
        iterations: int,
        error: BaseException,
        model: Optional[str] = None,
    ) -> AgentResult:
        """Partial result for an execution that ended in a terminal failure."""
        return AgentResult(
            response=f"Execution error: {error_summary(error)}",
            tool_calls=self.collect_tool_calls(messages),
            iterations=iterations,
            success=False,
            error=error_summary(error),
            usage=self.sum_usage(messages),
            model=model,
        )


__all__ = ["ExecutionAccountant"]
