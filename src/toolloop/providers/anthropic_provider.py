"""
Anthropic provider adapter (Messages API).
"""

from __future__ import annotations

from typing import Any, AsyncIterator, Dict, List, Optional

from ..exceptions import ConfigurationError, ProviderConfigurationError
from ..types import FinishReason, ImagePart, Message, Role, TextPart, ToolCall
from ..usage import UsageStats
from .base import Provider, StreamChunk, new_tool_call_id, normalize_provider_error

_STOP_REASONS = {
    "end_turn": FinishReason.STOP,
    "stop_sequence": FinishReason.STOP,
    "pause_turn": FinishReason.STOP,
    "tool_use": FinishReason.TOOL_CALLS,
    "max_tokens": FinishReason.LENGTH,
    "model_context_window_exceeded": FinishReason.LENGTH,
    "refusal": FinishReason.SAFETY,
}


class AnthropicProvider(Provider):
    """Anthropic Messages API adapter."""

    name = "anthropic"

    def __init__(self, api_key: str, base_url: Optional[str] = None):
        if not api_key:
            raise ProviderConfigurationError("anthropic", "API key", env_var="ANTHROPIC_API_KEY")

        try:
            from anthropic import AsyncAnthropic
        except ImportError as exc:
            raise ConfigurationError(
                "anthropic package not installed",
                suggestion="Install with `pip install anthropic`",
            ) from exc

        self._client = AsyncAnthropic(api_key=api_key, base_url=base_url)

    def _request_args(
        self,
        *,
        model: str,
        system_prompt: str,
        messages: List[Message],
        tools,
        temperature: float,
        max_tokens: int,
        timeout: Optional[float],
    ) -> Dict[str, Any]:
        request_args: Dict[str, Any] = {
            "model": model,
            "messages": self._format_messages(messages),
            # Anthropic accepts temperatures in [0, 1]
            "temperature": min(max(temperature, 0.0), 1.0),
            "max_tokens": max_tokens,
        }
        if system_prompt:
            request_args["system"] = system_prompt
        if tools:
            request_args["tools"] = [
                {
                    "name": schema["name"],
                    "description": schema["description"],
                    "input_schema": schema["parameters"],
                }
                for schema in (tool.schema() for tool in tools)
            ]
        if timeout is not None:
            request_args["timeout"] = timeout
        return request_args

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
        """
        Call the Messages API for a non-streaming completion.

        Text blocks are concatenated into the message content, ``tool_use``
        blocks become tool calls and ``thinking`` blocks become thinking text.

        Raises:
            ProviderError: If the API call fails
        """
        request_args = self._request_args(
            model=model,
            system_prompt=system_prompt,
            messages=messages,
            tools=tools,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )
        try:
            response = await self._client.messages.create(**request_args)
        except Exception as exc:
            raise normalize_provider_error(exc, self.name) from exc
        return self._to_message(response, model)

    async def astream(
        self,
        *,
        model: str,
        system_prompt: str,
        messages: List[Message],
        tools=None,
        temperature: float = 0.7,
        max_tokens: int = 12800,
        timeout: Optional[float] = None,
    ) -> AsyncIterator[StreamChunk]:
        """Stream text and thinking deltas, then the assembled final message."""
        request_args = self._request_args(
            model=model,
            system_prompt=system_prompt,
            messages=messages,
            tools=tools,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )
        try:
            async with self._client.messages.stream(**request_args) as stream:
                async for event in stream:
                    event_type = getattr(event, "type", None)
                    if event_type == "text" and event.text:
                        yield StreamChunk(content=event.text)
                    elif event_type == "thinking" and event.thinking:
                        yield StreamChunk(thinking=event.thinking)
                final = await stream.get_final_message()
        except Exception as exc:
            raise normalize_provider_error(exc, self.name) from exc
        yield StreamChunk(message=self._to_message(final, model))

    def _to_message(self, response: Any, model: str) -> Message:
        text_chunks: List[str] = []
        thinking_chunks: List[str] = []
        tool_calls: List[ToolCall] = []
        for block in response.content or []:
            block_type = getattr(block, "type", None)
            if block_type == "text":
                text_chunks.append(block.text)
            elif block_type == "thinking":
                thinking_chunks.append(block.thinking)
            elif block_type == "tool_use":
                tool_calls.append(
                    ToolCall(
                        id=block.id or new_tool_call_id(),
                        name=block.name,
                        args=dict(block.input or {}),
                    )
                )

        usage = None
        if getattr(response, "usage", None) is not None:
            usage = UsageStats(
                input_tokens=response.usage.input_tokens or 0,
                output_tokens=response.usage.output_tokens or 0,
                model=model,
                provider=self.name,
            )

        return Message(
            role=Role.AI,
            content="".join(text_chunks),
            tool_calls=tool_calls,
            usage=usage,
            finish_reason=_STOP_REASONS.get(response.stop_reason or "end_turn", FinishReason.STOP),
            thinking="".join(thinking_chunks) or None,
        )

    def _format_messages(self, messages: List[Message]) -> List[Dict[str, Any]]:
        """
        Format messages for Anthropic's API.

        Tool results travel as ``tool_result`` blocks inside user turns, and
        consecutive turns with the same role are merged because the API
        requires alternating roles.
        """
        formatted: List[Dict[str, Any]] = []
        for message in messages:
            if message.role == Role.TOOL:
                role = "user"
                blocks = [
                    {
                        "type": "tool_result",
                        "tool_use_id": message.tool_call_id,
                        "content": message.text,
                    }
                ]
            elif message.role == Role.AI:
                role = "assistant"
                blocks = []
                if message.text:
                    blocks.append({"type": "text", "text": message.text})
                for call in message.tool_calls:
                    blocks.append(
                        {"type": "tool_use", "id": call.id, "name": call.name, "input": call.args}
                    )
            else:
                role = "user"
                blocks = self._format_content(message)

            if not blocks:
                continue
            if formatted and formatted[-1]["role"] == role:
                formatted[-1]["content"].extend(blocks)
            else:
                formatted.append({"role": role, "content": blocks})
        return formatted

    def _format_content(self, message: Message) -> List[Dict[str, Any]]:
        if isinstance(message.content, str):
            return [{"type": "text", "text": message.content}] if message.content else []
        blocks: List[Dict[str, Any]] = []
        for part in message.content:
            if isinstance(part, TextPart):
                blocks.append({"type": "text", "text": part.text})
            elif isinstance(part, ImagePart):
                blocks.append(
                    {
                        "type": "image",
                        "source": {
                            "type": "base64",
                            "media_type": part.mime_type,
                            "data": part.base64_data,
                        },
                    }
                )
        return blocks


__all__ = ["AnthropicProvider"]
