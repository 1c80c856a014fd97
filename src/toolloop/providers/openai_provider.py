"""
OpenAI provider adapter (Chat Completions API).
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

from ..exceptions import ConfigurationError, ProviderConfigurationError
from ..types import FinishReason, ImagePart, Message, Role, TextPart, ToolCall
from ..usage import UsageStats
from .base import Provider, StreamChunk, new_tool_call_id, normalize_provider_error

logger = logging.getLogger(__name__)

_FINISH_REASONS = {
    "stop": FinishReason.STOP,
    "tool_calls": FinishReason.TOOL_CALLS,
    "function_call": FinishReason.TOOL_CALLS,
    "length": FinishReason.LENGTH,
    "content_filter": FinishReason.SAFETY,
    "error": FinishReason.ERROR,
}


def _parse_arguments(raw: Optional[str]) -> Dict[str, Any]:
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Model returned tool arguments that are not valid JSON: %.200s", raw)
        return {}
    return parsed if isinstance(parsed, dict) else {"input": parsed}


class OpenAIProvider(Provider):
    """Adapter that speaks to OpenAI's Chat Completions API (or a compatible endpoint)."""

    name = "openai"
    max_tokens_param = "max_completion_tokens"

    def __init__(self, api_key: str, base_url: Optional[str] = None):
        if not api_key:
            raise ProviderConfigurationError("openai", "API key", env_var="OPENAI_API_KEY")

        try:
            from openai import AsyncOpenAI
        except ImportError as exc:
            raise ConfigurationError(
                "openai package not installed", suggestion="Install with `pip install openai`"
            ) from exc

        self.base_url = base_url
        if base_url:
            # OpenAI-compatible servers generally only understand max_tokens
            self.max_tokens_param = "max_tokens"
        self._client = AsyncOpenAI(api_key=api_key, base_url=base_url)

    def _extra_body(self) -> Optional[Dict[str, Any]]:
        return None

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
            "messages": self._format_messages(system_prompt, messages),
            "temperature": temperature,
            self.max_tokens_param: max_tokens,
        }
        if tools:
            request_args["tools"] = [
                {"type": "function", "function": tool.schema()} for tool in tools
            ]
        if timeout is not None:
            request_args["timeout"] = timeout
        extra_body = self._extra_body()
        if extra_body:
            request_args["extra_body"] = extra_body
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
            response = await self._client.chat.completions.create(**request_args)
        except Exception as exc:
            raise normalize_provider_error(exc, self.name) from exc

        if not response.choices:
            return Message(role=Role.AI, content="", finish_reason=FinishReason.ERROR)

        choice = response.choices[0]
        raw = choice.message
        tool_calls = [
            ToolCall(
                id=call.id or new_tool_call_id(),
                name=call.function.name,
                args=_parse_arguments(call.function.arguments),
            )
            for call in (raw.tool_calls or [])
        ]
        usage = None
        if response.usage is not None:
            usage = UsageStats(
                input_tokens=response.usage.prompt_tokens or 0,
                output_tokens=response.usage.completion_tokens or 0,
                total_tokens=response.usage.total_tokens or 0,
                model=model,
                provider=self.name,
            )
        return Message(
            role=Role.AI,
            content=raw.content or "",
            tool_calls=tool_calls,
            usage=usage,
            finish_reason=_FINISH_REASONS.get(choice.finish_reason or "stop", FinishReason.STOP),
            thinking=self._reasoning_of(raw),
        )

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
        request_args = self._request_args(
            model=model,
            system_prompt=system_prompt,
            messages=messages,
            tools=tools,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )
        request_args["stream"] = True
        request_args["stream_options"] = {"include_usage": True}

        content_parts: List[str] = []
        thinking_parts: List[str] = []
        partial_calls: Dict[int, Dict[str, str]] = {}
        finish_reason: Optional[str] = None
        usage: Optional[UsageStats] = None

        try:
            stream = await self._client.chat.completions.create(**request_args)
            async for chunk in stream:
                if chunk.usage is not None:
                    usage = UsageStats(
                        input_tokens=chunk.usage.prompt_tokens or 0,
                        output_tokens=chunk.usage.completion_tokens or 0,
                        total_tokens=chunk.usage.total_tokens or 0,
                        model=model,
                        provider=self.name,
                    )
                if not chunk.choices:
                    continue
                choice = chunk.choices[0]
                if choice.finish_reason:
                    finish_reason = choice.finish_reason
                delta = choice.delta
                if delta is None:
                    continue
                reasoning = self._reasoning_of(delta)
                if reasoning:
                    thinking_parts.append(reasoning)
                    yield StreamChunk(thinking=reasoning)
                if delta.content:
                    content_parts.append(delta.content)
                    yield StreamChunk(content=delta.content)
                for call_delta in delta.tool_calls or []:
                    entry = partial_calls.setdefault(
                        call_delta.index, {"id": "", "name": "", "arguments": ""}
                    )
                    if call_delta.id:
                        entry["id"] = call_delta.id
                    if call_delta.function is not None:
                        if call_delta.function.name:
                            entry["name"] += call_delta.function.name
                        if call_delta.function.arguments:
                            entry["arguments"] += call_delta.function.arguments
        except Exception as exc:
            raise normalize_provider_error(exc, self.name) from exc

        tool_calls = [
            ToolCall(
                id=entry["id"] or new_tool_call_id(),
                name=entry["name"],
                args=_parse_arguments(entry["arguments"]),
            )
            for _, entry in sorted(partial_calls.items())
        ]
        yield StreamChunk(
            message=Message(
                role=Role.AI,
                content="".join(content_parts),
                tool_calls=tool_calls,
                usage=usage,
                finish_reason=_FINISH_REASONS.get(finish_reason or "stop", FinishReason.STOP),
                thinking="".join(thinking_parts) or None,
            )
        )

    def _reasoning_of(self, payload: Any) -> Optional[str]:
        """Reasoning text exposed by OpenAI-compatible servers as a non-standard field."""
        for attr in ("reasoning", "reasoning_content"):
            value = getattr(payload, attr, None)
            if value is None:
                extra = getattr(payload, "model_extra", None) or {}
                value = extra.get(attr)
            if isinstance(value, str) and value:
                return value
        return None

    def _format_messages(self, system_prompt: str, messages: List[Message]) -> List[Dict[str, Any]]:
        payload: List[Dict[str, Any]] = []
        if system_prompt:
            payload.append({"role": "system", "content": system_prompt})
        for message in messages:
            if message.role == Role.TOOL:
                payload.append(
                    {
                        "role": "tool",
                        "tool_call_id": message.tool_call_id,
                        "content": message.text,
                    }
                )
            elif message.role == Role.AI:
                entry: Dict[str, Any] = {"role": "assistant", "content": message.text or None}
                if message.tool_calls:
                    entry["tool_calls"] = [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {"name": call.name, "arguments": json.dumps(call.args)},
                        }
                        for call in message.tool_calls
                    ]
                payload.append(entry)
            else:
                payload.append({"role": "user", "content": self._format_content(message)})
        return payload

    def _format_content(self, message: Message):
        if isinstance(message.content, str):
            return message.content
        parts = []
        for part in message.content:
            if isinstance(part, TextPart):
                parts.append({"type": "text", "text": part.text})
            elif isinstance(part, ImagePart):
                parts.append({"type": "image_url", "image_url": {"url": part.url}})
        return parts


__all__ = ["OpenAIProvider"]
