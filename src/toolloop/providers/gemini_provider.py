"""
Google Gemini provider adapter using the google-genai SDK.

This provider uses the centralized Client API:
- client.aio.models.generate_content() for completions
See: https://ai.google.dev/gemini-api/docs/migrate
"""

from __future__ import annotations

import base64
import logging
from typing import Any, List, Optional

from ..exceptions import ConfigurationError, ProviderConfigurationError
from ..types import FinishReason, ImagePart, Message, Role, TextPart, ToolCall
from ..usage import UsageStats
from .base import Provider, new_tool_call_id, normalize_provider_error

logger = logging.getLogger(__name__)

_SAFETY_FINISH_REASONS = {
    "SAFETY",
    "RECITATION",
    "BLOCKLIST",
    "PROHIBITED_CONTENT",
    "SPII",
    "IMAGE_SAFETY",
}
_LENGTH_FINISH_REASONS = {"MAX_TOKENS"}
_ERROR_FINISH_REASONS = {"MALFORMED_FUNCTION_CALL", "OTHER"}

_HARM_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)


def _enum_name(value: Any) -> str:
    if value is None:
        return ""
    return getattr(value, "name", None) or str(value).rsplit(".", 1)[-1]


class GeminiProvider(Provider):
    """
    Google Gemini adapter.

    Safety filters are relaxed to ``BLOCK_NONE`` for the four configurable harm
    categories; responses the API still blocks come back with
    ``FinishReason.SAFETY`` instead of raising. Streaming is not used for
    Gemini, so the inherited ``astream`` wraps a single ``ainvoke``.
    """

    name = "google"

    def __init__(self, api_key: str):
        if not api_key:
            raise ProviderConfigurationError("google", "API key", env_var="GEMINI_API_KEY")

        try:
            from google import genai
        except ImportError as exc:
            raise ConfigurationError(
                "google-genai package not installed",
                suggestion="Install with `pip install google-genai`",
            ) from exc

        self._client = genai.Client(api_key=api_key)

    def _build_config(
        self, system_prompt: str, tools, temperature: float, max_tokens: int, timeout: Optional[float]
    ):
        from google.genai import types

        config_args: dict = {
            "temperature": temperature,
            "max_output_tokens": max_tokens,
            "system_instruction": system_prompt or None,
            "safety_settings": [
                types.SafetySetting(
                    category=getattr(types.HarmCategory, category),
                    threshold=types.HarmBlockThreshold.BLOCK_NONE,
                )
                for category in _HARM_CATEGORIES
            ],
        }
        if tools:
            config_args["tools"] = [
                types.Tool(
                    function_declarations=[
                        types.FunctionDeclaration(
                            name=schema["name"],
                            description=schema["description"],
                            parameters_json_schema=schema["parameters"],
                        )
                        for schema in (tool.schema() for tool in tools)
                    ]
                )
            ]
            config_args["automatic_function_calling"] = types.AutomaticFunctionCallingConfig(
                disable=True
            )
        if timeout is not None:
            config_args["http_options"] = types.HttpOptions(timeout=int(timeout * 1000))
        return types.GenerateContentConfig(**config_args)

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
        Call Gemini's generate_content API.

        Raises:
            ProviderError: If the API call fails
        """
        config = self._build_config(system_prompt, tools, temperature, max_tokens, timeout)
        contents = self._format_contents(messages)
        try:
            response = await self._client.aio.models.generate_content(
                model=model,
                contents=contents,
                config=config,
            )
        except Exception as exc:
            raise normalize_provider_error(exc, self.name) from exc
        return self._to_message(response, model)

    def _to_message(self, response: Any, model: str) -> Message:
        usage = None
        metadata = getattr(response, "usage_metadata", None)
        if metadata is not None:
            usage = UsageStats(
                input_tokens=metadata.prompt_token_count or 0,
                output_tokens=metadata.candidates_token_count or 0,
                total_tokens=metadata.total_token_count or 0,
                model=model,
                provider=self.name,
            )

        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            feedback = getattr(response, "prompt_feedback", None)
            block_reason = _enum_name(getattr(feedback, "block_reason", None))
            logger.warning("Gemini returned no candidates (block reason: %s)", block_reason or "none")
            return Message(role=Role.AI, content="", usage=usage, finish_reason=FinishReason.SAFETY)

        candidate = candidates[0]
        text_chunks: List[str] = []
        thinking_chunks: List[str] = []
        images: List[ImagePart] = []
        tool_calls: List[ToolCall] = []

        # Blocked candidates may come back without content at all
        parts = getattr(getattr(candidate, "content", None), "parts", None) or []
        for part in parts:
            if getattr(part, "function_call", None) is not None:
                call = part.function_call
                tool_calls.append(
                    ToolCall(
                        id=getattr(call, "id", None) or new_tool_call_id(),
                        name=call.name,
                        args=dict(call.args or {}),
                    )
                )
            elif getattr(part, "inline_data", None) is not None and part.inline_data.data:
                blob = part.inline_data
                data = blob.data
                if isinstance(data, bytes):
                    data = base64.b64encode(data).decode("utf-8")
                images.append(ImagePart(url=f"data:{blob.mime_type or 'image/png'};base64,{data}"))
            elif getattr(part, "text", None):
                if getattr(part, "thought", False):
                    thinking_chunks.append(part.text)
                else:
                    text_chunks.append(part.text)

        finish_name = _enum_name(getattr(candidate, "finish_reason", None))
        if finish_name in _SAFETY_FINISH_REASONS:
            finish_reason = FinishReason.SAFETY
        elif finish_name in _LENGTH_FINISH_REASONS:
            finish_reason = FinishReason.LENGTH
        elif finish_name in _ERROR_FINISH_REASONS and not tool_calls:
            finish_reason = FinishReason.ERROR
        elif tool_calls:
            finish_reason = FinishReason.TOOL_CALLS
        else:
            finish_reason = FinishReason.STOP

        content: Any = "".join(text_chunks)
        if images:
            content = ([TextPart(text=content)] if content else []) + images

        return Message(
            role=Role.AI,
            content=content,
            tool_calls=tool_calls,
            usage=usage,
            finish_reason=finish_reason,
            thinking="".join(thinking_chunks) or None,
        )

    def _format_contents(self, messages: List[Message]) -> List:
        """
        Convert history into Gemini contents.

        AI turns map to the ``model`` role; tool results are sent back as
        ``function_response`` parts in a user turn.
        """
        from google.genai import types

        contents = []
        for message in messages:
            if message.role == Role.TOOL:
                parts = [
                    types.Part(
                        function_response=types.FunctionResponse(
                            id=message.tool_call_id,
                            name=message.tool_name or "",
                            response={"result": message.text},
                        )
                    )
                ]
                role = "user"
            elif message.role == Role.AI:
                parts = []
                if message.text:
                    parts.append(types.Part(text=message.text))
                for call in message.tool_calls:
                    parts.append(
                        types.Part(
                            function_call=types.FunctionCall(
                                id=call.id, name=call.name, args=call.args
                            )
                        )
                    )
                role = "model"
            else:
                parts = self._format_user_parts(message)
                role = "user"

            if parts:
                contents.append(types.Content(role=role, parts=parts))
        return contents

    def _format_user_parts(self, message: Message) -> List:
        from google.genai import types

        if isinstance(message.content, str):
            return [types.Part(text=message.content)] if message.content else []
        parts = []
        for part in message.content:
            if isinstance(part, TextPart):
                parts.append(types.Part(text=part.text))
            elif isinstance(part, ImagePart):
                parts.append(
                    types.Part.from_bytes(
                        data=base64.b64decode(part.base64_data), mime_type=part.mime_type
                    )
                )
        return parts


__all__ = ["GeminiProvider"]
