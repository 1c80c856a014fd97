"""
Tests for the OpenAI and OpenRouter adapters using a fake async client.
"""

from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from toolloop.exceptions import ProviderRequestError, TransientProviderError
from toolloop.providers import OpenAIProvider, OpenRouterProvider
from toolloop.tools import Tool, ToolParameter
from toolloop.types import (
    FinishReason,
    ImagePart,
    Message,
    Role,
    TextPart,
    ToolCall,
    ai_message,
    human_message,
    tool_message,
)


class FakeCompletions:
    def __init__(self, response=None, error=None, stream_chunks=None):
        self.response = response
        self.error = error
        self.stream_chunks = stream_chunks or []
        self.requests = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        if kwargs.get("stream"):
            return self._stream()
        return self.response

    async def _stream(self):
        for chunk in self.stream_chunks:
            yield chunk


class StatusError(Exception):
    def __init__(self, status_code):
        self.status_code = status_code
        super().__init__(f"status {status_code}")


def _install(provider, completions):
    provider._client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return completions


def _response(content="", tool_calls=None, finish_reason="stop", usage=(12, 3, 15)):
    return SimpleNamespace(
        choices=[
            SimpleNamespace(
                message=SimpleNamespace(content=content, tool_calls=tool_calls, model_extra={}),
                finish_reason=finish_reason,
            )
        ],
        usage=SimpleNamespace(
            prompt_tokens=usage[0], completion_tokens=usage[1], total_tokens=usage[2]
        ),
    )


def _weather_tool():
    return Tool(
        name="weather",
        description="Get weather",
        parameters=[ToolParameter(name="city", param_type=str, description="City")],
        function=lambda city: f"sunny in {city}",
    )


@pytest.fixture
def provider():
    return OpenAIProvider(api_key="sk-test")


class TestRequestFormatting:
    @pytest.mark.asyncio
    async def test_history_is_mapped_to_chat_roles(self, provider):
        completions = _install(provider, FakeCompletions(_response("done")))
        history = [
            human_message("weather?"),
            ai_message("", tool_calls=[ToolCall(id="c1", name="weather", args={"city": "Oslo"})]),
            tool_message("sunny", "c1", "weather"),
        ]

        await provider.ainvoke(
            model="gpt-5-mini",
            system_prompt="be brief",
            messages=history,
            tools=[_weather_tool()],
            max_tokens=64,
            timeout=5,
        )

        request = completions.requests[0]
        assert [m["role"] for m in request["messages"]] == ["system", "user", "assistant", "tool"]
        assert request["messages"][2]["tool_calls"][0]["function"] == {
            "name": "weather",
            "arguments": json.dumps({"city": "Oslo"}),
        }
        assert request["messages"][3] == {"role": "tool", "tool_call_id": "c1", "content": "sunny"}
        assert request["max_completion_tokens"] == 64
        assert request["timeout"] == 5
        assert request["tools"][0]["function"]["name"] == "weather"
        assert "extra_body" not in request

    @pytest.mark.asyncio
    async def test_images_become_image_url_parts(self, provider):
        completions = _install(provider, FakeCompletions(_response("a cat")))
        message = Message(
            role=Role.HUMAN,
            content=[TextPart(text="what?"), ImagePart(url="data:image/png;base64,AA==")],
        )

        await provider.ainvoke(model="gpt-5", system_prompt="", messages=[message])

        content = completions.requests[0]["messages"][0]["content"]
        assert content == [
            {"type": "text", "text": "what?"},
            {"type": "image_url", "image_url": {"url": "data:image/png;base64,AA=="}},
        ]

    @pytest.mark.asyncio
    async def test_openrouter_sends_routing_and_reasoning(self):
        provider = OpenRouterProvider(api_key="or-test", provider_order=["groq"])
        completions = _install(provider, FakeCompletions(_response("ok")))

        await provider.ainvoke(model="x-ai/grok-code-fast-1", system_prompt="", messages=[])

        request = completions.requests[0]
        assert request["extra_body"]["provider"] == {"order": ["groq"]}
        assert request["extra_body"]["reasoning"] == {"effort": "medium", "exclude": False}
        assert request["max_tokens"] == 12800


class TestResponseMapping:
    @pytest.mark.asyncio
    async def test_tool_calls_and_usage(self, provider):
        raw_call = SimpleNamespace(
            id="call_1",
            function=SimpleNamespace(name="weather", arguments='{"city": "Rome"}'),
        )
        _install(provider, FakeCompletions(_response(None, [raw_call], "tool_calls")))

        reply = await provider.ainvoke(model="gpt-5", system_prompt="", messages=[])

        assert reply.tool_calls == [ToolCall(id="call_1", name="weather", args={"city": "Rome"})]
        assert reply.finish_reason == FinishReason.TOOL_CALLS
        assert reply.usage.total_tokens == 15
        assert reply.text == ""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("content_filter", FinishReason.SAFETY),
            ("length", FinishReason.LENGTH),
            ("stop", FinishReason.STOP),
        ],
    )
    async def test_finish_reasons(self, provider, raw, expected):
        _install(provider, FakeCompletions(_response("x", finish_reason=raw)))

        reply = await provider.ainvoke(model="gpt-5", system_prompt="", messages=[])

        assert reply.finish_reason == expected

    @pytest.mark.asyncio
    async def test_invalid_tool_arguments_become_empty_args(self, provider):
        raw_call = SimpleNamespace(
            id="call_1", function=SimpleNamespace(name="weather", arguments="{not json")
        )
        _install(provider, FakeCompletions(_response(None, [raw_call], "tool_calls")))

        reply = await provider.ainvoke(model="gpt-5", system_prompt="", messages=[])

        assert reply.tool_calls[0].args == {}

    @pytest.mark.asyncio
    async def test_errors_are_normalised(self, provider):
        _install(provider, FakeCompletions(error=StatusError(429)))
        with pytest.raises(TransientProviderError):
            await provider.ainvoke(model="gpt-5", system_prompt="", messages=[])

        _install(provider, FakeCompletions(error=StatusError(401)))
        with pytest.raises(ProviderRequestError):
            await provider.ainvoke(model="gpt-5", system_prompt="", messages=[])


class TestStreaming:
    @pytest.mark.asyncio
    async def test_stream_accumulates_text_reasoning_and_tool_calls(self, provider):
        def chunk(delta=None, finish_reason=None, usage=None):
            choices = [] if delta is None else [SimpleNamespace(delta=delta, finish_reason=finish_reason)]
            return SimpleNamespace(choices=choices, usage=usage)

        def delta(content=None, tool_calls=None, reasoning=None):
            return SimpleNamespace(
                content=content, tool_calls=tool_calls, reasoning=reasoning, model_extra={}
            )

        def call_delta(index, id=None, name=None, arguments=None):
            return SimpleNamespace(
                index=index, id=id, function=SimpleNamespace(name=name, arguments=arguments)
            )

        chunks = [
            chunk(delta(reasoning="thinking...")),
            chunk(delta(content="Let me ")),
            chunk(delta(content="check.")),
            chunk(delta(tool_calls=[call_delta(0, id="c9", name="weather", arguments='{"ci')])),
            chunk(delta(tool_calls=[call_delta(0, arguments='ty": "Lima"}')]), "tool_calls"),
            chunk(usage=SimpleNamespace(prompt_tokens=5, completion_tokens=7, total_tokens=12)),
        ]
        completions = _install(provider, FakeCompletions(stream_chunks=chunks))

        received = [
            item
            async for item in provider.astream(model="gpt-5", system_prompt="", messages=[])
        ]

        assert completions.requests[0]["stream_options"] == {"include_usage": True}
        assert [c.thinking for c in received if c.thinking] == ["thinking..."]
        assert "".join(c.content for c in received) == "Let me check."
        final = received[-1].message
        assert final.text == "Let me check."
        assert final.thinking == "thinking..."
        assert final.tool_calls == [ToolCall(id="c9", name="weather", args={"city": "Lima"})]
        assert final.finish_reason == FinishReason.TOOL_CALLS
        assert final.usage.total_tokens == 12
