"""
Tests for messages, multimodal parts, usage and results.
"""

from __future__ import annotations

import json

from toolloop.types import (
    AgentResult,
    ImageInput,
    ImagePart,
    Message,
    Role,
    TextPart,
    ToolCall,
    ToolCallRecord,
    ai_message,
    tool_message,
)
from toolloop.usage import AgentUsage, UsageStats


class TestMessage:
    def test_text_of_plain_message(self):
        assert Message(role=Role.HUMAN, content="hello").text == "hello"

    def test_text_skips_image_parts(self):
        message = Message(
            role=Role.HUMAN,
            content=[
                TextPart(text="look "),
                ImagePart(url="data:image/png;base64,AAAA"),
                TextPart(text="here"),
            ],
        )
        assert message.text == "look here"
        assert len(message.images) == 1

    def test_image_part_exposes_mime_and_data(self):
        part = ImagePart(url="data:image/webp;base64,UklGRg==")
        assert part.mime_type == "image/webp"
        assert part.base64_data == "UklGRg=="

    def test_tool_message_helper(self):
        message = tool_message("42", "call-1", "calc")
        assert message.role == Role.TOOL
        assert message.tool_call_id == "call-1"
        assert message.tool_name == "calc"


class TestImageInput:
    def test_from_base64(self):
        image = ImageInput.from_base64("abc", mime_type="image/jpeg", description="photo")
        assert (image.type, image.data, image.mime_type, image.description) == (
            "base64",
            "abc",
            "image/jpeg",
            "photo",
        )

    def test_from_url(self):
        image = ImageInput.from_url("https://example.com/a.png")
        assert image.type == "url"
        assert image.url == "https://example.com/a.png"


class TestAgentResult:
    def test_contract_keys(self):
        result = AgentResult(
            response="done",
            tool_calls=[ToolCallRecord(tool="calc", input={"x": 1}, output=2)],
            iterations=2,
        )
        assert list(result.to_dict()) == ["response", "toolCalls", "iterations", "success", "error"]
        assert json.loads(result.to_json())["toolCalls"][0] == {
            "tool": "calc",
            "input": {"x": 1},
            "output": 2,
        }

    def test_defaults_are_successful(self):
        result = AgentResult(response="")
        assert result.success is True
        assert result.error == ""
        assert result.usage.total_tokens == 0


class TestUsage:
    def test_total_is_derived_when_missing(self):
        assert UsageStats(input_tokens=3, output_tokens=4).total_tokens == 7

    def test_reported_total_is_kept(self):
        assert UsageStats(input_tokens=3, output_tokens=4, total_tokens=10).total_tokens == 10

    def test_agent_usage_aggregates_calls(self):
        usage = AgentUsage()
        usage.add_usage(UsageStats(10, 5, model="m", provider="p"))
        usage.add_usage(UsageStats(1, 1, model="m", provider="p"))

        stats = usage.as_stats()
        assert (stats.input_tokens, stats.output_tokens, stats.total_tokens) == (11, 6, 17)
        assert len(usage.calls) == 2
