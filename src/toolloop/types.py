"""
Core message, tool-call and result types for the execution engine.

These primitives are provider-agnostic and are reused across adapters,
the agent loop, and tests.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .usage import UsageStats


class Role(str, Enum):
    """Conversation role."""

    HUMAN = "human"
    AI = "ai"
    TOOL = "tool"


class FinishReason(str, Enum):
    """Provider-independent classification of why a model stopped generating."""

    STOP = "stop"
    TOOL_CALLS = "tool_calls"
    LENGTH = "length"
    SAFETY = "safety"
    ERROR = "error"


@dataclass
class TextPart:
    """Plain text content part."""

    text: str
    type: str = field(default="text", init=False)


@dataclass
class ImagePart:
    """Image content part carried as a data URI (``data:<mime>;base64,<data>``)."""

    url: str
    type: str = field(default="image_url", init=False)

    @property
    def mime_type(self) -> str:
        if self.url.startswith("data:") and ";" in self.url:
            return self.url[5 : self.url.index(";")]
        return "image/png"

    @property
    def base64_data(self) -> str:
        if self.url.startswith("data:") and "," in self.url:
            return self.url.split(",", 1)[1]
        return ""


ContentPart = Union[TextPart, ImagePart]
Content = Union[str, List[ContentPart]]


@dataclass
class ToolCall:
    """Structured request from the model to invoke a tool."""

    id: str
    name: str
    args: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Message:
    """
    One entry of the conversation history.

    ``content`` is either plain text or an ordered list of multimodal parts.
    AI messages may carry ``tool_calls``, ``usage`` and a ``finish_reason``;
    tool messages reference the call they answer through ``tool_call_id``.
    """

    role: Role
    content: Content = ""
    tool_calls: List[ToolCall] = field(default_factory=list)
    tool_call_id: Optional[str] = None
    tool_name: Optional[str] = None
    usage: Optional[UsageStats] = None
    finish_reason: Optional[FinishReason] = None
    thinking: Optional[str] = None

    @property
    def text(self) -> str:
        """Concatenated text of the message, ignoring image parts."""
        if isinstance(self.content, str):
            return self.content
        return "".join(part.text for part in self.content if isinstance(part, TextPart))

    @property
    def images(self) -> List[ImagePart]:
        if isinstance(self.content, str):
            return []
        return [part for part in self.content if isinstance(part, ImagePart)]


def human_message(content: Content) -> Message:
    return Message(role=Role.HUMAN, content=content)


def ai_message(content: Content = "", **kwargs: Any) -> Message:
    return Message(role=Role.AI, content=content, **kwargs)


def tool_message(content: str, tool_call_id: str, tool_name: Optional[str] = None) -> Message:
    return Message(role=Role.TOOL, content=content, tool_call_id=tool_call_id, tool_name=tool_name)


@dataclass
class ImageInput:
    """
    Image attached to the initial human message.

    ``type="base64"`` carries ``data`` (without the ``data:`` prefix) and
    ``mime_type``; ``type="url"`` carries an http(s) ``url`` that is fetched
    before the first model call.
    """

    type: str = "base64"
    data: Optional[str] = None
    mime_type: str = "image/png"
    url: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_base64(
        cls, data: str, mime_type: str = "image/png", description: Optional[str] = None
    ) -> "ImageInput":
        return cls(type="base64", data=data, mime_type=mime_type, description=description)

    @classmethod
    def from_url(cls, url: str, description: Optional[str] = None) -> "ImageInput":
        return cls(type="url", url=url, description=description)


@dataclass
class ToolCallRecord:
    """A tool call matched with its result, as reported in the final result."""

    tool: str
    input: Any
    output: Any

    def to_dict(self) -> Dict[str, Any]:
        return {"tool": self.tool, "input": self.input, "output": self.output}


@dataclass
class AgentResult:
    """
    Final outcome of one execution.

    The engine always returns one of these; failures are reported through
    ``success=False`` and ``error`` instead of exceptions.
    """

    response: str
    tool_calls: List[ToolCallRecord] = field(default_factory=list)
    iterations: int = 0
    success: bool = True
    error: str = ""
    usage: UsageStats = field(default_factory=UsageStats)
    model: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialise to the public result contract."""
        return {
            "response": self.response,
            "toolCalls": [record.to_dict() for record in self.tool_calls],
            "iterations": self.iterations,
            "success": self.success,
            "error": self.error,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


__all__ = [
    "Role",
    "FinishReason",
    "TextPart",
    "ImagePart",
    "ContentPart",
    "Content",
    "ToolCall",
    "Message",
    "human_message",
    "ai_message",
    "tool_message",
    "ImageInput",
    "ToolCallRecord",
    "AgentResult",
]
