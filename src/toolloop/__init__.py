"""Public exports for the toolloop package."""

# Toolbox is imported separately so its tools are only built on demand
from . import toolbox
from .agent import (
    AfterToolCallResult,
    Agent,
    AgentConfig,
    BackupModelConfig,
    BeforeToolCallResult,
    ModelConfig,
    StreamingEvent,
    ToolHookContext,
)
from .env import credentials_from_env
from .exceptions import (
    ConfigurationError,
    ContentPolicyError,
    MaxIterationsExceededError,
    ParsingError,
    ProviderConfigurationError,
    ProviderError,
    ProviderRequestError,
    ToolExecutionError,
    ToolloopError,
    ToolValidationError,
    TransientProviderError,
)
from .models import ModelInfo, ProviderKind
from .parser import StructuredOutputParser
from .providers import (
    AnthropicProvider,
    GeminiProvider,
    LocalProvider,
    OpenAIProvider,
    OpenRouterProvider,
    Provider,
)
from .tools import Tool, ToolParameter, ToolRegistry, tool
from .types import AgentResult, FinishReason, ImageInput, Message, Role, ToolCall, ToolCallRecord
from .usage import AgentUsage, UsageStats

__version__ = "0.1.0"

__all__ = [
    "toolbox",
    "Agent",
    "AgentConfig",
    "ModelConfig",
    "BackupModelConfig",
    "ToolHookContext",
    "BeforeToolCallResult",
    "AfterToolCallResult",
    "StreamingEvent",
    "credentials_from_env",
    "ProviderKind",
    "ModelInfo",
    "StructuredOutputParser",
    "Provider",
    "OpenAIProvider",
    "AnthropicProvider",
    "GeminiProvider",
    "OpenRouterProvider",
    "LocalProvider",
    "Tool",
    "ToolParameter",
    "ToolRegistry",
    "tool",
    "Message",
    "Role",
    "ToolCall",
    "ToolCallRecord",
    "FinishReason",
    "ImageInput",
    "AgentResult",
    # Exceptions
    "ToolloopError",
    "ConfigurationError",
    "ProviderConfigurationError",
    "ProviderError",
    "TransientProviderError",
    "ProviderRequestError",
    "ContentPolicyError",
    "ToolValidationError",
    "ToolExecutionError",
    "ParsingError",
    "MaxIterationsExceededError",
    # Usage tracking
    "UsageStats",
    "AgentUsage",
]
