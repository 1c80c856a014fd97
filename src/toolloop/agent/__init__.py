"""
Public exports for the agent package.
"""

from .accountant import ExecutionAccountant
from .config import AgentConfig, BackupModelConfig, ModelConfig
from .core import Agent
from .fallback import FallbackController, build_model_config
from .hooks import AfterToolCallResult, BeforeToolCallResult, HookPipeline, ToolHookContext
from .retry import RetryPolicy
from .streaming import StreamingEmitter, StreamingEvent
from .tool_invoker import ToolInvoker

__all__ = [
    "Agent",
    "AgentConfig",
    "ModelConfig",
    "BackupModelConfig",
    "ExecutionAccountant",
    "FallbackController",
    "build_model_config",
    "ToolHookContext",
    "BeforeToolCallResult",
    "AfterToolCallResult",
    "HookPipeline",
    "RetryPolicy",
    "StreamingEmitter",
    "StreamingEvent",
    "ToolInvoker",
]
