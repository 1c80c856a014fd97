"""
Custom exceptions with helpful error messages and suggestions.

Configuration and tool errors render a framed message with:
- Clear explanations of what went wrong
- Concrete suggestions for fixes
- Relevant context (provider names, parameter names, etc.)

Provider errors stay one-line. ``error_summary`` gives the one-line form of
any error for streaming consumers and ``AgentResult.error``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .types import FinishReason


class ToolloopError(Exception):
    """Base exception for all toolloop errors."""

    pass


class ConfigurationError(ToolloopError):
    """Raised for unsupported providers or invalid model configuration. Never retried."""

    def __init__(self, issue: str, suggestion: str = ""):
        self.issue = issue
        self.suggestion = suggestion

        message = f"\n{'='*60}\n"
        message += "❌ Configuration Error\n"
        message += f"{'='*60}\n\n"
        message += f"Issue: {issue}\n"
        if suggestion:
            message += f"\n💡 Suggestion: {suggestion}\n"
        message += f"\n{'='*60}\n"

        super().__init__(message)


class ProviderConfigurationError(ConfigurationError):
    """Raised when a required provider credential is missing."""

    def __init__(self, provider_name: str, missing_config: str, env_var: str = ""):
        self.provider_name = provider_name
        self.missing_config = missing_config
        self.env_var = env_var

        suggestion = ""
        if env_var:
            suggestion = (
                f"Set the environment variable `export {env_var}='your-api-key'` "
                f"or pass credentials={{'{provider_name}': 'your-api-key'}} to the Agent"
            )
        issue = f"No {missing_config} provided for '{provider_name}'"
        if env_var:
            issue += f" (set {env_var})"
        super().__init__(issue, suggestion)


class ProviderError(ToolloopError):
    """Raised when a provider adapter cannot complete a request."""

    retryable = False

    def __init__(self, message: str, *, provider: str = "", status_code: Optional[int] = None):
        self.provider = provider
        self.status_code = status_code
        super().__init__(message)


class TransientProviderError(ProviderError):
    """Timeouts, 5xx responses and rate limiting. Retried with backoff."""

    retryable = True


class ProviderRequestError(ProviderError):
    """Request rejected by the provider (bad request, auth, not found)."""


class ContentPolicyError(ToolloopError):
    """The model stopped because of a safety block or the output token limit."""

    def __init__(self, reason: FinishReason, message: str):
        self.reason = reason
        super().__init__(message)

    @classmethod
    def safety_blocked(cls) -> "ContentPolicyError":
        return cls(
            FinishReason.SAFETY,
            "Unable to generate a response: the provider blocked the output. "
            "Try rephrasing the request or use a different model.",
        )

    @classmethod
    def truncated(cls) -> "ContentPolicyError":
        return cls(
            FinishReason.LENGTH,
            "Response was truncated due to max tokens limit. "
            "Please increase max_tokens in the model configuration.",
        )


class ToolValidationError(ToolloopError):
    """Raised when tool parameters are invalid."""

    def __init__(self, tool_name: str, param_name: str, issue: str, suggestion: str = ""):
        self.tool_name = tool_name
        self.param_name = param_name
        self.issue = issue
        self.suggestion = suggestion

        message = f"\n{'='*60}\n"
        message += f"❌ Tool Validation Error: '{tool_name}'\n"
        message += f"{'='*60}\n\n"
        message += f"Parameter: {param_name}\n"
        message += f"Issue: {issue}\n"
        if suggestion:
            message += f"\n💡 Suggestion: {suggestion}\n"
        message += f"\n{'='*60}\n"

        super().__init__(message)


class ToolExecutionError(ToolloopError):
    """Raised when tool execution fails. Converted into a tool-result message by the agent."""

    def __init__(self, tool_name: str, error: Exception, params: Dict[str, Any]):
        self.tool_name = tool_name
        self.error = error
        self.params = params
        super().__init__(f"{type(error).__name__}: {error}")


class ParsingError(ToolloopError):
    """Raised when JSON-mode output cannot be parsed."""

    def __init__(self, message: str, raw_text: str = ""):
        self.raw_text = raw_text
        super().__init__(message)


class MaxIterationsExceededError(ToolloopError):
    """Raised when the agent loop exceeds its iteration bound."""

    def __init__(self, max_iterations: int):
        self.max_iterations = max_iterations
        super().__init__(
            f"Maximum iterations ({max_iterations}) reached without a final response. "
            "Increase max_iterations or simplify the task."
        )


def error_summary(exc: BaseException) -> str:
    """One-line description of ``exc``, without the framed layout."""
    if isinstance(exc, ConfigurationError):
        return exc.issue
    return str(exc)


__all__ = [
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
    "error_summary",
]
