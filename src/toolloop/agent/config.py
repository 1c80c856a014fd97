"""
Configuration options for the agent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..exceptions import ConfigurationError
from ..models import DEFAULT_MODEL, parse_model_id


def _check_range(name: str, value: Optional[float], low: float, high: float) -> None:
    if value is not None and not low <= value <= high:
        raise ConfigurationError(
            f"{name}={value} is out of range",
            suggestion=f"Use a value between {low} and {high}",
        )


def _check_positive(name: str, value: Optional[int]) -> None:
    if value is not None and value <= 0:
        raise ConfigurationError(f"{name}={value} must be positive")


@dataclass(frozen=True)
class BackupModelConfig:
    """
    Model to switch to when the whole execution fails on the primary model.

    Unset fields are inherited from the primary configuration. A backup
    cannot declare its own backup, so fallback is a single level deep.

    Attributes:
        model: Backup model identifier (``provider/model-name``).
        temperature: Override for the primary temperature.
        max_tokens: Override for the primary max_tokens.
        max_retries: Override for the primary max_retries.
    """

    model: str
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    max_retries: Optional[int] = None

    def __post_init__(self) -> None:
        parse_model_id(self.model)
        _check_range("temperature", self.temperature, 0.0, 2.0)
        _check_positive("max_tokens", self.max_tokens)
        _check_range("max_retries", self.max_retries, 0, 10)


@dataclass(frozen=True)
class ModelConfig:
    """
    Model selection and sampling settings for one execution.

    Immutable for the duration of a run; fallback derives a separate
    instance for the backup attempt.

    Attributes:
        model: Model identifier (``provider/model-name``). Default: google/gemini-2.5-flash.
        temperature: Sampling temperature, 0 (deterministic) to 2 (very random). Default: 0.7.
        max_tokens: Maximum tokens to generate per model call. Default: 12800.
        max_retries: Attempts per model call before the call is treated as failed. Default: 3.
        json_mode: Validate and clean the final response as JSON. Default: False.
        provider_order: Upstream provider preference (OpenRouter only). Default: None.
        backup_model: Optional model to fall back to when the execution fails.
    """

    model: str = DEFAULT_MODEL
    temperature: float = 0.7
    max_tokens: int = 12800
    max_retries: int = 3
    json_mode: bool = False
    provider_order: Optional[List[str]] = None
    backup_model: Optional[BackupModelConfig] = None

    def __post_init__(self) -> None:
        parse_model_id(self.model)
        _check_range("temperature", self.temperature, 0.0, 2.0)
        _check_positive("max_tokens", self.max_tokens)
        _check_range("max_retries", self.max_retries, 0, 10)
        if isinstance(self.backup_model, ModelConfig):
            raise ConfigurationError(
                "backup_model must be a BackupModelConfig",
                suggestion="Backup models cannot chain; pass BackupModelConfig(model=...)",
            )


@dataclass
class AgentConfig:
    """
    Configuration for one agent execution.

    Attributes:
        name: Friendly agent name used in log lines. Default: "AI Agent".
        system_prompt: Instructions sent with every model call.
        model: ModelConfig for the primary model.
        max_iterations: Maximum agent turns (model calls) before the run fails. Default: 10.
        tools: Names of pre-registered tools to enable.
        retry_base_delay: Base backoff delay in seconds. Default: 1.0.
        retry_max_delay: Cap on the backoff delay in seconds. Default: 32.0.
        request_timeout: Timeout for each model request in seconds. None = SDK default.
        image_fetch_timeout: Timeout for downloading URL images in seconds. Default: 30.0.
    """

    name: str = "AI Agent"
    system_prompt: str = "You are a helpful AI assistant"
    model: ModelConfig = field(default_factory=ModelConfig)
    max_iterations: int = 10
    tools: List[str] = field(default_factory=list)
    retry_base_delay: float = 1.0
    retry_max_delay: float = 32.0
    request_timeout: Optional[float] = None
    image_fetch_timeout: float = 30.0

    def __post_init__(self) -> None:
        if self.max_iterations < 1:
            raise ConfigurationError(
                f"max_iterations={self.max_iterations} must be at least 1",
                suggestion="Each agent turn counts as one iteration",
            )
        if self.retry_base_delay < 0 or self.retry_max_delay < 0:
            raise ConfigurationError("Retry delays cannot be negative")
