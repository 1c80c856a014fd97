"""
Whole-execution fallback to a backup model.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from ..exceptions import error_summary
from ..types import AgentResult
from .config import ModelConfig
from .streaming import StreamingEmitter

logger = logging.getLogger(__name__)


class ExecutionFailure(Exception):
    """
    A terminal failure of one execution attempt.

    Carries the partial result (iterations, accounted tool calls, usage)
    that is returned to the caller when no fallback applies.
    """

    def __init__(self, cause: BaseException, result: AgentResult):
        self.cause = cause
        self.result = result
        super().__init__(error_summary(cause))


def build_model_config(primary: ModelConfig) -> ModelConfig:
    """
    Derive the configuration used for the backup attempt.

    ``model``, ``temperature``, ``max_tokens`` and ``max_retries`` come from the
    backup when set, otherwise from the primary. The derived config never
    carries a backup of its own. Without a backup, ``primary`` is returned
    unchanged.
    """
    backup = primary.backup_model
    if backup is None:
        return primary
    return ModelConfig(
        model=backup.model,
        temperature=backup.temperature if backup.temperature is not None else primary.temperature,
        max_tokens=backup.max_tokens if backup.max_tokens is not None else primary.max_tokens,
        max_retries=backup.max_retries if backup.max_retries is not None else primary.max_retries,
        json_mode=primary.json_mode,
        provider_order=primary.provider_order,
        backup_model=None,
    )


ExecutionAttempt = Callable[[ModelConfig], Awaitable[AgentResult]]


class FallbackController:
    """
    Runs an execution attempt and re-runs it once under the backup model.

    ``attempt`` builds a fresh execution state each time it is called and
    raises ``ExecutionFailure`` on terminal failure. The backup attempt's
    result, success or failure, is returned as is.
    """

    def __init__(self, emitter: Optional[StreamingEmitter] = None):
        self.emitter = emitter or StreamingEmitter()

    async def run(self, model_config: ModelConfig, attempt: ExecutionAttempt) -> AgentResult:
        try:
            return await attempt(model_config)
        except ExecutionFailure as failure:
            if model_config.backup_model is None:
                return await self._give_up(model_config, failure)

            message = (
                f"Primary model {model_config.model} failed: {error_summary(failure.cause)}. "
                f"Retrying with backup model... {model_config.backup_model.model}"
            )
            logger.warning(message)
            await self.emitter.error(message, recoverable=True)

        backup_config = build_model_config(model_config)
        try:
            return await attempt(backup_config)
        except ExecutionFailure as failure:
            return await self._give_up(backup_config, failure)

    async def _give_up(self, model_config: ModelConfig, failure: ExecutionFailure) -> AgentResult:
        logger.error("Execution with %s failed: %s", model_config.model, failure.cause)
        await self.emitter.error(error_summary(failure.cause), recoverable=False)
        return failure.result


__all__ = ["ExecutionFailure", "build_model_config", "FallbackController", "ExecutionAttempt"]
