"""
Provider-agnostic agent loop alternating between model calls and tool batches.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Callable, Dict, List, Optional, Sequence

from ..env import CredentialsInput, credentials_from_env, normalize_credentials
from ..exceptions import (
    MaxIterationsExceededError,
    ProviderError,
    TransientProviderError,
    error_summary,
)
from ..images import build_human_message
from ..models import ProviderKind, parse_model_id
from ..providers import Provider, create_provider, normalize_provider_error
from ..toolbox import default_registry
from ..tools import Tool, ToolRegistry
from ..types import AgentResult, ImageInput, Message, Role
from .accountant import ExecutionAccountant
from .config import AgentConfig, ModelConfig
from .fallback import ExecutionFailure, FallbackController
from .hooks import AfterToolCallHook, BeforeToolCallHook, HookPipeline
from .retry import RetryPolicy
from .streaming import StreamingEmitter, StreamingSink
from .tool_invoker import ToolInvoker

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[ProviderKind, Dict[ProviderKind, str], Optional[List[str]]], Provider]

JSON_MODE_INSTRUCTION = (
    "Respond with valid JSON only. Do not wrap the JSON in markdown or add any other text."
)


class Agent:
    """
    Tool-augmented agent that loops between the model and its tools.

    Each execution starts in the agent step. When the model answers with tool
    calls, the tool step runs them in order and control returns to the agent
    step; a plain answer, or a stop request from an ``after_tool_call`` hook,
    ends the run. The number of agent steps is bounded by
    ``AgentConfig.max_iterations``.

    Model calls are retried on transient errors. When an execution fails and
    the model configuration names a backup model, the whole execution is run
    again on the backup.

    Executions share no mutable state, so one ``Agent`` may serve concurrent
    ``arun`` calls.

    Example:
        >>> agent = Agent(
        ...     config=AgentConfig(model=ModelConfig(model="openai/gpt-5-mini")),
        ...     tools=[get_weather],
        ...     credentials={"openai": "sk-..."},
        ... )
        >>> result = agent.run("What's the weather in Paris?")
        >>> print(result.response)
    """

    def __init__(
        self,
        config: Optional[AgentConfig] = None,
        tools: Optional[Sequence[Tool]] = None,
        credentials: Optional[CredentialsInput] = None,
        before_tool_call: Optional[BeforeToolCallHook] = None,
        after_tool_call: Optional[AfterToolCallHook] = None,
        streaming_callback: Optional[StreamingSink] = None,
        provider_factory: Optional[ProviderFactory] = None,
        registry: Optional[ToolRegistry] = None,
    ):
        """
        Initialize a new Agent.

        Args:
            config: Agent configuration. Defaults to AgentConfig().
            tools: Caller-supplied tools. They take precedence over
                pre-registered tools of the same name.
            credentials: Provider kind (or its name) to secret. Read from the
                environment when omitted.
            before_tool_call: Optional hook run before each tool invocation.
            after_tool_call: Optional hook run after each tool invocation.
            streaming_callback: Optional sink receiving StreamingEvents.
            provider_factory: Builds the provider adapter. Defaults to create_provider.
            registry: Source of pre-registered tools named in ``config.tools``.
                Defaults to the built-in toolbox.
        """
        self.config = config or AgentConfig()
        if credentials is None:
            self.credentials = credentials_from_env()
        else:
            self.credentials = normalize_credentials(credentials)
        self.hooks = HookPipeline(before_tool_call, after_tool_call)
        self.streaming_callback = streaming_callback
        self.provider_factory: ProviderFactory = provider_factory or create_provider
        self.tools = self._resolve_tools(list(tools or []), registry)
        self._tools_by_name: Dict[str, Tool] = {tool.name: tool for tool in self.tools}
        self.accountant = ExecutionAccountant(self._tools_by_name.keys())

    def _resolve_tools(self, custom: List[Tool], registry: Optional[ToolRegistry]) -> List[Tool]:
        resolved: List[Tool] = []
        seen = set()
        for tool in custom:
            if tool.name in seen:
                logger.warning("Duplicate custom tool '%s' ignored", tool.name)
                continue
            seen.add(tool.name)
            resolved.append(tool)

        if not self.config.tools:
            return resolved

        registry = registry if registry is not None else default_registry()
        for name in self.config.tools:
            if name in seen:
                continue
            tool = registry.get(name)
            if tool is None:
                logger.warning("Tool '%s' is not registered, skipping", name)
                continue
            seen.add(name)
            resolved.append(tool)
        return resolved

    def _system_prompt(self, model_config: ModelConfig) -> str:
        if model_config.json_mode:
            return f"{self.config.system_prompt}\n\n{JSON_MODE_INSTRUCTION}"
        return self.config.system_prompt

    def run(self, message: str, images: Optional[Sequence[ImageInput]] = None) -> AgentResult:
        """Synchronous wrapper around ``arun``."""
        return asyncio.run(self.arun(message, images))

    async def arun(
        self, message: str, images: Optional[Sequence[ImageInput]] = None
    ) -> AgentResult:
        """
        Execute the agent for one human message.

        Never raises: every failure comes back as ``success=False`` with the
        error message.
        """
        emitter = StreamingEmitter(self.streaming_callback)
        controller = FallbackController(emitter)
        logger.info("[%s] Starting execution with %s", self.config.name, self.config.model.model)

        async def attempt(model_config: ModelConfig) -> AgentResult:
            return await self._execute_with_model(model_config, message, images, emitter)

        try:
            return await controller.run(self.config.model, attempt)
        except Exception as exc:
            logger.exception("[%s] Unexpected execution error", self.config.name)
            return AgentResult(
                response=f"Execution error: {error_summary(exc)}",
                success=False,
                error=error_summary(exc),
                model=self.config.model.model,
            )

    async def _execute_with_model(
        self,
        model_config: ModelConfig,
        message: str,
        images: Optional[Sequence[ImageInput]],
        emitter: StreamingEmitter,
    ) -> AgentResult:
        """
        One complete execution on ``model_config`` with a fresh history.

        Raises:
            ExecutionFailure: On any terminal failure.
        """
        history: List[Message] = []
        iterations = 0
        try:
            kind, model_name = parse_model_id(model_config.model)
            provider = self.provider_factory(kind, self.credentials, model_config.provider_order)
            history.append(
                await build_human_message(message, images, self.config.image_fetch_timeout)
            )
            retry = RetryPolicy(
                max_retries=model_config.max_retries,
                base_delay=self.config.retry_base_delay,
                max_delay=self.config.retry_max_delay,
                emitter=emitter,
            )
            invoker = ToolInvoker(self._tools_by_name, self.hooks, emitter)
            system_prompt = self._system_prompt(model_config)

            while True:
                if iterations >= self.config.max_iterations:
                    raise MaxIterationsExceededError(self.config.max_iterations)
                iterations += 1

                ai_message = await self._agent_step(
                    provider, model_name, model_config, system_prompt, history, retry, emitter
                )
                history.append(ai_message)
                if not ai_message.tool_calls:
                    break

                logger.info(
                    "[%s] Iteration %d: %d tool call(s) requested",
                    self.config.name,
                    iterations,
                    len(ai_message.tool_calls),
                )
                outcome = await invoker.execute_batch(ai_message.tool_calls, history)
                history = outcome.messages
                if outcome.should_stop:
                    break

            return self.accountant.finalize(
                history, iterations, json_mode=model_config.json_mode, model=model_config.model
            )
        except Exception as exc:
            raise ExecutionFailure(
                exc, self.accountant.failed(history, iterations, exc, model=model_config.model)
            ) from exc

    async def _agent_step(
        self,
        provider: Provider,
        model_name: str,
        model_config: ModelConfig,
        system_prompt: str,
        history: List[Message],
        retry: RetryPolicy,
        emitter: StreamingEmitter,
    ) -> Message:
        """Call the model through the retry policy and report the call to the sink."""
        message_id = str(uuid.uuid4())
        tools = self.tools or None

        async def call_model() -> Message:
            await emitter.llm_start(model_config.model, model_config.temperature)
            request = dict(
                model=model_name,
                system_prompt=system_prompt,
                messages=list(history),
                tools=tools,
                temperature=model_config.temperature,
                max_tokens=model_config.max_tokens,
                timeout=self.config.request_timeout,
            )
            try:
                if emitter.enabled:
                    return await self._stream_model(provider, request, message_id, emitter)
                return await provider.ainvoke(**request)
            except ProviderError:
                raise
            except Exception as exc:
                normalized = normalize_provider_error(exc, getattr(provider, "name", "provider"))
                if normalized is exc:
                    raise
                raise normalized from exc

        ai_message = await retry.run(call_model)
        total_tokens = ai_message.usage.total_tokens if ai_message.usage else 0
        logger.debug("Model reply preview: %s", ai_message.text[:200])
        await emitter.llm_complete(message_id, total_tokens)
        return ai_message

    async def _stream_model(
        self, provider: Provider, request: dict, message_id: str, emitter: StreamingEmitter
    ) -> Message:
        final: Optional[Message] = None
        async for chunk in provider.astream(**request):
            if chunk.thinking:
                await emitter.think(message_id, chunk.thinking)
            if chunk.message is not None:
                final = chunk.message
        if final is None:
            raise TransientProviderError(
                "Stream ended without a final message", provider=getattr(provider, "name", "")
            )
        return final

    async def atest_credential(self) -> bool:
        """
        Send a one-shot prompt to check that the primary model's credential works.

        Raises:
            ConfigurationError: Unsupported provider or missing credential.
            ProviderError: The provider rejected the request.
        """
        kind, model_name = parse_model_id(self.config.model.model)
        provider = self.provider_factory(kind, self.credentials, self.config.model.provider_order)
        reply = await provider.ainvoke(
            model=model_name,
            system_prompt="",
            messages=[Message(role=Role.HUMAN, content="Hello, how are you?")],
            temperature=self.config.model.temperature,
            max_tokens=self.config.model.max_tokens,
            timeout=self.config.request_timeout,
        )
        return bool(reply.text or reply.images)

    def test_credential(self) -> bool:
        """Synchronous wrapper around ``atest_credential``."""
        return asyncio.run(self.atest_credential())


__all__ = ["Agent", "ProviderFactory", "JSON_MODE_INSTRUCTION"]
