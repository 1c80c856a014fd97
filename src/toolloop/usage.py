"""
Token usage tracking for model invocations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass
class UsageStats:
    """
    Token usage reported for a single model call.

    Attributes:
        input_tokens: Number of tokens in the prompt/input.
        output_tokens: Number of tokens in the completion/output.
        total_tokens: Total tokens used (input + output when not reported).
        model: Model name used for this call.
        provider: Provider name (openai, anthropic, google, openrouter, ...).
    """

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    model: str = ""
    provider: str = ""

    def __post_init__(self):
        """Ensure total_tokens is consistent."""
        if self.total_tokens == 0 and (self.input_tokens or self.output_tokens):
            self.total_tokens = self.input_tokens + self.output_tokens


@dataclass
class AgentUsage:
    """
    Aggregates usage across every model call of one execution.

    Attributes:
        total_input_tokens: Cumulative input tokens across all calls.
        total_output_tokens: Cumulative output tokens across all calls.
        total_tokens: Cumulative total tokens across all calls.
        calls: UsageStats for each model call, in order.
    """

    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_tokens: int = 0
    calls: List[UsageStats] = field(default_factory=list)

    def add_usage(self, stats: UsageStats) -> None:
        """Add usage stats from a single model call."""
        self.total_input_tokens += stats.input_tokens
        self.total_output_tokens += stats.output_tokens
        self.total_tokens += stats.total_tokens
        self.calls.append(stats)

    def as_stats(self) -> UsageStats:
        """Collapse the running totals into a single UsageStats."""
        model = self.calls[-1].model if self.calls else ""
        provider = self.calls[-1].provider if self.calls else ""
        return UsageStats(
            input_tokens=self.total_input_tokens,
            output_tokens=self.total_output_tokens,
            total_tokens=self.total_tokens,
            model=model,
            provider=provider,
        )


__all__ = ["UsageStats", "AgentUsage"]
