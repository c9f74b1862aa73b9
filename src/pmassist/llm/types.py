# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Type definitions for LLM requests, results and stream events."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Generic, Literal, TypeVar

T = TypeVar("T")

Role = Literal["user", "assistant"]
ResponseFormat = Literal["text", "json"]


@dataclass(frozen=True)
class TokenUsage:
    """Token usage statistics for an LLM request/response."""

    input_tokens: int = 0
    output_tokens: int = 0

    def __post_init__(self) -> None:
        for name in ("input_tokens", "output_tokens"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")

    def __add__(self, other: TokenUsage) -> TokenUsage:
        if not isinstance(other, TokenUsage):
            return NotImplemented
        return TokenUsage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
        )

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass(frozen=True)
class ChatMessage:
    """A single prior turn in a conversation."""

    role: Role
    content: str


@dataclass(frozen=True)
class CompletionRequest:
    """Request for a completion.

    ``max_tokens`` and ``temperature`` fall back to the configured defaults
    when left as None.
    """

    system_prompt: str
    user_message: str
    history: Sequence[ChatMessage] = ()
    response_format: ResponseFormat = "text"
    max_tokens: int | None = None
    temperature: float | None = None


@dataclass(frozen=True)
class CompletionResult:
    """Result of a blocking completion."""

    content: str
    usage: TokenUsage
    latency_ms: int
    model: str
    stop_reason: str | None = None


@dataclass(frozen=True)
class StructuredResult(Generic[T]):
    """Validated result of a schema-constrained completion."""

    data: T
    usage: TokenUsage
    latency_ms: int
    model: str
    attempts: int = 1


@dataclass(frozen=True)
class TextDelta:
    """Incremental text fragment from a stream."""

    text: str
    type: Literal["text_delta"] = "text_delta"


@dataclass(frozen=True)
class UsageReport:
    """Final token usage of a stream, emitted once before StreamDone."""

    usage: TokenUsage
    type: Literal["usage"] = "usage"


@dataclass(frozen=True)
class StreamDone:
    """Terminal stream event."""

    type: Literal["done"] = "done"


StreamEvent = TextDelta | UsageReport | StreamDone


@dataclass(frozen=True)
class ModelUsage:
    """Accumulated usage for a single model."""

    model: str
    requests: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    estimated_cost_usd: float = 0.0


@dataclass(frozen=True)
class UsageStats:
    """Point-in-time copy of the usage ledger."""

    total_requests: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    estimated_cost_usd: float = 0.0
    models: dict[str, ModelUsage] = field(default_factory=dict)

    @property
    def total_tokens(self) -> int:
        return self.total_input_tokens + self.total_output_tokens
