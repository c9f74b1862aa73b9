# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Token usage accounting and cost estimation for LLM calls."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass, replace
from types import MappingProxyType

from pmassist.llm.types import ModelUsage, TokenUsage, UsageStats
from pmassist.logging import get_logger

logger = get_logger(__name__)

LARGE_REQUEST_TOKENS = 10_000


@dataclass(frozen=True)
class ModelPricing:
    """USD price per million tokens."""

    input_per_million: float
    output_per_million: float

    def cost(self, usage: TokenUsage) -> float:
        return (usage.input_tokens / 1_000_000) * self.input_per_million + (
            usage.output_tokens / 1_000_000
        ) * self.output_per_million


DEFAULT_PRICING = ModelPricing(input_per_million=3.0, output_per_million=15.0)

MODEL_PRICING: Mapping[str, ModelPricing] = MappingProxyType(
    {
        "claude-sonnet-4-5-20250929": ModelPricing(3.0, 15.0),
        "claude-sonnet-4-20250514": ModelPricing(3.0, 15.0),
        "claude-haiku-4-20250414": ModelPricing(0.80, 4.0),
        "claude-opus-4-20250514": ModelPricing(15.0, 75.0),
    }
)


class UsageLedger:
    """Accumulate request count, token counts and estimated cost.

    One ledger is shared by every engine of an LLMManager. All mutation
    happens under a lock so concurrent completions (tasks or threads) never
    lose an update.
    """

    def __init__(
        self,
        pricing: Mapping[str, ModelPricing] | None = None,
        default_pricing: ModelPricing = DEFAULT_PRICING,
    ):
        """Initialize ledger.

        Args:
            pricing: Per-model price table (defaults to MODEL_PRICING)
            default_pricing: Price tier for models missing from the table
        """
        self._pricing: Mapping[str, ModelPricing] = MappingProxyType(
            dict(MODEL_PRICING if pricing is None else pricing)
        )
        self._default_pricing = default_pricing
        self._lock = threading.Lock()
        self._total_requests = 0
        self._total_input_tokens = 0
        self._total_output_tokens = 0
        self._estimated_cost_usd = 0.0
        self._models: dict[str, ModelUsage] = {}

    @property
    def pricing(self) -> Mapping[str, ModelPricing]:
        return self._pricing

    def pricing_for(self, model: str) -> ModelPricing:
        """Return the price entry for a model, or the default tier."""
        return self._pricing.get(model, self._default_pricing)

    def record(self, usage: TokenUsage, model: str) -> float:
        """Record one completed request.

        Args:
            usage: Token usage reported by the provider
            model: Model that served the request

        Returns:
            Estimated cost of this request in USD
        """
        cost = self.pricing_for(model).cost(usage)

        with self._lock:
            self._total_requests += 1
            self._total_input_tokens += usage.input_tokens
            self._total_output_tokens += usage.output_tokens
            self._estimated_cost_usd += cost

            current = self._models.get(model) or ModelUsage(model=model)
            self._models[model] = replace(
                current,
                requests=current.requests + 1,
                input_tokens=current.input_tokens + usage.input_tokens,
                output_tokens=current.output_tokens + usage.output_tokens,
                estimated_cost_usd=current.estimated_cost_usd + cost,
            )

        if usage.total_tokens > LARGE_REQUEST_TOKENS:
            logger.warning(
                "large_llm_request",
                model=model,
                tokens=usage.total_tokens,
                cost_usd=cost,
            )
        return cost

    def snapshot(self) -> UsageStats:
        """Return a point-in-time copy of the accumulated statistics."""
        with self._lock:
            return UsageStats(
                total_requests=self._total_requests,
                total_input_tokens=self._total_input_tokens,
                total_output_tokens=self._total_output_tokens,
                estimated_cost_usd=self._estimated_cost_usd,
                models=dict(self._models),
            )

    def log_summary(self) -> None:
        """Log a summary of usage statistics."""
        stats = self.snapshot()

        logger.info(
            "llm_usage_summary",
            total_requests=stats.total_requests,
            total_tokens=stats.total_tokens,
            estimated_cost=f"${stats.estimated_cost_usd:.4f}",
        )

        for model, model_stats in stats.models.items():
            logger.info(
                "llm_model_stats",
                model=model,
                requests=model_stats.requests,
                tokens=model_stats.input_tokens + model_stats.output_tokens,
                cost=f"${model_stats.estimated_cost_usd:.4f}",
            )
