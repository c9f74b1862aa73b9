# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""LLM manager for transport lifecycle and engine wiring."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import httpx

from pmassist.llm.config import LLMConfig
from pmassist.llm.engine import CompletionEngine
from pmassist.llm.exceptions import LLMUnavailableError
from pmassist.llm.streaming import StreamEngine
from pmassist.llm.structured import SchemaValidatedCompletion
from pmassist.llm.transport import TransportClient
from pmassist.llm.types import CompletionRequest, CompletionResult, StreamEvent, StructuredResult, UsageStats
from pmassist.llm.usage_ledger import UsageLedger
from pmassist.logging import get_logger

logger = get_logger(__name__)


class LLMManager:
    """Manages the provider transport and the engines built on it.

    Features:
    - Lazy transport creation, shared by every engine
    - Availability gate (AI enabled and API key configured)
    - Injected usage ledger shared across all calls
    """

    def __init__(
        self,
        config: LLMConfig,
        ledger: UsageLedger | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize manager.

        Args:
            config: LLM configuration
            ledger: Usage ledger to record into (a new one if omitted)
            transport: Optional httpx transport passed to the TransportClient
        """
        self.config = config
        self.ledger = ledger if ledger is not None else UsageLedger()
        self._http_transport = transport
        self._transport: TransportClient | None = None
        self._completion: CompletionEngine | None = None
        self._stream: StreamEngine | None = None
        self._structured: SchemaValidatedCompletion | None = None

        if config.enabled and not config.api_key:
            logger.warning(
                "llm_api_key_missing",
                detail="AI is enabled but no API key is configured; AI features are unavailable",
            )

    def is_available(self) -> bool:
        """Return True if AI features can be used."""
        return self.config.is_configured

    def _require_transport(self) -> TransportClient:
        if not self.is_available():
            raise LLMUnavailableError(
                "[LLMManager] AI service is unavailable. Either AI is disabled or no API key "
                "is configured. Check PMASSIST_LLM__ENABLED and ANTHROPIC_API_KEY.",
                call_site="LLMManager",
            )
        if self._transport is None:
            self._transport = TransportClient(self.config, transport=self._http_transport)
            logger.info("llm_transport_initialized", base_url=self.config.base_url, model=self.config.model)
        return self._transport

    @property
    def completion_engine(self) -> CompletionEngine:
        transport = self._require_transport()
        if self._completion is None:
            self._completion = CompletionEngine(transport, self.ledger, self.config)
        return self._completion

    @property
    def stream_engine(self) -> StreamEngine:
        transport = self._require_transport()
        if self._stream is None:
            self._stream = StreamEngine(transport, self.ledger, self.config)
        return self._stream

    @property
    def structured(self) -> SchemaValidatedCompletion:
        engine = self.completion_engine
        if self._structured is None:
            self._structured = SchemaValidatedCompletion(engine)
        return self._structured

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        """Generate a blocking completion."""
        return await self.completion_engine.complete(request)

    def stream(self, request: CompletionRequest) -> AsyncIterator[StreamEvent]:
        """Stream a completion.

        Availability is checked immediately, before the stream is iterated.
        """
        return self.stream_engine.stream(request)

    async def complete_with_schema(self, request: CompletionRequest, schema: Any) -> StructuredResult[Any]:
        """Generate a completion validated against ``schema``."""
        return await self.structured.complete_with_schema(request, schema)

    def get_usage_stats(self) -> UsageStats:
        """Get token usage statistics."""
        return self.ledger.snapshot()

    def log_usage_summary(self) -> None:
        """Log usage summary to logger."""
        self.ledger.log_summary()

    async def close(self) -> None:
        """Cleanup transport resources and log final statistics."""
        self.log_usage_summary()

        if self._transport:
            await self._transport.close()
            logger.info("llm_transport_closed")
            self._transport = None
            self._completion = None
            self._stream = None
            self._structured = None

    async def __aenter__(self) -> LLMManager:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
