# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Streaming completion engine.

Provider stream events are normalized into ``TextDelta`` fragments followed
by exactly one ``UsageReport`` and one ``StreamDone``.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import aclosing

from pmassist.llm.config import LLMConfig
from pmassist.llm.engine import build_payload
from pmassist.llm.error_translation import translate_error
from pmassist.llm.exceptions import LLMConnectionError
from pmassist.llm.transport import TransportClient
from pmassist.llm.types import (
    CompletionRequest,
    StreamDone,
    StreamEvent,
    TextDelta,
    TokenUsage,
    UsageReport,
)
from pmassist.llm.usage_ledger import UsageLedger
from pmassist.llm.wire import (
    ContentBlockDeltaEvent,
    MessageDeltaEvent,
    MessageStartEvent,
    MessageStopEvent,
    TextDeltaPayload,
)
from pmassist.logging import get_logger

logger = get_logger(__name__)


class StreamEngine:
    """Drive incremental completions.

    Each call to ``stream`` opens a new provider session; a finished or
    failed stream cannot be replayed. Consumers that stop early must close
    the generator (``contextlib.aclosing`` or ``aclose()``) so the HTTP
    response is released.
    """

    name = "StreamEngine"

    def __init__(self, transport: TransportClient, ledger: UsageLedger, config: LLMConfig):
        self._transport = transport
        self._ledger = ledger
        self._config = config

    async def stream(self, request: CompletionRequest) -> AsyncIterator[StreamEvent]:
        """Stream a completion.

        Args:
            request: Completion request

        Yields:
            TextDelta per provider text fragment, then UsageReport, then StreamDone

        Raises:
            LLMError: On transport or provider failures
        """
        call_site = f"{self.name}.stream"
        payload = build_payload(request, self._config, stream=True)

        model = self._config.model
        input_tokens = 0
        output_tokens = 0
        completed = False

        try:
            async with aclosing(self._transport.stream_message(payload)) as events:
                async for event in events:
                    if isinstance(event, ContentBlockDeltaEvent):
                        if isinstance(event.delta, TextDeltaPayload):
                            yield TextDelta(text=event.delta.text)
                    elif isinstance(event, MessageStartEvent):
                        model = event.message.model or model
                        input_tokens = event.message.usage.input_tokens
                        output_tokens = event.message.usage.output_tokens
                    elif isinstance(event, MessageDeltaEvent):
                        if event.usage is not None:
                            if event.usage.output_tokens is not None:
                                output_tokens = event.usage.output_tokens
                            if event.usage.input_tokens is not None:
                                input_tokens = event.usage.input_tokens
                    elif isinstance(event, MessageStopEvent):
                        completed = True
        except Exception as e:
            error = translate_error(e, call_site, self._config.timeout_seconds)
            logger.warning("llm_request_failed", call_site=call_site, kind=error.kind.value, error=str(e))
            raise error from e

        if not completed:
            raise LLMConnectionError(
                f"[{call_site}] Stream ended before the provider signalled completion.",
                call_site=call_site,
            )

        usage = TokenUsage(input_tokens=input_tokens, output_tokens=output_tokens)
        self._ledger.record(usage, model)
        logger.debug(
            "llm_stream_finished",
            model=model,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
        )
        yield UsageReport(usage=usage)
        yield StreamDone()
