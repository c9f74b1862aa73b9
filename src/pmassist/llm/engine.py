# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Blocking completion engine and wire payload construction."""

from __future__ import annotations

import time
from typing import Any

from pmassist.llm.config import LLMConfig
from pmassist.llm.error_translation import translate_error
from pmassist.llm.exceptions import LLMEmptyCompletionError
from pmassist.llm.transport import TransportClient
from pmassist.llm.types import CompletionRequest, CompletionResult, TokenUsage
from pmassist.llm.usage_ledger import UsageLedger
from pmassist.logging import get_logger

logger = get_logger(__name__)

JSON_INSTRUCTION = (
    "\n\nIMPORTANT: You must respond with ONLY valid JSON. "
    "Do not include any markdown code fences, explanatory text, or comments. "
    "Your entire response must be a single, parseable JSON object or array."
)


def build_system_prompt(system_prompt: str, response_format: str) -> str:
    if response_format == "json":
        return system_prompt + JSON_INSTRUCTION
    return system_prompt


def build_messages(request: CompletionRequest) -> list[dict[str, str]]:
    """Prior turns in chronological order, followed by the new user message."""
    messages = [{"role": msg.role, "content": msg.content} for msg in request.history]
    messages.append({"role": "user", "content": request.user_message})
    return messages


def build_payload(request: CompletionRequest, config: LLMConfig, *, stream: bool) -> dict[str, Any]:
    """Build the Messages API request body.

    Args:
        request: Completion request
        config: Supplies the model and the max_tokens/temperature defaults
        stream: Whether to request a streaming response

    Returns:
        JSON-serializable request body
    """
    return {
        "model": config.model,
        "max_tokens": request.max_tokens if request.max_tokens is not None else config.max_tokens,
        "temperature": request.temperature if request.temperature is not None else config.temperature,
        "system": build_system_prompt(request.system_prompt, request.response_format),
        "messages": build_messages(request),
        "stream": stream,
    }


class CompletionEngine:
    """Run a single request/response cycle against the provider."""

    name = "CompletionEngine"

    def __init__(self, transport: TransportClient, ledger: UsageLedger, config: LLMConfig):
        self._transport = transport
        self._ledger = ledger
        self._config = config

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        """Generate a completion.

        Args:
            request: Completion request

        Returns:
            Completion result with concatenated text, usage and latency

        Raises:
            LLMEmptyCompletionError: If the response has no text blocks
            LLMError: On transport or provider failures
        """
        call_site = f"{self.name}.complete"
        payload = build_payload(request, self._config, stream=False)

        start = time.monotonic()
        try:
            response = await self._transport.create_message(payload)
        except Exception as e:
            error = translate_error(e, call_site, self._config.timeout_seconds)
            logger.warning("llm_request_failed", call_site=call_site, kind=error.kind.value, error=str(e))
            raise error from e
        latency_ms = int((time.monotonic() - start) * 1000)

        model = response.model or self._config.model
        usage = TokenUsage(
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
        # The provider billed the tokens even when no text came back.
        self._ledger.record(usage, model)

        segments = response.text_segments()
        if not segments:
            raise LLMEmptyCompletionError(
                f"[{call_site}] Response contained no text content blocks. Stop reason: {response.stop_reason}",
                call_site=call_site,
                stop_reason=response.stop_reason,
            )

        logger.debug(
            "llm_completion_finished",
            model=model,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            latency_ms=latency_ms,
            stop_reason=response.stop_reason,
        )
        return CompletionResult(
            content="".join(segments),
            usage=usage,
            latency_ms=latency_ms,
            model=model,
            stop_reason=response.stop_reason,
        )
