# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authenticated HTTP transport for the Anthropic Messages API."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Any

import httpx

from pmassist.llm.config import LLMConfig
from pmassist.llm.wire import (
    ErrorEvent,
    MessageResponse,
    MessageStopEvent,
    ProviderEvent,
    parse_error_body,
    parse_stream_event,
)
from pmassist.logging import get_logger

logger = get_logger(__name__)

MESSAGES_PATH = "/v1/messages"

# HTTP status equivalents of the error types carried by in-stream error events.
STREAM_ERROR_STATUS = {
    "invalid_request_error": 400,
    "authentication_error": 401,
    "permission_error": 403,
    "not_found_error": 404,
    "request_too_large": 413,
    "rate_limit_error": 429,
    "api_error": 500,
    "overloaded_error": 529,
}


class ProviderAPIError(Exception):
    """Provider answered with an error status or an in-stream error event."""

    def __init__(
        self,
        status_code: int,
        message: str,
        *,
        error_type: str | None = None,
        retry_after: float | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.error_type = error_type
        self.retry_after = retry_after


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _api_error(response: httpx.Response) -> ProviderAPIError:
    detail = parse_error_body(response.content)
    message = detail.message if detail and detail.message else response.reason_phrase or "request failed"
    return ProviderAPIError(
        response.status_code,
        message,
        error_type=detail.type if detail else None,
        retry_after=_parse_retry_after(response.headers.get("retry-after")),
    )


async def iter_sse_data(lines: AsyncIterator[str]) -> AsyncIterator[str]:
    """Yield the ``data`` payload of each server-sent event.

    Multi-line data fields are joined with newlines; comment lines and the
    ``event:`` / ``id:`` fields are ignored since every payload carries its
    own ``type``.
    """
    data_lines: list[str] = []
    async for line in lines:
        if not line:
            if data_lines:
                yield "\n".join(data_lines)
                data_lines = []
            continue
        if line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        if field == "data":
            data_lines.append(value[1:] if value.startswith(" ") else value)
    if data_lines:
        yield "\n".join(data_lines)


class TransportClient:
    """Thin client for the provider's message-completion endpoint.

    A single httpx connection pool is shared by all concurrent calls. The
    configured timeout applies to both single-shot and streaming requests.
    """

    def __init__(self, config: LLMConfig, transport: httpx.AsyncBaseTransport | None = None):
        """Initialize transport.

        Args:
            config: LLM configuration
            transport: Optional httpx transport (tests inject httpx.MockTransport)
        """
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_seconds),
            headers={
                "x-api-key": config.api_key or "",
                "anthropic-version": config.api_version,
                "content-type": "application/json",
            },
            transport=transport,
        )

    async def create_message(self, payload: dict[str, Any]) -> MessageResponse:
        """Send a non-streaming request.

        Raises:
            ProviderAPIError: On a non-2xx response
            httpx.TransportError: On timeouts and connection failures
        """
        response = await self._client.post(MESSAGES_PATH, json=payload)
        if response.is_error:
            raise _api_error(response)
        return MessageResponse.model_validate_json(response.content)

    async def stream_message(self, payload: dict[str, Any]) -> AsyncIterator[ProviderEvent]:
        """Send a streaming request and yield parsed provider events.

        The HTTP response is closed when the provider signals ``message_stop``,
        when the generator is closed, or when the consuming task is cancelled.

        Raises:
            ProviderAPIError: On a non-2xx response or an ``error`` event
            httpx.TransportError: On timeouts and connection failures
        """
        async with self._client.stream("POST", MESSAGES_PATH, json=payload) as response:
            if response.is_error:
                await response.aread()
                raise _api_error(response)
            async with aclosing(iter_sse_data(response.aiter_lines())) as payloads:
                async for data in payloads:
                    event = parse_stream_event(data)
                    if isinstance(event, ErrorEvent):
                        raise ProviderAPIError(
                            STREAM_ERROR_STATUS.get(event.error.type, 500),
                            event.error.message,
                            error_type=event.error.type,
                        )
                    yield event
                    if isinstance(event, MessageStopEvent):
                        return
            logger.debug("llm_stream_closed_without_stop")

    async def close(self) -> None:
        """Cleanup HTTP client."""
        await self._client.aclose()
