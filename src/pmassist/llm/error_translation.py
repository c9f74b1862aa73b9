# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Translation of transport and provider failures into typed LLM errors."""

from __future__ import annotations

import httpx

from pmassist.llm.exceptions import (
    LLMAuthenticationError,
    LLMBadRequestError,
    LLMConnectionError,
    LLMError,
    LLMOverloadedError,
    LLMProviderError,
    LLMRateLimitError,
    LLMTimeoutError,
    LLMUnexpectedError,
)
from pmassist.llm.transport import ProviderAPIError

OVERLOADED_STATUSES = frozenset({503, 529})


def _translate_api_error(exc: ProviderAPIError, site: str) -> LLMError:
    status = exc.status_code
    details = exc.message

    if status == 401:
        return LLMAuthenticationError(
            f"[{site}] Authentication failed. The API key is invalid or expired. Details: {details}",
            call_site=site,
        )
    if status == 429:
        hint = f" Retry after {exc.retry_after:g}s." if exc.retry_after is not None else ""
        return LLMRateLimitError(
            f"[{site}] Rate limit exceeded. Please wait before making additional requests.{hint} Details: {details}",
            call_site=site,
            retry_after=exc.retry_after,
        )
    if status in OVERLOADED_STATUSES:
        return LLMOverloadedError(
            f"[{site}] Provider is temporarily overloaded or unavailable. Please retry later. Details: {details}",
            call_site=site,
        )
    if status == 400:
        return LLMBadRequestError(
            f"[{site}] Bad request sent to provider. This may indicate a prompt that is too long "
            f"or invalid parameters. Details: {details}",
            call_site=site,
        )
    return LLMProviderError(
        f"[{site}] Provider API error (HTTP {status}): {details}",
        call_site=site,
        status_code=status,
    )


def translate_error(exc: BaseException, call_site: str, timeout_seconds: float) -> LLMError:
    """Map a failure raised during a provider call to an LLMError.

    Args:
        exc: Exception raised by the transport or while handling its response
        call_site: Engine and method name, used as the message prefix
        timeout_seconds: Configured request timeout, quoted in timeout errors

    Returns:
        Typed error carrying the original message. LLMError instances are
        returned unchanged.
    """
    if isinstance(exc, LLMError):
        return exc
    if isinstance(exc, ProviderAPIError):
        return _translate_api_error(exc, call_site)
    # TimeoutException is a TransportError subclass, so it must be checked first.
    if isinstance(exc, httpx.TimeoutException):
        return LLMTimeoutError(
            f"[{call_site}] Request timed out after {timeout_seconds:g}s. The request may have been "
            f"too large or the service is under heavy load. Details: {exc}",
            call_site=call_site,
        )
    if isinstance(exc, httpx.TransportError):
        return LLMConnectionError(
            f"[{call_site}] Failed to connect to provider. Check network connectivity and firewall "
            f"rules. Details: {exc}",
            call_site=call_site,
        )
    return LLMUnexpectedError(f"[{call_site}] Unexpected error: {exc}", call_site=call_site)
