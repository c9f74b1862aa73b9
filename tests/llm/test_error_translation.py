# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Tests for failure translation."""

import httpx
import pytest

from pmassist.llm.error_translation import translate_error
from pmassist.llm.exceptions import (
    ErrorKind,
    LLMAuthenticationError,
    LLMBadRequestError,
    LLMConnectionError,
    LLMEmptyCompletionError,
    LLMOverloadedError,
    LLMProviderError,
    LLMRateLimitError,
    LLMTimeoutError,
    LLMUnexpectedError,
)
from pmassist.llm.transport import ProviderAPIError

SITE = "CompletionEngine.complete"


@pytest.mark.parametrize(
    ("status", "error_cls", "kind"),
    [
        (401, LLMAuthenticationError, ErrorKind.AUTHENTICATION_FAILED),
        (429, LLMRateLimitError, ErrorKind.RATE_LIMITED),
        (503, LLMOverloadedError, ErrorKind.PROVIDER_OVERLOADED),
        (529, LLMOverloadedError, ErrorKind.PROVIDER_OVERLOADED),
        (400, LLMBadRequestError, ErrorKind.BAD_REQUEST),
        (500, LLMProviderError, ErrorKind.PROVIDER_ERROR),
        (404, LLMProviderError, ErrorKind.PROVIDER_ERROR),
    ],
)
def test_status_mapping(status, error_cls, kind):
    error = translate_error(ProviderAPIError(status, "upstream message"), SITE, 30.0)

    assert isinstance(error, error_cls)
    assert error.kind is kind
    assert error.call_site == SITE
    assert str(error).startswith(f"[{SITE}]")
    assert "upstream message" in str(error)


def test_rate_limit_includes_retry_hint():
    error = translate_error(ProviderAPIError(429, "slow down", retry_after=7.0), SITE, 30.0)

    assert isinstance(error, LLMRateLimitError)
    assert error.retry_after == 7.0
    assert "Retry after 7s." in str(error)


def test_rate_limit_without_retry_hint():
    error = translate_error(ProviderAPIError(429, "slow down"), SITE, 30.0)

    assert error.retry_after is None
    assert "Retry after" not in str(error)


def test_other_status_includes_code():
    error = translate_error(ProviderAPIError(418, "teapot"), SITE, 30.0)

    assert isinstance(error, LLMProviderError)
    assert error.status_code == 418
    assert "HTTP 418" in str(error)


def test_timeout_includes_configured_value():
    error = translate_error(httpx.ReadTimeout("read timed out"), SITE, 30.0)

    assert isinstance(error, LLMTimeoutError)
    assert "30s" in str(error)
    assert "read timed out" in str(error)


@pytest.mark.parametrize(
    "exc",
    [httpx.ConnectError("Connection refused"), httpx.RemoteProtocolError("peer closed connection")],
)
def test_connection_failures(exc):
    error = translate_error(exc, SITE, 30.0)

    assert isinstance(error, LLMConnectionError)
    assert "network connectivity" in str(error)
    assert str(exc) in str(error)


def test_unexpected_error_wraps_message():
    error = translate_error(RuntimeError("boom"), SITE, 30.0)

    assert isinstance(error, LLMUnexpectedError)
    assert error.kind is ErrorKind.UNEXPECTED_ERROR
    assert str(error) == f"[{SITE}] Unexpected error: boom"


def test_llm_errors_pass_through():
    original = LLMEmptyCompletionError("no text")

    assert translate_error(original, SITE, 30.0) is original
