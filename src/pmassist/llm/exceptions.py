# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Exception hierarchy for LLM operations.

Every failure that leaves the completion client is one of the classes below.
``kind`` identifies the failure category without isinstance checks, and
``call_site`` names the engine method that raised it.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from pmassist.llm.types import TokenUsage


class ErrorKind(str, Enum):
    """Closed set of failure categories surfaced to callers."""

    AUTHENTICATION_FAILED = "authentication_failed"
    RATE_LIMITED = "rate_limited"
    PROVIDER_OVERLOADED = "provider_overloaded"
    BAD_REQUEST = "bad_request"
    PROVIDER_ERROR = "provider_error"
    TIMEOUT = "timeout"
    CONNECTION_FAILED = "connection_failed"
    UNEXPECTED_ERROR = "unexpected_error"
    EMPTY_COMPLETION = "empty_completion"
    SCHEMA_VALIDATION_FAILED = "schema_validation_failed"
    UNAVAILABLE = "unavailable"


class LLMError(Exception):
    """Base exception for LLM operations."""

    kind: ClassVar[ErrorKind] = ErrorKind.UNEXPECTED_ERROR

    def __init__(self, message: str, *, call_site: str | None = None):
        super().__init__(message)
        self.call_site = call_site


class LLMAuthenticationError(LLMError):
    """Authentication failed."""

    kind = ErrorKind.AUTHENTICATION_FAILED


class LLMRateLimitError(LLMError):
    """Rate limit exceeded."""

    kind = ErrorKind.RATE_LIMITED

    def __init__(self, message: str, *, call_site: str | None = None, retry_after: float | None = None):
        super().__init__(message, call_site=call_site)
        self.retry_after = retry_after


class LLMOverloadedError(LLMError):
    """Provider is overloaded or temporarily unavailable."""

    kind = ErrorKind.PROVIDER_OVERLOADED


class LLMBadRequestError(LLMError):
    """Provider rejected the request parameters."""

    kind = ErrorKind.BAD_REQUEST


class LLMProviderError(LLMError):
    """Provider returned an unclassified HTTP error."""

    kind = ErrorKind.PROVIDER_ERROR

    def __init__(self, message: str, *, call_site: str | None = None, status_code: int | None = None):
        super().__init__(message, call_site=call_site)
        self.status_code = status_code


class LLMTimeoutError(LLMError):
    """LLM request timed out."""

    kind = ErrorKind.TIMEOUT


class LLMConnectionError(LLMError):
    """Failed to connect to LLM provider."""

    kind = ErrorKind.CONNECTION_FAILED


class LLMUnexpectedError(LLMError):
    """Failure that matches no other category."""

    kind = ErrorKind.UNEXPECTED_ERROR


class LLMEmptyCompletionError(LLMError):
    """Response contained no text content blocks."""

    kind = ErrorKind.EMPTY_COMPLETION

    def __init__(self, message: str, *, call_site: str | None = None, stop_reason: str | None = None):
        super().__init__(message, call_site=call_site)
        self.stop_reason = stop_reason


class LLMSchemaValidationError(LLMError):
    """Structured output still invalid after the corrective retry."""

    kind = ErrorKind.SCHEMA_VALIDATION_FAILED

    def __init__(
        self,
        message: str,
        *,
        call_site: str | None = None,
        validation_error: str = "",
        usage: TokenUsage | None = None,
    ):
        super().__init__(message, call_site=call_site)
        self.validation_error = validation_error
        self.usage = usage


class LLMUnavailableError(LLMError):
    """AI features are disabled or no API key is configured."""

    kind = ErrorKind.UNAVAILABLE


class TemplateRenderError(ValueError):
    """Strict rendering found placeholders without a value."""

    def __init__(self, missing: set[str] | frozenset[str]):
        self.missing = frozenset(missing)
        names = ", ".join(sorted(self.missing))
        super().__init__(f"Unresolved template placeholders: {names}")
