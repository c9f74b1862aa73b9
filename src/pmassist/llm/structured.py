# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Schema-validated completions with a single self-correcting retry."""

from __future__ import annotations

import json
import re
from dataclasses import replace
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from pmassist.llm.engine import CompletionEngine
from pmassist.llm.exceptions import LLMSchemaValidationError
from pmassist.llm.prompts import SCHEMA_CORRECTION
from pmassist.llm.types import ChatMessage, CompletionRequest, StructuredResult
from pmassist.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# ```json is always a tag. Other tags are only consumed when whitespace follows
# them, so output such as ```true``` keeps its value.
_LEADING_FENCE_RE = re.compile(r"^```(?:json(?![A-Za-z0-9_+.-])|[A-Za-z0-9_+.-]+(?=\s))?")
_TRAILING_FENCE_RE = re.compile(r"```$")

RAW_PREVIEW_CHARS = 200


class OutputValidationError(Exception):
    """Model output could not be parsed or did not match the schema."""


def strip_code_fences(raw: str) -> str:
    """Remove a leading and a trailing markdown code fence."""
    cleaned = raw.strip()
    cleaned = _LEADING_FENCE_RE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE_RE.sub("", cleaned, count=1)
    return cleaned.strip()


def _format_validation_error(error: ValidationError) -> str:
    lines = []
    for issue in error.errors():
        path = ".".join(str(part) for part in issue["loc"]) or "(root)"
        lines.append(f"  - {path}: {issue['msg']}")
    return "Schema validation errors:\n" + "\n".join(lines)


def parse_structured_output(raw: str, adapter: TypeAdapter[T]) -> T:
    """Parse model output as JSON and validate it.

    Raises:
        OutputValidationError: With a message suitable for feeding back to the model
    """
    cleaned = strip_code_fences(raw)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise OutputValidationError(
            f"JSON parse error: {e}. Raw content starts with: {cleaned[:RAW_PREVIEW_CHARS]!r}"
        ) from e
    try:
        return adapter.validate_python(parsed)
    except ValidationError as e:
        raise OutputValidationError(_format_validation_error(e)) from e


class SchemaValidatedCompletion:
    """Wrap a CompletionEngine with a structured-output contract.

    The first response is parsed and validated; on failure the invalid output
    and the validation error are replayed to the model once. Usage and latency
    of both attempts are summed, so callers see the full cost of correction.
    """

    name = "SchemaValidatedCompletion"

    def __init__(self, engine: CompletionEngine):
        self._engine = engine

    async def complete_with_schema(self, request: CompletionRequest, schema: Any) -> StructuredResult[Any]:
        """Generate a completion validated against ``schema``.

        Args:
            request: Completion request (response_format is forced to json)
            schema: Anything pydantic can validate (model class, TypedDict,
                ``list[Model]``...) or a TypeAdapter

        Returns:
            Structured result holding the validated data

        Raises:
            LLMSchemaValidationError: If the corrected response is still invalid
            LLMError: On transport or provider failures
        """
        call_site = f"{self.name}.complete_with_schema"
        adapter = schema if isinstance(schema, TypeAdapter) else TypeAdapter(schema)
        json_request = replace(request, response_format="json")

        first = await self._engine.complete(json_request)
        try:
            data = parse_structured_output(first.content, adapter)
        except OutputValidationError as e:
            first_error = str(e)
        else:
            return StructuredResult(
                data=data,
                usage=first.usage,
                latency_ms=first.latency_ms,
                model=first.model,
                attempts=1,
            )

        logger.info("llm_schema_retry", call_site=call_site, error=first_error)
        retry_request = replace(
            json_request,
            history=[
                *request.history,
                ChatMessage(role="user", content=request.user_message),
                ChatMessage(role="assistant", content=first.content),
            ],
            user_message=SCHEMA_CORRECTION.render({"error": first_error}),
        )
        second = await self._engine.complete(retry_request)
        usage = first.usage + second.usage
        latency_ms = first.latency_ms + second.latency_ms

        try:
            data = parse_structured_output(second.content, adapter)
        except OutputValidationError as e:
            logger.warning("llm_schema_retry_failed", call_site=call_site, error=str(e))
            raise LLMSchemaValidationError(
                f"[{call_site}] Failed to get valid JSON after retry. Validation error: {e}",
                call_site=call_site,
                validation_error=str(e),
                usage=usage,
            ) from e

        return StructuredResult(
            data=data,
            usage=usage,
            latency_ms=latency_ms,
            model=second.model,
            attempts=2,
        )
