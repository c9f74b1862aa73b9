# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""LLM completion client.

Turns rendered prompts into completions over the Anthropic Messages API,
with blocking, streaming and schema-validated modes and usage accounting.

Public API:
    - LLMManager: Transport lifecycle and engine wiring
    - CompletionEngine, StreamEngine, SchemaValidatedCompletion
    - PromptTemplate and the shipped prompt templates
    - UsageLedger: Token and cost accounting
    - Request/Result/Stream types
    - Exception hierarchy
"""

from pmassist.llm.config import LLMConfig
from pmassist.llm.engine import CompletionEngine
from pmassist.llm.error_translation import translate_error
from pmassist.llm.exceptions import (
    ErrorKind,
    LLMAuthenticationError,
    LLMBadRequestError,
    LLMConnectionError,
    LLMEmptyCompletionError,
    LLMError,
    LLMOverloadedError,
    LLMProviderError,
    LLMRateLimitError,
    LLMSchemaValidationError,
    LLMTimeoutError,
    LLMUnavailableError,
    LLMUnexpectedError,
    TemplateRenderError,
)
from pmassist.llm.manager import LLMManager
from pmassist.llm.prompts import PROMPT_TEMPLATES, get_template
from pmassist.llm.streaming import StreamEngine
from pmassist.llm.structured import SchemaValidatedCompletion
from pmassist.llm.templates import PromptTemplate
from pmassist.llm.transport import TransportClient
from pmassist.llm.types import (
    ChatMessage,
    CompletionRequest,
    CompletionResult,
    ModelUsage,
    StreamDone,
    StreamEvent,
    StructuredResult,
    TextDelta,
    TokenUsage,
    UsageReport,
    UsageStats,
)
from pmassist.llm.usage_ledger import ModelPricing, UsageLedger

__all__ = [
    # Core
    "LLMManager",
    "TransportClient",
    "CompletionEngine",
    "StreamEngine",
    "SchemaValidatedCompletion",
    "UsageLedger",
    "ModelPricing",
    "translate_error",
    # Config
    "LLMConfig",
    # Templates
    "PromptTemplate",
    "PROMPT_TEMPLATES",
    "get_template",
    # Types
    "ChatMessage",
    "CompletionRequest",
    "CompletionResult",
    "StructuredResult",
    "TokenUsage",
    "TextDelta",
    "UsageReport",
    "StreamDone",
    "StreamEvent",
    "ModelUsage",
    "UsageStats",
    # Exceptions
    "ErrorKind",
    "LLMError",
    "LLMAuthenticationError",
    "LLMRateLimitError",
    "LLMOverloadedError",
    "LLMBadRequestError",
    "LLMProviderError",
    "LLMTimeoutError",
    "LLMConnectionError",
    "LLMUnexpectedError",
    "LLMEmptyCompletionError",
    "LLMSchemaValidationError",
    "LLMUnavailableError",
    "TemplateRenderError",
]
