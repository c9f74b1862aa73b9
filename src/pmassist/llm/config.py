# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration model for the LLM completion client."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"


def _api_key_from_env() -> str | None:
    return os.environ.get("ANTHROPIC_API_KEY") or None


class LLMConfig(BaseModel):
    """Configuration for the Anthropic Messages API client.

    ``api_key`` falls back to the ``ANTHROPIC_API_KEY`` environment variable
    so the key does not have to be repeated under the ``PMASSIST_`` prefix.
    """

    enabled: bool = True
    api_key: str | None = Field(default_factory=_api_key_from_env, repr=False)
    base_url: str = "https://api.anthropic.com"
    api_version: str = "2023-06-01"
    model: str = DEFAULT_MODEL
    max_tokens: int = Field(default=4096, ge=256, le=16384)
    temperature: float = Field(default=0.3, ge=0.0, le=1.0)
    timeout_seconds: float = Field(default=30.0, gt=0)

    @property
    def is_configured(self) -> bool:
        """Return True when AI features are enabled and a key is present."""
        return self.enabled and bool(self.api_key)
