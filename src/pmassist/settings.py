# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Application settings."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pmassist.llm.config import LLMConfig


class Settings(BaseSettings):
    log_level: str = "WARNING"
    log_format: Literal["console", "json"] = "console"
    llm: LLMConfig = Field(default_factory=LLMConfig)

    model_config = SettingsConfigDict(
        env_prefix="PMASSIST_",
        env_nested_delimiter="__",
        extra="ignore",
    )
