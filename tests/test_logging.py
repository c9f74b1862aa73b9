# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Tests for logging configuration."""

import json

import pytest
import structlog

from pmassist.logging import configure_logging, get_logger
from pmassist.settings import Settings


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


def test_json_format_writes_lines_to_stderr(capsys):
    configure_logging(Settings(log_level="INFO", log_format="json"))

    get_logger("pmassist.llm.engine").info("llm_completion_finished", model="m", input_tokens=3)

    captured = capsys.readouterr()
    assert captured.out == ""
    record = json.loads(captured.err.strip())
    assert record["event"] == "llm_completion_finished"
    assert record["logger"] == "pmassist.llm.engine"
    assert record["level"] == "info"
    assert record["input_tokens"] == 3
    assert "timestamp" in record


def test_level_filters_lower_events(capsys):
    configure_logging(Settings(log_level="WARNING", log_format="json"))
    logger = get_logger("pmassist.test")

    logger.info("hidden")
    logger.warning("shown")

    lines = capsys.readouterr().err.strip().splitlines()
    assert [json.loads(line)["event"] for line in lines] == ["shown"]


def test_logger_created_before_configuration_follows_it(capsys):
    logger = get_logger("pmassist.early")

    configure_logging(Settings(log_level="DEBUG", log_format="json"))
    logger.debug("late_configured")

    record = json.loads(capsys.readouterr().err.strip())
    assert record["event"] == "late_configured"
    assert record["logger"] == "pmassist.early"


def test_format_from_environment(monkeypatch):
    monkeypatch.setenv("PMASSIST_LOG_FORMAT", "json")

    assert Settings().log_format == "json"


def test_unknown_format_rejected():
    with pytest.raises(ValueError):
        Settings(log_format="xml")
