# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Pytest configuration and fixtures.

The Messages API is simulated with httpx.MockTransport.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from pmassist.llm.config import LLMConfig
from pmassist.llm.transport import TransportClient
from pmassist.llm.usage_ledger import UsageLedger


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real credentials and overrides out of tests."""
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("PMASSIST_LOG_LEVEL", raising=False)
    monkeypatch.delenv("PMASSIST_LOG_FORMAT", raising=False)
    monkeypatch.delenv("PMASSIST_LLM__API_KEY", raising=False)
    monkeypatch.delenv("PMASSIST_LLM__ENABLED", raising=False)


@pytest.fixture
def llm_config() -> LLMConfig:
    """LLM config with a test key and a short timeout."""
    return LLMConfig(
        api_key="test-key",
        base_url="https://llm.test",
        model="claude-sonnet-4-5-20250929",
        timeout_seconds=5.0,
    )

class FakeProvider:
    """Queue of canned responses served through httpx.MockTransport.

    Each queued item is an httpx.Response, an exception to raise, or a
    callable receiving the request. Sent request bodies are kept in
    ``payloads``.
    """

    def __init__(self) -> None:
        self.responses: list[Any] = []
        self.requests: list[httpx.Request] = []

    @property
    def payloads(self) -> list[dict[str, Any]]:
        return [json.loads(request.content) for request in self.requests]

    def queue(self, *responses: Any) -> None:
        self.responses.extend(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError("FakeProvider received an unexpected request")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(request)
        return item

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def ledger() -> UsageLedger:
    return UsageLedger()


@pytest.fixture
async def transport_client(llm_config: LLMConfig, provider: FakeProvider):
    """TransportClient wired to the fake provider."""
    client = TransportClient(llm_config, transport=provider.transport)
    yield client
    await client.close()


@pytest.fixture
def message_response() -> Callable[..., httpx.Response]:
    """Factory for non-streaming Messages API responses."""

    def _make(
        *texts: str,
        model: str = "claude-sonnet-4-5-20250929",
        stop_reason: str = "end_turn",
        input_tokens: int = 10,
        output_tokens: int = 5,
        blocks: list[dict[str, Any]] | None = None,
    ) -> httpx.Response:
        content = blocks if blocks is not None else [{"type": "text", "text": text} for text in texts]
        return httpx.Response(
            200,
            json={
                "id": "msg_test",
                "type": "message",
                "role": "assistant",
                "model": model,
                "stop_reason": stop_reason,
                "usage": {"input_tokens": input_tokens, "output_tokens": output_tokens},
                "content": content,
            },
        )

    return _make


@pytest.fixture
def error_response() -> Callable[..., httpx.Response]:
    """Factory for provider error responses."""

    def _make(
        status_code: int,
        message: str = "provider says no",
        error_type: str = "api_error",
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        return httpx.Response(
            status_code,
            json={"type": "error", "error": {"type": error_type, "message": message}},
            headers=headers,
        )

    return _make


def encode_sse(events: list[dict[str, Any]]) -> bytes:
    chunks = [f"event: {event['type']}\ndata: {json.dumps(event)}\n\n" for event in events]
    return "".join(chunks).encode()


def text_stream_events(
    *fragments: str,
    model: str = "claude-sonnet-4-5-20250929",
    input_tokens: int = 25,
    output_tokens: int = 12,
    stop: bool = True,
) -> list[dict[str, Any]]:
    events: list[dict[str, Any]] = [
        {
            "type": "message_start",
            "message": {
                "id": "msg_stream",
                "model": model,
                "usage": {"input_tokens": input_tokens, "output_tokens": 1},
            },
        },
        {"type": "content_block_start", "index": 0, "content_block": {"type": "text", "text": ""}},
        {"type": "ping"},
    ]
    events.extend(
        {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": fragment}}
        for fragment in fragments
    )
    events.append({"type": "content_block_stop", "index": 0})
    events.append(
        {
            "type": "message_delta",
            "delta": {"stop_reason": "end_turn"},
            "usage": {"output_tokens": output_tokens},
        }
    )
    if stop:
        events.append({"type": "message_stop"})
    return events


@pytest.fixture
def sse_response() -> Callable[..., httpx.Response]:
    """Factory for streaming responses built from raw event dicts."""

    def _make(events: list[dict[str, Any]]) -> httpx.Response:
        return httpx.Response(
            200,
            content=encode_sse(events),
            headers={"content-type": "text/event-stream"},
        )

    return _make


@pytest.fixture
def text_stream(sse_response) -> Callable[..., httpx.Response]:
    """Factory for a well-formed text stream."""

    def _make(*fragments: str, **kwargs: Any) -> httpx.Response:
        return sse_response(text_stream_events(*fragments, **kwargs))

    return _make


@pytest.fixture
def stream_events() -> Callable[..., list[dict[str, Any]]]:
    return text_stream_events
