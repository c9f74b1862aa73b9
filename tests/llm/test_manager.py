# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Tests for LLM manager."""

import pytest

from pmassist.llm.config import LLMConfig
from pmassist.llm.exceptions import LLMUnavailableError
from pmassist.llm.manager import LLMManager
from pmassist.llm.schemas import DependencyResponse
from pmassist.llm.types import CompletionRequest, StreamDone, TextDelta
from pmassist.llm.usage_ledger import UsageLedger


@pytest.fixture
def request_():
    return CompletionRequest(system_prompt="s", user_message="hello")


@pytest.fixture
async def manager(llm_config, ledger, provider):
    manager = LLMManager(llm_config, ledger=ledger, transport=provider.transport)
    yield manager
    await manager.close()


def test_unavailable_without_key():
    manager = LLMManager(LLMConfig())

    assert not manager.is_available()
    with pytest.raises(LLMUnavailableError, match="ANTHROPIC_API_KEY"):
        manager.completion_engine


@pytest.mark.asyncio
async def test_disabled_rejects_every_operation(request_):
    manager = LLMManager(LLMConfig(enabled=False, api_key="sk"))

    with pytest.raises(LLMUnavailableError):
        await manager.complete(request_)
    with pytest.raises(LLMUnavailableError):
        manager.stream(request_)
    with pytest.raises(LLMUnavailableError):
        await manager.complete_with_schema(request_, DependencyResponse)

    await manager.close()


@pytest.mark.asyncio
async def test_engines_share_transport(manager):
    """Test engines are built lazily on one transport."""
    assert manager._transport is None

    completion = manager.completion_engine
    assert manager.completion_engine is completion
    assert manager.stream_engine._transport is completion._transport
    assert manager.structured._engine is completion


@pytest.mark.asyncio
async def test_calls_record_into_shared_ledger(manager, provider, message_response, text_stream, request_):
    provider.queue(
        message_response("hi", input_tokens=10, output_tokens=4),
        text_stream("streamed", input_tokens=6, output_tokens=2),
        message_response('{"dependencies": []}', input_tokens=8, output_tokens=3),
    )

    result = await manager.complete(request_)
    events = [event async for event in manager.stream(request_)]
    structured = await manager.complete_with_schema(request_, DependencyResponse)

    assert result.content == "hi"
    assert events[0] == TextDelta("streamed")
    assert isinstance(events[-1], StreamDone)
    assert structured.data.dependencies == []
    stats = manager.get_usage_stats()
    assert stats.total_requests == 3
    assert stats.total_input_tokens == 24
    assert stats.total_output_tokens == 9


@pytest.mark.asyncio
async def test_default_ledger_created(llm_config):
    manager = LLMManager(llm_config)

    assert isinstance(manager.ledger, UsageLedger)
    assert manager.get_usage_stats().total_requests == 0
    await manager.close()


@pytest.mark.asyncio
async def test_manager_close(manager):
    """Test closing manager drops the transport."""
    first = manager.completion_engine

    await manager.close()

    assert manager._transport is None
    assert manager.completion_engine is not first


@pytest.mark.asyncio
async def test_context_manager_closes(llm_config, provider, message_response, request_):
    provider.queue(message_response("ok"))

    async with LLMManager(llm_config, transport=provider.transport) as manager:
        await manager.complete(request_)
        assert manager._transport is not None

    assert manager._transport is None
