# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Wire models for the Anthropic Messages API.

Responses and stream events are parsed once, at the transport boundary, into
tagged unions. Block and event types this client does not use (tool calls,
images, pings) resolve to catch-all variants instead of failing validation.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


def _type_tag(known: frozenset[str]):
    def _discriminate(value: Any) -> str:
        kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
        return kind if kind in known else "other"

    return _discriminate


class WireUsage(_WireModel):
    input_tokens: int = Field(default=0, ge=0)
    output_tokens: int = Field(default=0, ge=0)


class TextBlock(_WireModel):
    type: Literal["text"]
    text: str


class OtherBlock(_WireModel):
    type: str


ContentBlock = Annotated[
    Union[Annotated[TextBlock, Tag("text")], Annotated[OtherBlock, Tag("other")]],
    Discriminator(_type_tag(frozenset({"text"}))),
]


class MessageResponse(_WireModel):
    """Non-streaming response body."""

    id: str | None = None
    model: str = ""
    stop_reason: str | None = None
    usage: WireUsage = Field(default_factory=WireUsage)
    content: list[ContentBlock] = Field(default_factory=list)

    def text_segments(self) -> list[str]:
        return [block.text for block in self.content if isinstance(block, TextBlock)]


class ErrorDetail(_WireModel):
    type: str = "api_error"
    message: str = ""


class ErrorBody(_WireModel):
    """Error payload returned with non-2xx responses and ``error`` events."""

    type: Literal["error"] = "error"
    error: ErrorDetail = Field(default_factory=ErrorDetail)


# Stream events


class MessageStartPayload(_WireModel):
    id: str | None = None
    model: str = ""
    usage: WireUsage = Field(default_factory=WireUsage)


class MessageStartEvent(_WireModel):
    type: Literal["message_start"]
    message: MessageStartPayload


class TextDeltaPayload(_WireModel):
    type: Literal["text_delta"]
    text: str


class OtherDeltaPayload(_WireModel):
    type: str


DeltaPayload = Annotated[
    Union[Annotated[TextDeltaPayload, Tag("text_delta")], Annotated[OtherDeltaPayload, Tag("other")]],
    Discriminator(_type_tag(frozenset({"text_delta"}))),
]


class ContentBlockDeltaEvent(_WireModel):
    type: Literal["content_block_delta"]
    index: int = 0
    delta: DeltaPayload


class MessageDeltaUsage(_WireModel):
    """Cumulative counts; absent fields keep the value from message_start."""

    input_tokens: int | None = Field(default=None, ge=0)
    output_tokens: int | None = Field(default=None, ge=0)


class MessageDeltaInfo(_WireModel):
    stop_reason: str | None = None


class MessageDeltaEvent(_WireModel):
    type: Literal["message_delta"]
    delta: MessageDeltaInfo = Field(default_factory=MessageDeltaInfo)
    usage: MessageDeltaUsage | None = None


class MessageStopEvent(_WireModel):
    type: Literal["message_stop"]


class ErrorEvent(_WireModel):
    type: Literal["error"]
    error: ErrorDetail = Field(default_factory=ErrorDetail)


class IgnoredEvent(_WireModel):
    """ping, content_block_start, content_block_stop and unknown events."""

    type: str


ProviderEvent = Annotated[
    Union[
        Annotated[MessageStartEvent, Tag("message_start")],
        Annotated[ContentBlockDeltaEvent, Tag("content_block_delta")],
        Annotated[MessageDeltaEvent, Tag("message_delta")],
        Annotated[MessageStopEvent, Tag("message_stop")],
        Annotated[ErrorEvent, Tag("error")],
        Annotated[IgnoredEvent, Tag("other")],
    ],
    Discriminator(
        _type_tag(frozenset({"message_start", "content_block_delta", "message_delta", "message_stop", "error"}))
    ),
]

_provider_event_adapter: TypeAdapter[ProviderEvent] = TypeAdapter(ProviderEvent)


def parse_stream_event(data: str) -> ProviderEvent:
    """Parse the JSON ``data`` field of one server-sent event."""
    return _provider_event_adapter.validate_json(data)


def parse_error_body(body: bytes) -> ErrorDetail | None:
    """Extract the provider's error detail from a response body, if any."""
    try:
        return ErrorBody.model_validate_json(body).error
    except ValueError:
        return None
