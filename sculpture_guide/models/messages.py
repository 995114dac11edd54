# sculpture_guide/models/messages.py
# -*- coding: utf-8 -*-
"""
Sculpture Guide — WebSocket frame models
----------------------------------------
JSON text frames exchanged with the browser on /realtime.

Server -> client:
    {"type": "text_delta", "id": "...", "delta": "..."}
    {"type": "transcription", "id": "...", "text": "..."}
    {"type": "control", "action": "connected", "greeting": "..."}
    {"type": "control", "action": "speech_started"}
    {"type": "control", "action": "text_done", "id": "..."}

Client -> server:
    {"type": "user_message", "text": "..."}     (optional "id")

Binary frames carry raw audio in both directions and have no model.

All kinds share one discriminated union, so any of them parses; the
session only acts on user_message.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


class TextDelta(BaseModel):
    """One incremental chunk of assistant text or audio transcript."""

    type: Literal["text_delta"] = "text_delta"
    id: str = Field(..., description="Content id: '<item_id>-<content_index>'.")
    delta: str


class Transcription(BaseModel):
    """Final transcript of one user speech segment."""

    type: Literal["transcription"] = "transcription"
    id: str
    text: str


class UserMessage(BaseModel):
    """Typed message from the user."""

    type: Literal["user_message"] = "user_message"
    id: Optional[str] = None
    text: str


class Connected(BaseModel):
    type: Literal["control"] = "control"
    action: Literal["connected"] = "connected"
    greeting: str


class SpeechStarted(BaseModel):
    type: Literal["control"] = "control"
    action: Literal["speech_started"] = "speech_started"


class TextDone(BaseModel):
    type: Literal["control"] = "control"
    action: Literal["text_done"] = "text_done"
    id: str


ControlMessage = Annotated[
    Union[Connected, SpeechStarted, TextDone],
    Field(discriminator="action"),
]

WSMessage = Annotated[
    Union[TextDelta, Transcription, UserMessage, ControlMessage],
    Field(discriminator="type"),
]

_ws_message_adapter: TypeAdapter = TypeAdapter(WSMessage)


def parse_ws_message(raw: str | bytes) -> BaseModel:
    """
    Parse one JSON text frame into its model.

    Raises pydantic.ValidationError for malformed JSON or unknown kinds.
    """
    return _ws_message_adapter.validate_json(raw)


def dump_ws_message(message: BaseModel) -> str:
    """Serialize a frame model to compact JSON, without null fields."""
    return message.model_dump_json(exclude_none=True)
