# sculpture_guide/core/types.py
# -*- coding: utf-8 -*-
"""
Sculpture Guide — Shared type helpers
-------------------------------------
Structural types for the two collaborators a relay session talks to:

- ClientTransport : the browser WebSocket (FastAPI/Starlette WebSocket fits)
- RealtimeSession : the remote streaming conversation
                    (providers.realtime_client.RealtimeClient fits)

Remote events are duck-typed by their `type` attribute, exactly like the
provider produces them:

    event.type == "response"     -> async-iterable of items
        item.type == "message"   -> async-iterable of contents
            content.type == "text"  -> content.text_chunks()
            content.type == "audio" -> content.audio_chunks(), content.transcript_chunks()
    event.type == "input_audio"  -> await event.wait_for_completion(); event.transcription
"""

from __future__ import annotations

from enum import Enum
from typing import Any, AsyncIterator, Dict, MutableMapping, Protocol


class SessionState(str, Enum):
    """Lifecycle of one relay session."""

    INITIALIZING = "initializing"
    ACTIVE = "active"
    CLOSING = "closing"
    CLOSED = "closed"


class ClientTransport(Protocol):
    async def receive(self) -> MutableMapping[str, Any]: ...

    async def send_text(self, data: str) -> None: ...

    async def send_bytes(self, data: bytes) -> None: ...

    async def close(self, code: int = 1000, reason: str | None = None) -> None: ...


class RealtimeSession(Protocol):
    async def configure(self, options: Dict[str, Any]) -> None: ...

    async def send_audio(self, audio: bytes) -> None: ...

    async def send_item(self, role: str, text: str) -> None: ...

    async def generate_response(self) -> None: ...

    def events(self) -> AsyncIterator[Any]: ...

    async def close(self) -> None: ...


def content_id(item_id: str, content_index: int) -> str:
    """Client-facing id of one content part: '<item_id>-<content_index>'."""
    return f"{item_id}-{content_index}"
