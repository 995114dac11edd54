# sculpture_guide/core/session.py
# -*- coding: utf-8 -*-
"""
Sculpture Guide — Realtime relay session
----------------------------------------
One RealtimeRelaySession per browser WebSocket. It owns:

- the client socket (ClientTransport)
- one remote conversation (RealtimeSession)
- one EntityStore handle used for enrichment

Lifecycle
---------
    INITIALIZING -> ACTIVE -> CLOSING -> CLOSED

INITIALIZING
    Start loading the dataset in the background, configure the remote
    session, submit the system instructions, send the "connected" greeting.
ACTIVE
    Two tasks run side by side:
    - receive loop: binary frames -> remote audio input;
      text frames -> parsed; user_message -> enrichment + user item +
      response.create.
    - event loop: remote responses -> text_delta / text_done frames and
      binary audio frames; remote input audio -> speech_started, then
      transcription once the transcript is ready.
CLOSING / CLOSED
    Whichever task ends first (client disconnect, remote stream end,
    transport failure) closes the session: the other task is cancelled,
    the remote session is closed best-effort and the client socket is
    closed if it is still open. Nothing is sent after that.

Error policy
------------
- Failing to handle one client frame or one remote event is logged and
  the session goes on.
- Enrichment failures are logged and the user turn proceeds without
  context.
- Transport failures (remote socket unusable, client socket gone)
  propagate and close the session.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, MutableMapping, Optional

from pydantic import BaseModel

from sculpture_guide.core.config import Settings, settings
from sculpture_guide.core.enrichment import build_context_message
from sculpture_guide.core.entity_store import EntityStore
from sculpture_guide.core.types import (
    ClientTransport,
    RealtimeSession,
    SessionState,
    content_id,
)
from sculpture_guide.models.messages import (
    Connected,
    SpeechStarted,
    TextDelta,
    TextDone,
    Transcription,
    UserMessage,
    dump_ws_message,
    parse_ws_message,
)
from sculpture_guide.providers.realtime_client import RealtimeConnectionError
from sculpture_guide.utils import SessionLoggerAdapter, Stopwatch

logger = logging.getLogger(__name__)


class ClientDisconnected(Exception):
    """Raised when a frame cannot be delivered to the browser socket."""


TRANSPORT_ERRORS = (RealtimeConnectionError, ClientDisconnected)


class RealtimeRelaySession:
    """
    Relay between one browser WebSocket and one remote realtime conversation.

    Usage (see routers/ws.py):

        session = RealtimeRelaySession(websocket, create_realtime_client())
        await session.run()
    """

    def __init__(
        self,
        websocket: ClientTransport,
        client: RealtimeSession,
        store: Optional[EntityStore] = None,
        *,
        config: Settings = settings,
        session_id: Optional[str] = None,
    ) -> None:
        self.session_id = session_id or str(uuid.uuid4())
        self.websocket = websocket
        self.client = client
        self.store = store if store is not None else EntityStore()
        self.config = config
        self.state = SessionState.INITIALIZING
        self.log = SessionLoggerAdapter(logger, self.session_id)

        self._client_disconnected = False
        self._store_task: Optional[asyncio.Task] = None
        self._event_task: Optional[asyncio.Task] = None
        self._receive_task: Optional[asyncio.Task] = None

        self.log.info("New session created")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def run(self) -> None:
        """Drive the session until the client or the remote side goes away."""
        code = 1000
        try:
            try:
                await self.initialize()
            except Exception:  # noqa: BLE001
                self.log.exception("Failed to initialize realtime session")
                code = 1011
                return

            self._receive_task = asyncio.create_task(
                self._receive_loop(), name=f"relay-receive-{self.session_id}"
            )
            done, _ = await asyncio.wait(
                {self._receive_task, self._event_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
            for task in done:
                if task.cancelled():
                    continue
                exc = task.exception()
                if exc is not None:
                    self.log.error("Session task failed: %s", exc, exc_info=exc)
                    code = 1011
        finally:
            await self.close(code=code)

    async def initialize(self) -> None:
        self._store_task = asyncio.create_task(
            self._load_store(), name=f"relay-store-{self.session_id}"
        )

        self.log.debug("Configuring realtime session")
        with Stopwatch("Realtime session configure", self.log, logging.DEBUG):
            await self.client.configure(self.config.session_options())
        for instructions in self.config.system_instructions:
            await self.client.send_item("system", instructions)
        self.log.debug("Realtime session configured successfully")

        await self._send(Connected(greeting=self.config.greeting))

        self.state = SessionState.ACTIVE
        self._event_task = asyncio.create_task(
            self._event_loop(), name=f"relay-events-{self.session_id}"
        )

    async def close(self, code: int = 1000) -> None:
        """Close the session once; later calls are no-ops."""
        if self.state in (SessionState.CLOSING, SessionState.CLOSED):
            return
        self.state = SessionState.CLOSING
        self.log.info("Session closing")

        current = asyncio.current_task()
        pending = [
            task
            for task in (self._receive_task, self._event_task, self._store_task)
            if task is not None and task is not current and not task.done()
        ]
        for task in pending:
            task.cancel()
        try:
            await asyncio.gather(*pending, return_exceptions=True)
        finally:
            # Runs even when the handler itself is cancelled mid-close.
            await self._release(code)

    async def _release(self, code: int) -> None:
        """Close the remote session, then the client socket; always ends CLOSED."""
        try:
            try:
                await self.client.close()
                self.log.info("Session closed successfully")
            except Exception:  # noqa: BLE001
                self.log.exception("Error closing realtime session")

            if not self._client_disconnected:
                try:
                    await self.websocket.close(code=code)
                except Exception:  # noqa: BLE001
                    self.log.debug("Client socket already closed", exc_info=True)
        finally:
            self.state = SessionState.CLOSED

    async def _load_store(self) -> None:
        try:
            loaded = await self.store.load_async()
        except Exception:  # noqa: BLE001
            self.log.exception("Error initializing sculpture data")
            return
        if loaded:
            self.log.info("Sculpture data available for enrichment")
        else:
            self.log.error("Sculpture data unavailable; continuing without enrichment")

    # ------------------------------------------------------------------
    # Client -> remote
    # ------------------------------------------------------------------
    async def _receive_loop(self) -> None:
        while True:
            message = await self.websocket.receive()
            kind = message.get("type")
            if kind == "websocket.disconnect":
                self._client_disconnected = True
                self.log.info("Client disconnected (code=%s)", message.get("code"))
                return
            if kind == "websocket.receive":
                await self.handle_message(message)

    async def handle_message(self, message: MutableMapping[str, Any]) -> None:
        """Handle one inbound frame; only transport errors escape."""
        try:
            if message.get("bytes") is not None:
                await self.handle_binary_message(message["bytes"])
            elif message.get("text") is not None:
                await self.handle_text_message(message["text"])
        except TRANSPORT_ERRORS:
            raise
        except Exception:  # noqa: BLE001
            self.log.exception("Error handling message")

    async def handle_binary_message(self, data: bytes) -> None:
        await self.client.send_audio(data)

    async def handle_text_message(self, text: str) -> None:
        parsed = parse_ws_message(text)
        self.log.debug("Received text message type=%s", parsed.type)
        if isinstance(parsed, UserMessage):
            await self.handle_user_message(parsed.text)

    async def handle_user_message(self, text: str) -> None:
        await self._enrich(text)
        await self.client.send_item("user", text)
        await self.client.generate_response()
        self.log.debug("User message processed successfully")

    async def _enrich(self, text: str) -> bool:
        """Submit a system item with matching dataset context, if any."""
        try:
            context = build_context_message(
                self.store, text, self.config.enrichment_order
            )
            if not context:
                return False
            await self.client.send_item("system", context)
        except Exception:  # noqa: BLE001
            self.log.exception("Error enriching message with sculpture data")
            return False
        self.log.debug("Added sculpture context to conversation")
        return True

    # ------------------------------------------------------------------
    # Remote -> client
    # ------------------------------------------------------------------
    async def _event_loop(self) -> None:
        self.log.debug("Starting event loop")
        async for event in self.client.events():
            try:
                if event.type == "response":
                    await self.handle_response(event)
                elif event.type == "input_audio":
                    await self.handle_input_audio(event)
            except TRANSPORT_ERRORS:
                raise
            except Exception:  # noqa: BLE001
                self.log.exception("Error handling %s event", event.type)
        self.log.info("Realtime event stream ended")

    async def handle_response(self, response: Any) -> None:
        async for item in response:
            if item.type != "message":
                continue
            async for content in item:
                if content.type == "text":
                    await self.handle_text_content(content)
                elif content.type == "audio":
                    await self.handle_audio_content(content)
        self.log.debug("Response handled successfully")

    async def handle_text_content(self, content: Any) -> None:
        cid = content_id(content.item_id, content.content_index)
        async for chunk in content.text_chunks():
            await self._send(TextDelta(id=cid, delta=chunk))
        await self._send(TextDone(id=cid))

    async def handle_audio_content(self, content: Any) -> None:
        cid = content_id(content.item_id, content.content_index)

        async def stream_audio() -> None:
            async for chunk in content.audio_chunks():
                await self._send_bytes(chunk)

        async def stream_transcript() -> None:
            async for chunk in content.transcript_chunks():
                await self._send(TextDelta(id=cid, delta=chunk))
            await self._send(TextDone(id=cid))

        tasks = [
            asyncio.create_task(stream_audio()),
            asyncio.create_task(stream_transcript()),
        ]
        try:
            await asyncio.gather(*tasks)
        finally:
            for task in tasks:
                task.cancel()
        self.log.debug("Audio content processed successfully")

    async def handle_input_audio(self, item: Any) -> None:
        await self._send(SpeechStarted())
        await item.wait_for_completion()
        transcription = Transcription(id=item.id, text=item.transcription or "")
        await self._send(transcription)
        self.log.debug(
            "Input audio processed successfully (transcription_length=%d)",
            len(transcription.text),
        )

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------
    def _can_send(self) -> bool:
        return self.state not in (SessionState.CLOSING, SessionState.CLOSED)

    async def _send(self, message: BaseModel) -> None:
        if not self._can_send():
            self.log.debug("Dropping %s frame after close", type(message).__name__)
            return
        try:
            await self.websocket.send_text(dump_ws_message(message))
        except Exception as exc:  # noqa: BLE001
            raise ClientDisconnected(str(exc)) from exc

    async def _send_bytes(self, data: bytes) -> None:
        if not self._can_send():
            return
        try:
            await self.websocket.send_bytes(data)
        except Exception as exc:  # noqa: BLE001
            raise ClientDisconnected(str(exc)) from exc
