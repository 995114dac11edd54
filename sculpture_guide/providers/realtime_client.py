# sculpture_guide/providers/realtime_client.py
# -*- coding: utf-8 -*-
"""
Sculpture Guide — Realtime provider (OpenAI / Azure OpenAI)
-----------------------------------------------------------
This module is the ONLY place that knows how to talk to the realtime
conversation endpoint.

Responsibilities:
- Open the WebSocket (OpenAI or Azure flavour of URL + auth headers).
- Send client events: session.update, input_audio_buffer.append,
  conversation.item.create, response.create.
- Read server events in a background task and demultiplex them into
  ordered, nested streams:

      events()
        RealtimeResponse          (type "response")
          ResponseItem            (type "message", ...)
            TextContent           text_chunks()
            AudioContent          audio_chunks(), transcript_chunks()
        InputAudioItem            (type "input_audio")
          wait_for_completion(), transcription

Every stream keeps arrival order and has exactly one consumer. Streams of
different objects are independent, so audio and transcript of one content
part can be drained concurrently.

When the socket drops, every open stream raises RealtimeConnectionError.
Both the beta event names (response.text.delta, response.audio.delta, ...)
and the GA names (response.output_text.delta, ...) are accepted.
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Tuple
from urllib.parse import urlencode

from websockets.asyncio.client import connect as websocket_connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from sculpture_guide.core.config import Settings, settings

logger = logging.getLogger(__name__)


class RealtimeError(Exception):
    """Raised when the remote realtime session fails."""


class RealtimeConnectionError(RealtimeError):
    """Raised when the realtime socket is missing, closed or cannot be opened."""


TEXT_DELTA_EVENTS = ("response.text.delta", "response.output_text.delta")
TEXT_DONE_EVENTS = ("response.text.done", "response.output_text.done")
AUDIO_DELTA_EVENTS = ("response.audio.delta", "response.output_audio.delta")
AUDIO_DONE_EVENTS = ("response.audio.done", "response.output_audio.done")
TRANSCRIPT_DELTA_EVENTS = (
    "response.audio_transcript.delta",
    "response.output_audio_transcript.delta",
)
TRANSCRIPT_DONE_EVENTS = (
    "response.audio_transcript.done",
    "response.output_audio_transcript.done",
)

# Input audio items still waiting for a transcript; older ones are completed empty.
MAX_PENDING_INPUT_ITEMS = 16


# ---------------------------------------------------------------------------
# Streams
# ---------------------------------------------------------------------------

_END = object()


class _Failure:
    def __init__(self, exc: BaseException) -> None:
        self.exc = exc


class ChunkStream:
    """
    Ordered single-consumer async stream, fed synchronously by the reader task.

    put() after finish()/fail() is ignored.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False
        self._drained = False

    def put(self, item: Any) -> None:
        if not self._closed:
            self._queue.put_nowait(item)

    def finish(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_END)

    def fail(self, exc: BaseException) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_Failure(exc))

    def __aiter__(self) -> "ChunkStream":
        return self

    async def __anext__(self) -> Any:
        if self._drained:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _END:
            self._drained = True
            raise StopAsyncIteration
        if isinstance(item, _Failure):
            self._drained = True
            raise item.exc
        return item


# ---------------------------------------------------------------------------
# Event objects
# ---------------------------------------------------------------------------


class TextContent:
    type = "text"

    def __init__(self, item_id: str, content_index: int) -> None:
        self.item_id = item_id
        self.content_index = content_index
        self._text = ChunkStream()

    def text_chunks(self) -> ChunkStream:
        return self._text

    def finish(self) -> None:
        self._text.finish()

    def fail(self, exc: BaseException) -> None:
        self._text.fail(exc)


class AudioContent:
    type = "audio"

    def __init__(self, item_id: str, content_index: int) -> None:
        self.item_id = item_id
        self.content_index = content_index
        self._audio = ChunkStream()
        self._transcript = ChunkStream()

    def audio_chunks(self) -> ChunkStream:
        """Decoded PCM chunks (bytes)."""
        return self._audio

    def transcript_chunks(self) -> ChunkStream:
        return self._transcript

    def finish(self) -> None:
        self._audio.finish()
        self._transcript.finish()

    def fail(self, exc: BaseException) -> None:
        self._audio.fail(exc)
        self._transcript.fail(exc)


class ResponseItem:
    """One output item of a response; iterate it for its content parts."""

    def __init__(self, item_id: str, item_type: str) -> None:
        self.id = item_id
        self.type = item_type
        self._contents = ChunkStream()
        self.contents: List[TextContent | AudioContent] = []

    def add_content(self, content: TextContent | AudioContent) -> None:
        self.contents.append(content)
        self._contents.put(content)

    def __aiter__(self) -> ChunkStream:
        return self._contents

    def finish(self) -> None:
        for content in self.contents:
            content.finish()
        self._contents.finish()

    def fail(self, exc: BaseException) -> None:
        for content in self.contents:
            content.fail(exc)
        self._contents.fail(exc)


class RealtimeResponse:
    """One model response; iterate it for its output items."""

    type = "response"

    def __init__(self, response_id: str) -> None:
        self.id = response_id
        self._items = ChunkStream()
        self.items: List[ResponseItem] = []

    def add_item(self, item: ResponseItem) -> None:
        self.items.append(item)
        self._items.put(item)

    def __aiter__(self) -> ChunkStream:
        return self._items

    def finish(self) -> None:
        for item in self.items:
            item.finish()
        self._items.finish()

    def fail(self, exc: BaseException) -> None:
        for item in self.items:
            item.fail(exc)
        self._items.fail(exc)


class InputAudioItem:
    """User speech detected by the server (turn detection)."""

    type = "input_audio"

    def __init__(self, item_id: str) -> None:
        self.id = item_id
        self.transcription: Optional[str] = None
        self._done = asyncio.Event()
        self._error: Optional[BaseException] = None

    def complete(self, transcription: Optional[str]) -> None:
        self.transcription = transcription
        self._done.set()

    def fail(self, exc: BaseException) -> None:
        if not self._done.is_set():
            self._error = exc
            self._done.set()

    async def wait_for_completion(self) -> None:
        await self._done.wait()
        if self._error is not None:
            raise self._error


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class RealtimeClient:
    """
    Remote conversation session over one realtime WebSocket.

    Parameters
    ----------
    url:
        Full wss:// URL including query (model / deployment).
    headers:
        Auth headers for the handshake.
    connect_timeout_s:
        Bound for opening the socket and for waiting on session.updated.
    connector:
        Coroutine function with the signature of websockets' connect();
        replaceable in tests.
    """

    def __init__(
        self,
        url: str,
        headers: Dict[str, str],
        *,
        connect_timeout_s: float = 10.0,
        connector: Optional[Callable[..., Any]] = None,
    ) -> None:
        self.url = url
        self.headers = headers
        self.connect_timeout_s = connect_timeout_s
        self._connector = connector or websocket_connect
        self._ws: Any = None
        self._reader: Optional[asyncio.Task] = None
        self._closed = False

        self._events = ChunkStream()
        self._responses: Dict[str, RealtimeResponse] = {}
        self._items: Dict[str, ResponseItem] = {}
        self._contents: Dict[Tuple[str, int], TextContent | AudioContent] = {}
        self._input_items: Dict[str, InputAudioItem] = {}
        self._session_updated: Optional[asyncio.Future] = None

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------
    async def connect(self) -> None:
        if self._closed:
            raise RealtimeConnectionError("Realtime client is closed.")
        if self._ws is not None:
            return

        logger.debug("Connecting to realtime endpoint %s", self.url.split("?")[0])
        try:
            self._ws = await asyncio.wait_for(
                self._connector(self.url, additional_headers=self.headers, max_size=None),
                timeout=self.connect_timeout_s,
            )
        except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
            raise RealtimeConnectionError(f"Realtime connect failed: {exc}") from exc

        self._reader = asyncio.create_task(self._read_loop(), name="realtime-reader")

    async def _send(self, event: Dict[str, Any]) -> None:
        if self._ws is None or self._closed:
            raise RealtimeConnectionError("Realtime socket is not open.")
        try:
            await self._ws.send(json.dumps(event))
        except ConnectionClosed as exc:
            raise RealtimeConnectionError(f"Realtime socket closed: {exc}") from exc

    # ------------------------------------------------------------------
    # Client events
    # ------------------------------------------------------------------
    async def configure(self, options: Dict[str, Any]) -> None:
        """Connect if needed and apply session options (session.update)."""
        await self.connect()
        self._session_updated = asyncio.get_running_loop().create_future()
        await self._send({"type": "session.update", "session": options})
        try:
            await asyncio.wait_for(
                asyncio.shield(self._session_updated), timeout=self.connect_timeout_s
            )
        except asyncio.TimeoutError:
            logger.warning("No session.updated confirmation within %.1f s", self.connect_timeout_s)

    async def send_audio(self, audio: bytes) -> None:
        await self._send(
            {
                "type": "input_audio_buffer.append",
                "audio": base64.b64encode(audio).decode("ascii"),
            }
        )

    async def send_item(self, role: str, text: str) -> None:
        await self._send(
            {
                "type": "conversation.item.create",
                "item": {
                    "type": "message",
                    "role": role,
                    "content": [{"type": "input_text", "text": text}],
                },
            }
        )

    async def generate_response(self) -> None:
        await self._send({"type": "response.create"})

    async def events(self) -> AsyncIterator[RealtimeResponse | InputAudioItem]:
        """Server-pushed responses and input audio items, in arrival order."""
        async for event in self._events:
            yield event

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._reader is not None and self._reader is not asyncio.current_task():
            self._reader.cancel()
        try:
            if self._ws is not None:
                await self._ws.close()
        finally:
            # Streams end even if the close handshake is cancelled.
            self._shutdown(None)

    # ------------------------------------------------------------------
    # Server events
    # ------------------------------------------------------------------
    async def _read_loop(self) -> None:
        error: Optional[BaseException] = None
        try:
            async for message in self._ws:
                try:
                    data = json.loads(message)
                except (TypeError, ValueError):
                    data = None
                if not isinstance(data, dict):
                    logger.warning("Ignoring malformed realtime frame")
                    continue
                try:
                    self._dispatch(data)
                except Exception:  # noqa: BLE001
                    logger.exception("Failed to handle realtime event %r", data.get("type"))
        except asyncio.CancelledError:
            raise
        except ConnectionClosed as exc:
            error = exc
        finally:
            if not self._closed:
                logger.warning("Realtime socket closed by remote: %s", error or "normal close")
                self._closed = True
                self._shutdown(RealtimeConnectionError("Realtime connection closed."))

    def _shutdown(self, exc: Optional[BaseException]) -> None:
        """End every open stream: cleanly on our own close, with exc otherwise."""
        for resp in self._responses.values():
            if exc:
                resp.fail(exc)
            else:
                resp.finish()
        for item in self._input_items.values():
            item.fail(exc or RealtimeConnectionError("Realtime client closed."))
        if self._session_updated is not None and not self._session_updated.done():
            self._session_updated.set_exception(
                exc or RealtimeConnectionError("Realtime client closed.")
            )
            # Retrieved later or never; avoid "exception was never retrieved".
            self._session_updated.exception()
        if exc:
            self._events.fail(exc)
        else:
            self._events.finish()
        self._responses.clear()
        self._items.clear()
        self._contents.clear()
        self._input_items.clear()

    def _content(self, data: Dict[str, Any]) -> Optional[TextContent | AudioContent]:
        key = (data.get("item_id"), data.get("content_index", 0))
        content = self._contents.get(key)
        if content is None:
            logger.debug("Delta for unknown content %s", key)
        return content

    def _dispatch(self, data: Dict[str, Any]) -> None:
        etype = data.get("type", "")

        if etype == "session.updated":
            if self._session_updated is not None and not self._session_updated.done():
                self._session_updated.set_result(data.get("session"))

        elif etype == "error":
            logger.warning("Realtime error event: %s", data.get("error"))

        elif etype == "response.created":
            resp = RealtimeResponse(data.get("response", {}).get("id", ""))
            self._responses[resp.id] = resp
            self._events.put(resp)

        elif etype == "response.output_item.added":
            raw_item = data.get("item", {})
            item = ResponseItem(raw_item.get("id", ""), raw_item.get("type", "message"))
            self._items[item.id] = item
            resp = self._responses.get(data.get("response_id", ""))
            if resp is not None:
                resp.add_item(item)

        elif etype == "response.content_part.added":
            item_id = data.get("item_id", "")
            index = data.get("content_index", 0)
            part_type = data.get("part", {}).get("type", "text")
            if "audio" in part_type:
                content: TextContent | AudioContent = AudioContent(item_id, index)
            else:
                content = TextContent(item_id, index)
            self._contents[(item_id, index)] = content
            item = self._items.get(item_id)
            if item is not None:
                item.add_content(content)

        elif etype in TEXT_DELTA_EVENTS:
            content = self._content(data)
            if isinstance(content, TextContent):
                content.text_chunks().put(data.get("delta", ""))

        elif etype in TEXT_DONE_EVENTS:
            content = self._content(data)
            if content is not None:
                content.finish()

        elif etype in AUDIO_DELTA_EVENTS:
            content = self._content(data)
            if isinstance(content, AudioContent):
                content.audio_chunks().put(base64.b64decode(data.get("delta", "")))

        elif etype in AUDIO_DONE_EVENTS:
            content = self._content(data)
            if isinstance(content, AudioContent):
                content.audio_chunks().finish()

        elif etype in TRANSCRIPT_DELTA_EVENTS:
            content = self._content(data)
            if isinstance(content, AudioContent):
                content.transcript_chunks().put(data.get("delta", ""))

        elif etype in TRANSCRIPT_DONE_EVENTS:
            content = self._content(data)
            if isinstance(content, AudioContent):
                content.transcript_chunks().finish()

        elif etype == "response.content_part.done":
            key = (data.get("item_id"), data.get("content_index", 0))
            content = self._contents.pop(key, None)
            if content is not None:
                content.finish()

        elif etype == "response.output_item.done":
            item = self._items.pop(data.get("item", {}).get("id", ""), None)
            if item is not None:
                item.finish()

        elif etype == "response.done":
            resp = self._responses.pop(data.get("response", {}).get("id", ""), None)
            if resp is not None:
                # Cancelled or interrupted responses skip the per-part done events.
                for item in resp.items:
                    self._items.pop(item.id, None)
                    for content in item.contents:
                        self._contents.pop((content.item_id, content.content_index), None)
                resp.finish()

        elif etype == "input_audio_buffer.speech_started":
            audio_item = InputAudioItem(data.get("item_id", ""))
            self._input_items[audio_item.id] = audio_item
            while len(self._input_items) > MAX_PENDING_INPUT_ITEMS:
                stale_id = next(iter(self._input_items))
                logger.warning("No transcription for input item %s; giving up on it", stale_id)
                self._input_items.pop(stale_id).complete("")
            self._events.put(audio_item)

        elif etype == "conversation.item.input_audio_transcription.completed":
            audio_item = self._input_items.pop(data.get("item_id", ""), None)
            if audio_item is not None:
                audio_item.complete(data.get("transcript", ""))

        elif etype == "conversation.item.input_audio_transcription.failed":
            logger.warning("Input audio transcription failed: %s", data.get("error"))
            audio_item = self._input_items.pop(data.get("item_id", ""), None)
            if audio_item is not None:
                audio_item.complete("")


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def _azure_realtime_url(endpoint: str, deployment: str, api_version: str) -> str:
    base = endpoint.rstrip("/")
    if base.startswith("https://"):
        base = "wss://" + base[len("https://"):]
    elif base.startswith("http://"):
        base = "ws://" + base[len("http://"):]
    query = urlencode({"api-version": api_version, "deployment": deployment})
    return f"{base}/openai/realtime?{query}"


def create_realtime_client(config: Settings = settings) -> RealtimeClient:
    """
    Build a RealtimeClient for config.backend.

    Raises
    ------
    RealtimeConnectionError
        If the chosen backend is missing credentials or endpoint settings.
    """
    if config.backend == "azure":
        if not (
            config.azure_openai_api_key
            and config.azure_openai_endpoint
            and config.azure_openai_deployment
        ):
            raise RealtimeConnectionError(
                "Azure backend needs AZURE_OPENAI_API_KEY, AZURE_OPENAI_ENDPOINT "
                "and AZURE_OPENAI_DEPLOYMENT."
            )
        url = _azure_realtime_url(
            config.azure_openai_endpoint,
            config.azure_openai_deployment,
            config.azure_openai_api_version,
        )
        headers = {"api-key": config.azure_openai_api_key}
    else:
        if not config.openai_api_key:
            raise RealtimeConnectionError("OPENAI_API_KEY is missing.")
        url = f"{config.openai_realtime_url}?{urlencode({'model': config.openai_model})}"
        headers = {
            "Authorization": f"Bearer {config.openai_api_key}",
            "OpenAI-Beta": "realtime=v1",
        }

    return RealtimeClient(
        url,
        headers,
        connect_timeout_s=config.realtime_connect_timeout_s,
    )
