"""Shared fixtures: dataset files, a fake browser socket, a fake realtime session."""
import asyncio
import json

import pytest

from sculpture_guide.core import entity_store
from sculpture_guide.core.config import Settings
from sculpture_guide.core.entity_store import EntityStore
from sculpture_guide.providers.realtime_client import (
    RealtimeResponse,
    ResponseItem,
    TextContent,
)


SAMPLE_DATA = {
    "sculptures": [
        {
            "id": "s1",
            "name": "David",
            "artist": "a1",
            "year": "1501-1504",
            "material": "m1",
            "period": "p1",
            "location": "l1",
            "description": "Marble statue of the Biblical hero.",
        },
        {
            "id": "s2",
            "name": "Statue of David",
            "artist": "Donatello",
            "year": 1440,
            "material": "Bronze",
            "period": "Renaissance",
        },
        {
            "id": "s3",
            "name": "The Thinker",
            "artist": "a2",
            "material": "m2",
            "period": "p2",
            "location": "l2",
            "imageUrl": "https://example.org/thinker.jpg",
        },
        {
            "id": "s4",
            "name": "Unknown Bronze",
            "artist": "nobody",
            "material": "gunmetal",
        },
        {
            "id": "s5",
            "name": "Bare Figure",
            "artist": "a2",
        },
    ],
    "artists": [
        {
            "id": "a1",
            "name": "Michelangelo",
            "birthYear": "1475",
            "deathYear": "1564",
            "nationality": "Italian",
            "bio": "High Renaissance sculptor.",
        },
        {"id": "a2", "name": "Auguste Rodin", "nationality": "French"},
        {"id": "a3", "name": "Donatello"},
    ],
    "materials": [
        {"id": "m1", "name": "Marble", "properties": "Fine grain", "uses": "Statuary"},
        {"id": "m2", "name": "Bronze"},
    ],
    "periods": [
        {"id": "p1", "name": "Renaissance", "startYear": "1400", "endYear": "1600"},
        {"id": "p2", "name": "Modern"},
    ],
    "locations": [
        {"id": "l1", "name": "Galleria dell'Accademia", "city": "Florence", "country": "Italy"},
        {"id": "l2", "name": "Musée Rodin", "city": "Paris"},
    ],
}


@pytest.fixture(autouse=True)
def _fresh_store_cache():
    entity_store.clear_cache()
    yield
    entity_store.clear_cache()


def write_dataset(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def text_response(item_id, chunks, response_id="resp_1"):
    """A finished response holding one text content part."""
    content = TextContent(item_id, 0)
    for chunk in chunks:
        content.text_chunks().put(chunk)
    content.finish()
    item = ResponseItem(item_id, "message")
    item.add_content(content)
    item.finish()
    response = RealtimeResponse(response_id)
    response.add_item(item)
    response.finish()
    return response


@pytest.fixture
def data_file(tmp_path):
    return write_dataset(tmp_path / "sculptures.json", SAMPLE_DATA)


@pytest.fixture
def store(data_file):
    s = EntityStore(data_file)
    assert s.load() is True
    return s


@pytest.fixture
def config():
    return Settings(
        _env_file=None,
        greeting="Hello from the guide",
        system_instructions=[],
    )


class FakeTransport:
    """Stands in for a Starlette WebSocket: raw ASGI receive + send_text/bytes."""

    def __init__(self):
        self.incoming = asyncio.Queue()
        self.sent = []
        self.closed_with = None

    def push_text(self, text):
        self.incoming.put_nowait({"type": "websocket.receive", "text": text})

    def push_json(self, payload):
        self.push_text(json.dumps(payload))

    def push_bytes(self, data):
        self.incoming.put_nowait({"type": "websocket.receive", "bytes": data})

    def disconnect(self, code=1000):
        self.incoming.put_nowait({"type": "websocket.disconnect", "code": code})

    async def receive(self):
        return await self.incoming.get()

    async def send_text(self, data):
        self.sent.append(("text", json.loads(data)))

    async def send_bytes(self, data):
        self.sent.append(("bytes", data))

    async def close(self, code=1000, reason=None):
        self.closed_with = code

    def frames(self):
        return [payload for kind, payload in self.sent if kind == "text"]


class FakeRealtime:
    """
    Records every call; events are fed through `event_queue` (None ends the stream).

    Anything in `replies` is queued as events when generation is requested.
    """

    def __init__(self):
        self.calls = []
        self.replies = []
        self.event_queue = asyncio.Queue()
        self.closed = False
        self.fail_on = {}

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise self.fail_on[name]

    async def configure(self, options):
        self._record("configure", options)

    async def send_audio(self, audio):
        self._record("audio", audio)

    async def send_item(self, role, text):
        self._record("item", role, text)

    async def generate_response(self):
        self._record("generate")
        for event in self.replies:
            self.event_queue.put_nowait(event)
        self.replies = []

    async def events(self):
        while True:
            event = await self.event_queue.get()
            if event is None:
                return
            yield event

    async def close(self):
        self.closed = True


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def remote():
    return FakeRealtime()
