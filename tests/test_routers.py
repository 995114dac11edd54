"""HTTP and WebSocket routes, driven through FastAPI's TestClient."""
import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from conftest import text_response

from sculpture_guide.core.config import settings
from sculpture_guide.main import create_app
from sculpture_guide.providers import realtime_client
from sculpture_guide.providers.realtime_client import RealtimeConnectionError


@pytest.fixture
def app_settings(monkeypatch, data_file):
    monkeypatch.setattr(settings, "sculpture_data_path", data_file)
    monkeypatch.setattr(settings, "greeting", "Welcome to the gallery")
    monkeypatch.setattr(settings, "system_instructions", ["Persona"])
    return settings


@pytest.fixture
def client(app_settings):
    with TestClient(create_app()) as test_client:
        yield test_client


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["backend"] == settings.backend


def test_root(client):
    assert client.get("/").json()["name"] == settings.app_name


def test_data_status_reports_counts(client, data_file):
    body = client.get("/status/data").json()
    assert body["loaded"] is True
    assert body["path"] == str(data_file.resolve())
    assert body["counts"]["sculptures"] == 5
    assert body["counts"]["artists"] == 3


def test_data_status_failed_reload_keeps_data(client, data_file):
    data_file.write_text("{ broken", encoding="utf-8")
    body = client.get("/status/data", params={"reload": "true"}).json()
    assert body["loaded"] is True
    assert body["counts"]["locations"] == 2


def test_data_status_unloaded(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "sculpture_data_path", tmp_path / "missing.json")
    with TestClient(create_app()) as test_client:
        body = test_client.get("/status/data").json()
    assert body == {
        "loaded": False,
        "path": str((tmp_path / "missing.json").resolve()),
        "counts": {},
    }


def test_realtime_relays_greeting_and_user_turn(client, remote, monkeypatch):
    monkeypatch.setattr(realtime_client, "create_realtime_client", lambda config: remote)
    # Answer the turn, then end the remote stream so the server closes first.
    remote.replies = [text_response("item_9", ["Michelangelo carved it."]), None]

    with client.websocket_connect("/realtime") as ws:
        assert ws.receive_json() == {
            "type": "control",
            "action": "connected",
            "greeting": "Welcome to the gallery",
        }
        ws.send_bytes(b"\x10\x20")
        ws.send_json({"type": "user_message", "text": "Tell me about David"})
        assert ws.receive_json() == {
            "type": "text_delta",
            "id": "item_9-0",
            "delta": "Michelangelo carved it.",
        }
        assert ws.receive_json() == {"type": "control", "action": "text_done", "id": "item_9-0"}
        closing = ws.receive()
        assert closing["type"] == "websocket.close"
        assert closing["code"] == 1000

    assert remote.calls[0][0] == "configure"
    assert remote.calls[1] == ("item", "system", "Persona")
    assert ("audio", b"\x10\x20") in remote.calls
    assert ("item", "user", "Tell me about David") in remote.calls
    assert remote.calls[-1] == ("generate",)
    assert remote.closed


def test_realtime_without_credentials_closes_with_1011(client, monkeypatch):
    def no_credentials(config):
        raise RealtimeConnectionError("OPENAI_API_KEY is missing.")

    monkeypatch.setattr(realtime_client, "create_realtime_client", no_credentials)

    with client.websocket_connect("/realtime") as ws:
        with pytest.raises(WebSocketDisconnect) as excinfo:
            ws.receive_json()
    assert excinfo.value.code == 1011
