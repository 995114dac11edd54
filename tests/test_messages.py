"""WebSocket frame schema."""
import json

import pytest
from pydantic import ValidationError

from sculpture_guide.models import messages


def test_parse_user_message():
    parsed = messages.parse_ws_message('{"type": "user_message", "text": "Hi"}')
    assert isinstance(parsed, messages.UserMessage)
    assert parsed.text == "Hi"
    assert parsed.id is None


def test_parse_control_frames_by_action():
    parsed = messages.parse_ws_message('{"type": "control", "action": "text_done", "id": "x-0"}')
    assert isinstance(parsed, messages.TextDone)
    parsed = messages.parse_ws_message('{"type": "control", "action": "speech_started"}')
    assert isinstance(parsed, messages.SpeechStarted)


def test_other_kinds_parse_too():
    parsed = messages.parse_ws_message('{"type": "text_delta", "id": "i-0", "delta": "a"}')
    assert isinstance(parsed, messages.TextDelta)


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        '{"type": "shout", "text": "x"}',
        '{"type": "user_message"}',
        '{"type": "control", "action": "dance"}',
    ],
)
def test_malformed_frames_raise(raw):
    with pytest.raises(ValidationError):
        messages.parse_ws_message(raw)


def test_dump_frames():
    assert json.loads(messages.dump_ws_message(messages.Connected(greeting="Hey"))) == {
        "type": "control",
        "action": "connected",
        "greeting": "Hey",
    }
    assert json.loads(messages.dump_ws_message(messages.SpeechStarted())) == {
        "type": "control",
        "action": "speech_started",
    }
    assert json.loads(messages.dump_ws_message(messages.TextDelta(id="i-0", delta="x"))) == {
        "type": "text_delta",
        "id": "i-0",
        "delta": "x",
    }
