"""Small helpers: tolerant JSON reads and the stopwatch."""
import logging

import pytest

from sculpture_guide.utils import Stopwatch, read_json_safely

logger = logging.getLogger("tests.utils")


def test_read_json_safely_returns_default_on_problems(tmp_path, caplog):
    assert read_json_safely(tmp_path / "missing.json", default={}) == {}

    bad = tmp_path / "bad.json"
    bad.write_text("{ nope", encoding="utf-8")
    with caplog.at_level(logging.WARNING):
        assert read_json_safely(bad, default="fallback") == "fallback"
    assert "Invalid JSON" in caplog.text


def test_read_json_safely_logs_missing_only_when_asked(tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        read_json_safely(tmp_path / "quiet.json")
        assert "quiet.json" not in caplog.text
        read_json_safely(tmp_path / "loud.json", log_missing=True)
    assert "JSON file not found" in caplog.text


def test_stopwatch_logs_duration(caplog):
    with caplog.at_level(logging.INFO, logger="tests.utils"):
        with Stopwatch("Dataset load", logger) as watch:
            pass
    assert watch.elapsed >= 0
    assert "Dataset load took" in caplog.text


def test_stopwatch_reports_failed_blocks(caplog):
    with caplog.at_level(logging.INFO, logger="tests.utils"):
        with pytest.raises(ValueError):
            with Stopwatch("Remote configure", logger):
                raise ValueError("boom")
    assert "Remote configure failed after" in caplog.text
