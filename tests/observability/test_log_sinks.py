from __future__ import annotations

import io
import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from prime_search.observability.logging import (
    JsonlLogSink,
    LogMessage,
    NullLogSink,
    StdoutLogSink,
    info,
)


def test_log_message_requires_level_and_message() -> None:
    with pytest.raises(ValueError):
        LogMessage(level="", message="x")
    with pytest.raises(ValueError):
        LogMessage(level="INFO", message="")


def test_stdout_log_sink_writes_compact_json() -> None:
    stream = io.StringIO()
    stamp = datetime(2024, 5, 1, 12, 30, tzinfo=UTC)
    StdoutLogSink(stream).emit(LogMessage(level="INFO", message="search started", timestamp=stamp, fields={"n": 1}))
    assert stream.getvalue() == (
        '{"level":"INFO","message":"search started","timestamp":"2024-05-01T12:30:00Z","fields":{"n":1}}\n'
    )


def test_jsonl_log_sink_appends(tmp_path: Path) -> None:
    path = tmp_path / "logs" / "run.jsonl"
    sink = JsonlLogSink(path)
    sink.emit(info("search started", worker_count=2))
    sink.emit(info("search completed", prime_count=4))
    sink.close()
    sink.close()

    records = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [record["message"] for record in records] == ["search started", "search completed"]
    assert records[0]["fields"] == {"worker_count": 2}
    assert records[1]["timestamp"].endswith("Z")


def test_null_log_sink_accepts_anything() -> None:
    NullLogSink().emit(info("ignored"))
