from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from threading import Lock
from typing import TextIO


@dataclass(frozen=True, slots=True)
class LogMessage:
    # Structured log payload for search lifecycle events.
    level: str
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    fields: dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.level or not self.message:
            raise ValueError("LogMessage requires non-empty level/message")


class NullLogSink:
    # Default sink when no logging channel is configured.
    def emit(self, message: LogMessage) -> None:
        _ = message


class StdoutLogSink:
    # Compact one-line JSON records; workers may log concurrently, so writes are serialized.
    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._lock = Lock()

    def emit(self, message: LogMessage) -> None:
        line = json.dumps(_log_to_dict(message), separators=(",", ":"), ensure_ascii=False)
        with self._lock:
            print(line, file=sys.stdout if self._stream is None else self._stream)


class JsonlLogSink:
    # File-backed structured log sink for run diagnostics.
    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self._path.open("a", encoding="utf-8")
        self._lock = Lock()

    def emit(self, message: LogMessage) -> None:
        payload = json.dumps(_log_to_dict(message), separators=(",", ":"), ensure_ascii=False)
        with self._lock:
            self._file.write(payload + "\n")
            self._file.flush()

    def close(self) -> None:
        with self._lock:
            if not self._file.closed:
                self._file.close()


def info(message: str, **fields: object) -> LogMessage:
    return LogMessage(level="INFO", message=message, fields=dict(fields))


def debug(message: str, **fields: object) -> LogMessage:
    return LogMessage(level="DEBUG", message=message, fields=dict(fields))


def error(message: str, **fields: object) -> LogMessage:
    return LogMessage(level="ERROR", message=message, fields=dict(fields))


def _log_to_dict(message: LogMessage) -> dict[str, object]:
    return {
        "level": message.level,
        "message": message.message,
        "timestamp": message.timestamp.isoformat().replace("+00:00", "Z"),
        "fields": message.fields,
    }
