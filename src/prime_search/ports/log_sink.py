from __future__ import annotations

from typing import Protocol, runtime_checkable

from prime_search.observability.logging import LogMessage


# LogSink port is the structured logging channel for run lifecycle events.
@runtime_checkable
class LogSink(Protocol):
    def emit(self, message: LogMessage) -> None:
        """Write one structured log record."""
        # Port contract has no implementation; calling it directly is a wiring error.
        raise NotImplementedError("LogSink is a port; use a concrete adapter.")
