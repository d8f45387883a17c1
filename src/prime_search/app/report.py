from __future__ import annotations

import sys
from datetime import datetime
from typing import TextIO

from prime_search.domain.models import PrimeNotification, SearchConfig, SearchOutcome

RULE_WIDTH = 60
SUMMARY_HEAD = 20


class ConsoleNotificationSink:
    # Renders immediate-mode discoveries; the ResultSink serializes calls.
    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def emit(self, notification: PrimeNotification) -> None:
        stream = sys.stdout if self._stream is None else self._stream
        stream.write(format_notification(notification) + "\n")
        stream.flush()


def format_notification(notification: PrimeNotification) -> str:
    ts = notification.timestamp
    clock = f"{ts:%H:%M:%S}.{ts.microsecond // 1000:03d}"
    return f"[Thread-{notification.worker_id}] [{clock}] Found prime: {notification.value}"


def render_header(config: SearchConfig) -> list[str]:
    bound = str(config.upper_bound)
    if config.upper_bound & (config.upper_bound - 1) == 0:
        bound += f" (2^{config.upper_bound.bit_length() - 1})"
    return [
        "",
        "Starting Prime Number Search",
        "Configuration:",
        f"  - Number of threads: {config.worker_count}",
        f"  - Max number: {bound}",
        f"  - Print mode: {config.emit_mode.value}",
        f"  - Division scheme: {config.partition_strategy.value}",
        "-" * RULE_WIDTH,
    ]


def render_results(outcome: SearchOutcome) -> list[str]:
    # Deferred mode prints every prime once the run is over.
    lines = ["", "All threads completed. Results:", "-" * RULE_WIDTH]
    lines.extend(f"Prime: {prime}" for prime in outcome.primes)
    return lines


def render_summary(outcome: SearchOutcome, head: int = SUMMARY_HEAD) -> list[str]:
    shown = ", ".join(str(prime) for prime in outcome.head(head))
    if outcome.count > head:
        shown += "..."
    return [
        "-" * RULE_WIDTH,
        "",
        "Summary:",
        f"  - Total primes found: {outcome.count}",
        f"  - Execution time: {outcome.elapsed_seconds:.6f} seconds",
        f"  - Primes: {shown}",
        "",
        "=" * RULE_WIDTH,
        f"START TIME: {_stamp(outcome.started_at)}",
        f"END TIME:   {_stamp(outcome.finished_at)}",
        "=" * RULE_WIDTH,
    ]


def _stamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S")
