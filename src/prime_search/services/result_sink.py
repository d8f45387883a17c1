from __future__ import annotations

from datetime import datetime
from threading import Lock

from prime_search.domain.models import PrimeNotification
from prime_search.ports.notification_sink import NotificationSink


class ResultSink:
    """Shared collector of primes found during one run.

    Inserts and notifications are guarded by two independent locks so a slow
    console never blocks aggregation. The sink is created per run and read
    back in full only after every worker has joined.
    """

    def __init__(
        self,
        notification_sink: NotificationSink | None = None,
    ) -> None:
        self._values: list[int] = []
        self._values_lock = Lock()
        self._notification_sink = notification_sink
        self._notify_lock = Lock()

    def add(self, number: int) -> None:
        with self._values_lock:
            self._values.append(number)

    def snapshot_sorted(self) -> tuple[int, ...]:
        with self._values_lock:
            values = list(self._values)
        values.sort()
        return tuple(values)

    def notify(self, worker_id: int, number: int, timestamp: datetime) -> None:
        if self._notification_sink is None:
            return
        notification = PrimeNotification(worker_id=worker_id, value=number, timestamp=timestamp)
        with self._notify_lock:
            self._notification_sink.emit(notification)

    def __len__(self) -> int:
        with self._values_lock:
            return len(self._values)
