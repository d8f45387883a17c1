from __future__ import annotations

from typing import Protocol, runtime_checkable

from prime_search.domain.models import PrimeNotification


# NotificationSink port receives immediate-mode discoveries while workers are still running.
@runtime_checkable
class NotificationSink(Protocol):
    def emit(self, notification: PrimeNotification) -> None:
        """Deliver a single discovery; callers serialize access."""
        # Port contract has no implementation; calling it directly is a wiring error.
        raise NotImplementedError("NotificationSink is a port; use a concrete adapter.")
