from .log_sink import LogSink
from .notification_sink import NotificationSink
from .prime_oracle import PrimeOracle

# Public port exports keep wiring explicit at composition time.
__all__ = ["LogSink", "NotificationSink", "PrimeOracle"]
