from .errors import ConfigError, SearchError
from .models import (
    DivisorChunk,
    EmitMode,
    PartitionStrategy,
    PrimeNotification,
    SearchConfig,
    SearchOutcome,
    WorkUnit,
)
from .partitioning import odd_divisors, partition_range, split_divisors

# Public domain exports keep imports explicit across layers.
__all__ = [
    "ConfigError",
    "DivisorChunk",
    "EmitMode",
    "PartitionStrategy",
    "PrimeNotification",
    "SearchConfig",
    "SearchError",
    "SearchOutcome",
    "WorkUnit",
    "odd_divisors",
    "partition_range",
    "split_divisors",
]
