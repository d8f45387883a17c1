from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .errors import ConfigError


class EmitMode(str, Enum):
    # Values match the print_mode spelling used in config files.
    IMMEDIATE = "immediate"
    DEFERRED = "wait"


class PartitionStrategy(str, Enum):
    # Values match the division_scheme spelling used in config files.
    RANGE_DIVISION = "range"
    DIVISOR_PARALLEL = "divisibility"


@dataclass(frozen=True, slots=True)
class SearchConfig:
    # Validated, immutable parameters of a single search run.
    worker_count: int
    upper_bound: int
    emit_mode: EmitMode = EmitMode.DEFERRED
    partition_strategy: PartitionStrategy = PartitionStrategy.RANGE_DIVISION

    def __post_init__(self) -> None:
        # bool is an int subclass; reject it explicitly so True never means "one worker".
        if not isinstance(self.worker_count, int) or isinstance(self.worker_count, bool):
            raise ConfigError("worker_count must be an integer")
        if self.worker_count < 1:
            raise ConfigError(f"worker_count must be >= 1, got {self.worker_count}")
        if not isinstance(self.upper_bound, int) or isinstance(self.upper_bound, bool):
            raise ConfigError("upper_bound must be an integer")
        if self.upper_bound < 1:
            raise ConfigError(f"upper_bound must be >= 1, got {self.upper_bound}")
        if not isinstance(self.emit_mode, EmitMode):
            raise ConfigError(f"Unknown emit mode: {self.emit_mode!r}")
        if not isinstance(self.partition_strategy, PartitionStrategy):
            raise ConfigError(f"Unknown partition strategy: {self.partition_strategy!r}")


@dataclass(frozen=True, slots=True)
class WorkUnit:
    # Inclusive candidate range owned by one top-level worker; empty when start > end.
    worker_id: int
    start: int
    end: int

    def __len__(self) -> int:
        return max(0, self.end - self.start + 1)

    def candidates(self) -> range:
        return range(self.start, self.end + 1)


@dataclass(frozen=True, slots=True)
class DivisorChunk:
    # Slice of odd trial divisors for a single candidate; may be empty.
    index: int
    divisors: tuple[int, ...]

    def __bool__(self) -> bool:
        return bool(self.divisors)


@dataclass(frozen=True, slots=True)
class PrimeNotification:
    # Immediate-mode record delivered to the notification sink.
    worker_id: int
    value: int
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class SearchOutcome:
    # Final, ascending result of a completed run with its timing.
    primes: tuple[int, ...]
    elapsed_seconds: float
    started_at: datetime
    finished_at: datetime
    config: SearchConfig

    @property
    def count(self) -> int:
        return len(self.primes)

    def head(self, limit: int) -> tuple[int, ...]:
        return self.primes[: max(0, limit)]
