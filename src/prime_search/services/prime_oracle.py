from __future__ import annotations

import math
from concurrent.futures import Executor, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from threading import Lock

from prime_search.domain.errors import ConfigError
from prime_search.domain.partitioning import odd_divisors, split_divisors
from prime_search.ports.prime_oracle import PrimeOracle


def is_prime_serial(number: int) -> bool:
    # Trial division by odd divisors up to isqrt(number).
    if number < 2:
        return False
    if number == 2:
        return True
    if number % 2 == 0:
        return False
    limit = math.isqrt(number)
    for divisor in range(3, limit + 1, 2):
        if number % divisor == 0:
            return False
    return True


class SerialPrimeOracle(PrimeOracle):
    # Single-threaded oracle used by range-division workers.
    def is_prime(self, number: int) -> bool:
        return is_prime_serial(number)


@dataclass(slots=True)
class CompositeFlag:
    # Verdict of a single oracle call; the first divisor hit wins, later writes are no-ops.
    _value: bool = False
    _lock: Lock = field(default_factory=Lock, init=False, repr=False)

    @property
    def is_set(self) -> bool:
        return self._value

    def set(self) -> bool:
        # Returns True only for the writer that flipped the flag.
        with self._lock:
            if self._value:
                return False
            self._value = True
            return True


class ParallelPrimeOracle(PrimeOracle):
    """Primality test that fans each candidate's trial divisors out to a thread pool.

    Every call splits the odd divisors of ``number`` into ``worker_count``
    chunks, submits one task per non-empty chunk and waits for all of them
    before answering. The pool is reused across calls; the per-call barrier
    is not. A caller-provided executor is borrowed and never shut down here.
    """

    def __init__(self, worker_count: int, executor: Executor | None = None) -> None:
        if worker_count < 1:
            raise ConfigError(f"worker_count must be >= 1, got {worker_count}")
        self._worker_count = worker_count
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=worker_count,
            thread_name_prefix="divisor",
        )

    def is_prime(self, number: int) -> bool:
        if number < 2:
            return False
        if number == 2:
            return True
        if number % 2 == 0:
            return False

        divisors = odd_divisors(number)
        if not divisors:
            return True

        flag = CompositeFlag()
        futures = [
            self._executor.submit(_scan_chunk, number, chunk.divisors, flag)
            for chunk in split_divisors(divisors, self._worker_count)
            if chunk
        ]
        done, _ = wait(futures)
        for future in done:
            # Surface task failures instead of reporting a possibly wrong verdict.
            future.result()
        return not flag.is_set

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def __enter__(self) -> ParallelPrimeOracle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _scan_chunk(number: int, divisors: tuple[int, ...], flag: CompositeFlag) -> None:
    for divisor in divisors:
        # A sibling chunk already decided the verdict.
        if flag.is_set:
            return
        if number % divisor == 0:
            flag.set()
            return
