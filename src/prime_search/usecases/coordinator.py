from __future__ import annotations

import time
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from threading import Lock, Thread

from prime_search.domain.errors import SearchError
from prime_search.domain.models import (
    EmitMode,
    PartitionStrategy,
    SearchConfig,
    SearchOutcome,
    WorkUnit,
)
from prime_search.domain.partitioning import partition_range
from prime_search.observability import logging as log
from prime_search.observability.logging import NullLogSink
from prime_search.ports.log_sink import LogSink
from prime_search.ports.notification_sink import NotificationSink
from prime_search.ports.prime_oracle import PrimeOracle
from prime_search.services.prime_oracle import ParallelPrimeOracle, SerialPrimeOracle
from prime_search.services.result_sink import ResultSink


class SearchState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    AGGREGATING = "aggregating"
    DONE = "done"


class SearchCoordinator:
    """Runs one prime search at a time and turns it into a SearchOutcome.

    Both strategies give every top-level worker a contiguous range from
    ``partition_range``. Under range division each worker tests its numbers
    serially; under divisor-parallel each candidate is handed to a
    ``ParallelPrimeOracle`` that fans the divisors out and waits for a verdict.
    Workers are joined before any result is read, so the outcome never
    reflects a partial run.
    """

    def __init__(
        self,
        notification_sink: NotificationSink | None = None,
        log_sink: LogSink | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._notification_sink = notification_sink
        self._log = log_sink or NullLogSink()
        self._clock = clock or datetime.now
        self._state = SearchState.IDLE
        self._state_lock = Lock()

    @property
    def state(self) -> SearchState:
        return self._state

    def run(self, config: SearchConfig) -> SearchOutcome:
        with self._state_lock:
            if self._state in (SearchState.RUNNING, SearchState.AGGREGATING):
                raise SearchError("A search is already in progress on this coordinator")
            self._state = SearchState.RUNNING

        try:
            return self._run(config)
        except BaseException:
            # A failed run leaves nothing behind; the coordinator can be reused.
            self._state = SearchState.IDLE
            raise

    def _run(self, config: SearchConfig) -> SearchOutcome:
        started_at = self._clock()
        started = time.perf_counter()
        units = partition_range(config.upper_bound, config.worker_count)
        results = ResultSink(self._notification_sink)
        self._log.emit(
            log.info(
                "search started",
                worker_count=config.worker_count,
                upper_bound=config.upper_bound,
                emit_mode=config.emit_mode.value,
                partition_strategy=config.partition_strategy.value,
            )
        )

        oracle = self._build_oracle(config)
        try:
            failures = self._run_workers(units, oracle, results, config)
        finally:
            if isinstance(oracle, ParallelPrimeOracle):
                oracle.close()

        if failures:
            worker_id, exc = failures[0]
            self._log.emit(log.error("search failed", worker_id=worker_id, error=repr(exc)))
            raise SearchError(f"Worker {worker_id} failed: {exc}") from exc

        elapsed = time.perf_counter() - started
        finished_at = self._clock()
        self._state = SearchState.AGGREGATING
        primes = results.snapshot_sorted()
        outcome = SearchOutcome(
            primes=primes,
            elapsed_seconds=elapsed,
            started_at=started_at,
            finished_at=finished_at,
            config=config,
        )
        self._state = SearchState.DONE
        self._log.emit(
            log.info("search completed", prime_count=outcome.count, elapsed_seconds=round(elapsed, 6))
        )
        return outcome

    def _build_oracle(self, config: SearchConfig) -> PrimeOracle:
        if config.partition_strategy is PartitionStrategy.DIVISOR_PARALLEL:
            return ParallelPrimeOracle(config.worker_count)
        return SerialPrimeOracle()

    def _run_workers(
        self,
        units: list[WorkUnit],
        oracle: PrimeOracle,
        results: ResultSink,
        config: SearchConfig,
    ) -> list[tuple[int, BaseException]]:
        failures: list[tuple[int, BaseException]] = []
        failures_lock = Lock()
        immediate = config.emit_mode is EmitMode.IMMEDIATE

        def work(unit: WorkUnit) -> None:
            try:
                found = self._search_unit(unit, oracle, results, immediate)
            except Exception as exc:
                with failures_lock:
                    failures.append((unit.worker_id, exc))
                return
            self._log.emit(
                log.debug(
                    "worker finished",
                    worker_id=unit.worker_id,
                    start=unit.start,
                    end=unit.end,
                    found=found,
                )
            )

        threads = [
            Thread(target=work, args=(unit,), name=f"search-worker-{unit.worker_id}")
            for unit in units
        ]
        started: list[Thread] = []
        try:
            for thread in threads:
                thread.start()
                started.append(thread)
        finally:
            # Join whatever did start, even when spawning fails partway.
            for thread in started:
                thread.join()
        failures.sort(key=lambda item: item[0])
        return failures

    def _search_unit(
        self,
        unit: WorkUnit,
        oracle: PrimeOracle,
        results: ResultSink,
        immediate: bool,
    ) -> int:
        found = 0
        for number in unit.candidates():
            if not oracle.is_prime(number):
                continue
            results.add(number)
            found += 1
            if immediate:
                results.notify(unit.worker_id, number, self._clock())
        return found
