from __future__ import annotations

from datetime import datetime, timedelta
from threading import Event, Thread

import pytest

from prime_search.domain.errors import SearchError
from prime_search.domain.models import EmitMode, PartitionStrategy, PrimeNotification, SearchConfig
from prime_search.observability.logging import LogMessage
from prime_search.services.prime_oracle import is_prime_serial
from prime_search.services.result_sink import ResultSink
from prime_search.usecases import coordinator as coordinator_module
from prime_search.usecases.coordinator import SearchCoordinator, SearchState

PRIMES_TO_30 = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29)


class _RecordingNotifications:
    def __init__(self) -> None:
        self.items: list[PrimeNotification] = []

    def emit(self, notification: PrimeNotification) -> None:
        self.items.append(notification)


class _RecordingLog:
    def __init__(self) -> None:
        self.messages: list[LogMessage] = []

    def emit(self, message: LogMessage) -> None:
        self.messages.append(message)


def _config(bound: int, workers: int, strategy: PartitionStrategy, mode: EmitMode = EmitMode.DEFERRED) -> SearchConfig:
    return SearchConfig(worker_count=workers, upper_bound=bound, emit_mode=mode, partition_strategy=strategy)


def test_range_division_up_to_30() -> None:
    outcome = SearchCoordinator().run(_config(30, 4, PartitionStrategy.RANGE_DIVISION))
    assert outcome.primes == PRIMES_TO_30


def test_divisor_parallel_up_to_30() -> None:
    outcome = SearchCoordinator().run(_config(30, 3, PartitionStrategy.DIVISOR_PARALLEL))
    assert outcome.primes == PRIMES_TO_30


@pytest.mark.parametrize("strategy", list(PartitionStrategy))
def test_boundary_bounds(strategy: PartitionStrategy) -> None:
    coordinator = SearchCoordinator()
    assert coordinator.run(_config(1, 3, strategy)).primes == ()
    assert coordinator.run(_config(2, 3, strategy)).primes == (2,)


@pytest.mark.parametrize("strategy", list(PartitionStrategy))
def test_single_worker_matches_reference(strategy: PartitionStrategy) -> None:
    outcome = SearchCoordinator().run(_config(1000, 1, strategy))
    assert outcome.primes == tuple(n for n in range(1001) if is_prime_serial(n))
    assert outcome.count == 168


@pytest.mark.parametrize("strategy", list(PartitionStrategy))
def test_repeated_runs_are_identical(strategy: PartitionStrategy) -> None:
    # Discovery order varies between runs; the sorted result never does.
    coordinator = SearchCoordinator()
    first = coordinator.run(_config(2000, 5, strategy))
    second = coordinator.run(_config(2000, 5, strategy))
    assert first.primes == second.primes
    assert coordinator.state is SearchState.DONE


def test_strategies_agree() -> None:
    by_range = SearchCoordinator().run(_config(5000, 6, PartitionStrategy.RANGE_DIVISION))
    by_divisor = SearchCoordinator().run(_config(5000, 6, PartitionStrategy.DIVISOR_PARALLEL))
    assert by_range.primes == by_divisor.primes


def test_no_duplicates_under_many_workers() -> None:
    outcome = SearchCoordinator().run(_config(100_000, 64, PartitionStrategy.RANGE_DIVISION))
    assert len(outcome.primes) == len(set(outcome.primes)) == 9592
    assert list(outcome.primes) == sorted(outcome.primes)


def test_no_duplicates_under_many_divisor_workers() -> None:
    outcome = SearchCoordinator().run(_config(20_000, 32, PartitionStrategy.DIVISOR_PARALLEL))
    assert len(outcome.primes) == len(set(outcome.primes)) == 2262
    assert list(outcome.primes) == sorted(outcome.primes)


def test_more_workers_than_numbers() -> None:
    outcome = SearchCoordinator().run(_config(5, 12, PartitionStrategy.DIVISOR_PARALLEL))
    assert outcome.primes == (2, 3, 5)


def test_immediate_mode_notifies_every_prime_with_owner() -> None:
    notifications = _RecordingNotifications()
    coordinator = SearchCoordinator(notification_sink=notifications)
    outcome = coordinator.run(_config(30, 4, PartitionStrategy.RANGE_DIVISION, EmitMode.IMMEDIATE))

    assert sorted(item.value for item in notifications.items) == list(outcome.primes)
    # Units for 30/4: [1-7], [8-14], [15-21], [22-30].
    owners = {item.value: item.worker_id for item in notifications.items}
    assert owners == {2: 1, 3: 1, 5: 1, 7: 1, 11: 2, 13: 2, 17: 3, 19: 3, 23: 4, 29: 4}
    # Each worker reports its own primes in ascending order.
    for worker_id in range(1, 5):
        values = [item.value for item in notifications.items if item.worker_id == worker_id]
        assert values == sorted(values)


def test_deferred_mode_never_notifies() -> None:
    notifications = _RecordingNotifications()
    SearchCoordinator(notification_sink=notifications).run(
        _config(30, 4, PartitionStrategy.DIVISOR_PARALLEL, EmitMode.DEFERRED)
    )
    assert notifications.items == []


def test_outcome_timing_uses_clock() -> None:
    ticks = iter([datetime(2024, 1, 1, 10, 0, 0), datetime(2024, 1, 1, 10, 0, 5)])
    coordinator = SearchCoordinator(clock=lambda: next(ticks))
    outcome = coordinator.run(_config(10, 2, PartitionStrategy.RANGE_DIVISION))
    assert outcome.started_at == datetime(2024, 1, 1, 10, 0, 0)
    assert outcome.finished_at - outcome.started_at == timedelta(seconds=5)
    assert outcome.elapsed_seconds >= 0
    assert outcome.config.upper_bound == 10


def test_state_transitions() -> None:
    coordinator = SearchCoordinator()
    assert coordinator.state is SearchState.IDLE
    coordinator.run(_config(10, 2, PartitionStrategy.RANGE_DIVISION))
    assert coordinator.state is SearchState.DONE


def test_lifecycle_is_logged() -> None:
    log_sink = _RecordingLog()
    SearchCoordinator(log_sink=log_sink).run(_config(30, 3, PartitionStrategy.RANGE_DIVISION))
    messages = [message.message for message in log_sink.messages]
    assert messages[0] == "search started"
    assert messages[-1] == "search completed"
    assert messages.count("worker finished") == 3
    assert log_sink.messages[-1].fields["prime_count"] == 10
    found = sum(m.fields["found"] for m in log_sink.messages if m.message == "worker finished")
    assert found == 10


def test_worker_failure_is_raised_after_barrier() -> None:
    class _Broken:
        def emit(self, notification: PrimeNotification) -> None:
            raise OSError("console closed")

    log_sink = _RecordingLog()
    coordinator = SearchCoordinator(notification_sink=_Broken(), log_sink=log_sink)
    with pytest.raises(SearchError, match="console closed"):
        coordinator.run(_config(30, 2, PartitionStrategy.RANGE_DIVISION, EmitMode.IMMEDIATE))
    failed = [m for m in log_sink.messages if m.message == "search failed"]
    assert len(failed) == 1
    assert failed[0].level == "ERROR"
    assert failed[0].fields["worker_id"] == 1
    assert "search completed" not in [m.message for m in log_sink.messages]
    assert coordinator.state is SearchState.IDLE
    # The coordinator stays usable once the faulty run is over.
    assert coordinator.run(_config(10, 2, PartitionStrategy.RANGE_DIVISION)).primes == (2, 3, 5, 7)


def test_concurrent_run_is_rejected() -> None:
    entered = Event()
    release = Event()

    class _Blocking:
        def emit(self, notification: PrimeNotification) -> None:
            entered.set()
            release.wait(timeout=5)

    coordinator = SearchCoordinator(notification_sink=_Blocking())
    background = Thread(
        target=coordinator.run,
        args=(_config(10, 1, PartitionStrategy.RANGE_DIVISION, EmitMode.IMMEDIATE),),
    )
    background.start()
    try:
        assert entered.wait(timeout=5)
        assert coordinator.state is SearchState.RUNNING
        with pytest.raises(SearchError):
            coordinator.run(_config(10, 1, PartitionStrategy.RANGE_DIVISION))
    finally:
        release.set()
        background.join()
    assert coordinator.state is SearchState.DONE


def test_started_workers_are_joined_when_spawning_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    created: list[Thread] = []

    class _LimitedThread(Thread):
        def __init__(self, *args: object, **kwargs: object) -> None:
            super().__init__(*args, **kwargs)
            created.append(self)

        def start(self) -> None:
            if len([t for t in created if t.ident is not None]) >= 2:
                raise RuntimeError("can't start new thread")
            super().start()

    monkeypatch.setattr(coordinator_module, "Thread", _LimitedThread)
    coordinator = SearchCoordinator()
    with pytest.raises(RuntimeError, match="can't start new thread"):
        coordinator.run(_config(200, 4, PartitionStrategy.RANGE_DIVISION))

    started = [thread for thread in created if thread.ident is not None]
    assert len(started) == 2
    assert all(not thread.is_alive() for thread in started)
    assert coordinator.state is SearchState.IDLE


def test_run_timing_is_captured_before_sorting(monkeypatch: pytest.MonkeyPatch) -> None:
    # The end timestamp belongs to the join, not to the aggregation step.
    clock_calls: list[datetime] = []
    calls_at_snapshot: list[int] = []

    def clock() -> datetime:
        clock_calls.append(datetime(2024, 1, 1))
        return clock_calls[-1]

    class _ObservedSink(ResultSink):
        def snapshot_sorted(self) -> tuple[int, ...]:
            calls_at_snapshot.append(len(clock_calls))
            return super().snapshot_sorted()

    monkeypatch.setattr(coordinator_module, "ResultSink", _ObservedSink)
    SearchCoordinator(clock=clock).run(_config(30, 2, PartitionStrategy.RANGE_DIVISION))
    assert calls_at_snapshot == [2]
