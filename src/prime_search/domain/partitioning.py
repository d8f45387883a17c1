from __future__ import annotations

import math
from collections.abc import Sequence

from .errors import ConfigError
from .models import DivisorChunk, WorkUnit


def partition_range(upper_bound: int, worker_count: int) -> list[WorkUnit]:
    """Split [1, upper_bound] into exactly ``worker_count`` contiguous units.

    Every unit holds ``upper_bound // worker_count`` numbers except the last,
    which runs to ``upper_bound`` and absorbs the remainder. With more workers
    than numbers the leading units come out empty and the last one covers
    the whole range.
    """
    _require_workers(worker_count)
    if upper_bound < 1:
        raise ConfigError(f"upper_bound must be >= 1, got {upper_bound}")

    chunk_size = upper_bound // worker_count
    units: list[WorkUnit] = []
    for index in range(worker_count):
        start = index * chunk_size + 1
        if index == worker_count - 1:
            end = upper_bound
        else:
            end = (index + 1) * chunk_size
        units.append(WorkUnit(worker_id=index + 1, start=start, end=end))
    return units


def odd_divisors(number: int) -> list[int]:
    # Odd trial divisors in [3, isqrt(number)]; empty for number < 9.
    if number < 9:
        return []
    return list(range(3, math.isqrt(number) + 1, 2))


def split_divisors(divisors: Sequence[int], worker_count: int) -> list[DivisorChunk]:
    """Split ``divisors`` into exactly ``worker_count`` contiguous chunks.

    Chunk size is ``max(1, len(divisors) // worker_count)`` and the last chunk
    takes whatever is left. When there are fewer divisors than workers the
    trailing chunks are empty; they are kept so the chunk count never changes.
    """
    _require_workers(worker_count)
    items = tuple(divisors)
    size = max(1, len(items) // worker_count)
    chunks: list[DivisorChunk] = []
    for index in range(worker_count):
        start = index * size
        if index == worker_count - 1:
            piece = items[start:]
        else:
            piece = items[start : start + size]
        chunks.append(DivisorChunk(index=index, divisors=piece))
    return chunks


def _require_workers(worker_count: int) -> None:
    # Guards the integer divisions above.
    if worker_count < 1:
        raise ConfigError(f"worker_count must be >= 1, got {worker_count}")
