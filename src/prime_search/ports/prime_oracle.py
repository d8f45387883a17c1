from __future__ import annotations

from typing import Protocol, runtime_checkable


# PrimeOracle port is the single primality decision used by search workers.
@runtime_checkable
class PrimeOracle(Protocol):
    def is_prime(self, number: int) -> bool:
        """Return True if number is prime under the oracle's strategy."""
        # Port contract has no implementation; calling it directly is a wiring error.
        raise NotImplementedError("PrimeOracle is a port; use a concrete oracle.")
