from .prime_oracle import CompositeFlag, ParallelPrimeOracle, SerialPrimeOracle, is_prime_serial
from .result_sink import ResultSink

__all__ = [
    "CompositeFlag",
    "ParallelPrimeOracle",
    "ResultSink",
    "SerialPrimeOracle",
    "is_prime_serial",
]
