from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from prime_search.domain.models import EmitMode, PartitionStrategy, SearchConfig

MIN_EXPONENT = 1
MAX_EXPONENT = 30


class SearchSettings(BaseModel):
    # Typed view of the config file; keys keep their historical config.json names.
    model_config = ConfigDict(extra="forbid")
    num_threads: int = Field(gt=0)
    max_number: int = Field(gt=0)
    print_mode: Literal["immediate", "wait"] = "immediate"
    division_scheme: Literal["range", "divisibility"] = "range"

    @field_validator("max_number", mode="before")
    @classmethod
    def _parse_power_of_two(cls, value: object) -> object:
        # "2^X" strings are expanded here; plain integers pass through to the int check.
        if isinstance(value, str) and value.strip().startswith("2^"):
            return 2 ** parse_exponent(value.strip()[2:])
        return value

    @property
    def exponent(self) -> int | None:
        # X for bounds of the form 2^X, else None.
        if self.max_number & (self.max_number - 1):
            return None
        return self.max_number.bit_length() - 1

    def max_number_text(self) -> str | int:
        exponent = self.exponent
        if exponent is not None and exponent >= MIN_EXPONENT:
            return f"2^{exponent}"
        return self.max_number

    def to_search_config(self) -> SearchConfig:
        return SearchConfig(
            worker_count=self.num_threads,
            upper_bound=self.max_number,
            emit_mode=EmitMode(self.print_mode),
            partition_strategy=PartitionStrategy(self.division_scheme),
        )


def parse_exponent(text: str) -> int:
    # Exponents outside [1, 30] would overflow the historical 32-bit bound.
    try:
        exponent = int(text)
    except ValueError as exc:
        raise ValueError(f"exponent must be an integer, got {text!r}") from exc
    if not MIN_EXPONENT <= exponent <= MAX_EXPONENT:
        raise ValueError(f"exponent must be between {MIN_EXPONENT} and {MAX_EXPONENT}, got {exponent}")
    return exponent


def default_settings() -> SearchSettings:
    return SearchSettings(num_threads=4, max_number=2**10, print_mode="immediate", division_scheme="range")
