from __future__ import annotations

from collections.abc import Callable

from prime_search.config.models import MAX_EXPONENT, MIN_EXPONENT, SearchSettings

InputFn = Callable[[str], str]
OutputFn = Callable[[str], None]

_PRINT_MODES = {"1": "immediate", "2": "wait"}
_DIVISION_SCHEMES = {"1": "range", "2": "divisibility"}


def confirm(prompt: str, *, input_fn: InputFn = input) -> bool:
    return input_fn(prompt).strip().lower() == "y"


def configure_interactive(
    settings: SearchSettings,
    *,
    input_fn: InputFn = input,
    output_fn: OutputFn = print,
) -> SearchSettings:
    """Ask for every search setting, re-prompting until each answer is valid.

    Returns a new settings object; ``settings`` only supplies the values shown
    as "current".
    """
    output_fn("=== Prime Number Finder Configuration ===\n")

    threads = _ask(
        input_fn,
        output_fn,
        f"Enter number of threads (current: {settings.num_threads}): ",
        _positive_int,
        "Invalid input! Please enter a positive integer.\n",
    )
    exponent = _ask(
        input_fn,
        output_fn,
        f"Enter X for max number (2^X) (current calculates to: {settings.max_number}): ",
        _exponent,
        f"Invalid input! Please enter an integer between {MIN_EXPONENT} and {MAX_EXPONENT}.\n",
    )
    print_mode = _ask_choice(
        input_fn,
        output_fn,
        [
            "\nPrinting Variations:",
            "  1. Print immediately (with thread ID and timestamp)",
            "  2. Wait until all threads are done then print",
        ],
        f"Enter choice (1 or 2) (current: {settings.print_mode}): ",
        _PRINT_MODES,
    )
    division_scheme = _ask_choice(
        input_fn,
        output_fn,
        [
            "\nTask Division Schemes:",
            "  1. Range division (divide search range among threads)",
            "  2. Divisibility testing (linear search, parallel divisibility check)",
        ],
        f"Enter choice (1 or 2) (current: {settings.division_scheme}): ",
        _DIVISION_SCHEMES,
    )
    return SearchSettings(
        num_threads=threads,
        max_number=2**exponent,
        print_mode=print_mode,
        division_scheme=division_scheme,
    )


def _ask(
    input_fn: InputFn,
    output_fn: OutputFn,
    prompt: str,
    parse: Callable[[str], int | None],
    error: str,
) -> int:
    while True:
        value = parse(input_fn(prompt))
        if value is not None:
            return value
        output_fn(error)


def _ask_choice(
    input_fn: InputFn,
    output_fn: OutputFn,
    menu: list[str],
    prompt: str,
    options: dict[str, str],
) -> str:
    while True:
        for line in menu:
            output_fn(line)
        choice = options.get(input_fn(prompt).strip())
        if choice is not None:
            return choice
        output_fn("\nInvalid input! Please enter either 1 or 2.")


def _positive_int(text: str) -> int | None:
    value = _int_or_none(text)
    if value is None or value <= 0:
        return None
    return value


def _exponent(text: str) -> int | None:
    value = _int_or_none(text)
    if value is None or not MIN_EXPONENT <= value <= MAX_EXPONENT:
        return None
    return value


def _int_or_none(text: str) -> int | None:
    try:
        return int(text.strip())
    except ValueError:
        return None
