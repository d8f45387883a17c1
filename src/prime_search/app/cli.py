from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

from pydantic import ValidationError

from prime_search.app.interactive import configure_interactive, confirm
from prime_search.app.report import (
    ConsoleNotificationSink,
    render_header,
    render_results,
    render_summary,
)
from prime_search.config.loader import load_config, save_config
from prime_search.config.models import SearchSettings, default_settings, parse_exponent
from prime_search.domain.errors import ConfigError, SearchError
from prime_search.domain.models import EmitMode
from prime_search.observability.logging import JsonlLogSink, NullLogSink, StdoutLogSink
from prime_search.ports.log_sink import LogSink
from prime_search.usecases.coordinator import SearchCoordinator

DEFAULT_CONFIG = "config.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Concurrent prime number search")
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="Path to JSON/YAML config")
    parser.add_argument(
        "--configure",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Edit settings interactively before the run (asks when omitted)",
    )
    parser.add_argument("--threads", type=int, help="Override num_threads")
    parser.add_argument("--max-exponent", type=int, help="Override max_number as 2^X")
    parser.add_argument("--print-mode", choices=["immediate", "wait"], help="Override print_mode")
    parser.add_argument(
        "--division-scheme",
        choices=["range", "divisibility"],
        help="Override division_scheme",
    )
    parser.add_argument("--log-path", help="Append structured run logs to this JSONL file")
    parser.add_argument("--log-stdout", action="store_true", help="Print structured run logs to stdout")
    return parser


def parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    # Parse CLI arguments; caller passes argv for testability.
    return build_parser().parse_args(argv)


def resolve_settings(args: argparse.Namespace) -> SearchSettings:
    # A missing config file falls back to defaults; a broken one is fatal.
    path = Path(args.config)
    if path.exists():
        settings = load_config(path)
    else:
        print(f"Warning: {path} not found, using default settings.", file=sys.stderr)
        settings = default_settings()
    return apply_overrides(settings, args)


def apply_overrides(settings: SearchSettings, args: argparse.Namespace) -> SearchSettings:
    # CLI overrides take precedence over config values and are validated the same way.
    updates: dict[str, object] = {}
    if args.threads is not None:
        updates["num_threads"] = args.threads
    if args.max_exponent is not None:
        try:
            updates["max_number"] = 2 ** parse_exponent(str(args.max_exponent))
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
    if args.print_mode is not None:
        updates["print_mode"] = args.print_mode
    if args.division_scheme is not None:
        updates["division_scheme"] = args.division_scheme
    if not updates:
        return settings
    try:
        return SearchSettings.model_validate({**settings.model_dump(), **updates})
    except ValidationError as exc:
        raise ConfigError(f"Invalid override: {exc.errors()[0].get('msg')}") from exc


def build_log_sink(args: argparse.Namespace) -> LogSink:
    if args.log_path:
        return JsonlLogSink(Path(args.log_path))
    if args.log_stdout:
        return StdoutLogSink()
    return NullLogSink()


def run(argv: Sequence[str] | None = None, *, input_fn: Callable[[str], str] = input) -> int:
    # Thin shell around SearchCoordinator: settings in, report out.
    args = parse_args(argv)
    try:
        settings = resolve_settings(args)
        wants_config = args.configure
        if wants_config is None:
            wants_config = confirm("Do you want to configure settings? (y/n): ", input_fn=input_fn)
        if wants_config:
            settings = configure_interactive(settings, input_fn=input_fn)
            save_config(Path(args.config), settings)
            print(f"\nConfiguration saved to {args.config}\n")
        config = settings.to_search_config()
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    log_sink = build_log_sink(args)
    notification_sink = ConsoleNotificationSink() if config.emit_mode is EmitMode.IMMEDIATE else None
    coordinator = SearchCoordinator(notification_sink=notification_sink, log_sink=log_sink)

    for line in render_header(config):
        print(line)
    try:
        outcome = coordinator.run(config)
    except SearchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        if isinstance(log_sink, JsonlLogSink):
            log_sink.close()

    if config.emit_mode is EmitMode.DEFERRED:
        for line in render_results(outcome):
            print(line)
    for line in render_summary(outcome):
        print(line)
    return 0
