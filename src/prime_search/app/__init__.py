from .cli import apply_overrides, build_parser, parse_args, resolve_settings, run

# app package exports CLI helpers for reuse in tests and entrypoints.
__all__ = ["apply_overrides", "build_parser", "parse_args", "resolve_settings", "run"]
