from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from prime_search.domain.errors import ConfigError

from .models import SearchSettings

_ALLOWED_KEYS = {"num_threads", "max_number", "print_mode", "division_scheme"}
_REQUIRED_KEYS = {"num_threads", "max_number"}


def load_config(path: Path) -> SearchSettings:
    # JSON is a YAML subset, so config.json and config.yml share one loader.
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Config file is not readable: {path}: {exc}") from exc

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file is not valid JSON/YAML: {path}") from exc
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")

    _validate_top_level(raw)
    try:
        return SearchSettings.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(_describe(exc)) from exc


def save_config(path: Path, settings: SearchSettings) -> None:
    # Bounds that are powers of two are written back in "2^X" form.
    payload: dict[str, Any] = {
        "num_threads": settings.num_threads,
        "max_number": settings.max_number_text(),
        "print_mode": settings.print_mode,
        "division_scheme": settings.division_scheme,
    }
    if path.suffix.lower() == ".json":
        text = json.dumps(payload, indent=4) + "\n"
    else:
        text = yaml.safe_dump(payload, sort_keys=False)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _validate_top_level(raw: dict[str, Any]) -> None:
    # Fail fast on unknown keys to prevent silent misconfiguration.
    unknown = set(raw.keys()) - _ALLOWED_KEYS
    if unknown:
        raise ConfigError(f"Unknown top-level keys: {sorted(unknown)}")

    missing = _REQUIRED_KEYS - set(raw.keys())
    if missing:
        raise ConfigError(f"Missing required top-level keys: {sorted(missing)}")


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(item) for item in err.get("loc", ())) or "config"
        parts.append(f"{location}: {err.get('msg')}")
    return "Invalid config: " + "; ".join(parts)
