from prime_search.domain.errors import ConfigError

from .loader import load_config, save_config
from .models import MAX_EXPONENT, MIN_EXPONENT, SearchSettings, default_settings, parse_exponent

# Config exports are intentionally small.
__all__ = [
    "ConfigError",
    "MAX_EXPONENT",
    "MIN_EXPONENT",
    "SearchSettings",
    "default_settings",
    "load_config",
    "parse_exponent",
    "save_config",
]
