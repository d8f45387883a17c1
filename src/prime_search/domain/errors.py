from __future__ import annotations


class ConfigError(ValueError):
    # Raised for unusable search parameters; always before a run starts.
    pass


class SearchError(RuntimeError):
    # Raised when a run is misused or a worker fails; no partial outcome is produced.
    pass
