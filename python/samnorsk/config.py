"""Configuration loader for samnorsk.

Loads defaults from config.json at project root, with hardcoded fallbacks.
"""

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Hardcoded fallback defaults
FALLBACK_DEFAULTS = {
    "cutoff": 5,
    "relative_threshold": 0.3,
    "batch_size": 1000,
    "workers": 0,
    "min_article_length": 100,
    "translation_group_size": 100,
    "translation_chunk_size": 10000,
    "cache_dir": "sources",
    "apertium": "apertium",
}

_config: dict[str, Any] | None = None


def _find_config() -> Path | None:
    """Find config.json by walking up from current file."""
    paths = [
        Path(__file__).parent.parent.parent / "config.json",  # python/samnorsk -> root
        Path.cwd() / "config.json",
    ]
    for path in paths:
        if path.exists():
            return path
    return None


def load() -> dict[str, Any]:
    """Load configuration from config.json or use fallbacks."""
    global _config
    if _config is not None:
        return _config

    config_path = _find_config()
    if config_path:
        try:
            with open(config_path, encoding="utf-8") as f:
                _config = json.load(f)
                return _config
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable config %s: %s", config_path, e)

    # Fallback
    _config = {"defaults": dict(FALLBACK_DEFAULTS)}
    return _config


def reset() -> None:
    """Forget the cached configuration so the next load() re-reads it."""
    global _config
    _config = None


def get_default(key: str, fallback: Any = None) -> Any:
    """Get a default value from config."""
    cfg = load()
    return cfg.get("defaults", {}).get(key, fallback)


# Convenience accessors
def default_cutoff() -> int:
    return int(get_default("cutoff", FALLBACK_DEFAULTS["cutoff"]))


def default_relative_threshold() -> float:
    return float(get_default("relative_threshold", FALLBACK_DEFAULTS["relative_threshold"]))


def default_batch_size() -> int:
    return int(get_default("batch_size", FALLBACK_DEFAULTS["batch_size"]))


def default_workers() -> int:
    return int(get_default("workers", FALLBACK_DEFAULTS["workers"]))


def default_cache_dir() -> str:
    return get_default("cache_dir", FALLBACK_DEFAULTS["cache_dir"])
