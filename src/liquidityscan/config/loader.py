"""Config loader: reads YAML, applies LIQSCAN_* env var overrides."""

from __future__ import annotations

import os
from pathlib import Path

import yaml

from liquidityscan.config.schema import AppConfig

# env var -> (section, key); section None means top level
_ENV_OVERRIDES: dict[str, tuple[str | None, str]] = {
    "LIQSCAN_ENVIRONMENT": (None, "environment"),
    "LIQSCAN_DATABASE_URL": ("database", "url"),
    "LIQSCAN_LOG_LEVEL": ("logging", "level"),
    "LIQSCAN_LOG_FORMAT": ("logging", "format"),
    "LIQSCAN_WEBHOOK_SECRET": ("signals", "webhook_secret"),
    "LIQSCAN_SIGNAL_STORE": ("signals", "store"),
}


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from a YAML file, then apply env var overrides.

    If *path* is None or the file doesn't exist, returns defaults.

    Environment variable overrides:
        LIQSCAN_ENVIRONMENT     -> environment
        LIQSCAN_DATABASE_URL    -> database.url
        LIQSCAN_LOG_LEVEL       -> logging.level
        LIQSCAN_LOG_FORMAT      -> logging.format
        LIQSCAN_WEBHOOK_SECRET  -> signals.webhook_secret
        LIQSCAN_SIGNAL_STORE    -> signals.store
    """
    data: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p) as f:
                data = yaml.safe_load(f) or {}

    for env_name, (section, key) in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if not value:
            continue
        if section is None:
            data[key] = value
        else:
            data.setdefault(section, {})[key] = value

    return AppConfig.model_validate(data)
