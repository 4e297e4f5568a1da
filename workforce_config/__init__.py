"""
workforce_config -- single entrypoint for engine configuration.

Responsibility:
    ``get_active_config()`` returns the validated ``EngineConfig`` the
    engine runs with.  Source precedence:

    1. the ``path`` argument;
    2. the ``WORKFORCE_CONFIG`` environment variable;
    3. the packaged ``defaults.yaml``.

    ``WORKFORCE_DATABASE_URL``, when set, replaces ``database.url``.

Architecture position:
    Sits above ``workforce_kernel`` and ``workforce_modules`` (it reuses
    the module config classes) and below ``workforce_services``.  The
    kernel never imports from here.

Audit relevance:
    Every call logs ``workforce_config_trace`` with the source file and the
    checksum of the parsed YAML.
"""

from __future__ import annotations

import os
from dataclasses import replace
from pathlib import Path

from workforce_config.loader import load_config, load_yaml_file, parse_engine_config
from workforce_config.schema import BatchConfig, DatabaseConfig, EngineConfig, LoggingConfig
from workforce_kernel.logging_config import get_logger

logger = get_logger("config")

CONFIG_ENV = "WORKFORCE_CONFIG"
DATABASE_URL_ENV = "WORKFORCE_DATABASE_URL"
DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_config(path: Path | str | None = None) -> EngineConfig:
    """The engine's configuration, with environment overrides applied."""
    source = Path(path or os.environ.get(CONFIG_ENV) or DEFAULT_CONFIG_PATH)
    config = load_config(source)

    database_url = os.environ.get(DATABASE_URL_ENV)
    if database_url:
        config = replace(config, database=replace(config.database, url=database_url))

    logger.info(
        "workforce_config_trace",
        extra={
            "source": str(source),
            "checksum": config.checksum,
            "database_url_overridden": bool(database_url),
            "max_workers": config.batch.max_workers,
        },
    )
    return config


__all__ = [
    "BatchConfig",
    "DatabaseConfig",
    "EngineConfig",
    "LoggingConfig",
    "get_active_config",
    "load_config",
    "load_yaml_file",
    "parse_engine_config",
]
