"""
workshop_config -- single public entrypoint for workshop configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration files
    or environment variables directly.

Architecture position:
    Configuration -- sits beside ``workshop_kernel`` and below
    ``workshop_modules``.  The kernel MUST NEVER import from
    ``workshop_config``; callers pass the values they need (database URL,
    default quota, rounding places) into kernel and module constructors.

Resolution order:
    1. ``path`` argument, if given.
    2. ``WORKSHOP_CONFIG`` environment variable, if set.
    3. ``workshop_config/sets/default.yaml``.
    ``DATABASE_URL``, when set, replaces ``database.url`` in all cases.

Failure modes:
    - ``FileNotFoundError`` -- the selected file does not exist.
    - ``ValueError`` -- unknown sections or invalid values.
    - ``yaml.YAMLError`` -- malformed YAML.

Audit relevance:
    Every successful call emits a ``WORKSHOP_CONFIG_TRACE`` log entry with the
    config id, version and checksum.
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path

from workshop_config.loader import compute_checksum, load_yaml_file, parse_config
from workshop_config.schema import (
    DatabaseConfig,
    InvoicingConfig,
    LoggingConfig,
    PricingConfig,
    QuotaConfig,
    StockConfig,
    WorkshopConfig,
)

_logger = logging.getLogger("workshop_kernel.config")

_DEFAULT_CONFIG_FILE = Path(__file__).parent / "sets" / "default.yaml"

CONFIG_ENV_VAR = "WORKSHOP_CONFIG"
DATABASE_URL_ENV_VAR = "DATABASE_URL"


def get_active_config(path: Path | str | None = None) -> WorkshopConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: Explicit YAML file.  Overrides ``WORKSHOP_CONFIG``.

    Returns:
        A frozen ``WorkshopConfig``.
    """
    source = Path(path or os.environ.get(CONFIG_ENV_VAR) or _DEFAULT_CONFIG_FILE)
    config = parse_config(load_yaml_file(source))

    database_url = os.environ.get(DATABASE_URL_ENV_VAR)
    if database_url:
        config = replace(config, database=replace(config.database, url=database_url))

    _logger.info(
        "WORKSHOP_CONFIG_TRACE",
        extra={
            "trace_type": "WORKSHOP_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "source": str(source),
            "database_url_overridden": bool(database_url),
        },
    )
    return config


__all__ = [
    "DatabaseConfig",
    "InvoicingConfig",
    "LoggingConfig",
    "PricingConfig",
    "QuotaConfig",
    "StockConfig",
    "WorkshopConfig",
    "compute_checksum",
    "get_active_config",
]
