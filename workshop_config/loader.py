"""
Configuration Loader (``workshop_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the frozen dataclasses
of ``workshop_config.schema``.  Runtime code does not call this directly;
the single entrypoint is ``workshop_config.get_active_config()``.

Invariants enforced
-------------------
* Unknown top-level sections raise ``ValueError`` instead of being ignored.
* Money-like values are parsed as ``Decimal`` through ``str``.
* ``compute_checksum`` is deterministic for identical input.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid values  -> ``ValueError`` from the schema dataclasses.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from workshop_config.schema import (
    DatabaseConfig,
    InvoicingConfig,
    LoggingConfig,
    PricingConfig,
    QuotaConfig,
    StockConfig,
    WorkshopConfig,
)

KNOWN_SECTIONS = {"config_id", "version", "database", "logging", "quota", "pricing", "invoicing", "stock"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dict (empty file -> {})."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _decimal(value: Any) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    return section


def parse_database(data: dict[str, Any]) -> DatabaseConfig:
    return DatabaseConfig(
        url=data.get("url", DatabaseConfig.url),
        echo=bool(data.get("echo", False)),
        pool_size=int(data.get("pool_size", DatabaseConfig.pool_size)),
        max_overflow=int(data.get("max_overflow", DatabaseConfig.max_overflow)),
    )


def parse_stock(data: dict[str, Any]) -> StockConfig:
    defaults = StockConfig()
    return StockConfig(
        critical_pct=_decimal(data.get("critical_pct", defaults.critical_pct)),
        low_pct=_decimal(data.get("low_pct", defaults.low_pct)),
    )


def parse_config(data: dict[str, Any]) -> WorkshopConfig:
    """
    Parse a configuration dict into a ``WorkshopConfig``.

    The checksum is computed over the raw dict, before defaults are applied.
    """
    unknown = set(data) - KNOWN_SECTIONS
    if unknown:
        raise ValueError(f"Unknown config sections: {sorted(unknown)}")

    invoicing = _section(data, "invoicing")
    return WorkshopConfig(
        config_id=str(data.get("config_id", "default")),
        version=int(data.get("version", 1)),
        database=parse_database(_section(data, "database")),
        logging=LoggingConfig(level=str(_section(data, "logging").get("level", "INFO"))),
        quota=QuotaConfig(default_total=int(_section(data, "quota").get("default_total", 0))),
        pricing=PricingConfig(decimal_places=int(_section(data, "pricing").get("decimal_places", 2))),
        invoicing=InvoicingConfig(
            labor_line_threshold=_decimal(invoicing.get("labor_line_threshold", "0.01")),
        ),
        stock=parse_stock(_section(data, "stock")),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
