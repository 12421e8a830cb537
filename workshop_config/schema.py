"""
WorkshopConfig schema.

Frozen dataclasses that a YAML configuration file is parsed into.  Every
section has defaults, so an empty file yields a usable configuration; the
loader only overrides what the file sets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class DatabaseConfig:
    url: str = "sqlite:///workshop.db"
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10

    def __post_init__(self):
        if not self.url:
            raise ValueError("database.url is required")
        if self.pool_size < 1:
            raise ValueError("database.pool_size must be at least 1")


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"

    def __post_init__(self):
        if self.level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"logging.level must be one of {VALID_LOG_LEVELS}, got '{self.level}'")


@dataclass(frozen=True)
class QuotaConfig:
    """Order quota applied to tenants without their own quota row (0 = unlimited)."""
    default_total: int = 0

    def __post_init__(self):
        if self.default_total < 0:
            raise ValueError("quota.default_total cannot be negative")


@dataclass(frozen=True)
class PricingConfig:
    decimal_places: int = 2

    def __post_init__(self):
        if not 0 < self.decimal_places <= 9:
            raise ValueError("pricing.decimal_places must be between 1 and 9")


@dataclass(frozen=True)
class InvoicingConfig:
    labor_line_threshold: Decimal = Decimal("0.01")


@dataclass(frozen=True)
class StockConfig:
    """Percent-of-minimum thresholds for the stock status badge."""
    critical_pct: Decimal = Decimal("50")
    low_pct: Decimal = Decimal("100")

    def __post_init__(self):
        if self.critical_pct > self.low_pct:
            raise ValueError("stock.critical_pct cannot exceed stock.low_pct")


@dataclass(frozen=True)
class WorkshopConfig:
    """The runtime configuration artifact returned by ``get_active_config``."""

    config_id: str = "default"
    version: int = 1
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    quota: QuotaConfig = field(default_factory=QuotaConfig)
    pricing: PricingConfig = field(default_factory=PricingConfig)
    invoicing: InvoicingConfig = field(default_factory=InvoicingConfig)
    stock: StockConfig = field(default_factory=StockConfig)
    checksum: str = ""
