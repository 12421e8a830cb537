"""
Stock Domain Models (``workshop_modules.stock.models``).

Responsibility
--------------
Frozen value objects for the parts store: stock items and the append-only
purchase history used to replenish them.

Architecture
------------
Layer: **Modules** -- pure domain data structures.  These carry no session
and no I/O; ``StockLedger`` returns them to callers.

Invariants
----------
- ``StockItem.quantity`` is never negative.
- ``PurchaseHistoryEntry.quantity`` is positive.
- Money fields are ``Decimal``.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID


class StockStatus(str, Enum):
    """Replenishment urgency of a stock item relative to its minimum."""
    OK = "ok"
    LOW = "low"
    CRITICAL = "critical"


@dataclass(frozen=True)
class StockItem:
    """A part kept on the shelf and consumed by service orders."""
    id: UUID
    name: str
    code: str
    category: str
    quantity: int
    min_quantity: int
    unit_price: Decimal
    supplier: str | None = None
    version: int = 1

    def __post_init__(self):
        if self.quantity < 0:
            raise ValueError("quantity cannot be negative")
        if self.min_quantity < 0:
            raise ValueError("min_quantity cannot be negative")


@dataclass(frozen=True)
class PurchaseHistoryEntry:
    """One replenishment of a stock item.  Never mutated once recorded."""
    id: UUID
    stock_item_id: UUID
    quantity: int
    unit_price: Decimal
    total_amount: Decimal
    purchase_date: date
    supplier: str | None = None

    def __post_init__(self):
        if self.quantity <= 0:
            raise ValueError("purchase quantity must be positive")
