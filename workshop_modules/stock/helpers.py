"""
Stock Pure Functions (``workshop_modules.stock.helpers``).

Responsibility
--------------
Stateless calculations behind the stock screen: replenishment status and
the two valuation figures (money invested in purchases, value currently on
the shelf).

Architecture
------------
Layer: **Modules** -- pure helper functions.  No session, no clock.

Invariants
----------
- Money is ``Decimal``; quantities are ``int``.
- ``total_invested`` only grows: consuming stock never reduces it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from workshop_kernel.db.types import to_decimal
from workshop_modules.stock.models import StockStatus

CRITICAL_PCT = Decimal("50")
LOW_PCT = Decimal("100")


def _read(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def stock_status(
    quantity: int,
    min_quantity: int,
    critical_pct: Decimal = CRITICAL_PCT,
    low_pct: Decimal = LOW_PCT,
) -> StockStatus:
    """
    Status of an item relative to its minimum.

    ``critical`` at or below half the minimum, ``low`` at or below the
    minimum, ``ok`` above it.  Items without a minimum are always ``ok``.
    """
    if min_quantity <= 0:
        return StockStatus.OK
    pct = Decimal(quantity) / Decimal(min_quantity) * 100
    if pct <= critical_pct:
        return StockStatus.CRITICAL
    if pct <= low_pct:
        return StockStatus.LOW
    return StockStatus.OK


def purchase_total(purchase: Any) -> Decimal:
    """Recorded ``total_amount`` or, when missing, ``quantity * unit_price``."""
    total = _read(purchase, "total_amount")
    if total is not None and total != "":
        return to_decimal(total)
    return to_decimal(_read(purchase, "quantity")) * to_decimal(_read(purchase, "unit_price"))


def total_invested(purchases: Iterable[Any]) -> Decimal:
    return sum((purchase_total(p) for p in purchases), Decimal("0"))


def current_stock_value(items: Iterable[Any]) -> Decimal:
    return sum(
        (to_decimal(_read(i, "quantity")) * to_decimal(_read(i, "unit_price")) for i in items),
        Decimal("0"),
    )


def items_needing_replenishment(items: Iterable[Any]) -> list[Any]:
    """Items whose status is ``low`` or ``critical``, most urgent first."""
    flagged = []
    for item in items:
        status = stock_status(int(_read(item, "quantity") or 0), int(_read(item, "min_quantity") or 0))
        if status is not StockStatus.OK:
            flagged.append((status is StockStatus.LOW, item))
    return [item for _, item in sorted(flagged, key=lambda pair: pair[0])]
