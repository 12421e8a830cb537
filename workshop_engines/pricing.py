"""
workshop_engines.pricing -- Service order value calculation.

Responsibility:
    Turn a labor cost plus a list of (part, quantity, unit price) lines into
    the order total.  This is the only place the order value formula lives:

        value = sum(quantity * unit_price) + labor_cost

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumed by the order service on create and on every item/labor change.

Invariants enforced:
    - Purity: identical inputs produce identical outputs.
    - Defensive inputs: missing or negative amounts are clamped to zero
      instead of failing (the back office sends ``Number(x || 0)`` values).
    - No intermediate rounding.  ``PricingResult.rounded_total`` applies
      ``round_money`` once, and that is the figure the order persists.

Failure modes:
    - None.  Garbage input degrades to zero contributions.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from workshop_engines.tracer import traced_engine
from workshop_kernel.db.types import round_money, to_decimal
from workshop_kernel.logging_config import get_logger

logger = get_logger("engines.pricing")

_ZERO = Decimal("0")


def _read(line: Any, name: str) -> Any:
    if isinstance(line, Mapping):
        return line.get(name)
    return getattr(line, name, None)


def _non_negative(value: Any) -> Decimal:
    amount = to_decimal(value)
    return amount if amount > _ZERO else _ZERO


def line_total(quantity: Any, unit_price: Any) -> Decimal:
    """``quantity * unit_price`` with both factors clamped at zero."""
    return _non_negative(quantity) * _non_negative(unit_price)


@dataclass(frozen=True)
class PricingResult:
    """
    Breakdown of an order value.

    ``total`` is exact (unrounded); ``rounded_total`` is the persisted value.
    """

    items_total: Decimal
    labor_cost: Decimal
    total: Decimal
    line_count: int

    @property
    def rounded_total(self) -> Decimal:
        return round_money(self.total)


class PricingCalculator:
    """
    Stateless calculator for service order values.

    Lines may be any object (or mapping) exposing ``quantity`` and
    ``unit_price``.
    """

    @traced_engine("pricing", "1.0", fingerprint_fields=("labor_cost",))
    def price(
        self,
        *,
        labor_cost: Any,
        items: Iterable[Any],
    ) -> PricingResult:
        items_total = _ZERO
        count = 0
        for line in items:
            items_total += line_total(_read(line, "quantity"), _read(line, "unit_price"))
            count += 1

        labor = _non_negative(labor_cost)
        return PricingResult(
            items_total=items_total,
            labor_cost=labor,
            total=items_total + labor,
            line_count=count,
        )


_calculator = PricingCalculator()


def compute_total(labor_cost: Any, items: Iterable[Any]) -> Decimal:
    """Exact order value: sum of line totals plus labor."""
    return _calculator.price(labor_cost=labor_cost, items=items).total
