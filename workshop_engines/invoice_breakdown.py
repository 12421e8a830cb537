"""
workshop_engines.invoice_breakdown -- Line items handed to the invoice emitter.

Responsibility:
    Split a finalized service order into the lines of its fiscal documents:

        product-kind lines  -> product document
        service-kind lines  -> service document
        labor > 0.01        -> service line "Labor - <service text>"
        nothing left        -> one service line carrying the whole value

    Lines with zero quantity or zero price are dropped.  The emitter receives
    the breakdown as-is; tax computation and document rendering happen there.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Failure modes:
    - ValidationFailedError when the breakdown would be empty and the order
      value is not positive.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from workshop_engines.pricing import compute_total
from workshop_engines.tracer import traced_engine
from workshop_kernel.db.types import round_money, to_decimal
from workshop_kernel.exceptions import ValidationFailedError

PRODUCT_DOCUMENT = "product_document"
SERVICE_DOCUMENT = "service_document"

LABOR_THRESHOLD = Decimal("0.01")
DEFAULT_SERVICE_TEXT = "Service provision"
DEFAULT_ITEM_TEXT = "Item without description"


@dataclass(frozen=True)
class InvoiceLine:
    number: int
    document: str
    description: str
    quantity: Decimal
    unit_price: Decimal
    unit: str = "UN"

    @property
    def total(self) -> Decimal:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class InvoiceBreakdown:
    """Lines per fiscal document plus the order value they came from."""

    order_id: Any
    product_lines: tuple[InvoiceLine, ...]
    service_lines: tuple[InvoiceLine, ...]
    order_value: Decimal

    @property
    def lines(self) -> tuple[InvoiceLine, ...]:
        return self.product_lines + self.service_lines

    @property
    def documents(self) -> tuple[str, ...]:
        """Fiscal documents this breakdown needs, product first."""
        docs = []
        if self.product_lines:
            docs.append(PRODUCT_DOCUMENT)
        if self.service_lines:
            docs.append(SERVICE_DOCUMENT)
        return tuple(docs)

    def total_for(self, document: str) -> Decimal:
        return sum((line.total for line in self.lines if line.document == document), Decimal("0"))


def _read(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _kind(item: Any) -> str:
    kind = _read(item, "kind")
    return str(getattr(kind, "value", kind) or "product")


@traced_engine("invoice_breakdown", "1.0")
def build_invoice_breakdown(
    order: Any,
    labor_threshold: Decimal = LABOR_THRESHOLD,
) -> InvoiceBreakdown:
    """Build the emitter's line breakdown for ``order``."""
    items = list(_read(order, "items") or ())
    service_text = (str(_read(order, "service") or "").strip()) or DEFAULT_SERVICE_TEXT

    product_lines: list[InvoiceLine] = []
    service_lines: list[InvoiceLine] = []
    number = 0

    for item in items:
        quantity = to_decimal(_read(item, "quantity"))
        unit_price = to_decimal(_read(item, "unit_price"))
        if quantity <= 0 or unit_price <= 0:
            continue
        number += 1
        description = (str(_read(item, "description") or "").strip()) or DEFAULT_ITEM_TEXT
        document = SERVICE_DOCUMENT if _kind(item) == "service" else PRODUCT_DOCUMENT
        line = InvoiceLine(number, document, description, quantity, unit_price)
        (service_lines if document == SERVICE_DOCUMENT else product_lines).append(line)

    labor = to_decimal(_read(order, "labor_cost"))
    if labor > labor_threshold:
        number += 1
        service_lines.append(
            InvoiceLine(
                number,
                SERVICE_DOCUMENT,
                f"Labor - {service_text}",
                Decimal("1"),
                round_money(labor),
            )
        )

    value = to_decimal(_read(order, "value"))
    if not value:
        value = round_money(compute_total(_read(order, "labor_cost"), items))

    if not product_lines and not service_lines:
        if value <= 0:
            raise ValidationFailedError(["The service order value must be greater than zero"])
        service_lines.append(
            InvoiceLine(1, SERVICE_DOCUMENT, service_text, Decimal("1"), value)
        )

    return InvoiceBreakdown(
        order_id=_read(order, "id"),
        product_lines=tuple(product_lines),
        service_lines=tuple(service_lines),
        order_value=value,
    )
