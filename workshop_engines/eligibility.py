"""
workshop_engines.eligibility -- Fiscal invoice eligibility gate.

Responsibility:
    Decide whether a service order may be handed to the external invoice
    emitter.  An order qualifies only when it is finalized and nothing has
    been emitted for it yet.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The invoicing service loads
    the order and its invoices and asks this module for a verdict.

Invariants enforced:
    - ``not_finalized`` is checked before ``already_invoiced``; the item list
      never influences the decision.
    - An order counts as invoiced when any invoice row references it or when
      the order already carries a product or service invoice number.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from workshop_engines.tracer import traced_engine

FINALIZED = "finalized"

REASON_NOT_FINALIZED = "not_finalized"
REASON_ALREADY_INVOICED = "already_invoiced"


@dataclass(frozen=True)
class EligibilityResult:
    eligible: bool
    reason: str | None = None

    def __post_init__(self) -> None:
        if self.eligible and self.reason is not None:
            raise ValueError("An eligible result carries no reason")
        if not self.eligible and self.reason is None:
            raise ValueError("An ineligible result needs a reason")


def _read(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _status_value(status: Any) -> str:
    return str(getattr(status, "value", status) or "")


def has_invoice_linkage(order: Any) -> bool:
    """True when an invoice number was already written onto the order."""
    return bool(
        _read(order, "product_invoice_number")
        or _read(order, "service_invoice_number")
    )


@traced_engine("eligibility", "1.0")
def can_emit(order: Any, existing_invoices: Iterable[Any] = ()) -> EligibilityResult:
    """
    Eligibility of ``order`` for invoice emission.

    ``existing_invoices`` may contain invoices for other orders; only those
    whose ``service_order_id`` matches ``order.id`` count.
    """
    if _status_value(_read(order, "status")) != FINALIZED:
        return EligibilityResult(False, REASON_NOT_FINALIZED)

    order_id = str(_read(order, "id"))
    for invoice in existing_invoices:
        if str(_read(invoice, "service_order_id")) == order_id:
            return EligibilityResult(False, REASON_ALREADY_INVOICED)

    if has_invoice_linkage(order):
        return EligibilityResult(False, REASON_ALREADY_INVOICED)

    return EligibilityResult(True)
