"""
Module: workshop_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the import surface for workshop_modules.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import workshop_kernel (types, exceptions, logging) and sibling
    engine modules.  MUST NOT import workshop_modules.

Invariants enforced:
    - Purity: engines never read the clock.  Dates such as "today" are
      passed in by the caller.
    - Decimal-only arithmetic for money.
    - Inputs are duck-typed: any object or mapping with the expected
      attribute names works, so ORM rows, DTOs and plain dicts are accepted.

Usage:
    from workshop_engines import compute_total, diff_items, ItemSnapshot
    from workshop_engines import can_emit, build_invoice_breakdown
    from workshop_engines import monthly_summary
"""

from workshop_kernel.logging_config import get_logger

logger = get_logger("engines")

from workshop_engines.eligibility import (
    REASON_ALREADY_INVOICED,
    REASON_NOT_FINALIZED,
    EligibilityResult,
    can_emit,
    has_invoice_linkage,
)
from workshop_engines.financial import (
    ExpenseStatusTotals,
    MonthlySummary,
    OrderCounts,
    expense_status_for,
    expense_status_totals,
    monthly_summary,
    order_counts,
    previous_month,
    recent_finalized,
    revenue_growth,
)
from workshop_engines.invoice_breakdown import (
    PRODUCT_DOCUMENT,
    SERVICE_DOCUMENT,
    InvoiceBreakdown,
    InvoiceLine,
    build_invoice_breakdown,
)
from workshop_engines.pricing import (
    PricingCalculator,
    PricingResult,
    compute_total,
    line_total,
)
from workshop_engines.stock_delta import (
    ItemSnapshot,
    LineChange,
    StockMovement,
    diff_items,
)
from workshop_engines.tracer import traced_engine

__all__ = [
    "EligibilityResult",
    "ExpenseStatusTotals",
    "InvoiceBreakdown",
    "InvoiceLine",
    "ItemSnapshot",
    "LineChange",
    "MonthlySummary",
    "OrderCounts",
    "PRODUCT_DOCUMENT",
    "PricingCalculator",
    "PricingResult",
    "REASON_ALREADY_INVOICED",
    "REASON_NOT_FINALIZED",
    "SERVICE_DOCUMENT",
    "StockMovement",
    "build_invoice_breakdown",
    "can_emit",
    "compute_total",
    "diff_items",
    "expense_status_for",
    "expense_status_totals",
    "has_invoice_linkage",
    "line_total",
    "monthly_summary",
    "order_counts",
    "previous_month",
    "recent_finalized",
    "revenue_growth",
    "traced_engine",
]
