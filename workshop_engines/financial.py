"""
workshop_engines.financial -- Monthly financial rollup.

Responsibility:
    Aggregate manual transactions, finalized service orders and the expense
    ledger into the figures shown on the financial dashboard:

        revenue  = revenue transactions in month + finalized orders in month
        expenses = |expense transactions in month| + |expense entries in month|
        profit   = revenue - expenses
        margin   = profit / revenue * 100   (0 when revenue is 0)

    A finalized order referenced by a revenue transaction
    (``service_order_id``) is left out of the order sum, so a sale recorded
    both ways is counted once.  Untagged transactions always count.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The financial selector
    loads rows and passes them here.

Invariants enforced:
    - Decimal arithmetic throughout; no rounding inside the rollup.
    - Records with a missing date never fall inside a month.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from workshop_engines.tracer import traced_engine
from workshop_kernel.db.types import to_decimal

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")

REVENUE = "revenue"
EXPENSE = "expense"
FINALIZED = "finalized"

PAID = "paid"
PENDING = "pending"
OVERDUE = "overdue"


@dataclass(frozen=True)
class MonthlySummary:
    year: int
    month: int
    revenue_from_transactions: Decimal
    revenue_from_orders: Decimal
    expenses_from_transactions: Decimal
    expenses_from_ledger: Decimal

    @property
    def revenue(self) -> Decimal:
        return self.revenue_from_transactions + self.revenue_from_orders

    @property
    def expenses(self) -> Decimal:
        return self.expenses_from_transactions + self.expenses_from_ledger

    @property
    def profit(self) -> Decimal:
        return self.revenue - self.expenses

    @property
    def margin(self) -> Decimal:
        if self.revenue == _ZERO:
            return _ZERO
        return self.profit / self.revenue * _HUNDRED


@dataclass(frozen=True)
class ExpenseStatusTotals:
    paid: Decimal = _ZERO
    pending: Decimal = _ZERO
    overdue: Decimal = _ZERO

    @property
    def total(self) -> Decimal:
        return self.paid + self.pending + self.overdue


@dataclass(frozen=True)
class OrderCounts:
    open_orders: int
    finalized_in_month: int


def _read(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _enum_value(value: Any) -> str:
    return str(getattr(value, "value", value) or "")


def _as_date(value: Any) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def in_month(value: Any, year: int, month: int) -> bool:
    d = _as_date(value)
    return d is not None and d.year == year and d.month == month


def _finalized_in_month(order: Any, year: int, month: int) -> bool:
    return (
        _enum_value(_read(order, "status")) == FINALIZED
        and in_month(_read(order, "order_date"), year, month)
    )


@traced_engine("financial", "1.0", fingerprint_fields=("year", "month"))
def monthly_summary(
    *,
    year: int,
    month: int,
    transactions: Iterable[Any] = (),
    orders: Iterable[Any] = (),
    expenses: Iterable[Any] = (),
) -> MonthlySummary:
    """Revenue, expenses, profit and margin for one calendar month."""
    revenue_tx = _ZERO
    expense_tx = _ZERO
    recorded_orders: set[str] = set()

    for tx in transactions:
        kind = _enum_value(_read(tx, "type"))
        if kind == REVENUE:
            order_id = _read(tx, "service_order_id")
            if order_id is not None:
                recorded_orders.add(str(order_id))
        if not in_month(_read(tx, "transaction_date"), year, month):
            continue
        if kind == REVENUE:
            revenue_tx += to_decimal(_read(tx, "value"))
        elif kind == EXPENSE:
            expense_tx += abs(to_decimal(_read(tx, "value")))

    revenue_orders = sum(
        (
            to_decimal(_read(order, "value"))
            for order in orders
            if _finalized_in_month(order, year, month)
            and str(_read(order, "id")) not in recorded_orders
        ),
        _ZERO,
    )

    ledger = sum(
        (
            abs(to_decimal(_read(expense, "amount")))
            for expense in expenses
            if in_month(_read(expense, "expense_date"), year, month)
        ),
        _ZERO,
    )

    return MonthlySummary(
        year=year,
        month=month,
        revenue_from_transactions=revenue_tx,
        revenue_from_orders=revenue_orders,
        expenses_from_transactions=expense_tx,
        expenses_from_ledger=ledger,
    )


def expense_status_for(due_date: Any, today: date) -> str:
    """Status a new, unpaid expense starts in."""
    d = _as_date(due_date)
    if d is not None and d < today:
        return OVERDUE
    return PENDING


def expense_status_totals(expenses: Iterable[Any]) -> ExpenseStatusTotals:
    totals = {PAID: _ZERO, PENDING: _ZERO, OVERDUE: _ZERO}
    for expense in expenses:
        status = _enum_value(_read(expense, "status"))
        if status in totals:
            totals[status] += abs(to_decimal(_read(expense, "amount")))
    return ExpenseStatusTotals(**totals)


def revenue_growth(current: Any, previous: Any) -> Decimal:
    """
    Percentage change from ``previous`` to ``current``.

    With no previous revenue the growth is 100 when there is current revenue
    and 0 otherwise.
    """
    cur = to_decimal(current)
    prev = to_decimal(previous)
    if prev == _ZERO:
        return _HUNDRED if cur > _ZERO else _ZERO
    return (cur - prev) / abs(prev) * _HUNDRED


def previous_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def order_counts(orders: Iterable[Any], year: int, month: int) -> OrderCounts:
    open_orders = 0
    finalized = 0
    for order in orders:
        if _enum_value(_read(order, "status")) == FINALIZED:
            if in_month(_read(order, "order_date"), year, month):
                finalized += 1
        else:
            open_orders += 1
    return OrderCounts(open_orders=open_orders, finalized_in_month=finalized)


def recent_finalized(orders: Iterable[Any], limit: int = 5) -> list[Any]:
    """Most recent finalized orders, newest first."""
    finalized = [o for o in orders if _enum_value(_read(o, "status")) == FINALIZED]
    finalized.sort(key=lambda o: _as_date(_read(o, "order_date")) or date.min, reverse=True)
    return finalized[:limit]
