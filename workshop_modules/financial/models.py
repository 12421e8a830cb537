"""
Financial Domain Models (``workshop_modules.financial.models``).

Responsibility
--------------
Frozen value objects for manual revenue/expense transactions, expense-ledger
entries and the dashboard figures built from them.

Architecture
------------
Layer: **Modules** -- pure domain data structures, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from workshop_engines.financial import ExpenseStatusTotals, MonthlySummary, OrderCounts


class TransactionType(str, Enum):
    REVENUE = "revenue"
    EXPENSE = "expense"


class ExpenseStatus(str, Enum):
    PAID = "paid"
    PENDING = "pending"
    OVERDUE = "overdue"


@dataclass(frozen=True)
class Transaction:
    """
    A manually recorded movement.

    ``service_order_id`` links a revenue transaction to the order it
    collects; that order's value is then not counted a second time.
    """
    id: UUID
    type: TransactionType
    value: Decimal
    description: str
    transaction_date: date
    service_order_id: UUID | None = None


@dataclass(frozen=True)
class Expense:
    id: UUID
    description: str
    amount: Decimal
    category: str
    expense_date: date
    payment_method: str
    status: ExpenseStatus
    notes: str | None = None

    def __post_init__(self):
        if self.amount <= 0:
            raise ValueError("expense amount must be positive")


@dataclass(frozen=True)
class FinancialDashboard:
    """Everything the financial screen shows for one month."""
    summary: MonthlySummary
    previous_revenue: Decimal
    growth: Decimal
    order_counts: OrderCounts
    expense_statuses: ExpenseStatusTotals
    recent_finalized_order_ids: tuple[UUID, ...] = ()
