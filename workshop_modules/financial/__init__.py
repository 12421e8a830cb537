"""
Financial Module (``workshop_modules.financial``).

Responsibility
--------------
Manual transactions, the expense ledger and the monthly financial rollup
that also counts finalized service orders.
"""

from workshop_modules.financial.models import (
    Expense,
    ExpenseStatus,
    FinancialDashboard,
    Transaction,
    TransactionType,
)
from workshop_modules.financial.selector import FinancialSelector
from workshop_modules.financial.service import FinancialService

__all__ = [
    "Expense",
    "ExpenseStatus",
    "FinancialDashboard",
    "FinancialSelector",
    "FinancialService",
    "Transaction",
    "TransactionType",
]
