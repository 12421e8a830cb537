"""
Module: workshop_modules.financial.selector
Responsibility: Read side of the financial dashboard.  Loads transactions,
    expenses and service orders for a tenant and hands them to the pure
    rollup in ``workshop_engines.financial``.

Invariants enforced:
    - Read-only: never adds, flushes or commits.
    - The dashboard is only returned to callers who may view the financial
      dashboard card.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import select

from workshop_engines.financial import (
    ExpenseStatusTotals,
    MonthlySummary,
    expense_status_totals,
    monthly_summary,
    order_counts,
    previous_month,
    recent_finalized,
    revenue_growth,
)
from workshop_kernel.domain.context import FINANCIAL, OperationContext
from workshop_kernel.exceptions import PermissionDeniedError
from workshop_kernel.logging_config import get_logger
from workshop_kernel.selectors.base import BaseSelector
from workshop_modules.financial.models import FinancialDashboard
from workshop_modules.financial.orm import ExpenseModel, TransactionModel
from workshop_modules.orders.orm import ServiceOrderModel

logger = get_logger("modules.financial.selector")

DASHBOARD_MODULE = "dashboard:financial"


def _month_bounds(year: int, month: int) -> tuple[date, date]:
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


class FinancialSelector(BaseSelector[TransactionModel]):
    """Monthly revenue, expenses, profit and margin for a tenant."""

    def _transactions(self, tenant_id: UUID) -> list[TransactionModel]:
        return list(
            self.session.execute(
                select(TransactionModel).where(TransactionModel.tenant_id == tenant_id)
            ).scalars()
        )

    def _expenses(self, tenant_id: UUID, year: int | None = None, month: int | None = None) -> list[ExpenseModel]:
        stmt = select(ExpenseModel).where(ExpenseModel.tenant_id == tenant_id)
        if year is not None and month is not None:
            start, end = _month_bounds(year, month)
            stmt = stmt.where(ExpenseModel.expense_date >= start, ExpenseModel.expense_date < end)
        return list(self.session.execute(stmt).scalars())

    def _orders(self, tenant_id: UUID) -> list[ServiceOrderModel]:
        return list(
            self.session.execute(
                select(ServiceOrderModel).where(ServiceOrderModel.tenant_id == tenant_id)
            ).scalars()
        )

    def monthly_summary(self, tenant_id: UUID, year: int, month: int) -> MonthlySummary:
        """
        Rollup for one month.

        All transactions are passed (not only the month's) so that a revenue
        transaction recorded in another month still suppresses the order it
        references.
        """
        start, end = _month_bounds(year, month)
        orders = [
            o for o in self._orders(tenant_id)
            if o.order_date is not None and start <= o.order_date < end
        ]
        return monthly_summary(
            year=year,
            month=month,
            transactions=self._transactions(tenant_id),
            orders=orders,
            expenses=self._expenses(tenant_id, year, month),
        )

    def expense_statuses(self, tenant_id: UUID) -> ExpenseStatusTotals:
        return expense_status_totals(self._expenses(tenant_id))

    def dashboard(self, context: OperationContext, year: int, month: int) -> FinancialDashboard:
        if not context.can_view_dashboard_card(FINANCIAL):
            raise PermissionDeniedError(context.actor_id, DASHBOARD_MODULE)

        tenant_id = context.tenant_id
        summary = self.monthly_summary(tenant_id, year, month)
        prev_year, prev_month = previous_month(year, month)
        previous = self.monthly_summary(tenant_id, prev_year, prev_month)
        orders = self._orders(tenant_id)

        logger.debug(
            "financial_dashboard_built",
            extra={
                "year": year,
                "month": month,
                "revenue": str(summary.revenue),
                "expenses": str(summary.expenses),
            },
        )
        return FinancialDashboard(
            summary=summary,
            previous_revenue=previous.revenue,
            growth=revenue_growth(summary.revenue, previous.revenue),
            order_counts=order_counts(orders, year, month),
            expense_statuses=self.expense_statuses(tenant_id),
            recent_finalized_order_ids=tuple(o.id for o in recent_finalized(orders)),
        )
