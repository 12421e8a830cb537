"""
Financial Module Service (``workshop_modules.financial.service``).

Responsibility
--------------
Records the inputs of the financial rollup: manual revenue/expense
transactions and expense-ledger entries.

Architecture
------------
Layer: **Modules** -- each public method owns its transaction boundary
(commit on success, rollback on failure).

Failure Modes
-------------
- ``PermissionDeniedError`` without ``financial`` (transactions) or
  ``expenses`` (expense ledger) edit rights.
- ``ValidationFailedError`` listing every missing or invalid field.
- ``ExpenseNotFoundError`` for an unknown expense or one of another tenant.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, TypeVar
from uuid import UUID

from sqlalchemy.orm import Session

from workshop_engines.financial import expense_status_for
from workshop_kernel.db.types import to_decimal
from workshop_kernel.domain.clock import Clock, SystemClock
from workshop_kernel.domain.context import EXPENSES, FINANCIAL, OperationContext
from workshop_kernel.exceptions import ExpenseNotFoundError, ValidationFailedError
from workshop_kernel.logging_config import LogContext, get_logger
from workshop_modules.financial.models import Expense, ExpenseStatus, Transaction, TransactionType
from workshop_modules.financial.orm import ExpenseModel, TransactionModel

logger = get_logger("modules.financial.service")

T = TypeVar("T")


class FinancialService:
    """Writes transactions and expenses for the financial dashboard."""

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()

    def _run(self, context: OperationContext, work: Callable[[], T]) -> T:
        with LogContext.bind(**context.log_fields()):
            try:
                result = work()
                self._session.commit()
                return result
            except Exception:
                self._session.rollback()
                raise

    def record_transaction(
        self,
        context: OperationContext,
        transaction_type: TransactionType,
        value: Any,
        description: str,
        transaction_date: date | None = None,
        service_order_id: UUID | None = None,
    ) -> Transaction:
        context.require_edit(FINANCIAL)
        amount = to_decimal(value)
        if amount == 0:
            raise ValidationFailedError(["value must be non-zero"])

        def work() -> Transaction:
            row = TransactionModel(
                tenant_id=context.tenant_id,
                type=TransactionType(transaction_type).value,
                value=amount,
                description=description or "",
                transaction_date=transaction_date or self._clock.today(),
                service_order_id=service_order_id,
                created_by_id=context.actor_id,
            )
            self._session.add(row)
            self._session.flush()
            logger.info(
                "transaction_recorded",
                extra={
                    "transaction_id": str(row.id),
                    "type": row.type,
                    "value": str(amount),
                    "service_order_id": str(service_order_id) if service_order_id else None,
                },
            )
            return row.to_dto()

        return self._run(context, work)

    def record_expense(
        self,
        context: OperationContext,
        description: str,
        amount: Any,
        category: str,
        payment_method: str,
        expense_date: date | None = None,
        status: ExpenseStatus | None = None,
        notes: str | None = None,
    ) -> Expense:
        """
        Record an expense-ledger entry.

        Without an explicit ``status`` the entry starts ``overdue`` when its
        date is already past and ``pending`` otherwise.
        """
        context.require_edit(EXPENSES)
        value = to_decimal(amount)
        errors = []
        if not (description or "").strip():
            errors.append("description is required")
        if value <= 0:
            errors.append("amount must be greater than zero")
        if not (category or "").strip():
            errors.append("category is required")
        if not (payment_method or "").strip():
            errors.append("payment_method is required")
        if errors:
            raise ValidationFailedError(errors)

        when = expense_date or self._clock.today()
        initial = ExpenseStatus(status) if status is not None else ExpenseStatus(
            expense_status_for(when, self._clock.today())
        )

        def work() -> Expense:
            row = ExpenseModel(
                tenant_id=context.tenant_id,
                description=description.strip(),
                amount=value,
                category=category.strip(),
                expense_date=when,
                payment_method=payment_method.strip(),
                status=initial.value,
                notes=notes,
                created_by_id=context.actor_id,
            )
            self._session.add(row)
            self._session.flush()
            logger.info(
                "expense_recorded",
                extra={"expense_id": str(row.id), "amount": str(value), "status": row.status},
            )
            return row.to_dto()

        return self._run(context, work)

    def set_expense_status(self, context: OperationContext, expense_id: UUID, status: ExpenseStatus) -> Expense:
        context.require_edit(EXPENSES)

        def work() -> Expense:
            row = self._session.get(ExpenseModel, expense_id)
            if row is None or row.tenant_id != context.tenant_id:
                raise ExpenseNotFoundError(expense_id)
            row.status = ExpenseStatus(status).value
            row.updated_by_id = context.actor_id
            self._session.flush()
            logger.info("expense_status_changed", extra={"expense_id": str(expense_id), "status": row.status})
            return row.to_dto()

        return self._run(context, work)
