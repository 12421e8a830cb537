"""
Module: workshop_modules.financial.orm
Responsibility: SQLAlchemy ORM persistence models for manual transactions and
    expense-ledger entries.

Architecture position: Modules > Financial > ORM.  Inherits from TrackedBase.
    ``service_order_id`` references a service order with NO foreign key.

Invariants enforced:
    - Money columns are Numeric(38,9).
    - expenses.amount > 0 (CHECK constraint).
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from workshop_kernel.db.base import TrackedBase


class TransactionModel(TrackedBase):
    """Maps to: workshop_modules.financial.models.Transaction."""

    __tablename__ = "financial_transactions"

    __table_args__ = (
        Index("idx_fin_tx_tenant_date", "tenant_id", "transaction_date"),
        Index("idx_fin_tx_order", "service_order_id"),
    )

    tenant_id: Mapped[UUID] = mapped_column()
    type: Mapped[str] = mapped_column(String(50))
    value: Mapped[Decimal] = mapped_column()
    description: Mapped[str] = mapped_column(String(4000), default="")
    transaction_date: Mapped[date] = mapped_column(Date)
    service_order_id: Mapped[UUID | None] = mapped_column(nullable=True)

    def to_dto(self):
        from workshop_modules.financial.models import Transaction, TransactionType
        return Transaction(
            id=self.id,
            type=TransactionType(self.type),
            value=self.value,
            description=self.description,
            transaction_date=self.transaction_date,
            service_order_id=self.service_order_id,
        )


class ExpenseModel(TrackedBase):
    """Maps to: workshop_modules.financial.models.Expense."""

    __tablename__ = "expenses"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_expense_amount_positive"),
        Index("idx_expense_tenant_date", "tenant_id", "expense_date"),
        Index("idx_expense_status", "status"),
    )

    tenant_id: Mapped[UUID] = mapped_column()
    description: Mapped[str] = mapped_column(String(4000))
    amount: Mapped[Decimal] = mapped_column()
    category: Mapped[str] = mapped_column(String(100))
    expense_date: Mapped[date] = mapped_column(Date)
    payment_method: Mapped[str] = mapped_column(String(100))
    status: Mapped[str] = mapped_column(String(50), default="pending")
    notes: Mapped[str | None] = mapped_column(String(4000), nullable=True)

    def to_dto(self):
        from workshop_modules.financial.models import Expense, ExpenseStatus
        return Expense(
            id=self.id,
            description=self.description,
            amount=self.amount,
            category=self.category,
            expense_date=self.expense_date,
            payment_method=self.payment_method,
            status=ExpenseStatus(self.status),
            notes=self.notes,
        )
