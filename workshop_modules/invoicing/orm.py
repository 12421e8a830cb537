"""
Module: workshop_modules.invoicing.orm
Responsibility: SQLAlchemy ORM persistence model for emitted fiscal documents.

Architecture position: Modules > Invoicing > ORM.  Inherits from TrackedBase.
    References the service order by id with NO foreign key, so the invoice
    record outlives a deleted order.

Invariants enforced:
    - One document of each type per service order (unique constraint).
    - amount is Numeric(38,9).
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import DateTime, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from workshop_kernel.db.base import TrackedBase


class InvoiceModel(TrackedBase):
    """
    ORM model for an emitted invoice.

    Maps to: workshop_modules.invoicing.models.Invoice.
    """

    __tablename__ = "invoices"

    __table_args__ = (
        UniqueConstraint("service_order_id", "type", name="uq_invoice_order_type"),
        Index("idx_invoice_tenant", "tenant_id"),
    )

    tenant_id: Mapped[UUID] = mapped_column()
    service_order_id: Mapped[UUID] = mapped_column()
    type: Mapped[str] = mapped_column(String(50))
    status: Mapped[str] = mapped_column(String(50), default="issued")
    number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    amount: Mapped[Decimal] = mapped_column()
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    def to_dto(self):
        from workshop_modules.invoicing.models import Invoice, InvoiceStatus, InvoiceType
        return Invoice(
            id=self.id,
            service_order_id=self.service_order_id,
            type=InvoiceType(self.type),
            status=InvoiceStatus(self.status),
            amount=self.amount,
            number=self.number,
            issued_at=self.issued_at,
        )

    def __repr__(self) -> str:
        return f"<InvoiceModel {self.type} {self.number} for {self.service_order_id}>"
