"""
Module: workshop_modules.stock.orm
Responsibility: SQLAlchemy ORM persistence models for the stock module.
    Maps the frozen DTOs of stock.models to the stock_items and
    stock_purchases tables.

Architecture position: Modules > Stock > ORM.  Inherits from TrackedBase
    (workshop_kernel.db.base).

Invariants enforced:
    - stock_items.quantity >= 0 (CHECK constraint backs the ledger's own check).
    - stock_items.version is a SQLAlchemy version_id_col: an UPDATE that finds
      a different version raises StaleDataError, which the ledger reports as
      OptimisticLockError.
    - Purchase rows are append-only; nothing updates or deletes them.

Failure modes:
    - IntegrityError on duplicate stock item code within a tenant.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from workshop_kernel.db.base import TrackedBase


class StockItemModel(TrackedBase):
    """
    ORM model for a stock item.

    Maps to: workshop_modules.stock.models.StockItem.
    """

    __tablename__ = "stock_items"

    __table_args__ = (
        UniqueConstraint("tenant_id", "code", name="uq_stock_item_code"),
        CheckConstraint("quantity >= 0", name="ck_stock_item_quantity_non_negative"),
        Index("idx_stock_item_tenant", "tenant_id"),
    )

    tenant_id: Mapped[UUID] = mapped_column()
    name: Mapped[str] = mapped_column(String(200))
    code: Mapped[str] = mapped_column(String(50))
    category: Mapped[str] = mapped_column(String(100), default="")
    supplier: Mapped[str | None] = mapped_column(String(200), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, default=0)
    min_quantity: Mapped[int] = mapped_column(Integer, default=0)
    unit_price: Mapped[Decimal] = mapped_column()
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def to_dto(self):
        from workshop_modules.stock.models import StockItem
        return StockItem(
            id=self.id,
            name=self.name,
            code=self.code,
            category=self.category,
            quantity=self.quantity,
            min_quantity=self.min_quantity,
            unit_price=self.unit_price,
            supplier=self.supplier,
            version=self.version,
        )

    def __repr__(self) -> str:
        return f"<StockItemModel {self.code}: {self.quantity} on hand>"


class PurchaseHistoryModel(TrackedBase):
    """
    ORM model for a replenishment purchase.

    Maps to: workshop_modules.stock.models.PurchaseHistoryEntry.
    """

    __tablename__ = "stock_purchases"

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_purchase_quantity_positive"),
        Index("idx_stock_purchase_item", "stock_item_id"),
        Index("idx_stock_purchase_date", "purchase_date"),
    )

    tenant_id: Mapped[UUID] = mapped_column()
    stock_item_id: Mapped[UUID] = mapped_column(ForeignKey("stock_items.id"))
    quantity: Mapped[int] = mapped_column(Integer)
    unit_price: Mapped[Decimal] = mapped_column()
    total_amount: Mapped[Decimal] = mapped_column()
    supplier: Mapped[str | None] = mapped_column(String(200), nullable=True)
    purchase_date: Mapped[date] = mapped_column(Date)

    def to_dto(self):
        from workshop_modules.stock.models import PurchaseHistoryEntry
        return PurchaseHistoryEntry(
            id=self.id,
            stock_item_id=self.stock_item_id,
            quantity=self.quantity,
            unit_price=self.unit_price,
            total_amount=self.total_amount,
            purchase_date=self.purchase_date,
            supplier=self.supplier,
        )

    def __repr__(self) -> str:
        return f"<PurchaseHistoryModel {self.stock_item_id}: +{self.quantity}>"
