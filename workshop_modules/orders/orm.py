"""
Module: workshop_modules.orders.orm
Responsibility: SQLAlchemy ORM persistence models for service orders, their
    item lines and the per-tenant order quota row.

Architecture position: Modules > Orders > ORM.  Inherits from TrackedBase
    (workshop_kernel.db.base).

Invariants enforced:
    - service_orders.version and tenant_order_quotas.version are
      version_id_col columns: an UPDATE or DELETE based on a stale read
      raises StaleDataError instead of silently overwriting.
    - One line per (order, stock item), enforced by a unique constraint.
    - service_orders.number is unique per tenant and is display-only.
    - Money columns are Numeric(38,9); value is stored already rounded to cents.

Failure modes:
    - IntegrityError on a duplicate line or duplicate display number.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workshop_kernel.db.base import Base, TrackedBase


class ServiceOrderModel(TrackedBase):
    """
    ORM model for a service order.

    Maps to: workshop_modules.orders.models.ServiceOrder.
    """

    __tablename__ = "service_orders"

    __table_args__ = (
        UniqueConstraint("tenant_id", "number", name="uq_service_order_number"),
        CheckConstraint("labor_cost >= 0", name="ck_service_order_labor_non_negative"),
        Index("idx_service_order_tenant_status", "tenant_id", "status"),
        Index("idx_service_order_date", "order_date"),
    )

    tenant_id: Mapped[UUID] = mapped_column()
    number: Mapped[int] = mapped_column(Integer)
    client_id: Mapped[UUID] = mapped_column()
    vehicle_id: Mapped[UUID] = mapped_column()
    worker_id: Mapped[UUID | None] = mapped_column(nullable=True)
    service: Mapped[str] = mapped_column(String(4000))
    status: Mapped[str] = mapped_column(String(50), default="in_progress")
    priority: Mapped[str] = mapped_column(String(50), default="normal")
    labor_cost: Mapped[Decimal] = mapped_column()
    value: Mapped[Decimal] = mapped_column()
    order_date: Mapped[date] = mapped_column(Date)

    # Invoice linkage -- the only content still written after finalization
    product_invoice_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    service_invoice_number: Mapped[str | None] = mapped_column(String(100), nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    items: Mapped[list[OrderItemModel]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.position",
    )

    __mapper_args__ = {"version_id_col": version}

    def to_dto(self):
        from workshop_modules.orders.models import OrderStatus, Priority, ServiceOrder
        return ServiceOrder(
            id=self.id,
            tenant_id=self.tenant_id,
            number=self.number,
            client_id=self.client_id,
            vehicle_id=self.vehicle_id,
            service=self.service,
            status=OrderStatus(self.status),
            priority=Priority(self.priority),
            labor_cost=self.labor_cost,
            value=self.value,
            order_date=self.order_date,
            items=tuple(item.to_dto() for item in self.items),
            worker_id=self.worker_id,
            created_by_id=self.created_by_id,
            updated_by_id=self.updated_by_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
            product_invoice_number=self.product_invoice_number,
            service_invoice_number=self.service_invoice_number,
        )

    def __repr__(self) -> str:
        return f"<ServiceOrderModel #{self.number} {self.status}: {self.value}>"


class OrderItemModel(Base):
    """
    ORM model for one item line of a service order.

    Maps to: workshop_modules.orders.models.OrderItem.
    """

    __tablename__ = "service_order_items"

    __table_args__ = (
        UniqueConstraint("order_id", "stock_item_id", name="uq_service_order_item_stock"),
        CheckConstraint("quantity >= 1", name="ck_service_order_item_quantity"),
        Index("idx_service_order_item_stock", "stock_item_id"),
    )

    order_id: Mapped[UUID] = mapped_column(ForeignKey("service_orders.id", ondelete="CASCADE"))
    position: Mapped[int] = mapped_column(Integer, default=0)
    stock_item_id: Mapped[UUID] = mapped_column()
    quantity: Mapped[int] = mapped_column(Integer)
    unit_price: Mapped[Decimal] = mapped_column()
    kind: Mapped[str] = mapped_column(String(50), default="product")
    description: Mapped[str] = mapped_column(String(200), default="")

    order: Mapped[ServiceOrderModel] = relationship(back_populates="items")

    def to_dto(self):
        from workshop_modules.orders.models import ItemKind, OrderItem
        return OrderItem(
            stock_item_id=self.stock_item_id,
            quantity=self.quantity,
            unit_price=self.unit_price,
            kind=ItemKind(self.kind),
            description=self.description,
        )

    def __repr__(self) -> str:
        return f"<OrderItemModel {self.stock_item_id} x{self.quantity}>"


class TenantQuotaModel(TrackedBase):
    """
    Per-tenant order quota and display-number counter.

    ``total == 0`` means unlimited.  ``order_sequence`` only grows; it is
    bumped under a row lock each time an order is created.
    """

    __tablename__ = "tenant_order_quotas"

    __table_args__ = (
        UniqueConstraint("tenant_id", name="uq_tenant_order_quota"),
        CheckConstraint("total >= 0", name="ck_tenant_order_quota_total"),
    )

    tenant_id: Mapped[UUID] = mapped_column()
    total: Mapped[int] = mapped_column(Integer, default=0)
    order_sequence: Mapped[int] = mapped_column(Integer, default=0)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<TenantQuotaModel {self.tenant_id}: total={self.total} seq={self.order_sequence}>"
