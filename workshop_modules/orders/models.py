"""
Service Order Domain Models (``workshop_modules.orders.models``).

Responsibility
--------------
Frozen value objects for service orders: the order itself, its item lines,
and the inputs of the create and update operations.

Architecture
------------
Layer: **Modules** -- pure domain data structures, no I/O.  The order
service returns ``ServiceOrder`` snapshots; callers never receive ORM rows.

Invariants
----------
- ``OrderItem.quantity >= 1``; ``unit_price >= 0``.
- An item list references each stock item at most once.
- ``ServiceOrder.value`` is derived by the pricing engine, never supplied.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from workshop_kernel.db.types import to_decimal


class OrderStatus(str, Enum):
    """Service order lifecycle states."""
    IN_PROGRESS = "in_progress"
    AWAITING_PARTS = "awaiting_parts"
    FINALIZED = "finalized"


class Priority(str, Enum):
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


class ItemKind(str, Enum):
    """Which fiscal document a line goes on."""
    PRODUCT = "product"
    SERVICE = "service"


@dataclass(frozen=True)
class OrderItem:
    """
    One line of a service order.

    ``unit_price`` and ``description`` are copied from the stock item when the
    line is first added and are never re-read from stock afterwards.
    """
    stock_item_id: UUID
    quantity: int
    unit_price: Decimal
    kind: ItemKind = ItemKind.PRODUCT
    description: str = ""

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError(f"item quantity must be at least 1, got {self.quantity}")
        if self.unit_price < 0:
            raise ValueError("item unit_price cannot be negative")

    @property
    def total(self) -> Decimal:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class LineRequest:
    """
    A caller's request for an item line.

    ``unit_price`` is optional: new lines snapshot the stock item's price,
    existing lines keep the price they were added with.
    """
    stock_item_id: UUID
    quantity: int
    kind: ItemKind = ItemKind.PRODUCT
    unit_price: Decimal | None = None

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError(f"item quantity must be at least 1, got {self.quantity}")


@dataclass(frozen=True)
class ServiceOrder:
    """Snapshot of a persisted service order."""
    id: UUID
    tenant_id: UUID
    number: int
    client_id: UUID
    vehicle_id: UUID
    service: str
    status: OrderStatus
    priority: Priority
    labor_cost: Decimal
    value: Decimal
    order_date: date
    items: tuple[OrderItem, ...] = ()
    worker_id: UUID | None = None
    created_by_id: UUID | None = None
    updated_by_id: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    product_invoice_number: str | None = None
    service_invoice_number: str | None = None

    @property
    def is_finalized(self) -> bool:
        return self.status == OrderStatus.FINALIZED

    @property
    def display_number(self) -> str:
        from workshop_modules.orders.helpers import format_order_number
        return format_order_number(self.number)


@dataclass(frozen=True)
class OrderDraft:
    """Input of ``ServiceOrderService.create``."""
    client_id: UUID | None
    vehicle_id: UUID | None
    service: str
    labor_cost: Any = Decimal("0")
    items: tuple[LineRequest, ...] = ()
    priority: Priority = Priority.NORMAL
    status: OrderStatus = OrderStatus.IN_PROGRESS
    order_date: date | None = None
    worker_id: UUID | None = None


@dataclass(frozen=True)
class OrderPatch:
    """
    Input of ``ServiceOrderService.update``.

    Fields left as ``None`` are not changed.  ``items``, when given, replaces
    the whole item list.
    """
    client_id: UUID | None = None
    vehicle_id: UUID | None = None
    service: str | None = None
    labor_cost: Any = None
    items: tuple[LineRequest, ...] | None = None
    status: OrderStatus | None = None
    priority: Priority | None = None
    order_date: date | None = None
    worker_id: UUID | None = None

    CONTENT_FIELDS = (
        "client_id", "vehicle_id", "service", "labor_cost", "items",
        "priority", "order_date", "worker_id",
    )

    def content_fields(self) -> tuple[str, ...]:
        """Fields this patch sets, other than ``status``."""
        return tuple(name for name in self.CONTENT_FIELDS if getattr(self, name) is not None)

    @property
    def labor_decimal(self) -> Decimal | None:
        return None if self.labor_cost is None else to_decimal(self.labor_cost)


@dataclass(frozen=True)
class FinalizeResult:
    order: ServiceOrder
    already_finalized: bool = False


@dataclass(frozen=True)
class QuotaCheck:
    """Result of ``OrderQuotaGuard.can_create`` / ``stats``."""
    allowed: bool
    used: int
    total: int

    @property
    def unlimited(self) -> bool:
        return self.total == 0

    @property
    def available(self) -> int:
        return max(self.total - self.used, 0)
