"""
Stock Module Service (``workshop_modules.stock.service``).

Responsibility
--------------
``StockLedger`` keeps every stock item's on-hand quantity equal to what is
left after the reservations of all non-deleted service orders:

    reserve(id, q)        on_hand -= q        (needs q <= on_hand)
    adjust(id, old, new)  on_hand += old-new  (needs new <= on_hand + old)
    release(id, q)        on_hand += q

``StockService`` wraps item registration and replenishment for the stock
screen and owns the transaction for those calls.

Architecture
------------
Layer: **Modules** -- stateful orchestration.

- ``StockLedger`` is flush-only (``BaseService``).  The order service calls
  it once per changed line and commits or rolls back the whole order.
- ``StockService`` commits on success and rolls back on failure.

Invariants
----------
- Every read that precedes a write locks the row (``SELECT ... FOR UPDATE``)
  and refreshes it from the database.
- ``stock_items.version`` is the optimistic lock column; a lost update
  surfaces as ``OptimisticLockError`` at the transaction owner.
- Purchases are append-only.

Failure Modes
-------------
- ``StockItemNotFoundError`` for an unknown id or an item of another tenant.
- ``InsufficientStockError`` with the requested and available quantities.
- ``ValueError`` for non-positive quantities.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from workshop_kernel.db.types import to_decimal
from workshop_kernel.domain.clock import Clock, SystemClock
from workshop_kernel.domain.context import STOCK, OperationContext
from workshop_kernel.exceptions import (
    InsufficientStockError,
    OptimisticLockError,
    StockItemNotFoundError,
)
from workshop_kernel.logging_config import LogContext, get_logger
from workshop_kernel.services.base import BaseService
from workshop_modules.stock.models import PurchaseHistoryEntry, StockItem
from workshop_modules.stock.orm import PurchaseHistoryModel, StockItemModel

logger = get_logger("modules.stock.service")


class StockLedger(BaseService[StockItemModel]):
    """
    Per-line stock reservations.

    Contract
    --------
    Each method changes one stock item and flushes.  The caller owns the
    transaction; a failure raises before anything is written for that line.
    """

    def __init__(
        self,
        session: Session,
        actor_id: UUID | None = None,
        tenant_id: UUID | None = None,
    ):
        super().__init__(session)
        self._actor_id = actor_id
        self._tenant_id = tenant_id

    def _owned(self, item: StockItemModel | None) -> bool:
        return item is not None and (self._tenant_id is None or item.tenant_id == self._tenant_id)

    def _lock_item(self, stock_item_id: Any) -> StockItemModel:
        stmt = select(StockItemModel).where(StockItemModel.id == stock_item_id)
        if self._tenant_id is not None:
            stmt = stmt.where(StockItemModel.tenant_id == self._tenant_id)
        item = self.session.execute(
            stmt
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if item is None:
            raise StockItemNotFoundError(stock_item_id)
        return item

    def _write(self, item: StockItemModel, quantity: int) -> None:
        item.quantity = quantity
        if self._actor_id is not None:
            item.updated_by_id = self._actor_id
        self.session.flush()

    def get_item(self, stock_item_id: Any) -> StockItem:
        item = self.session.get(StockItemModel, stock_item_id)
        if not self._owned(item):
            raise StockItemNotFoundError(stock_item_id)
        return item.to_dto()

    def on_hand(self, stock_item_id: Any) -> int:
        return self.get_item(stock_item_id).quantity

    def reserve(self, stock_item_id: Any, quantity: int) -> int:
        """Take ``quantity`` off the shelf.  Returns the new on-hand quantity."""
        if quantity <= 0:
            raise ValueError(f"reserve quantity must be positive, got {quantity}")
        item = self._lock_item(stock_item_id)
        if quantity > item.quantity:
            logger.warning(
                "stock_insufficient",
                extra={
                    "stock_item_id": str(stock_item_id),
                    "requested": quantity,
                    "available": item.quantity,
                },
            )
            raise InsufficientStockError(stock_item_id, quantity, item.quantity)
        self._write(item, item.quantity - quantity)
        logger.info(
            "stock_reserved",
            extra={"stock_item_id": str(stock_item_id), "quantity": quantity, "on_hand": item.quantity},
        )
        return item.quantity

    def adjust(self, stock_item_id: Any, old_quantity: int, new_quantity: int) -> int:
        """
        Move an existing reservation from ``old_quantity`` to ``new_quantity``.

        The old reservation counts as available, so an order holding 2 units
        of an item with 3 on hand may grow to 5.
        """
        if old_quantity < 0 or new_quantity < 0:
            raise ValueError("adjust quantities cannot be negative")
        item = self._lock_item(stock_item_id)
        headroom = item.quantity + old_quantity
        if new_quantity > headroom:
            logger.warning(
                "stock_insufficient",
                extra={
                    "stock_item_id": str(stock_item_id),
                    "requested": new_quantity,
                    "available": headroom,
                },
            )
            raise InsufficientStockError(stock_item_id, new_quantity, headroom)
        self._write(item, headroom - new_quantity)
        logger.info(
            "stock_adjusted",
            extra={
                "stock_item_id": str(stock_item_id),
                "old_quantity": old_quantity,
                "new_quantity": new_quantity,
                "on_hand": item.quantity,
            },
        )
        return item.quantity

    def release(self, stock_item_id: Any, quantity: int) -> int:
        """Put ``quantity`` back on the shelf."""
        if quantity <= 0:
            raise ValueError(f"release quantity must be positive, got {quantity}")
        item = self._lock_item(stock_item_id)
        self._write(item, item.quantity + quantity)
        logger.info(
            "stock_released",
            extra={"stock_item_id": str(stock_item_id), "quantity": quantity, "on_hand": item.quantity},
        )
        return item.quantity

    def register_item(
        self,
        *,
        tenant_id: UUID,
        name: str,
        code: str,
        unit_price: Any,
        quantity: int = 0,
        min_quantity: int = 0,
        category: str = "",
        supplier: str | None = None,
    ) -> StockItemModel:
        if quantity < 0 or min_quantity < 0:
            raise ValueError("quantities cannot be negative")
        item = StockItemModel(
            tenant_id=tenant_id,
            name=name,
            code=code,
            category=category,
            supplier=supplier,
            quantity=quantity,
            min_quantity=min_quantity,
            unit_price=to_decimal(unit_price),
            created_by_id=self._actor_id,
        )
        self.session.add(item)
        self.session.flush()
        logger.info(
            "stock_item_registered",
            extra={"stock_item_id": str(item.id), "code": code, "quantity": quantity},
        )
        return item

    def record_purchase(
        self,
        *,
        tenant_id: UUID,
        stock_item_id: Any,
        quantity: int,
        unit_price: Any,
        purchase_date: date,
        total_amount: Any = None,
        supplier: str | None = None,
    ) -> PurchaseHistoryModel:
        """Append a purchase and add its quantity to on-hand stock."""
        if quantity <= 0:
            raise ValueError(f"purchase quantity must be positive, got {quantity}")
        item = self._lock_item(stock_item_id)
        price = to_decimal(unit_price)
        total = to_decimal(total_amount) if total_amount is not None else Decimal(quantity) * price
        purchase = PurchaseHistoryModel(
            tenant_id=tenant_id,
            stock_item_id=item.id,
            quantity=quantity,
            unit_price=price,
            total_amount=total,
            supplier=supplier or item.supplier,
            purchase_date=purchase_date,
            created_by_id=self._actor_id,
        )
        self.session.add(purchase)
        self._write(item, item.quantity + quantity)
        logger.info(
            "stock_purchase_recorded",
            extra={
                "stock_item_id": str(item.id),
                "quantity": quantity,
                "total_amount": str(total),
                "on_hand": item.quantity,
            },
        )
        return purchase


class StockService:
    """
    Stock screen operations with their own transaction boundary.

    Contract
    --------
    Each public method checks the caller may edit ``stock``, performs the
    change through ``StockLedger``, commits on success and rolls back on any
    failure.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()

    def _ledger(self, context: OperationContext) -> StockLedger:
        return StockLedger(self._session, actor_id=context.actor_id, tenant_id=context.tenant_id)

    def _commit(self, entity_id: Any = None) -> None:
        try:
            self._session.commit()
        except StaleDataError as exc:
            raise OptimisticLockError("stock_item", entity_id) from exc

    def register_item(self, context: OperationContext, **fields: Any) -> StockItem:
        context.require_edit(STOCK)
        with LogContext.bind(**context.log_fields()):
            try:
                item = self._ledger(context).register_item(tenant_id=context.tenant_id, **fields)
                dto = item.to_dto()
                self._commit(item.id)
                return dto
            except Exception:
                self._session.rollback()
                raise

    def record_purchase(
        self,
        context: OperationContext,
        stock_item_id: Any,
        quantity: int,
        unit_price: Any,
        purchase_date: date | None = None,
        total_amount: Any = None,
        supplier: str | None = None,
    ) -> PurchaseHistoryEntry:
        context.require_edit(STOCK)
        with LogContext.bind(**context.log_fields()):
            try:
                purchase = self._ledger(context).record_purchase(
                    tenant_id=context.tenant_id,
                    stock_item_id=stock_item_id,
                    quantity=quantity,
                    unit_price=unit_price,
                    purchase_date=purchase_date or self._clock.today(),
                    total_amount=total_amount,
                    supplier=supplier,
                )
                dto = purchase.to_dto()
                self._commit(stock_item_id)
                return dto
            except Exception:
                self._session.rollback()
                raise

    def list_items(self, tenant_id: UUID) -> list[StockItem]:
        rows = self._session.execute(
            select(StockItemModel)
            .where(StockItemModel.tenant_id == tenant_id)
            .order_by(StockItemModel.name)
        ).scalars()
        return [row.to_dto() for row in rows]

    def list_purchases(self, tenant_id: UUID, stock_item_id: Any = None) -> list[PurchaseHistoryEntry]:
        stmt = select(PurchaseHistoryModel).where(PurchaseHistoryModel.tenant_id == tenant_id)
        if stock_item_id is not None:
            stmt = stmt.where(PurchaseHistoryModel.stock_item_id == stock_item_id)
        rows = self._session.execute(
            stmt.order_by(PurchaseHistoryModel.purchase_date.desc())
        ).scalars()
        return [row.to_dto() for row in rows]
