"""
Service Order Module Service (``workshop_modules.orders.service``).

Responsibility
--------------
Runs the service order lifecycle: create, update, finalize and delete.
Each call composes the quota guard, the stock ledger and the pricing engine
inside one database transaction.

Architecture
------------
Layer: **Modules** -- stateful orchestration wrapper.

1. ``OperationContext.require_edit("service_orders")`` at the boundary.
2. ``OrderQuotaGuard.acquire`` re-checks the quota with the tenant row
   locked and hands out the display number (create only).
3. ``diff_items`` turns the old and new item snapshots into per-line
   ``StockLedger`` calls.
4. ``PricingCalculator`` recomputes the order value from the stored lines.

Invariants
----------
- Each public mutating method owns its transaction boundary: commit on
  success, rollback on any failure.  A failure on the third line of an
  order leaves the first two lines' stock untouched.
- ``value`` is recomputed on every mutation and never taken from input.
- A finalized order's content never changes; only invoice linkage (written
  by the invoicing service) and ``updated_by_id`` may.
- Status changes follow ``ORDER_WORKFLOW``.
- A stale read of an order or stock row surfaces as
  ``OptimisticLockError``; nothing is retried automatically.

Failure Modes
-------------
- ``PermissionDeniedError``, ``ValidationFailedError``,
  ``QuotaExceededError``, ``InsufficientStockError``,
  ``StockItemNotFoundError``, ``OrderNotFoundError``,
  ``OrderFinalizedImmutableError``, ``InvalidStatusTransitionError``,
  ``OptimisticLockError``.

Usage::

    service = ServiceOrderService(session, clock=clock)
    order = service.create(context, OrderDraft(
        client_id=client_id, vehicle_id=vehicle_id, service="Brake pads",
        labor_cost=Decimal("50"),
        items=(LineRequest(stock_item_id=pads_id, quantity=1),),
    ))
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from decimal import Decimal
from typing import Any, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified
from sqlalchemy.orm.exc import StaleDataError

from workshop_engines.pricing import PricingCalculator
from workshop_engines.stock_delta import ItemSnapshot, LineChange, StockMovement, diff_items
from workshop_kernel.db.types import CENT_DECIMAL_PLACES, round_money, to_decimal
from workshop_kernel.domain.clock import Clock, SystemClock
from workshop_kernel.domain.context import SERVICE_ORDERS, OperationContext
from workshop_kernel.exceptions import (
    InvalidStatusTransitionError,
    OptimisticLockError,
    OrderFinalizedImmutableError,
    OrderNotFoundError,
    PermissionDeniedError,
    ValidationFailedError,
)
from workshop_kernel.logging_config import LogContext, get_logger
from workshop_modules.orders.helpers import duplicate_stock_items
from workshop_modules.orders.models import (
    FinalizeResult,
    LineRequest,
    OrderDraft,
    OrderItem,
    OrderPatch,
    OrderStatus,
    QuotaCheck,
    ServiceOrder,
)
from workshop_modules.orders.orm import OrderItemModel, ServiceOrderModel
from workshop_modules.orders.quota import OrderQuotaGuard
from workshop_modules.orders.workflows import ORDER_WORKFLOW
from workshop_modules.stock.service import StockLedger

logger = get_logger("modules.orders.service")

T = TypeVar("T")

QUOTA_MODULE = "quota"


def _as_uuid(value: Any) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


class ServiceOrderService:
    """
    Orchestrates service orders through the quota guard, stock ledger and
    pricing engine.

    Contract
    --------
    Mutating methods take an ``OperationContext`` first and return frozen
    ``ServiceOrder`` snapshots.  Orders of another tenant are reported as
    not found.

    Non-goals
    ---------
    - Does not emit invoices (``InvoicingService``).
    - Does not retry on ``OptimisticLockError``; the caller reloads and
      re-submits.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        default_quota_total: int = 0,
        decimal_places: int = CENT_DECIMAL_PLACES,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._decimal_places = decimal_places
        self._quota = OrderQuotaGuard(session, default_total=default_quota_total)
        self._pricing = PricingCalculator()

    @classmethod
    def from_config(cls, session: Session, config: Any, clock: Clock | None = None) -> ServiceOrderService:
        """Build from a ``workshop_config.WorkshopConfig``."""
        return cls(
            session,
            clock=clock,
            default_quota_total=config.quota.default_total,
            decimal_places=config.pricing.decimal_places,
        )

    # =========================================================================
    # Transaction plumbing
    # =========================================================================

    def _run(self, context: OperationContext, order_id: Any, work: Callable[[], T]) -> T:
        with LogContext.bind(**context.log_fields(), order_id=str(order_id) if order_id else None):
            try:
                result = work()
                self._session.commit()
                return result
            except StaleDataError as exc:
                self._session.rollback()
                logger.warning(
                    "order_optimistic_lock_conflict",
                    extra={"order_id": str(order_id), "detail": str(exc)},
                )
                raise OptimisticLockError("service_order", order_id) from exc
            except Exception:
                self._session.rollback()
                raise

    def _load(self, order_id: Any, tenant_id: UUID | None = None) -> ServiceOrderModel:
        try:
            key = _as_uuid(order_id)
        except ValueError:
            raise OrderNotFoundError(order_id) from None
        order = self._session.get(ServiceOrderModel, key)
        if order is None or (tenant_id is not None and order.tenant_id != tenant_id):
            raise OrderNotFoundError(order_id)
        return order

    def _ledger(self, context: OperationContext) -> StockLedger:
        return StockLedger(self._session, actor_id=context.actor_id, tenant_id=context.tenant_id)

    # =========================================================================
    # Lines and stock
    # =========================================================================

    def _resolve_lines(
        self,
        ledger: StockLedger,
        requests: Sequence[LineRequest],
        existing: dict[UUID, OrderItemModel],
    ) -> list[OrderItem]:
        """
        Turn line requests into priced lines.

        A new line snapshots the stock item's current price and name; a kept
        line keeps what it was added with.  An explicit ``unit_price`` on the
        request wins in both cases.
        """
        items = []
        for request in requests:
            stock_item_id = _as_uuid(request.stock_item_id)
            current = existing.get(stock_item_id)
            if current is not None:
                unit_price, description = current.unit_price, current.description
            else:
                stock_item = ledger.get_item(stock_item_id)
                unit_price, description = stock_item.unit_price, stock_item.name
            if request.unit_price is not None:
                unit_price = to_decimal(request.unit_price)
            items.append(
                OrderItem(
                    stock_item_id=stock_item_id,
                    quantity=request.quantity,
                    unit_price=unit_price,
                    kind=request.kind,
                    description=description,
                )
            )
        return items

    def _apply_stock(self, ledger: StockLedger, changes: Iterable[LineChange]) -> int:
        count = 0
        for change in changes:
            if change.movement is StockMovement.RESERVE:
                ledger.reserve(change.stock_item_id, change.new_quantity)
            elif change.movement is StockMovement.RELEASE:
                ledger.release(change.stock_item_id, change.old_quantity)
            else:
                ledger.adjust(change.stock_item_id, change.old_quantity, change.new_quantity)
            count += 1
        return count

    @staticmethod
    def _sync_items(order: ServiceOrderModel, items: Sequence[OrderItem]) -> None:
        """Update kept rows in place, add new rows, orphan removed rows."""
        by_stock_id = {row.stock_item_id: row for row in order.items}
        rows = []
        for position, item in enumerate(items):
            row = by_stock_id.pop(item.stock_item_id, None)
            if row is None:
                row = OrderItemModel(stock_item_id=item.stock_item_id)
            row.position = position
            row.quantity = item.quantity
            row.unit_price = item.unit_price
            row.kind = item.kind.value
            row.description = item.description
            rows.append(row)
        order.items = rows

    def _reprice(self, order: ServiceOrderModel) -> None:
        result = self._pricing.price(labor_cost=order.labor_cost, items=order.items)
        order.value = round_money(result.total, self._decimal_places)

    @staticmethod
    def _validate_lines(requests: Sequence[LineRequest], errors: list[str]) -> None:
        for stock_item_id in duplicate_stock_items(requests):
            errors.append(f"Stock item {stock_item_id} appears on more than one line")
        for request in requests:
            if request.unit_price is not None and to_decimal(request.unit_price) < 0:
                errors.append(f"Unit price for stock item {request.stock_item_id} cannot be negative")

    # =========================================================================
    # Create
    # =========================================================================

    def create(self, context: OperationContext, draft: OrderDraft) -> ServiceOrder:
        """
        Create an order, reserving stock for every line.

        Postconditions:
            - Stock for every line is reserved and the quota slot consumed,
              or, on any failure, nothing is.
        """
        context.require_edit(SERVICE_ORDERS)

        errors: list[str] = []
        if draft.client_id is None:
            errors.append("client_id is required")
        if draft.vehicle_id is None:
            errors.append("vehicle_id is required")
        if not (draft.service or "").strip():
            errors.append("service description is required")
        self._validate_lines(draft.items, errors)
        if errors:
            raise ValidationFailedError(errors)

        def work() -> ServiceOrder:
            number = self._quota.acquire(context.tenant_id, context.actor_id)
            ledger = self._ledger(context)
            items = self._resolve_lines(ledger, draft.items, {})
            changes = diff_items(ItemSnapshot.empty(), ItemSnapshot.of(items))
            self._apply_stock(ledger, changes)

            pricing = self._pricing.price(labor_cost=draft.labor_cost, items=items)
            order = ServiceOrderModel(
                tenant_id=context.tenant_id,
                number=number,
                client_id=draft.client_id,
                vehicle_id=draft.vehicle_id,
                worker_id=draft.worker_id,
                service=draft.service.strip(),
                status=OrderStatus(draft.status).value,
                priority=draft.priority.value,
                labor_cost=pricing.labor_cost,
                value=round_money(pricing.total, self._decimal_places),
                order_date=draft.order_date or self._clock.today(),
                created_by_id=context.actor_id,
            )
            self._sync_items(order, items)
            self._session.add(order)
            self._session.flush()

            logger.info(
                "order_created",
                extra={
                    "order_id": str(order.id),
                    "order_number": number,
                    "status": order.status,
                    "line_count": len(items),
                    "value": str(order.value),
                },
            )
            return order.to_dto()

        return self._run(context, None, work)

    # =========================================================================
    # Update
    # =========================================================================

    def update(self, context: OperationContext, order_id: Any, patch: OrderPatch) -> ServiceOrder:
        """
        Apply ``patch`` to an order.

        Item changes are applied as a diff against the stored lines: only
        the stock items whose quantity changed are touched.
        """
        context.require_edit(SERVICE_ORDERS)

        errors: list[str] = []
        if patch.service is not None and not patch.service.strip():
            errors.append("service description is required")
        if patch.items is not None:
            self._validate_lines(patch.items, errors)
        if errors:
            raise ValidationFailedError(errors)

        def work() -> ServiceOrder:
            order = self._load(order_id, context.tenant_id)

            if order.status == OrderStatus.FINALIZED.value:
                touched = patch.content_fields()
                if touched:
                    logger.warning(
                        "order_finalized_edit_rejected",
                        extra={"order_id": str(order.id), "fields": list(touched)},
                    )
                    raise OrderFinalizedImmutableError(order.id, touched)
                if patch.status is not None and patch.status != OrderStatus.FINALIZED:
                    raise InvalidStatusTransitionError(order.id, order.status, patch.status.value)
                order.updated_by_id = context.actor_id
                flag_modified(order, "updated_by_id")
                self._session.flush()
                return order.to_dto()

            stock_changes = 0
            if patch.items is not None:
                ledger = self._ledger(context)
                existing = {row.stock_item_id: row for row in order.items}
                new_items = self._resolve_lines(ledger, patch.items, existing)
                changes = diff_items(ItemSnapshot.of(order.items), ItemSnapshot.of(new_items))
                stock_changes = self._apply_stock(ledger, changes)
                self._sync_items(order, new_items)

            if patch.client_id is not None:
                order.client_id = patch.client_id
            if patch.vehicle_id is not None:
                order.vehicle_id = patch.vehicle_id
            if patch.worker_id is not None:
                order.worker_id = patch.worker_id
            if patch.service is not None:
                order.service = patch.service.strip()
            if patch.priority is not None:
                order.priority = patch.priority.value
            if patch.order_date is not None:
                order.order_date = patch.order_date
            if patch.labor_cost is not None:
                order.labor_cost = max(patch.labor_decimal, Decimal("0"))

            if patch.status is not None and patch.status.value != order.status:
                if ORDER_WORKFLOW.find_transition(order.status, patch.status.value) is None:
                    raise InvalidStatusTransitionError(order.id, order.status, patch.status.value)
                order.status = patch.status.value

            self._reprice(order)
            order.updated_by_id = context.actor_id
            flag_modified(order, "updated_by_id")
            self._session.flush()

            logger.info(
                "order_updated",
                extra={
                    "order_id": str(order.id),
                    "fields": list(patch.content_fields()),
                    "status": order.status,
                    "stock_changes": stock_changes,
                    "value": str(order.value),
                },
            )
            return order.to_dto()

        return self._run(context, order_id, work)

    # =========================================================================
    # Finalize
    # =========================================================================

    def finalize(self, context: OperationContext, order_id: Any) -> FinalizeResult:
        """
        Move an order to ``finalized``.

        Finalizing an already finalized order changes nothing and reports
        ``already_finalized=True``.
        """
        context.require_edit(SERVICE_ORDERS)

        def work() -> FinalizeResult:
            order = self._load(order_id, context.tenant_id)
            if order.status == OrderStatus.FINALIZED.value:
                logger.warning("order_finalize_noop", extra={"order_id": str(order.id)})
                return FinalizeResult(order=order.to_dto(), already_finalized=True)

            if ORDER_WORKFLOW.find_transition(order.status, OrderStatus.FINALIZED.value) is None:
                raise InvalidStatusTransitionError(order.id, order.status, OrderStatus.FINALIZED.value)

            previous = order.status
            order.status = OrderStatus.FINALIZED.value
            order.updated_by_id = context.actor_id
            self._session.flush()
            logger.info(
                "order_finalized",
                extra={"order_id": str(order.id), "from_status": previous, "value": str(order.value)},
            )
            return FinalizeResult(order=order.to_dto())

        return self._run(context, order_id, work)

    # =========================================================================
    # Delete
    # =========================================================================

    def delete(self, context: OperationContext, order_id: Any) -> None:
        """Delete an order at any status, returning all of its stock."""
        context.require_edit(SERVICE_ORDERS)

        def work() -> None:
            order = self._load(order_id, context.tenant_id)
            changes = diff_items(ItemSnapshot.of(order.items), ItemSnapshot.empty())
            released = self._apply_stock(self._ledger(context), changes)
            self._session.delete(order)
            self._session.flush()
            logger.info(
                "order_deleted",
                extra={"order_id": str(order_id), "status": order.status, "lines_released": released},
            )

        self._run(context, order_id, work)

    # =========================================================================
    # Quota
    # =========================================================================

    def quota_stats(self, tenant_id: UUID) -> QuotaCheck:
        return self._quota.stats(tenant_id)

    def can_create(self, tenant_id: UUID) -> QuotaCheck:
        return self._quota.can_create(tenant_id)

    def set_quota_total(self, context: OperationContext, total: int) -> QuotaCheck:
        """Change the tenant's plan ceiling.  Admins only."""
        if not context.is_admin:
            raise PermissionDeniedError(context.actor_id, QUOTA_MODULE)
        return self._run(
            context,
            None,
            lambda: self._quota.set_total(context.tenant_id, total, context.actor_id),
        )

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, order_id: Any, tenant_id: UUID | None = None) -> ServiceOrder:
        return self._load(order_id, tenant_id).to_dto()

    def list_orders(self, tenant_id: UUID, status: OrderStatus | None = None) -> list[ServiceOrder]:
        stmt = select(ServiceOrderModel).where(ServiceOrderModel.tenant_id == tenant_id)
        if status is not None:
            stmt = stmt.where(ServiceOrderModel.status == OrderStatus(status).value)
        rows = self._session.execute(stmt.order_by(ServiceOrderModel.number.desc())).scalars()
        return [row.to_dto() for row in rows]
