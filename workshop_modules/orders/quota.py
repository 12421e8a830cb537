"""
Order Quota Guard (``workshop_modules.orders.quota``).

Responsibility
--------------
Gate service-order creation on the tenant's plan.  A tenant may hold at most
``total`` orders at once (all statuses count); ``total == 0`` means no limit.
The same locked row also hands out the tenant's display numbers.

Architecture
------------
Layer: **Modules** -- flush-only service (``BaseService``).  The order
service calls ``acquire`` inside the creating transaction.

Invariants
----------
- ``acquire`` re-checks the quota with the tenant row locked
  (``SELECT ... FOR UPDATE``), so a check made when the form was opened
  is never trusted.
- ``order_sequence`` is incremented through the locked row, never by
  ``MAX(number) + 1``; a rolled-back creation does not consume a number.
- ``version`` on the row turns a lost update into ``StaleDataError``.

Failure Modes
-------------
- ``QuotaExceededError(used, total)`` from ``acquire``.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from workshop_kernel.exceptions import QuotaExceededError
from workshop_kernel.logging_config import get_logger
from workshop_kernel.services.base import BaseService
from workshop_modules.orders.models import QuotaCheck
from workshop_modules.orders.orm import ServiceOrderModel, TenantQuotaModel

logger = get_logger("modules.orders.quota")


def quota_allows(used: int, total: int) -> bool:
    return total == 0 or used < total


class OrderQuotaGuard(BaseService[TenantQuotaModel]):
    """Per-tenant order quota, checked and consumed under a row lock."""

    def __init__(self, session: Session, default_total: int = 0):
        super().__init__(session)
        self._default_total = default_total

    def _find(self, tenant_id: UUID, lock: bool = False) -> TenantQuotaModel | None:
        stmt = select(TenantQuotaModel).where(TenantQuotaModel.tenant_id == tenant_id)
        if lock:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self.session.execute(stmt).scalar_one_or_none()

    def _insert_row(self, tenant_id: UUID, actor_id: UUID) -> TenantQuotaModel:
        row = TenantQuotaModel(
            tenant_id=tenant_id,
            total=self._default_total,
            order_sequence=0,
            created_by_id=actor_id,
        )
        self.session.add(row)
        self.session.flush()
        return row

    def _lock_row(self, tenant_id: UUID, actor_id: UUID) -> TenantQuotaModel:
        row = self._find(tenant_id, lock=True)
        if row is not None:
            return row

        if self.session.get_bind().dialect.name == "sqlite":
            # SQLite has a single writer; pysqlite savepoints would commit early.
            return self._insert_row(tenant_id, actor_id)

        # First order of this tenant.  Another request may insert the row
        # at the same time; the savepoint keeps the outer transaction usable.
        savepoint = self.session.begin_nested()
        try:
            row = self._insert_row(tenant_id, actor_id)
            savepoint.commit()
            logger.debug("quota_row_created", extra={"tenant_id": str(tenant_id)})
            return row
        except IntegrityError:
            logger.debug("quota_row_race_retry", extra={"tenant_id": str(tenant_id)})
            savepoint.rollback()
            self.session.expire_all()
            row = self._find(tenant_id, lock=True)
            if row is None:
                raise
            return row

    def used(self, tenant_id: UUID) -> int:
        return self.session.execute(
            select(func.count(ServiceOrderModel.id)).where(ServiceOrderModel.tenant_id == tenant_id)
        ).scalar_one()

    def stats(self, tenant_id: UUID) -> QuotaCheck:
        row = self._find(tenant_id)
        total = row.total if row is not None else self._default_total
        used = self.used(tenant_id)
        return QuotaCheck(allowed=quota_allows(used, total), used=used, total=total)

    def can_create(self, tenant_id: UUID) -> QuotaCheck:
        """Advisory check for the UI.  ``acquire`` re-checks at creation time."""
        return self.stats(tenant_id)

    def acquire(self, tenant_id: UUID, actor_id: UUID) -> int:
        """
        Reserve room for one more order and return its display number.

        Must run inside the transaction that inserts the order.
        """
        row = self._lock_row(tenant_id, actor_id)
        used = self.used(tenant_id)
        if not quota_allows(used, row.total):
            logger.warning(
                "quota_exceeded",
                extra={"tenant_id": str(tenant_id), "used": used, "total": row.total},
            )
            raise QuotaExceededError(used, row.total)

        row.order_sequence += 1
        row.updated_by_id = actor_id
        self.session.flush()
        logger.debug(
            "quota_acquired",
            extra={
                "tenant_id": str(tenant_id),
                "used": used + 1,
                "total": row.total,
                "order_number": row.order_sequence,
            },
        )
        return row.order_sequence

    def set_total(self, tenant_id: UUID, total: int, actor_id: UUID) -> QuotaCheck:
        if total < 0:
            raise ValueError(f"quota total cannot be negative, got {total}")
        row = self._lock_row(tenant_id, actor_id)
        row.total = total
        row.updated_by_id = actor_id
        self.session.flush()
        logger.info("quota_total_set", extra={"tenant_id": str(tenant_id), "total": total})
        return self.stats(tenant_id)
