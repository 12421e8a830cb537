"""
Invoicing Module Service (``workshop_modules.invoicing.service``).

Responsibility
--------------
Decides whether a service order may be invoiced, builds the line breakdown
and hands it to the external emitter.  On success it records the emitted
documents and writes their numbers onto the order.

Architecture
------------
Layer: **Modules** -- stateful orchestration wrapper around the pure
``can_emit`` gate and ``build_invoice_breakdown`` engine.

Invariants
----------
- Only finalized, not-yet-invoiced orders reach the emitter.
- Writing invoice numbers is the one change allowed on a finalized order.
- ``emit`` owns its transaction: commit on success, rollback on failure.

Failure Modes
-------------
- ``InvoiceNotEligibleError(order_id, reason)`` -- ``not_finalized`` or
  ``already_invoiced``.
- ``ValidationFailedError(fields)`` -- the emitter rejected the data; the
  caller re-submits with ``corrections``.
- ``OrderNotFoundError``, ``PermissionDeniedError``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from workshop_engines.eligibility import EligibilityResult, can_emit
from workshop_engines.invoice_breakdown import LABOR_THRESHOLD, InvoiceBreakdown, build_invoice_breakdown
from workshop_kernel.domain.clock import Clock, SystemClock
from workshop_kernel.domain.context import INVOICES, OperationContext
from workshop_kernel.exceptions import InvoiceNotEligibleError, OrderNotFoundError, ValidationFailedError
from workshop_kernel.logging_config import LogContext, get_logger
from workshop_modules.invoicing.models import Invoice, InvoiceEmitter, InvoiceStatus, InvoiceType
from workshop_modules.invoicing.orm import InvoiceModel
from workshop_modules.orders.orm import ServiceOrderModel

logger = get_logger("modules.invoicing.service")


class InvoicingService:
    """Eligibility checks and the emission handoff for service orders."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        labor_line_threshold: Decimal = LABOR_THRESHOLD,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._labor_line_threshold = labor_line_threshold

    def _load_order(self, order_id: Any, tenant_id: UUID | None) -> ServiceOrderModel:
        try:
            key = order_id if isinstance(order_id, UUID) else UUID(str(order_id))
        except ValueError:
            raise OrderNotFoundError(order_id) from None
        order = self._session.get(ServiceOrderModel, key)
        if order is None or (tenant_id is not None and order.tenant_id != tenant_id):
            raise OrderNotFoundError(order_id)
        return order

    def _invoice_rows(self, order_id: UUID) -> list[InvoiceModel]:
        return list(
            self._session.execute(
                select(InvoiceModel).where(InvoiceModel.service_order_id == order_id)
            ).scalars()
        )

    def list_invoices(self, order_id: Any, tenant_id: UUID | None = None) -> list[Invoice]:
        order = self._load_order(order_id, tenant_id)
        return [row.to_dto() for row in self._invoice_rows(order.id)]

    def check(self, order_id: Any, tenant_id: UUID | None = None) -> EligibilityResult:
        order = self._load_order(order_id, tenant_id)
        return can_emit(order, self._invoice_rows(order.id))

    def breakdown(self, order_id: Any, tenant_id: UUID | None = None) -> InvoiceBreakdown:
        order = self._load_order(order_id, tenant_id)
        return build_invoice_breakdown(order.to_dto(), labor_threshold=self._labor_line_threshold)

    def emit(
        self,
        context: OperationContext,
        order_id: Any,
        emitter: InvoiceEmitter,
        corrections: dict[str, Any] | None = None,
    ) -> list[Invoice]:
        """
        Emit the fiscal documents of a finalized order.

        Postconditions:
            - On success, one ``Invoice`` row per emitted document exists and
              the order carries the document numbers.
            - On any failure nothing is recorded.
        """
        context.require_edit(INVOICES)

        with LogContext.bind(**context.log_fields(), order_id=str(order_id)):
            try:
                order = self._load_order(order_id, context.tenant_id)
                eligibility = can_emit(order, self._invoice_rows(order.id))
                if not eligibility.eligible:
                    logger.warning(
                        "invoice_not_eligible",
                        extra={"order_id": str(order.id), "reason": eligibility.reason},
                    )
                    raise InvoiceNotEligibleError(order.id, eligibility.reason)

                breakdown = build_invoice_breakdown(
                    order.to_dto(), labor_threshold=self._labor_line_threshold
                )
                outcome = emitter.emit(breakdown, corrections)
                if not outcome.succeeded:
                    errors = list(outcome.validation_errors) or ["The emitter returned no documents"]
                    logger.warning(
                        "invoice_emission_rejected",
                        extra={"order_id": str(order.id), "errors": errors},
                    )
                    raise ValidationFailedError(errors)

                issued_at = self._clock.now()
                rows = []
                for document in outcome.documents:
                    row = InvoiceModel(
                        tenant_id=order.tenant_id,
                        service_order_id=order.id,
                        type=InvoiceType(document.type).value,
                        status=InvoiceStatus.ISSUED.value,
                        number=document.number,
                        amount=document.amount,
                        issued_at=issued_at,
                        created_by_id=context.actor_id,
                    )
                    self._session.add(row)
                    rows.append(row)
                    if document.type == InvoiceType.PRODUCT_DOCUMENT:
                        order.product_invoice_number = document.number
                    else:
                        order.service_invoice_number = document.number
                order.updated_by_id = context.actor_id
                self._session.flush()

                invoices = [row.to_dto() for row in rows]
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "invoices_emitted",
                extra={
                    "order_id": str(order.id),
                    "documents": [i.type.value for i in invoices],
                    "numbers": [i.number for i in invoices],
                },
            )
            return invoices
