"""
Service Orders Module (``workshop_modules.orders``).

Responsibility
--------------
The service order lifecycle: creation under the tenant quota, item edits
that move stock through the ledger, finalization and deletion.

Architecture
------------
Layer: **Modules** -- domain models, workflow, ORM, a flush-only quota guard
and the ``ServiceOrderService`` that owns each operation's transaction.
Pricing and stock diffing are delegated to ``workshop_engines``.
"""

from workshop_modules.orders.helpers import format_legacy_order_id, format_order_number
from workshop_modules.orders.models import (
    FinalizeResult,
    ItemKind,
    LineRequest,
    OrderDraft,
    OrderItem,
    OrderPatch,
    OrderStatus,
    Priority,
    QuotaCheck,
    ServiceOrder,
)
from workshop_modules.orders.quota import OrderQuotaGuard
from workshop_modules.orders.service import ServiceOrderService
from workshop_modules.orders.workflows import ORDER_WORKFLOW

__all__ = [
    "FinalizeResult",
    "ItemKind",
    "LineRequest",
    "ORDER_WORKFLOW",
    "OrderDraft",
    "OrderItem",
    "OrderPatch",
    "OrderQuotaGuard",
    "OrderStatus",
    "Priority",
    "QuotaCheck",
    "ServiceOrder",
    "ServiceOrderService",
    "format_legacy_order_id",
    "format_order_number",
]
