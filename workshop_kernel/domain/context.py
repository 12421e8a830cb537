"""
OperationContext -- capability object passed into every mutating call.

Responsibility:
    Carries who is acting (actor, tenant) and what they may do.  The order,
    stock, invoicing and financial services call ``require_edit()`` at their
    own operation boundary, so authorization is enforced once inside the
    engine rather than trusted from whoever rendered the UI.

Architecture position:
    Kernel > Domain -- pure value object, zero I/O.  Building the context
    from a session/token is the caller's job.

Module names mirror the permission layer of the back office:
    ``service_orders``, ``stock``, ``invoices``, ``financial``, ``expenses``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from workshop_kernel.exceptions import PermissionDeniedError

SERVICE_ORDERS = "service_orders"
STOCK = "stock"
INVOICES = "invoices"
FINANCIAL = "financial"
EXPENSES = "expenses"


@dataclass(frozen=True)
class OperationContext:
    """
    Identity and capabilities of the caller of one engine operation.

    Contract:
        ``edit_permissions`` lists the modules the actor may mutate;
        ``dashboard_cards`` lists the dashboard cards the actor may view.
        Admins may do everything.
    """

    actor_id: UUID
    tenant_id: UUID
    edit_permissions: frozenset[str] = field(default_factory=frozenset)
    dashboard_cards: frozenset[str] = field(default_factory=frozenset)
    is_admin: bool = False

    def can_edit(self, module: str) -> bool:
        return self.is_admin or module in self.edit_permissions

    def can_view_dashboard_card(self, card: str) -> bool:
        return self.is_admin or card in self.dashboard_cards

    def require_edit(self, module: str) -> None:
        """Raise ``PermissionDeniedError`` unless the actor may edit ``module``."""
        if not self.can_edit(module):
            raise PermissionDeniedError(self.actor_id, module)

    def log_fields(self) -> dict[str, str]:
        """Fields suitable for ``LogContext.bind``."""
        return {"actor_id": str(self.actor_id), "tenant_id": str(self.tenant_id)}
