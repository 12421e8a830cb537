"""
Typed Exception Hierarchy for the Workshop Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every failure of the service order engine is recoverable by the caller: the
user reads the reason, corrects the input and re-submits.  That only works if
callers can catch by type and read structured data instead of parsing
messages:

    try:
        orders.update(context, order_id, patch)
    except InsufficientStockError as e:
        show(f"Only {e.available} available for {e.stock_item_id}")
    except OrderFinalizedImmutableError as e:
        show("Finalized orders cannot be edited")

Rules:
  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    WorkshopError (base)
    |
    +-- StockError
    |   +-- InsufficientStockError
    |   +-- StockItemNotFoundError
    |
    +-- QuotaError
    |   +-- QuotaExceededError
    |
    +-- OrderError
    |   +-- OrderNotFoundError
    |   +-- OrderFinalizedImmutableError
    |   +-- InvalidStatusTransitionError
    |
    +-- InvoiceError
    |   +-- InvoiceNotEligibleError
    |
    +-- ExpenseNotFoundError
    |
    +-- ValidationFailedError
    |
    +-- ConcurrencyError
    |   +-- OptimisticLockError
    |
    +-- AuthorizationError
        +-- PermissionDeniedError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Stock           | INSUFFICIENT_STOCK          | Requested quantity exceeds headroom
                | STOCK_ITEM_NOT_FOUND        | Stock item ID doesn't exist
----------------|-----------------------------|-----------------------------------------
Quota           | QUOTA_EXCEEDED              | Tenant already holds `total` orders
----------------|-----------------------------|-----------------------------------------
Order           | ORDER_NOT_FOUND             | Order ID doesn't exist
                | ORDER_FINALIZED_IMMUTABLE   | Editing content of a finalized order
                | INVALID_STATUS_TRANSITION   | Transition not in the order workflow
----------------|-----------------------------|-----------------------------------------
Invoice         | INVOICE_NOT_ELIGIBLE        | Not finalized / already invoiced
----------------|-----------------------------|-----------------------------------------
Expense         | EXPENSE_NOT_FOUND           | Expense ID doesn't exist for the tenant
----------------|-----------------------------|-----------------------------------------
Validation      | VALIDATION_FAILED           | Missing/invalid fields (list attached)
----------------|-----------------------------|-----------------------------------------
Concurrency     | OPTIMISTIC_LOCK_CONFLICT    | Row changed by another transaction
----------------|-----------------------------|-----------------------------------------
Authorization   | PERMISSION_DENIED           | Actor lacks edit permission for module
"""

from typing import Any


class WorkshopError(Exception):
    """
    Base exception for all workshop kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "WORKSHOP_ERROR"


# Stock-related exceptions


class StockError(WorkshopError):
    """Base exception for stock ledger errors."""

    code: str = "STOCK_ERROR"


class InsufficientStockError(StockError):
    """Requested quantity exceeds what the stock ledger can give."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, stock_item_id: Any, requested: int, available: int):
        self.stock_item_id = str(stock_item_id)
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for item {stock_item_id}: "
            f"requested {requested}, available {available}"
        )


class StockItemNotFoundError(StockError):
    """Stock item with given ID was not found."""

    code: str = "STOCK_ITEM_NOT_FOUND"

    def __init__(self, stock_item_id: Any):
        self.stock_item_id = str(stock_item_id)
        super().__init__(f"Stock item not found: {stock_item_id}")


# Quota-related exceptions


class QuotaError(WorkshopError):
    """Base exception for order quota errors."""

    code: str = "QUOTA_ERROR"


class QuotaExceededError(QuotaError):
    """Tenant reached its service order ceiling."""

    code: str = "QUOTA_EXCEEDED"

    def __init__(self, used: int, total: int):
        self.used = used
        self.total = total
        super().__init__(
            f"Order quota exceeded: using {used} of {total} available orders"
        )


# Order-related exceptions


class OrderError(WorkshopError):
    """Base exception for service order errors."""

    code: str = "ORDER_ERROR"


class OrderNotFoundError(OrderError):
    """Service order with given ID was not found."""

    code: str = "ORDER_NOT_FOUND"

    def __init__(self, order_id: Any):
        self.order_id = str(order_id)
        super().__init__(f"Service order not found: {order_id}")


class OrderFinalizedImmutableError(OrderError):
    """
    Attempted to change the content of a finalized order.

    Only invoice linkage and audit metadata may change after finalization.
    """

    code: str = "ORDER_FINALIZED_IMMUTABLE"

    def __init__(self, order_id: Any, fields: tuple[str, ...] = ()):
        self.order_id = str(order_id)
        self.fields = tuple(fields)
        detail = f" (fields: {', '.join(self.fields)})" if self.fields else ""
        super().__init__(
            f"Service order {order_id} is finalized and cannot be edited{detail}"
        )


class InvalidStatusTransitionError(OrderError):
    """Requested status change is not a transition of the order workflow."""

    code: str = "INVALID_STATUS_TRANSITION"

    def __init__(self, order_id: Any, from_status: str, to_status: str):
        self.order_id = str(order_id)
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Service order {order_id} cannot move from "
            f"{from_status} to {to_status}"
        )


# Invoice-related exceptions


class InvoiceError(WorkshopError):
    """Base exception for invoicing errors."""

    code: str = "INVOICE_ERROR"


class InvoiceNotEligibleError(InvoiceError):
    """Order may not have a fiscal document emitted against it."""

    code: str = "INVOICE_NOT_ELIGIBLE"

    def __init__(self, order_id: Any, reason: str):
        self.order_id = str(order_id)
        self.reason = reason
        super().__init__(
            f"Invoice cannot be emitted for order {order_id}: {reason}"
        )


# Financial exceptions


class ExpenseNotFoundError(WorkshopError):
    """Expense entry with given ID was not found."""

    code: str = "EXPENSE_NOT_FOUND"

    def __init__(self, expense_id: Any):
        self.expense_id = str(expense_id)
        super().__init__(f"Expense not found: {expense_id}")


# Validation


class ValidationFailedError(WorkshopError):
    """
    One or more input fields are missing or invalid.

    ``fields`` is a list of human-readable messages, one per problem, so the
    caller can render a correction form and re-submit.
    """

    code: str = "VALIDATION_FAILED"

    def __init__(self, fields: list[str]):
        self.fields = list(fields)
        super().__init__(
            f"Validation failed: {'; '.join(self.fields)}"
        )


# Concurrency-related exceptions


class ConcurrencyError(WorkshopError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class OptimisticLockError(ConcurrencyError):
    """Optimistic locking conflict detected."""

    code: str = "OPTIMISTIC_LOCK_CONFLICT"

    def __init__(self, entity_type: str, entity_id: Any):
        self.entity_type = entity_type
        self.entity_id = str(entity_id)
        super().__init__(
            f"Optimistic lock conflict on {entity_type} {entity_id}: "
            "entity was modified by another transaction"
        )


# Authorization


class AuthorizationError(WorkshopError):
    """Base exception for authorization errors."""

    code: str = "AUTHORIZATION_ERROR"


class PermissionDeniedError(AuthorizationError):
    """Actor is not allowed to mutate the given module."""

    code: str = "PERMISSION_DENIED"

    def __init__(self, actor_id: Any, module: str):
        self.actor_id = str(actor_id)
        self.module = module
        super().__init__(
            f"Actor {actor_id} is not allowed to edit {module}"
        )
