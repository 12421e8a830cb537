"""
Invoicing Domain Models (``workshop_modules.invoicing.models``).

Responsibility
--------------
Frozen value objects exchanged with the external fiscal-document emitter,
and the ``InvoiceEmitter`` protocol that emitter implements.

Architecture
------------
Layer: **Modules** -- pure domain data structures, no I/O.  XML/PDF
generation and tax computation live behind ``InvoiceEmitter``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Protocol
from uuid import UUID

from workshop_engines.invoice_breakdown import InvoiceBreakdown


class InvoiceType(str, Enum):
    PRODUCT_DOCUMENT = "product_document"
    SERVICE_DOCUMENT = "service_document"


class InvoiceStatus(str, Enum):
    ISSUED = "issued"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Invoice:
    id: UUID
    service_order_id: UUID
    type: InvoiceType
    status: InvoiceStatus
    amount: Decimal
    number: str | None = None
    issued_at: datetime | None = None


@dataclass(frozen=True)
class EmittedDocument:
    """One document the emitter produced."""
    type: InvoiceType
    number: str
    amount: Decimal


@dataclass(frozen=True)
class EmissionOutcome:
    """
    What the emitter returns.

    Either ``documents`` (success) or ``validation_errors`` (the caller
    corrects the listed fields and tries again).
    """
    documents: tuple[EmittedDocument, ...] = ()
    validation_errors: tuple[str, ...] = ()

    def __post_init__(self):
        if self.documents and self.validation_errors:
            raise ValueError("An emission outcome cannot both succeed and fail validation")

    @property
    def succeeded(self) -> bool:
        return bool(self.documents) and not self.validation_errors


class InvoiceEmitter(Protocol):
    """External fiscal-document service."""

    def emit(
        self,
        breakdown: InvoiceBreakdown,
        corrections: dict[str, Any] | None,
    ) -> EmissionOutcome:
        ...
