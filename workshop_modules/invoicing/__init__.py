"""
Invoicing Module (``workshop_modules.invoicing``).

Responsibility
--------------
Eligibility of finalized service orders for fiscal-document emission, the
line breakdown handed to the external emitter, and the record of what was
emitted.
"""

from workshop_modules.invoicing.models import (
    EmissionOutcome,
    EmittedDocument,
    Invoice,
    InvoiceEmitter,
    InvoiceStatus,
    InvoiceType,
)
from workshop_modules.invoicing.service import InvoicingService

__all__ = [
    "EmissionOutcome",
    "EmittedDocument",
    "Invoice",
    "InvoiceEmitter",
    "InvoiceStatus",
    "InvoiceType",
    "InvoicingService",
]
