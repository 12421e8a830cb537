"""
Workshop Modules.

Thin orchestration layers over the workshop kernel and engines.  Each module
contains domain models (the nouns), ORM persistence, pure helpers and a
service that owns its transactions.

Modules:
- stock: parts on hand, reservations, replenishment purchases
- orders: service order lifecycle, quota guard, display numbers
- invoicing: emission eligibility and the handoff to the fiscal emitter
- financial: transactions, expenses, monthly rollup
"""

from workshop_modules import financial, invoicing, orders, stock

__all__ = [
    "financial",
    "invoicing",
    "orders",
    "stock",
]
