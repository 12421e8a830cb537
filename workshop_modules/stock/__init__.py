"""
Stock Module (``workshop_modules.stock``).

Responsibility
--------------
Parts on the shelf: on-hand quantities, reservations taken by service
orders, replenishment purchases and the valuation figures of the stock
screen.

Architecture
------------
Layer: **Modules**.  ``StockLedger`` is flush-only and is driven by the
order service; ``StockService`` owns its own transactions for item
registration and purchases.
"""

from workshop_modules.stock.helpers import (
    current_stock_value,
    items_needing_replenishment,
    stock_status,
    total_invested,
)
from workshop_modules.stock.models import PurchaseHistoryEntry, StockItem, StockStatus
from workshop_modules.stock.service import StockLedger, StockService

__all__ = [
    "PurchaseHistoryEntry",
    "StockItem",
    "StockLedger",
    "StockService",
    "StockStatus",
    "current_stock_value",
    "items_needing_replenishment",
    "stock_status",
    "total_invested",
]
