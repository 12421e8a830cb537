"""
workshop_engines.stock_delta -- Stock movements implied by an item-list change.

Responsibility:
    Compare two immutable snapshots of an order's item list and produce the
    per-line stock movements that bring the ledger from one to the other:

        old only        -> RELEASE old quantity
        new only        -> RESERVE new quantity
        both, changed   -> ADJUST old -> new (headroom = on_hand + old)
        both, unchanged -> nothing

    Creating an order is a diff from the empty snapshot; deleting one is a
    diff to the empty snapshot.  Every call site shares this one function,
    so the "give back the old quantity before checking the new one" rule is
    never re-derived by hand.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Conservation: applying the movements to on-hand quantities changes each
      item by exactly ``old_quantity - new_quantity``.
    - Idempotence: diffing a snapshot against itself yields no movements.
    - Deterministic order: movements are sorted by stock item id, which is
      also the order in which the ledger locks rows.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from workshop_engines.tracer import traced_engine


class StockMovement(str, Enum):
    """Kind of ledger call a line change needs."""

    RESERVE = "reserve"
    ADJUST = "adjust"
    RELEASE = "release"


@dataclass(frozen=True)
class ItemSnapshot:
    """
    Immutable ``{stock_item_id: quantity}`` view of an order's item list.

    Lines referencing the same stock item are summed.  Service lines that do
    not reference a stock item are not part of the snapshot.
    """

    quantities: tuple[tuple[Any, int], ...] = ()

    @classmethod
    def empty(cls) -> ItemSnapshot:
        return cls(())

    @classmethod
    def of(cls, items: Iterable[Any]) -> ItemSnapshot:
        totals: dict[Any, int] = {}
        for item in items:
            if isinstance(item, Mapping):
                stock_item_id = item.get("stock_item_id")
                quantity = item.get("quantity")
            else:
                stock_item_id = getattr(item, "stock_item_id", None)
                quantity = getattr(item, "quantity", None)
            if stock_item_id is None:
                continue
            totals[stock_item_id] = totals.get(stock_item_id, 0) + int(quantity or 0)
        return cls(tuple(sorted(totals.items(), key=lambda kv: str(kv[0]))))

    def as_dict(self) -> dict[Any, int]:
        return dict(self.quantities)

    def quantity_of(self, stock_item_id: Any) -> int:
        return self.as_dict().get(stock_item_id, 0)


@dataclass(frozen=True)
class LineChange:
    """One ledger call: move ``stock_item_id`` from ``old_quantity`` to ``new_quantity``."""

    stock_item_id: Any
    movement: StockMovement
    old_quantity: int
    new_quantity: int

    @property
    def on_hand_delta(self) -> int:
        """Signed change to on-hand stock once the call succeeds."""
        return self.old_quantity - self.new_quantity


@traced_engine("stock_delta", "1.0")
def diff_items(old: ItemSnapshot, new: ItemSnapshot) -> tuple[LineChange, ...]:
    """Movements that turn the ``old`` reservation set into ``new``."""
    before = old.as_dict()
    after = new.as_dict()
    changes: list[LineChange] = []

    for stock_item_id in sorted(set(before) | set(after), key=str):
        old_qty = before.get(stock_item_id, 0)
        new_qty = after.get(stock_item_id, 0)
        if old_qty == new_qty:
            continue
        if old_qty == 0:
            movement = StockMovement.RESERVE
        elif new_qty == 0:
            movement = StockMovement.RELEASE
        else:
            movement = StockMovement.ADJUST
        changes.append(LineChange(stock_item_id, movement, old_qty, new_qty))

    return tuple(changes)
