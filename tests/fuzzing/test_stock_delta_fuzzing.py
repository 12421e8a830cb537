"""
Hypothesis-based fuzzing of the pure order engines.

Properties:
- Applying the diff between two item snapshots moves each stock item by
  exactly old minus new, and a snapshot diffed against itself is empty.
- Diffs compose: old -> mid -> new nets out to old -> new.
- Order value is never negative, whatever the inputs.
"""

from decimal import Decimal
from uuid import UUID

from hypothesis import given, settings
from hypothesis import strategies as st

from workshop_engines.pricing import compute_total
from workshop_engines.stock_delta import ItemSnapshot, StockMovement, diff_items

PARTS = [UUID(int=n) for n in range(1, 7)]

item_lists = st.lists(
    st.fixed_dictionaries({
        "stock_item_id": st.sampled_from(PARTS),
        "quantity": st.integers(min_value=1, max_value=50),
    }),
    max_size=8,
)


def _apply(on_hand: dict, changes) -> dict:
    result = dict(on_hand)
    for change in changes:
        result[change.stock_item_id] = result.get(change.stock_item_id, 0) + change.on_hand_delta
    return result


class TestStockDeltaProperties:

    @given(old=item_lists, new=item_lists)
    @settings(max_examples=200)
    def test_conservation(self, old, new):
        before, after = ItemSnapshot.of(old), ItemSnapshot.of(new)

        moved = _apply({}, diff_items(before, after))

        for part in PARTS:
            assert moved.get(part, 0) == before.quantity_of(part) - after.quantity_of(part)

    @given(items=item_lists)
    def test_self_diff_is_empty(self, items):
        snapshot = ItemSnapshot.of(items)

        assert diff_items(snapshot, snapshot) == ()

    @given(old=item_lists, mid=item_lists, new=item_lists)
    def test_diffs_compose(self, old, mid, new):
        a, b, c = ItemSnapshot.of(old), ItemSnapshot.of(mid), ItemSnapshot.of(new)

        stepwise = _apply(_apply({}, diff_items(a, b)), diff_items(b, c))
        direct = _apply({}, diff_items(a, c))

        for part in PARTS:
            assert stepwise.get(part, 0) == direct.get(part, 0)

    @given(old=item_lists, new=item_lists)
    def test_movement_kinds(self, old, new):
        for change in diff_items(ItemSnapshot.of(old), ItemSnapshot.of(new)):
            if change.movement is StockMovement.RESERVE:
                assert change.old_quantity == 0 < change.new_quantity
            elif change.movement is StockMovement.RELEASE:
                assert change.new_quantity == 0 < change.old_quantity
            else:
                assert change.old_quantity > 0 and change.new_quantity > 0


class TestPricingProperties:

    @given(
        labor=st.decimals(min_value=-1000, max_value=1000, allow_nan=False, places=2),
        lines=st.lists(
            st.tuples(
                st.integers(min_value=-5, max_value=50),
                st.decimals(min_value=-100, max_value=1000, allow_nan=False, places=2),
            ),
            max_size=10,
        ),
    )
    def test_value_never_negative(self, labor, lines):
        items = [{"quantity": q, "unit_price": p} for q, p in lines]

        assert compute_total(labor, items) >= Decimal("0")
