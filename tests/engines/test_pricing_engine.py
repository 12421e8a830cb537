"""
Tests for the service order pricing engine.

Covers:
- Order value formula (items plus labor)
- Defensive clamping of missing and negative inputs
- Single rounding of the persisted total
- Engine trace logging
"""

from decimal import Decimal
from types import SimpleNamespace

from workshop_engines.pricing import PricingCalculator, compute_total, line_total


class TestOrderValue:
    """value = sum(quantity * unit_price) + labor_cost"""

    def setup_method(self):
        self.calculator = PricingCalculator()

    def test_labor_plus_two_lines(self):
        """Labor 50 with lines 2x10 and 1x5 is worth 75."""
        result = self.calculator.price(
            labor_cost=Decimal("50"),
            items=[
                {"quantity": 2, "unit_price": Decimal("10")},
                {"quantity": 1, "unit_price": Decimal("5")},
            ],
        )

        assert result.items_total == Decimal("25")
        assert result.labor_cost == Decimal("50")
        assert result.total == Decimal("75")
        assert result.line_count == 2

    def test_lines_as_objects(self):
        """Lines may be any object exposing quantity and unit_price."""
        items = [SimpleNamespace(quantity=3, unit_price=Decimal("12.50"))]

        assert compute_total(Decimal("0"), items) == Decimal("37.50")

    def test_no_items_is_labor_only(self):
        assert compute_total("120.00", []) == Decimal("120.00")

    def test_empty_order_is_zero(self):
        result = self.calculator.price(labor_cost=None, items=[])

        assert result.total == Decimal("0")
        assert result.line_count == 0


class TestDefensiveInputs:
    """Garbage input degrades to zero contributions instead of failing."""

    def setup_method(self):
        self.calculator = PricingCalculator()

    def test_negative_labor_clamped(self):
        result = self.calculator.price(
            labor_cost=Decimal("-30"),
            items=[{"quantity": 1, "unit_price": Decimal("10")}],
        )

        assert result.labor_cost == Decimal("0")
        assert result.total == Decimal("10")

    def test_missing_price_counts_as_zero(self):
        total = compute_total(
            "10",
            [{"quantity": 2, "unit_price": None}, {"quantity": 1, "unit_price": "4"}],
        )

        assert total == Decimal("14")

    def test_negative_quantity_clamped(self):
        assert line_total(-2, Decimal("10")) == Decimal("0")

    def test_unparsable_strings(self):
        assert line_total("abc", "10") == Decimal("0")

    def test_float_inputs_go_through_str(self):
        assert line_total(3, 0.1) == Decimal("0.3")


class TestRounding:
    """No intermediate rounding; the persisted figure is rounded once."""

    def test_exact_total_kept(self):
        result = PricingCalculator().price(
            labor_cost=Decimal("0"),
            items=[{"quantity": 3, "unit_price": Decimal("0.335")}],
        )

        assert result.total == Decimal("1.005")
        assert result.rounded_total == Decimal("1.01")

    def test_rounding_per_line_would_differ(self):
        """Three lines of 0.333 sum to 0.999 before rounding, i.e. 1.00."""
        items = [{"quantity": 1, "unit_price": Decimal("0.333")}] * 3
        result = PricingCalculator().price(labor_cost=0, items=items)

        assert result.rounded_total == Decimal("1.00")

    def test_purity(self):
        items = [{"quantity": 2, "unit_price": Decimal("19.99")}]

        assert compute_total("5", items) == compute_total("5", items)


class TestPricingTrace:

    def test_trace_emitted(self, captured_logs):
        PricingCalculator().price(labor_cost=Decimal("50"), items=[])

        traces = [r for r in captured_logs() if r["message"] == "WORKSHOP_ENGINE_TRACE"]
        assert traces
        assert traces[-1]["engine_name"] == "pricing"
        assert len(traces[-1]["input_fingerprint"]) == 16
