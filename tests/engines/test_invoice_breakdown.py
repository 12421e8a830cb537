"""
Tests for the invoice breakdown engine.

Covers:
- Routing of lines to the product and service documents
- The labor line and its threshold
- Dropping zero lines
- The single-line fallback and the empty-order failure
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from workshop_engines.invoice_breakdown import (
    DEFAULT_ITEM_TEXT,
    PRODUCT_DOCUMENT,
    SERVICE_DOCUMENT,
    build_invoice_breakdown,
)
from workshop_kernel.exceptions import ValidationFailedError
from workshop_modules.orders.models import ItemKind


def _order(items=(), labor_cost="0", value="0", service="Brake service"):
    return {
        "id": uuid4(),
        "service": service,
        "labor_cost": Decimal(labor_cost),
        "value": Decimal(value),
        "items": list(items),
    }


def _item(quantity, unit_price, kind="product", description="Brake pads"):
    return {
        "quantity": quantity,
        "unit_price": Decimal(unit_price),
        "kind": kind,
        "description": description,
    }


class TestDocumentRouting:

    def test_products_and_labor(self):
        order = _order(items=[_item(2, "10")], labor_cost="50", value="70")

        breakdown = build_invoice_breakdown(order)

        assert breakdown.documents == (PRODUCT_DOCUMENT, SERVICE_DOCUMENT)
        assert breakdown.total_for(PRODUCT_DOCUMENT) == Decimal("20")
        (labor,) = breakdown.service_lines
        assert labor.description == "Labor - Brake service"
        assert labor.quantity == Decimal("1")
        assert labor.unit_price == Decimal("50.00")

    def test_service_kind_goes_to_service_document(self):
        order = _order(items=[_item(1, "80", kind=ItemKind.SERVICE, description="Alignment")])

        breakdown = build_invoice_breakdown(order)

        assert breakdown.product_lines == ()
        assert breakdown.service_lines[0].description == "Alignment"

    def test_line_numbers_are_sequential(self):
        order = _order(
            items=[_item(1, "10"), _item(1, "20", kind="service")],
            labor_cost="5",
        )

        breakdown = build_invoice_breakdown(order)

        assert sorted(line.number for line in breakdown.lines) == [1, 2, 3]


class TestLineFiltering:

    def test_zero_quantity_and_price_dropped(self):
        order = _order(items=[_item(0, "10"), _item(2, "0"), _item(1, "15")])

        breakdown = build_invoice_breakdown(order)

        assert len(breakdown.product_lines) == 1
        assert breakdown.product_lines[0].unit_price == Decimal("15")

    def test_labor_at_threshold_not_billed(self):
        order = _order(items=[_item(1, "15")], labor_cost="0.01")

        assert build_invoice_breakdown(order).service_lines == ()

    def test_custom_threshold(self):
        order = _order(items=[_item(1, "15")], labor_cost="5")

        breakdown = build_invoice_breakdown(order, labor_threshold=Decimal("10"))

        assert breakdown.service_lines == ()

    def test_blank_description_gets_default(self):
        order = _order(items=[_item(1, "15", description="  ")])

        assert build_invoice_breakdown(order).product_lines[0].description == DEFAULT_ITEM_TEXT


class TestFallback:

    def test_value_only_order_becomes_one_service_line(self):
        order = _order(value="120", service="Diagnosis")

        breakdown = build_invoice_breakdown(order)

        (line,) = breakdown.service_lines
        assert line.description == "Diagnosis"
        assert line.unit_price == Decimal("120")

    def test_missing_value_is_recomputed(self):
        order = _order(items=[_item(3, "2.50")], labor_cost="0", value="0")

        assert build_invoice_breakdown(order).order_value == Decimal("7.50")

    def test_nothing_to_invoice_fails(self):
        order = _order(value="0")

        with pytest.raises(ValidationFailedError) as exc_info:
            build_invoice_breakdown(order)

        assert exc_info.value.code == "VALIDATION_FAILED"
        assert exc_info.value.fields == ["The service order value must be greater than zero"]
