"""
Tests for the financial aggregator.

Covers:
- Monthly revenue from transactions and finalized orders
- Linked revenue transactions suppressing their order
- Expenses from transactions and the expense ledger
- Profit, margin and month-over-month growth
- Expense status bucketing
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

from workshop_engines.financial import (
    MonthlySummary,
    expense_status_for,
    expense_status_totals,
    in_month,
    monthly_summary,
    order_counts,
    previous_month,
    recent_finalized,
    revenue_growth,
)


def _tx(kind, value, when, service_order_id=None):
    return {
        "type": kind,
        "value": Decimal(value),
        "transaction_date": when,
        "service_order_id": service_order_id,
    }


def _order(value, when, status="finalized", order_id=None):
    return {"id": order_id or uuid4(), "value": Decimal(value), "order_date": when, "status": status}


class TestMonthlySummary:

    def test_revenue_sources_are_added(self):
        summary = monthly_summary(
            year=2024,
            month=1,
            transactions=[_tx("revenue", "100", date(2024, 1, 3))],
            orders=[_order("75", date(2024, 1, 10))],
        )

        assert summary.revenue_from_transactions == Decimal("100")
        assert summary.revenue_from_orders == Decimal("75")
        assert summary.revenue == Decimal("175")

    def test_only_finalized_orders_count(self):
        summary = monthly_summary(
            year=2024,
            month=1,
            orders=[
                _order("75", date(2024, 1, 10)),
                _order("40", date(2024, 1, 11), status="in_progress"),
                _order("30", date(2024, 1, 12), status="awaiting_parts"),
            ],
        )

        assert summary.revenue_from_orders == Decimal("75")

    def test_other_months_ignored(self):
        summary = monthly_summary(
            year=2024,
            month=1,
            transactions=[_tx("revenue", "100", date(2023, 12, 31))],
            orders=[_order("75", date(2024, 2, 1))],
            expenses=[{"amount": Decimal("10"), "expense_date": date(2024, 2, 1)}],
        )

        assert summary.revenue == Decimal("0")
        assert summary.expenses == Decimal("0")

    def test_linked_revenue_transaction_suppresses_order(self):
        """A revenue transaction tagged with an order replaces that order's value."""
        order_id = uuid4()
        summary = monthly_summary(
            year=2024,
            month=1,
            transactions=[_tx("revenue", "75", date(2024, 1, 20), service_order_id=order_id)],
            orders=[_order("75", date(2024, 1, 10), order_id=order_id)],
        )

        assert summary.revenue == Decimal("75")
        assert summary.revenue_from_orders == Decimal("0")

    def test_link_recorded_in_another_month_still_suppresses(self):
        order_id = uuid4()
        summary = monthly_summary(
            year=2024,
            month=1,
            transactions=[_tx("revenue", "75", date(2024, 2, 2), service_order_id=str(order_id))],
            orders=[_order("75", date(2024, 1, 10), order_id=order_id)],
        )

        assert summary.revenue == Decimal("0")

    def test_expense_sources_use_absolute_values(self):
        summary = monthly_summary(
            year=2024,
            month=1,
            transactions=[_tx("expense", "-30", date(2024, 1, 5))],
            expenses=[{"amount": Decimal("20"), "expense_date": date(2024, 1, 6)}],
        )

        assert summary.expenses_from_transactions == Decimal("30")
        assert summary.expenses_from_ledger == Decimal("20")
        assert summary.expenses == Decimal("50")

    def test_profit_and_margin(self):
        summary = MonthlySummary(2024, 1, Decimal("150"), Decimal("50"), Decimal("40"), Decimal("10"))

        assert summary.profit == Decimal("150")
        assert summary.margin == Decimal("75")

    def test_margin_zero_without_revenue(self):
        summary = MonthlySummary(2024, 1, Decimal("0"), Decimal("0"), Decimal("40"), Decimal("0"))

        assert summary.profit == Decimal("-40")
        assert summary.margin == Decimal("0")

    def test_datetime_and_iso_strings_accepted(self):
        assert in_month(datetime(2024, 1, 31, 23, 0, tzinfo=timezone.utc), 2024, 1)
        assert in_month("2024-01-15T10:00:00", 2024, 1)
        assert not in_month("not a date", 2024, 1)
        assert not in_month(None, 2024, 1)


class TestGrowth:

    def test_growth_percentage(self):
        assert revenue_growth(Decimal("150"), Decimal("100")) == Decimal("50")

    def test_decline(self):
        assert revenue_growth(Decimal("50"), Decimal("100")) == Decimal("-50")

    def test_no_previous_revenue(self):
        assert revenue_growth(Decimal("10"), Decimal("0")) == Decimal("100")
        assert revenue_growth(Decimal("0"), Decimal("0")) == Decimal("0")

    def test_previous_month_wraps_year(self):
        assert previous_month(2024, 1) == (2023, 12)
        assert previous_month(2024, 7) == (2024, 6)


class TestExpenseStatus:

    def test_past_due_is_overdue(self):
        assert expense_status_for(date(2024, 1, 10), date(2024, 1, 15)) == "overdue"

    def test_today_or_later_is_pending(self):
        assert expense_status_for(date(2024, 1, 15), date(2024, 1, 15)) == "pending"
        assert expense_status_for(date(2024, 2, 1), date(2024, 1, 15)) == "pending"

    def test_totals_by_status(self):
        totals = expense_status_totals([
            {"status": "paid", "amount": Decimal("10")},
            {"status": "paid", "amount": Decimal("5")},
            {"status": "pending", "amount": Decimal("7")},
            {"status": "overdue", "amount": Decimal("3")},
        ])

        assert totals.paid == Decimal("15")
        assert totals.pending == Decimal("7")
        assert totals.overdue == Decimal("3")
        assert totals.total == Decimal("25")


class TestOrderRollups:

    def test_counts(self):
        orders = [
            _order("10", date(2024, 1, 2)),
            _order("10", date(2023, 12, 2)),
            _order("10", date(2024, 1, 3), status="in_progress"),
            _order("10", date(2023, 11, 3), status="awaiting_parts"),
        ]

        counts = order_counts(orders, 2024, 1)

        assert counts.open_orders == 2
        assert counts.finalized_in_month == 1

    def test_recent_finalized_newest_first(self):
        orders = [_order("10", date(2024, 1, day)) for day in range(1, 9)]
        orders.append(_order("10", date(2024, 1, 20), status="in_progress"))

        recent = recent_finalized(orders)

        assert len(recent) == 5
        assert [o["order_date"].day for o in recent] == [8, 7, 6, 5, 4]
