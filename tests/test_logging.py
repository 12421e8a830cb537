"""Tests for the structured logging system (workshop_kernel/logging_config.py)."""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from workshop_kernel.exceptions import InsufficientStockError
from workshop_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)
from workshop_modules.orders.models import OrderStatus


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests, then restore the suite's configuration."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG)


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


class TestStructuredFormatter:

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        (record,) = _parse_all_logs(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "workshop_kernel.test"
        assert "ts" in record

    def test_extra_fields_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        order_id = uuid4()
        get_logger("test").info(
            "order_updated",
            extra={"order_id": order_id, "value": Decimal("75.00"), "status": OrderStatus.FINALIZED},
        )

        (record,) = _parse_all_logs(stream)
        assert record["order_id"] == str(order_id)
        assert record["value"] == "75.00"
        assert record["status"] == "finalized"

    def test_workshop_error_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise InsufficientStockError("part-1", 4, 3)
        except InsufficientStockError:
            get_logger("test").error("reservation_failed", exc_info=True)

        (record,) = _parse_all_logs(stream)
        assert record["exc_type"] == "InsufficientStockError"
        assert record["exc_code"] == "INSUFFICIENT_STOCK"
        assert record["exc_requested"] == 4
        assert record["exc_available"] == 3
        assert "traceback" in record


class TestLogContext:

    def test_bound_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)

        with LogContext.bind(actor_id="actor-1", tenant_id="tenant-1"):
            get_logger("test").info("inside")
        get_logger("test").info("outside")

        inside, outside = _parse_all_logs(stream)
        assert inside["actor_id"] == "actor-1"
        assert inside["tenant_id"] == "tenant-1"
        assert "actor_id" not in outside

    def test_none_values_not_bound(self):
        with LogContext.bind(order_id=None, actor_id="a"):
            assert LogContext.get_all() == {"actor_id": "a"}

    def test_nested_bind_restores(self):
        with LogContext.bind(order_id="outer"):
            with LogContext.bind(order_id="inner"):
                assert LogContext.get_all()["order_id"] == "inner"
            assert LogContext.get_all()["order_id"] == "outer"

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError, match="stock_item_id"):
            with LogContext.bind(stock_item_id="p-1"):
                pass

        assert LogContext.get_all() == {}


class TestConfigureLogging:

    def test_idempotent(self):
        handler, _ = _make_handler()
        configure_logging(handler=handler)
        configure_logging(handler=handler)

        assert len(logging.getLogger("workshop_kernel").handlers) == 1

    def test_does_not_propagate_to_root(self):
        configure_logging()

        assert logging.getLogger("workshop_kernel").propagate is False

    def test_level_name_from_config(self):
        from workshop_config import get_active_config

        configure_logging(level=get_active_config().logging.level.lower())

        assert logging.getLogger("workshop_kernel").level == logging.INFO
