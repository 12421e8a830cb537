"""
Service Order Pure Functions (``workshop_modules.orders.helpers``).

Responsibility
--------------
Display numbering for service orders and validation of item lists.  The
display number (``OS-00042``) is for people; lookups always use the UUID.

Architecture
------------
Layer: **Modules** -- pure helper functions.  No session, no clock.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

ORDER_NUMBER_PREFIX = "OS-"
ORDER_NUMBER_WIDTH = 5
_LEGACY_MODULUS = 99999
_NON_DIGITS = re.compile(r"\D")


def format_order_number(number: int) -> str:
    """``42`` -> ``"OS-00042"``.  Numbers wider than five digits are kept whole."""
    return f"{ORDER_NUMBER_PREFIX}{number:0{ORDER_NUMBER_WIDTH}d}"


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _legacy_hash(text: str) -> int:
    h = 0
    for ch in text:
        h = _to_int32((h << 5) - h + ord(ch))
    return h


def format_legacy_order_id(identifier: Any) -> str:
    """
    Display number for an order known only by an opaque identifier.

    Integers are used as-is.  Strings use their first five digits; strings
    without digits fall back to a 32-bit rolling hash folded into 1..99998.
    The result is stable for a given identifier but is not unique.
    """
    if isinstance(identifier, int):
        return format_order_number(identifier)

    text = str(identifier)
    digits = _NON_DIGITS.sub("", text)
    if digits:
        number = int(digits[:ORDER_NUMBER_WIDTH]) or 1
    else:
        number = abs(_legacy_hash(text)) % _LEGACY_MODULUS or 1
    return format_order_number(number)


def duplicate_stock_items(lines: Iterable[Any]) -> list[str]:
    """Stock item ids that appear on more than one line."""
    seen: set[str] = set()
    duplicates: list[str] = []
    for line in lines:
        key = str(line.stock_item_id)
        if key in seen and key not in duplicates:
            duplicates.append(key)
        seen.add(key)
    return duplicates
