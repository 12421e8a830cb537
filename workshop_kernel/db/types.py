"""
Module: workshop_kernel.db.types
Responsibility: Annotated type aliases and the rounding function for money
    columns.  Centralizes precision so that every model and service uses
    identical type definitions.
Architecture position: Kernel > DB.  May be imported by ORM modules, domain,
    services and engines.  MUST NOT import from any of those layers.

Invariants enforced:
    - No floats anywhere.  All monetary amounts use Decimal.
    - round_money() is the ONLY sanctioned rounding function.  It is applied
      once, at persistence time, never at intermediate steps.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Annotated, Any

from sqlalchemy import Numeric, String

# Monetary amount: 38 digits total, 9 decimal places
Money = Annotated[Decimal, Numeric(38, 9)]

# Short identifier strings (status, kind, category)
ShortCode = Annotated[str, String(50)]

# Long text for descriptions
LongText = Annotated[str, String(4000)]

CENT_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP


def round_money(
    value: Decimal,
    decimal_places: int = CENT_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the given number of decimal places.

    Preconditions: value is a Decimal.
    Postconditions: Returns value quantized with the given rounding mode.
    """
    quantize_str = "0." + "0" * decimal_places
    return value.quantize(Decimal(quantize_str), rounding=rounding)


def to_decimal(value: Any) -> Decimal:
    """
    Coerce an untrusted numeric input to Decimal, treating missing as zero.

    ``None``, empty strings and unparsable values become ``Decimal("0")``.
    Floats go through ``str()`` so ``0.1`` becomes ``Decimal("0.1")``.
    """
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, float):
        value = str(value)
    try:
        result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return Decimal("0")
    if not result.is_finite():
        return Decimal("0")
    return result
