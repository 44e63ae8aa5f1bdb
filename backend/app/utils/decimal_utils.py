"""
Decimal precision utilities for KidLedger.

Money columns in the database use NUMERIC(10, 2). These helpers read the
precision from the model definitions instead of hardcoding it, and turn
user input into Decimals with that scale.

Usage:
    from backend.app.utils.decimal_utils import parse_money, quantize_money, format_money

    amount = parse_money("25.5")        # Decimal("25.50")
    format_money(amount)                # "25.50"
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Type, Tuple, Union

from sqlalchemy import Numeric
from sqlmodel import SQLModel

from backend.app.db.models import Account

MoneyInput = Union[str, int, float, Decimal]


class MoneyRangeError(ValueError):
    """A well-formed number that does not fit the NUMERIC(10, 2) money columns."""


def get_model_column_precision(model: Type[SQLModel], column_name: str) -> Tuple[int, int]:
    """
    Get (precision, scale) for a numeric column from SQLModel.

    Args:
        model: SQLModel table class (e.g., Account, Transaction)
        column_name: Column name (e.g., "balance", "amount")

    Returns:
        Tuple of (precision, scale). Example: (10, 2)

    Raises:
        ValueError: If column not found or not a Numeric type

    Example:
        >>> get_model_column_precision(Account, "balance")
        (10, 2)
    """
    if not hasattr(model, '__table__'):
        raise ValueError(f"Model {model.__name__} has no __table__ attribute")

    table = model.__table__

    if column_name not in table.columns:
        raise ValueError(f"Column '{column_name}' not found in {model.__name__}")

    column_type = table.columns[column_name].type

    if not isinstance(column_type, Numeric):
        raise ValueError(
            f"Column '{column_name}' in {model.__name__} is not Numeric type "
            f"(found: {type(column_type).__name__})"
            )

    precision = column_type.precision
    scale = column_type.scale

    if precision is None or scale is None:
        raise ValueError(f"Column '{column_name}' in {model.__name__} has undefined precision/scale")

    return precision, scale


_MONEY_PRECISION, _MONEY_SCALE = get_model_column_precision(Account, "balance")
MONEY_QUANTUM = Decimal(10) ** -_MONEY_SCALE
ZERO = Decimal("0").quantize(MONEY_QUANTUM)


def quantize_money(value: Decimal) -> Decimal:
    """
    Round a Decimal to the money scale (2 fractional digits, half-up).

    >>> quantize_money(Decimal("10.005"))
    Decimal('10.01')
    """
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def parse_money(value: MoneyInput) -> Decimal:
    """
    Parse user input into a money Decimal.

    Accepts numeric strings (surrounding whitespace ignored), ints, Decimals
    and floats (converted through ``str`` so binary artifacts are not carried
    over). The result is quantized with :func:`quantize_money` and must fit
    the money columns.

    Raises:
        MoneyRangeError: If the value has more integer digits than NUMERIC(10, 2) allows
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a monetary amount: {value!r}")
    if isinstance(value, float):
        value = str(value)
    if isinstance(value, str):
        value = value.strip()

    try:
        parsed = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError(f"Not a monetary amount: {value!r}")

    if not parsed.is_finite():
        raise ValueError(f"Not a monetary amount: {value!r}")

    try:
        amount = quantize_money(parsed)
    except InvalidOperation:
        # Too many digits to quantize within the decimal context (e.g. "1e30")
        raise MoneyRangeError(f"Amount out of range: {value!r}") from None

    if not fits_money_column(amount):
        raise MoneyRangeError(f"Amount out of range: {value!r}")
    return amount


def format_money(value: Decimal) -> str:
    """Render a money Decimal with exactly two fractional digits ("75.50")."""
    return f"{quantize_money(value):.{_MONEY_SCALE}f}"


def fits_money_column(value: Decimal) -> bool:
    """Check that ``value`` has at most NUMERIC(10, 2) integer digits."""
    max_abs = Decimal(10) ** (_MONEY_PRECISION - _MONEY_SCALE)
    return abs(value) < max_abs
