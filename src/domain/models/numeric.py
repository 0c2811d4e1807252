"""Fixed-precision decimal arithmetic for money and percentages.

Every monetary or percentage value in the domain flows through this module.
Values are built only from strings, ints or existing Decimals; native floats
are rejected so binary representation error can never enter a calculation.

Arithmetic runs in a shared context: 40 significant digits, ROUND_HALF_UP,
so sums and products of two 20-digit operands stay exact.
Display rounding (to_fixed / quantize) uses a wider context so large amounts
can still be rounded to two places without overflowing the precision.
"""

from __future__ import annotations

from decimal import ROUND_DOWN, ROUND_HALF_UP, Context, Decimal, InvalidOperation
from typing import Annotated, Any, Iterable, Union

from pydantic import BeforeValidator, PlainSerializer

from src.domain.errors import DivisionByZero, InvalidDecimal

PRECISION = 40

CONTEXT = Context(prec=PRECISION, rounding=ROUND_HALF_UP)
_DISPLAY_CONTEXT = Context(prec=60, rounding=ROUND_HALF_UP)

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")

NumberLike = Union[str, int, Decimal]


def to_decimal(value: Any) -> Decimal:
    """Parse a str / int / Decimal into a finite Decimal.

    Raises InvalidDecimal for floats, booleans, None, empty strings,
    non-numeric text and non-finite values (NaN, Infinity).
    """
    if isinstance(value, bool) or value is None:
        raise InvalidDecimal(f"Not a decimal value: {value!r}")
    if isinstance(value, float):
        raise InvalidDecimal("Floating-point values are not accepted; pass a string")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidDecimal("Empty string is not a decimal value")
        try:
            result = Decimal(text)
        except InvalidOperation as exc:
            raise InvalidDecimal(f"Not a decimal value: {value!r}") from exc
    else:
        raise InvalidDecimal(f"Unsupported type for decimal: {type(value).__name__}")

    if not result.is_finite():
        raise InvalidDecimal(f"Non-finite decimal value: {value!r}")
    return result


def add(a: NumberLike, b: NumberLike) -> Decimal:
    return CONTEXT.add(to_decimal(a), to_decimal(b))


def subtract(a: NumberLike, b: NumberLike) -> Decimal:
    return CONTEXT.subtract(to_decimal(a), to_decimal(b))


def multiply(a: NumberLike, b: NumberLike) -> Decimal:
    return CONTEXT.multiply(to_decimal(a), to_decimal(b))


def divide(a: NumberLike, b: NumberLike) -> Decimal:
    divisor = to_decimal(b)
    if divisor.is_zero():
        raise DivisionByZero(f"Cannot divide {a} by zero")
    return CONTEXT.divide(to_decimal(a), divisor)


def compare(a: NumberLike, b: NumberLike) -> int:
    """Return -1, 0 or 1 as a is less than, equal to or greater than b."""
    return int(to_decimal(a).compare(to_decimal(b)))


def sum_decimals(values: Iterable[NumberLike]) -> Decimal:
    total = ZERO
    for v in values:
        total = CONTEXT.add(total, to_decimal(v))
    return total


def is_zero(value: NumberLike) -> bool:
    return to_decimal(value).is_zero()


def is_positive(value: NumberLike) -> bool:
    return to_decimal(value) > ZERO


def is_negative(value: NumberLike) -> bool:
    return to_decimal(value) < ZERO


def max_decimal(a: NumberLike, b: NumberLike) -> Decimal:
    da, db = to_decimal(a), to_decimal(b)
    return da if da >= db else db


def min_decimal(a: NumberLike, b: NumberLike) -> Decimal:
    da, db = to_decimal(a), to_decimal(b)
    return da if da <= db else db


def percent_of(part: NumberLike, total: NumberLike) -> Decimal:
    """part / total * 100, or 0 when total is zero."""
    if is_zero(total):
        return ZERO
    return multiply(divide(part, total), HUNDRED)


def quantize(value: NumberLike, places: int, rounding: str = ROUND_HALF_UP) -> Decimal:
    exponent = ONE.scaleb(-places)
    return to_decimal(value).quantize(exponent, rounding=rounding, context=_DISPLAY_CONTEXT)


def quantize_down(value: NumberLike, places: int) -> Decimal:
    return quantize(value, places, rounding=ROUND_DOWN)


def to_fixed(value: NumberLike, places: int) -> str:
    """Format with exactly ``places`` fractional digits, rounding half up."""
    return format(quantize(value, places), "f")


def to_plain(value: NumberLike) -> str:
    """Shortest plain-notation string: "10", "0.5", "0" (never exponent form)."""
    d = to_decimal(value)
    if d.is_zero():
        return "0"
    return format(d.normalize(context=_DISPLAY_CONTEXT), "f")


# ------------------------------------------------------------------------- #
# Pydantic integration                                                       #
# ------------------------------------------------------------------------- #


def _coerce(value: Any) -> Decimal:
    try:
        return to_decimal(value)
    except InvalidDecimal as exc:
        raise ValueError(exc.message) from exc


# Decimal field that only accepts str / int / Decimal input and always
# serializes back to a plain decimal string.
DecimalStr = Annotated[
    Decimal,
    BeforeValidator(_coerce),
    PlainSerializer(to_plain, return_type=str),
]
