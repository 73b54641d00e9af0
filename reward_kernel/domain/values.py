"""
Values -- Decimal arithmetic helpers for money, day counts and percentages.

Responsibility:
    Central place for numeric coercion and the reporting-boundary rounding
    rules used by every engine record.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by the models and by every engine module.

Invariants enforced:
    - Decimal-only arithmetic: floats are rejected by ``to_decimal``.
    - Money is reported in whole currency units, half away from zero
      (``ROUND_HALF_UP`` on Decimal rounds away from zero for negatives).
    - Days and percentages are reported to one decimal place.

Failure modes:
    - TypeError when a float is passed to ``to_decimal``.
    - ValueError when a string is not a valid decimal number
      or the value is NaN or infinite.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

ZERO = Decimal("0")
HUNDRED = Decimal("100")

_WHOLE_UNIT = Decimal("1")
_ONE_DECIMAL = Decimal("0.1")


def to_decimal(value: Decimal | int | str) -> Decimal:
    """
    Coerce ``value`` to ``Decimal``.

    Floats are refused: a binary float carries representation error into
    every downstream money figure.

    Raises:
        TypeError: If ``value`` is a float or an unsupported type.
        ValueError: If ``value`` is a string that is not a decimal number,
            or if it is NaN or infinite.
    """
    if isinstance(value, bool) or not isinstance(value, (Decimal, int, str)):
        raise TypeError(f"Expected Decimal, int or str, got {type(value).__name__}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise ValueError(f"Invalid decimal value: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Decimal value must be finite, got {value!r}")
    return result


def round_money(amount: Decimal) -> Decimal:
    """Round a money amount to whole currency units, half away from zero."""
    return amount.quantize(_WHOLE_UNIT, rounding=ROUND_HALF_UP)


def round_days(days: Decimal) -> Decimal:
    """Round a day count to one decimal."""
    return days.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)


def round_percent(percent: Decimal) -> Decimal:
    """Round a percentage to one decimal."""
    return percent.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)
