"""Decimal helpers shared by the ledger and the amortization math."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from .errors import ValidationError

MoneyInput = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: MoneyInput, *, field: str = "amount") -> Decimal:
    """Coerce *value* into a Decimal, rejecting anything non-numeric."""

    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number, not a boolean")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        # str() keeps the shortest repr, so 0.1 becomes Decimal("0.1")
        result = Decimal(str(value))
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValidationError(f"{field} is not a valid number: {value!r}") from exc
    else:
        raise ValidationError(f"{field} must be numeric, got {type(value).__name__}")
    if not result.is_finite():
        raise ValidationError(f"{field} must be finite, got {value!r}")
    return result


def positive_amount(value: MoneyInput, *, field: str = "amount") -> Decimal:
    """Return *value* as a Decimal that is strictly greater than zero."""

    amount = to_decimal(value, field=field)
    if amount <= ZERO:
        raise ValidationError(f"{field} must be greater than zero, got {amount}")
    return amount


def round_currency(value: Decimal) -> Decimal:
    """Round to cents using half-up rounding."""

    return value.quantize(CENT, rounding=ROUND_HALF_UP)


__all__ = ["CENT", "ZERO", "MoneyInput", "positive_amount", "round_currency", "to_decimal"]
