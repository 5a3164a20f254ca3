"""Decimal parsing for user-supplied amounts and rates."""

from decimal import Decimal, InvalidOperation

from ledger_kernel.exceptions import InvalidAmountError, InvalidRateError


def _parse(value: object) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        parsed = value
    else:
        try:
            parsed = Decimal(str(value).strip().replace(",", ""))
        except (InvalidOperation, ValueError):
            return None
    if not parsed.is_finite():
        return None
    return parsed


def is_blank_amount(value: object) -> bool:
    """True for an empty cell or one holding zero in any spelling ("0", "0.00", 0.0)."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return True
    parsed = _parse(value)
    return parsed is not None and parsed == 0


def parse_amount(value: object, field: str, *, allow_zero: bool = False) -> Decimal:
    """
    Parse a principal amount.

    Raises:
        InvalidAmountError: non-numeric, negative, or zero (unless allowed).
    """
    parsed = _parse(value)
    if parsed is None:
        raise InvalidAmountError(field, value, "not a number")
    if parsed < 0 or (parsed == 0 and not allow_zero):
        raise InvalidAmountError(field, value, "must be greater than zero")
    return parsed


def parse_signed_amount(value: object, field: str) -> Decimal:
    """Parse a signed, non-zero amount (cash entries)."""
    parsed = _parse(value)
    if parsed is None:
        raise InvalidAmountError(field, value, "not a number")
    if parsed == 0:
        raise InvalidAmountError(field, value, "must not be zero")
    return parsed


def parse_rate(value: object, field: str, *, strictly_positive: bool = False) -> Decimal:
    """
    Parse a dealing or exchange rate.

    Raises:
        InvalidRateError: non-numeric, negative, or zero when a positive
            rate is required.
    """
    parsed = _parse(value)
    if parsed is None:
        raise InvalidRateError(field, value, "not a number")
    if parsed < 0:
        raise InvalidRateError(field, value, "must not be negative")
    if strictly_positive and parsed == 0:
        raise InvalidRateError(field, value, "must be greater than zero")
    return parsed
