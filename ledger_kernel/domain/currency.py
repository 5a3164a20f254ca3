"""Currency -- base-currency conversion by per-currency multiply/divide rule."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from ledger_kernel.exceptions import InvalidCurrencyConfigurationError

if TYPE_CHECKING:
    from ledger_kernel.models.currency import Currency as CurrencyModel


class ExchangeRateNote(str, Enum):
    """How a currency's rate turns a document amount into base currency."""

    MULTIPLY = "multiply"
    DIVIDE = "divide"


@dataclass(frozen=True, slots=True)
class CurrencyInfo:
    """Immutable snapshot of one currencies row."""

    id: UUID
    code: str
    rate: Decimal
    is_base: bool
    exchange_rate_note: ExchangeRateNote | None = None

    @classmethod
    def from_model(cls, model: CurrencyModel) -> CurrencyInfo:
        note = model.exchange_rate_note
        return cls(
            id=model.id,
            code=model.code,
            rate=model.rate,
            is_base=model.is_base,
            exchange_rate_note=ExchangeRateNote(note) if note else None,
        )


def to_base(amount: Decimal, currency: CurrencyInfo, rate: Decimal) -> Decimal:
    """
    Convert a document-currency amount into the base currency.

    The one conversion used by posting rules, validation and statements.
    ``rate`` is the rate stored on the line, not necessarily the currency's
    current rate.

    Raises:
        InvalidCurrencyConfigurationError: non-base currency without a
            conversion note, or a rate that is not positive.
    """
    if currency.is_base:
        return amount
    if rate is None or rate <= 0:
        raise InvalidCurrencyConfigurationError(
            currency.code, f"rate must be positive, got {rate}"
        )
    if currency.exchange_rate_note == ExchangeRateNote.MULTIPLY:
        return amount * rate
    if currency.exchange_rate_note == ExchangeRateNote.DIVIDE:
        return amount / rate
    raise InvalidCurrencyConfigurationError(
        currency.code, "non-base currency has no exchange rate note"
    )


def from_base(amount: Decimal, currency: CurrencyInfo, rate: Decimal) -> Decimal:
    """Inverse of :func:`to_base`."""
    if currency.is_base:
        return amount
    if rate is None or rate <= 0:
        raise InvalidCurrencyConfigurationError(
            currency.code, f"rate must be positive, got {rate}"
        )
    if currency.exchange_rate_note == ExchangeRateNote.MULTIPLY:
        return amount / rate
    if currency.exchange_rate_note == ExchangeRateNote.DIVIDE:
        return amount * rate
    raise InvalidCurrencyConfigurationError(
        currency.code, "non-base currency has no exchange rate note"
    )


def effective_rate(currency: CurrencyInfo, rate: Decimal | None) -> Decimal:
    """Rate to store on a line: 1 for the base currency, else the given or current rate."""
    if currency.is_base:
        return Decimal("1")
    return currency.rate if rate is None else rate
