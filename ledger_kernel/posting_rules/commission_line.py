"""The commission-account line shared by every commission-bearing rule."""

from decimal import Decimal
from uuid import UUID

from ledger_kernel.domain.currency import CurrencyInfo, from_base
from ledger_kernel.domain.dtos import LineRole, LineSide, LineSpec


def commission_line(
    account_id: UUID,
    currency: CurrencyInfo,
    booked: Decimal,
    rate: Decimal,
    description: str,
) -> LineSpec:
    """
    Book ``booked`` (base currency) against the commission account.

    Positive ``booked`` credits the account; a negative spread debits it so
    the entry still balances.  The document amount is the base amount
    converted back through the line's currency and rate.
    """
    amount_base = abs(booked)
    side = LineSide.CREDIT if booked > 0 else LineSide.DEBIT
    return LineSpec.create(
        side,
        account_id,
        currency.id,
        amount_base=amount_base,
        amount_doc=from_base(amount_base, currency, rate),
        exchange_rate=rate,
        role=LineRole.COMMISSION,
        memo=f"COMMISSION FOR {description}".strip(),
    )
