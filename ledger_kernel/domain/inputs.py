"""
Business inputs accepted by the posting engine, one dataclass per family.

Amounts and rates are typed ``object`` on purpose: they arrive from forms
and spreadsheets as strings, numbers or Decimals and are parsed (and
rejected with InvalidAmountError / InvalidRateError) by the posting rules.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

from ledger_kernel.domain.dtos import EntryStatus


@dataclass(frozen=True)
class CashEntryInput:
    """Receipt (positive amount) or payment (negative amount) through a cashbook."""

    transaction_date: date
    cashbook_account_id: UUID
    partner_account_id: UUID
    amount: object
    description: str = ""
    exchange_rate: object = None
    status: EntryStatus = EntryStatus.POSTED


@dataclass(frozen=True)
class BankTransferInput:
    """Bank transfer or manager cheque between a customer and a supplier."""

    transaction_date: date
    customer_account_id: UUID
    supplier_account_id: UUID
    amount: object
    sales_rate: object
    purchase_rate: object
    description: str = ""
    status: EntryStatus = EntryStatus.POSTED


@dataclass(frozen=True)
class GeneralTradingInput:
    """Currency deal: customer buys ``amount`` of ``currency_id`` at the sales rate."""

    transaction_date: date
    customer_account_id: UUID
    supplier_account_id: UUID
    currency_id: UUID
    amount: object
    sales_rate: object
    purchase_rate: object
    description: str = ""
    status: EntryStatus = EntryStatus.POSTED


@dataclass(frozen=True)
class InterpartyTransferInput:
    """Move ``amount`` from one party to another, optionally shedding a commission."""

    transaction_date: date
    from_account_id: UUID
    to_account_id: UUID
    amount: object
    commission: object = None
    description: str = ""
    status: EntryStatus = EntryStatus.POSTED


@dataclass(frozen=True)
class JournalLineInput:
    """One manual journal line: exactly one of debit/credit, in document currency."""

    account_id: UUID
    debit: object = None
    credit: object = None
    currency_id: UUID | None = None
    exchange_rate: object = None
    narration: str | None = None


@dataclass(frozen=True)
class JournalVoucherInput:
    transaction_date: date
    lines: tuple[JournalLineInput, ...] = field(default_factory=tuple)
    description: str = ""
    status: EntryStatus = EntryStatus.POSTED
