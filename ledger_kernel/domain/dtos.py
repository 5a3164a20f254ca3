"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Immutable structures flowing through the posting pipeline:
    AccountInfo / CurrencyInfo snapshots (rule inputs), LineSpec (rule
    output, one per ledger line) and PostingPlan (the complete header +
    lines a rule proposes).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  from_model()
    class methods are boundary converters called only from services.

Invariants enforced:
    - LineSpec amounts are non-negative and already quantized to the
      stored precision, so what is validated is exactly what is written.
    - Every LineSpec carries a role set at creation; nothing downstream
      infers the commission line from text or account names.

Data flow:
    inputs + PostingContext -> PostingRule.build() -> PostingPlan -> GLHeader/GLLine
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from ledger_kernel.db.types import ZERO, to_stored_amount, to_stored_rate
from ledger_kernel.domain.currency import CurrencyInfo
from ledger_kernel.domain.kinds import TransactionKind
from ledger_kernel.exceptions import (
    AccountNotFoundError,
    CurrencyNotFoundError,
    MissingSystemConfigurationError,
)

if TYPE_CHECKING:
    from ledger_kernel.domain.commission import CommissionResult
    from ledger_kernel.domain.settings import EngineSettings
    from ledger_kernel.models.account import Account as AccountModel


class EntryStatus(str, Enum):
    """Header status.  Set at creation; edits never change it."""

    DRAFT = "draft"
    POSTED = "posted"


class LineSide(str, Enum):
    """Which side of the entry a line is on."""

    DEBIT = "debit"
    CREDIT = "credit"


class LineRole(str, Enum):
    """Why a line exists: the business principal or the commission booking."""

    PRINCIPAL = "principal"
    COMMISSION = "commission"


@dataclass(frozen=True, slots=True)
class AccountInfo:
    """Immutable snapshot of a chart_of_accounts row."""

    id: UUID
    code: str
    name: str
    is_cashbook: bool
    is_active: bool
    currency_id: UUID | None = None
    subcategory_id: UUID | None = None

    @classmethod
    def from_model(cls, model: AccountModel) -> AccountInfo:
        return cls(
            id=model.id,
            code=model.code,
            name=model.name,
            is_cashbook=model.is_cashbook,
            is_active=model.is_active,
            currency_id=model.currency_id,
            subcategory_id=model.subcategory_id,
        )


@dataclass(frozen=True, slots=True)
class LineSpec:
    """
    Specification for one ledger line.

    ``amount_base`` is in the base currency; ``amount_doc`` in the line's own
    currency.  ``side`` decides whether they land in debit/debit_doc_currency
    or credit/credit_doc_currency.
    """

    account_id: UUID
    currency_id: UUID
    side: LineSide
    amount_base: Decimal
    amount_doc: Decimal
    exchange_rate: Decimal
    role: LineRole = LineRole.PRINCIPAL
    memo: str | None = None
    sales_rate: Decimal | None = None
    purchase_rate: Decimal | None = None

    def __post_init__(self) -> None:
        if self.amount_base < ZERO or self.amount_doc < ZERO:
            raise ValueError("Line amounts must be non-negative")

    @classmethod
    def create(
        cls,
        side: LineSide,
        account_id: UUID,
        currency_id: UUID,
        amount_base: Decimal,
        amount_doc: Decimal,
        exchange_rate: Decimal,
        **kwargs,
    ) -> LineSpec:
        """Build a line with amounts and rates quantized to stored precision."""
        for rate_field in ("sales_rate", "purchase_rate"):
            if kwargs.get(rate_field) is not None:
                kwargs[rate_field] = to_stored_rate(kwargs[rate_field])
        return cls(
            account_id=account_id,
            currency_id=currency_id,
            side=side,
            amount_base=to_stored_amount(amount_base),
            amount_doc=to_stored_amount(amount_doc),
            exchange_rate=to_stored_rate(exchange_rate),
            **kwargs,
        )

    @classmethod
    def debit(cls, *args, **kwargs) -> LineSpec:
        return cls.create(LineSide.DEBIT, *args, **kwargs)

    @classmethod
    def credit(cls, *args, **kwargs) -> LineSpec:
        return cls.create(LineSide.CREDIT, *args, **kwargs)

    @property
    def debit_amount(self) -> Decimal:
        return self.amount_base if self.side == LineSide.DEBIT else ZERO

    @property
    def credit_amount(self) -> Decimal:
        return self.amount_base if self.side == LineSide.CREDIT else ZERO


@dataclass(frozen=True, slots=True)
class PostingPlan:
    """Header fields and the full line set a posting rule proposes."""

    kind: TransactionKind
    transaction_date: date
    description: str
    status: EntryStatus
    lines: tuple[LineSpec, ...]
    rule_version: int
    commission: CommissionResult | None = None

    @property
    def total_debits(self) -> Decimal:
        return sum((line.debit_amount for line in self.lines), ZERO)

    @property
    def total_credits(self) -> Decimal:
        return sum((line.credit_amount for line in self.lines), ZERO)

    def with_residue_booked(self, base_currency_id: UUID) -> tuple[PostingPlan, int]:
        """
        Copy of the plan with the debit/credit residue added to one line.

        The residue goes to the short side, on its last base-currency line
        when there is one (document amount included), else on its last line.
        Returns the plan and the 1-based number of the adjusted line.
        """
        residue = self.total_debits - self.total_credits
        short_side = LineSide.CREDIT if residue > ZERO else LineSide.DEBIT
        candidates = [i for i, line in enumerate(self.lines) if line.side == short_side]
        in_base = [i for i in candidates if self.lines[i].currency_id == base_currency_id]
        index = (in_base or candidates)[-1]

        line = self.lines[index]
        amount_base = line.amount_base + abs(residue)
        amount_doc = amount_base if line.currency_id == base_currency_id else line.amount_doc
        lines = list(self.lines)
        lines[index] = replace(line, amount_base=amount_base, amount_doc=amount_doc)
        return replace(self, lines=tuple(lines)), index + 1


@dataclass(frozen=True)
class PostingContext:
    """
    Reference data a rule may read while building a plan.

    Loaded once per operation by the posting service; rules never query
    the store themselves.
    """

    settings: EngineSettings
    accounts: dict[UUID, AccountInfo] = field(default_factory=dict)
    currencies: dict[UUID, CurrencyInfo] = field(default_factory=dict)

    def account(self, account_id: UUID) -> AccountInfo:
        try:
            return self.accounts[account_id]
        except KeyError:
            raise AccountNotFoundError(str(account_id)) from None

    def currency(self, currency_id: UUID) -> CurrencyInfo:
        try:
            return self.currencies[currency_id]
        except KeyError:
            raise CurrencyNotFoundError(str(currency_id)) from None

    @property
    def base_currency(self) -> CurrencyInfo:
        if self.settings.base_currency_id is None:
            raise MissingSystemConfigurationError("base_currency")
        return self.currency(self.settings.base_currency_id)

    @property
    def commission_account_id(self) -> UUID:
        if self.settings.commission_account_id is None:
            raise MissingSystemConfigurationError("commission_account")
        return self.settings.commission_account_id
