"""
Commission strategies -- one per dealing convention.

Responsibility:
    Computes the commission and the two principal leg amounts for the
    transaction kinds that embed a dealing spread.  The three conventions
    below are distinct business rules and are kept apart on purpose:

    ===============================  =====================================
    Strategy                         Kinds
    ===============================  =====================================
    PerHundredThousandSpread         bank transfer, manager cheque
    DirectSpread                     general trading
    FlatCommission                   interparty transfer (IPT / IPTC)
    ===============================  =====================================

Architecture position:
    Kernel > Domain -- pure functions over Decimal, zero I/O.

Invariants enforced:
    - ``booked`` is the difference of the legs at stored precision, so the
      commission line always balances the two principal legs as written.
      A spread that rounds away leaves no commission line.
    - Amount and rate checks happen here, before any persistence.

Failure modes:
    - InvalidAmountError: principal <= 0, flat commission < 0 or >= amount.
    - InvalidRateError: rate non-numeric or out of range.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from ledger_kernel.db.types import to_stored_amount
from ledger_kernel.domain.kinds import TransactionKind
from ledger_kernel.domain.values import parse_amount, parse_rate
from ledger_kernel.exceptions import InvalidAmountError

PER_UNIT = Decimal("100000")


@dataclass(frozen=True, slots=True)
class CommissionBasis:
    """Raw inputs a strategy may draw on; unused fields stay None."""

    amount: object
    sales_rate: object = None
    purchase_rate: object = None
    commission: object = None


@dataclass(frozen=True, slots=True)
class CommissionResult:
    """
    Outcome of a commission computation.

    ``commission`` is the figure as the business quotes it.  ``booked`` is
    the signed amount the commission account must be credited with (negative
    means a debit) so that the entry balances.
    """

    amount: Decimal
    commission: Decimal
    debit_leg: Decimal
    credit_leg: Decimal
    sales_rate: Decimal | None = None
    purchase_rate: Decimal | None = None

    @property
    def booked(self) -> Decimal:
        # legs are stored quantized; the commission line must close that gap exactly
        return to_stored_amount(self.debit_leg) - to_stored_amount(self.credit_leg)

    @property
    def has_commission_line(self) -> bool:
        return self.booked != 0


class CommissionStrategy(ABC):
    """Computes commission and leg amounts for one dealing convention."""

    name: str

    @abstractmethod
    def compute(self, basis: CommissionBasis) -> CommissionResult:
        ...


class PerHundredThousandSpread(CommissionStrategy):
    """
    Rates quoted per 100,000 units of principal.

    commission = (amount / 100000) * (sales - purchase)
    debit leg  = amount + (amount / 100000) * sales
    credit leg = amount + (amount / 100000) * purchase
    """

    name = "per_100k_spread"

    def compute(self, basis: CommissionBasis) -> CommissionResult:
        amount = parse_amount(basis.amount, "amount")
        sales = parse_rate(basis.sales_rate, "sales_rate")
        purchase = parse_rate(basis.purchase_rate, "purchase_rate")
        units = amount / PER_UNIT
        return CommissionResult(
            amount=amount,
            commission=units * (sales - purchase),
            debit_leg=amount + units * sales,
            credit_leg=amount + units * purchase,
            sales_rate=sales,
            purchase_rate=purchase,
        )


class DirectSpread(CommissionStrategy):
    """
    Rates quoted as base currency per unit of the deal currency.

    commission = abs(amount * (sales - purchase))
    debit leg  = amount * sales
    credit leg = amount * purchase
    """

    name = "direct_spread"

    def compute(self, basis: CommissionBasis) -> CommissionResult:
        amount = parse_amount(basis.amount, "amount")
        sales = parse_rate(basis.sales_rate, "sales_rate", strictly_positive=True)
        purchase = parse_rate(basis.purchase_rate, "purchase_rate", strictly_positive=True)
        return CommissionResult(
            amount=amount,
            commission=abs(amount * (sales - purchase)),
            debit_leg=amount * sales,
            credit_leg=amount * purchase,
            sales_rate=sales,
            purchase_rate=purchase,
        )


class FlatCommission(CommissionStrategy):
    """
    User-supplied flat commission shed by both legs.

    debit leg  = amount + commission
    credit leg = amount - commission
    booked     = 2 * commission
    """

    name = "flat"

    def compute(self, basis: CommissionBasis) -> CommissionResult:
        amount = parse_amount(basis.amount, "amount")
        raw = basis.commission if basis.commission not in (None, "") else Decimal("0")
        commission = parse_amount(raw, "commission", allow_zero=True)
        if commission >= amount:
            raise InvalidAmountError(
                "commission", commission, f"must be less than amount {amount}"
            )
        return CommissionResult(
            amount=amount,
            commission=commission,
            debit_leg=amount + commission,
            credit_leg=amount - commission,
        )


_STRATEGIES: dict[TransactionKind, CommissionStrategy] = {
    TransactionKind.BANK_TRANSFER: PerHundredThousandSpread(),
    TransactionKind.MANAGER_CHEQUE: PerHundredThousandSpread(),
    TransactionKind.GENERAL_TRADING: DirectSpread(),
    TransactionKind.INTERPARTY_TRANSFER: FlatCommission(),
    TransactionKind.INTERPARTY_TRANSFER_COMMISSION: FlatCommission(),
}


def strategy_for(kind: TransactionKind) -> CommissionStrategy | None:
    """Commission strategy for ``kind``; None for kinds without commission."""
    return _STRATEGIES.get(kind)
