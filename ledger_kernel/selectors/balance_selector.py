"""
Module: ledger_kernel.selectors.balance_selector
Responsibility: Balances derived from ledger lines at query time -- cash-book
    balance per currency, running statement, trial balance and the general
    ledger statement of any account.  There are no stored balances.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - cash_book_balance, running_balance and account_ledger read POSTED
      headers only; trial_balance reads draft and posted headers.
    - running_balance folds lines in (transaction_date, header seq, line_seq)
      order and converts each line with that line's stored exchange_rate.
    - trial_balance reports each account on one side only and omits accounts
      whose net is zero, so total net debit equals total net credit.

Failure modes:
    - Empty results and zero balances when nothing matches.
    - InvalidCurrencyConfigurationError from to_base if a stored line refers
      to a currency whose conversion note was removed afterwards.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping
from uuid import UUID

from sqlalchemy import func, select

from ledger_kernel.db.types import ZERO, to_stored_amount
from ledger_kernel.domain.currency import CurrencyInfo, to_base
from ledger_kernel.domain.dtos import EntryStatus
from ledger_kernel.exceptions import AccountNotFoundError
from ledger_kernel.models.account import Account
from ledger_kernel.models.currency import Currency
from ledger_kernel.models.ledger import GLHeader, GLLine
from ledger_kernel.models.transaction_type import TransactionType
from ledger_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class CurrencyBalance:
    """Balance of one account in one currency."""

    currency_id: UUID
    currency_code: str
    balance: Decimal
    base_balance: Decimal


@dataclass(frozen=True)
class RunningBalanceRow:
    """One posted line of a cash-book statement with the balance after it."""

    header_id: UUID
    voucher_no: str
    transaction_date: date
    description: str
    currency_code: str
    debit: Decimal
    credit: Decimal
    exchange_rate: Decimal
    base_equivalent: Decimal
    running_balance: Decimal
    running_balances: Mapping[str, Decimal]


@dataclass(frozen=True)
class RunningBalanceStatement:
    account_id: UUID
    start: date
    end: date
    opening: tuple[CurrencyBalance, ...]
    rows: tuple[RunningBalanceRow, ...]
    closing: Mapping[str, Decimal] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class TrialBalanceRow:
    account_id: UUID
    account_code: str
    account_name: str
    net_debit: Decimal
    net_credit: Decimal


@dataclass(frozen=True)
class TrialBalance:
    as_of: date
    rows: tuple[TrialBalanceRow, ...]

    @property
    def total_debit(self) -> Decimal:
        return sum((r.net_debit for r in self.rows), ZERO)

    @property
    def total_credit(self) -> Decimal:
        return sum((r.net_credit for r in self.rows), ZERO)

    @property
    def is_balanced(self) -> bool:
        return self.total_debit == self.total_credit


@dataclass(frozen=True)
class LedgerStatementRow:
    header_id: UUID
    voucher_no: str
    transaction_date: date
    transaction_type: str
    description: str
    currency_code: str
    debit_doc: Decimal
    credit_doc: Decimal
    debit: Decimal
    credit: Decimal
    running_doc_balance: Decimal
    running_base_balance: Decimal


@dataclass(frozen=True)
class AccountLedger:
    """General-ledger statement of one account, in base currency."""

    account_id: UUID
    account_code: str
    account_name: str
    start: date
    end: date
    opening_balance: Decimal
    rows: tuple[LedgerStatementRow, ...]
    closing_balance: Decimal


class BalanceSelector(BaseSelector):
    """
    Balance computation over ledger lines.

    Usage:
        selector = BalanceSelector(session)
        selector.cash_book_balance(cashbook_id)
        selector.running_balance(cashbook_id, date(2024, 1, 1), date(2024, 1, 31))
        selector.trial_balance(date(2024, 12, 31))
    """

    def cash_book_balance(
        self,
        account_id: UUID,
        before: date | None = None,
    ) -> list[CurrencyBalance]:
        """
        Balance of ``account_id`` per line currency over posted headers.

        ``balance`` is sum(debit) - sum(credit) in the line currency;
        ``base_balance`` is the same fold over the base-currency columns.
        One row per currency with posted movement, ordered by currency code.

        Args:
            account_id: Account to query.
            before: If given, only lines dated strictly before this date
                (the opening balance of a statement starting on it).
        """
        doc_net = func.sum(GLLine.debit_doc_currency - GLLine.credit_doc_currency)
        base_net = func.sum(GLLine.debit - GLLine.credit)
        query = (
            select(
                GLLine.currency_id,
                Currency.code,
                doc_net.label("balance"),
                base_net.label("base_balance"),
            )
            .join(GLHeader, GLLine.header_id == GLHeader.id)
            .join(Currency, GLLine.currency_id == Currency.id)
            .where(GLLine.account_id == account_id)
            .where(GLHeader.status == EntryStatus.POSTED.value)
            .group_by(GLLine.currency_id, Currency.code)
            .order_by(Currency.code)
        )
        if before is not None:
            query = query.where(GLHeader.transaction_date < before)

        return [
            CurrencyBalance(
                currency_id=row.currency_id,
                currency_code=row.code,
                balance=self._amount(row.balance),
                base_balance=self._amount(row.base_balance),
            )
            for row in self.session.execute(query).all()
        ]

    def running_balance(
        self,
        account_id: UUID,
        start: date,
        end: date,
    ) -> RunningBalanceStatement:
        """
        Cash-book statement between ``start`` and ``end`` inclusive.

        Opens with cash_book_balance(before=start), then folds each posted
        line into a per-currency running total.  base_equivalent uses the
        line's own exchange_rate, so later rate changes never alter history.
        """
        opening = tuple(self.cash_book_balance(account_id, before=start))
        running: dict[str, Decimal] = {b.currency_code: b.balance for b in opening}

        query = (
            select(GLLine, GLHeader, Currency)
            .join(GLHeader, GLLine.header_id == GLHeader.id)
            .join(Currency, GLLine.currency_id == Currency.id)
            .where(GLLine.account_id == account_id)
            .where(GLHeader.status == EntryStatus.POSTED.value)
            .where(GLHeader.transaction_date >= start)
            .where(GLHeader.transaction_date <= end)
            .order_by(GLHeader.transaction_date, GLHeader.seq, GLLine.line_seq)
        )

        rows: list[RunningBalanceRow] = []
        for line, header, currency in self.session.execute(query).all():
            net = line.doc_amount
            code = currency.code
            running[code] = to_stored_amount(running.get(code, ZERO) + net)
            rows.append(
                RunningBalanceRow(
                    header_id=header.id,
                    voucher_no=header.voucher_no,
                    transaction_date=header.transaction_date,
                    description=line.memo or header.description,
                    currency_code=code,
                    debit=line.debit_doc_currency,
                    credit=line.credit_doc_currency,
                    exchange_rate=line.exchange_rate,
                    base_equivalent=to_stored_amount(
                        to_base(net, CurrencyInfo.from_model(currency), line.exchange_rate)
                    ),
                    running_balance=running[code],
                    running_balances=MappingProxyType(dict(running)),
                )
            )

        return RunningBalanceStatement(
            account_id=account_id,
            start=start,
            end=end,
            opening=opening,
            rows=tuple(rows),
            closing=MappingProxyType(dict(running)),
        )

    def trial_balance(self, as_of: date) -> TrialBalance:
        """
        Net debit or net credit per account as of ``as_of``.

        Draft and posted lines dated on or before ``as_of`` are included.
        Rows are ordered by account code.
        """
        query = (
            select(
                GLLine.account_id,
                Account.code,
                Account.name,
                func.sum(GLLine.debit).label("total_debit"),
                func.sum(GLLine.credit).label("total_credit"),
            )
            .join(GLHeader, GLLine.header_id == GLHeader.id)
            .join(Account, GLLine.account_id == Account.id)
            .where(
                GLHeader.status.in_(
                    [EntryStatus.DRAFT.value, EntryStatus.POSTED.value]
                )
            )
            .where(GLHeader.transaction_date <= as_of)
            .group_by(GLLine.account_id, Account.code, Account.name)
            .order_by(Account.code)
        )

        rows: list[TrialBalanceRow] = []
        for row in self.session.execute(query).all():
            net = self._amount(row.total_debit) - self._amount(row.total_credit)
            if net == ZERO:
                continue
            rows.append(
                TrialBalanceRow(
                    account_id=row.account_id,
                    account_code=row.code,
                    account_name=row.name,
                    net_debit=net if net > ZERO else to_stored_amount(ZERO),
                    net_credit=-net if net < ZERO else to_stored_amount(ZERO),
                )
            )
        return TrialBalance(as_of=as_of, rows=tuple(rows))

    def account_ledger(
        self,
        account_id: UUID,
        start: date,
        end: date,
    ) -> AccountLedger:
        """
        General-ledger statement of any account over posted headers.

        The opening balance is the base-currency net of every posted line
        dated before ``start``.  Each row carries the running base balance
        and the running document-currency balance.
        """
        account = self.session.get(Account, account_id)
        if account is None:
            raise AccountNotFoundError(str(account_id))
        opening = self._amount(
            self.session.execute(
                select(func.sum(GLLine.debit - GLLine.credit))
                .join(GLHeader, GLLine.header_id == GLHeader.id)
                .where(GLLine.account_id == account_id)
                .where(GLHeader.status == EntryStatus.POSTED.value)
                .where(GLHeader.transaction_date < start)
            ).scalar()
        )

        query = (
            select(GLLine, GLHeader, Currency.code, TransactionType.description)
            .join(GLHeader, GLLine.header_id == GLHeader.id)
            .join(Currency, GLLine.currency_id == Currency.id)
            .join(TransactionType, GLHeader.transaction_type_id == TransactionType.id)
            .where(GLLine.account_id == account_id)
            .where(GLHeader.status == EntryStatus.POSTED.value)
            .where(GLHeader.transaction_date >= start)
            .where(GLHeader.transaction_date <= end)
            .order_by(GLHeader.transaction_date, GLHeader.seq, GLLine.line_seq)
        )

        base_balance = opening
        doc_balance = to_stored_amount(ZERO)
        rows: list[LedgerStatementRow] = []
        for line, header, currency_code, type_description in self.session.execute(query).all():
            base_balance = to_stored_amount(base_balance + line.base_amount)
            doc_balance = to_stored_amount(doc_balance + line.doc_amount)
            rows.append(
                LedgerStatementRow(
                    header_id=header.id,
                    voucher_no=header.voucher_no,
                    transaction_date=header.transaction_date,
                    transaction_type=type_description,
                    description=line.memo or header.description,
                    currency_code=currency_code,
                    debit_doc=line.debit_doc_currency,
                    credit_doc=line.credit_doc_currency,
                    debit=line.debit,
                    credit=line.credit,
                    running_doc_balance=doc_balance,
                    running_base_balance=base_balance,
                )
            )

        return AccountLedger(
            account_id=account_id,
            account_code=account.code,
            account_name=account.name,
            start=start,
            end=end,
            opening_balance=opening,
            rows=tuple(rows),
            closing_balance=base_balance,
        )
