"""
BalanceSelector.running_balance() tests.

The statement opens with the balance before the start date, folds lines in
(date, voucher sequence, line) order and converts each line at the rate it
was posted with.
"""

from datetime import date
from decimal import Decimal

from ledger_kernel.domain.dtos import EntryStatus
from ledger_kernel.domain.inputs import CashEntryInput
from ledger_kernel.domain.kinds import TransactionKind

START = date(2024, 3, 1)
END = date(2024, 3, 31)


def _cash(posting_service, cashbook, partner, amount, when, **kwargs):
    return posting_service.post(
        TransactionKind.CASH_ENTRY,
        CashEntryInput(when, cashbook.id, partner.id, amount, **kwargs),
    )


class TestRunningBalance:
    def test_empty_period(self, balance_selector, ref_data, cashbook):
        statement = balance_selector.running_balance(cashbook.id, START, END)

        assert statement.opening == ()
        assert statement.rows == ()
        assert dict(statement.closing) == {}

    def test_opening_and_closing(self, posting_service, balance_selector, cashbook, customer):
        _cash(posting_service, cashbook, customer, "1000", date(2024, 2, 20))
        _cash(posting_service, cashbook, customer, "-200", date(2024, 3, 5))
        _cash(posting_service, cashbook, customer, "50", date(2024, 3, 6))
        _cash(posting_service, cashbook, customer, "999", date(2024, 4, 1))

        statement = balance_selector.running_balance(cashbook.id, START, END)

        assert [b.balance for b in statement.opening] == [Decimal("1000")]
        assert [r.running_balance for r in statement.rows] == [Decimal("800"), Decimal("850")]
        assert [(r.debit, r.credit) for r in statement.rows] == [
            (Decimal("0"), Decimal("200")),
            (Decimal("50"), Decimal("0")),
        ]
        assert statement.closing["AED"] == Decimal("850")

    def test_closing_is_opening_plus_movements(
        self, posting_service, balance_selector, cashbook, customer
    ):
        for day, amount in [(1, "10.25"), (2, "-3.10"), (20, "7"), (25, "-0.15")]:
            _cash(posting_service, cashbook, customer, amount, date(2024, 3, day))

        statement = balance_selector.running_balance(cashbook.id, date(2024, 3, 2), END)

        opening = statement.opening[0].balance
        movement = sum(r.debit - r.credit for r in statement.rows)
        assert statement.closing["AED"] == opening + movement

    def test_same_day_ordered_by_voucher(self, posting_service, balance_selector, cashbook, customer):
        day = date(2024, 3, 10)
        first = _cash(posting_service, cashbook, customer, "1", day, description="first")
        second = _cash(posting_service, cashbook, customer, "2", day, description="second")
        third = _cash(posting_service, cashbook, customer, "3", day, description="third")

        statement = balance_selector.running_balance(cashbook.id, START, END)

        assert [r.header_id for r in statement.rows] == [first, second, third]
        assert [r.description for r in statement.rows] == ["FIRST", "SECOND", "THIRD"]
        assert [r.running_balance for r in statement.rows] == [
            Decimal("1"), Decimal("3"), Decimal("6"),
        ]

    def test_drafts_excluded(self, posting_service, balance_selector, cashbook, customer):
        _cash(posting_service, cashbook, customer, "5", date(2024, 3, 2), status=EntryStatus.DRAFT)

        statement = balance_selector.running_balance(cashbook.id, START, END)

        assert statement.rows == ()

    def test_historical_rate_kept(
        self, session, posting_service, balance_selector, usd_cashbook, usd_currency, customer
    ):
        _cash(posting_service, usd_cashbook, customer, "100", date(2024, 3, 2))
        usd_currency.rate = Decimal("3.70")
        session.flush()
        _cash(posting_service, usd_cashbook, customer, "100", date(2024, 3, 3))

        statement = balance_selector.running_balance(usd_cashbook.id, START, END)

        assert [r.exchange_rate for r in statement.rows] == [Decimal("3.6725"), Decimal("3.70")]
        assert [r.base_equivalent for r in statement.rows] == [
            Decimal("367.25"), Decimal("370.00"),
        ]
        assert statement.closing["USD"] == Decimal("200")

    def test_explicit_rate_used(self, posting_service, balance_selector, usd_cashbook, customer):
        _cash(posting_service, usd_cashbook, customer, "-10", date(2024, 3, 4), exchange_rate="3.5")

        [row] = balance_selector.running_balance(usd_cashbook.id, START, END).rows

        assert row.credit == Decimal("10")
        assert row.base_equivalent == Decimal("-35")
        assert row.running_balance == Decimal("-10")
