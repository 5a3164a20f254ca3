"""
BalanceSelector.cash_book_balance() tests.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

from ledger_kernel.domain.dtos import EntryStatus
from ledger_kernel.domain.inputs import CashEntryInput, JournalLineInput, JournalVoucherInput
from ledger_kernel.domain.kinds import TransactionKind


def _cash(posting_service, cashbook, partner, amount, when=date(2024, 3, 15), **kwargs):
    return posting_service.post(
        TransactionKind.CASH_ENTRY,
        CashEntryInput(when, cashbook.id, partner.id, amount, **kwargs),
    )


class TestCashBookBalance:
    def test_no_movement(self, balance_selector, ref_data, cashbook):
        assert balance_selector.cash_book_balance(cashbook.id) == []

    def test_unknown_account_is_empty(self, balance_selector):
        assert balance_selector.cash_book_balance(uuid4()) == []

    def test_receipts_and_payments(self, posting_service, balance_selector, cashbook, customer):
        _cash(posting_service, cashbook, customer, "1000")
        _cash(posting_service, cashbook, customer, "-250.50")

        [balance] = balance_selector.cash_book_balance(cashbook.id)

        assert balance.currency_code == "AED"
        assert balance.balance == Decimal("749.50")
        assert balance.base_balance == Decimal("749.50")

    def test_drafts_ignored(self, posting_service, balance_selector, cashbook, customer):
        _cash(posting_service, cashbook, customer, "100")
        _cash(posting_service, cashbook, customer, "900", status=EntryStatus.DRAFT)

        [balance] = balance_selector.cash_book_balance(cashbook.id)

        assert balance.balance == Decimal("100")

    def test_foreign_cashbook_in_document_currency(
        self, posting_service, balance_selector, usd_cashbook, customer
    ):
        _cash(posting_service, usd_cashbook, customer, "100")

        [balance] = balance_selector.cash_book_balance(usd_cashbook.id)

        assert balance.currency_code == "USD"
        assert balance.balance == Decimal("100")
        assert balance.base_balance == Decimal("367.25")

    def test_one_row_per_currency(
        self, posting_service, balance_selector, cashbook, capital_account, customer, usd_currency
    ):
        _cash(posting_service, cashbook, customer, "500")
        posting_service.post(
            TransactionKind.JOURNAL_VOUCHER,
            JournalVoucherInput(
                date(2024, 3, 16),
                lines=(
                    JournalLineInput(cashbook.id, debit="100", currency_id=usd_currency.id),
                    JournalLineInput(capital_account.id, credit="367.25"),
                ),
            ),
        )

        balances = balance_selector.cash_book_balance(cashbook.id)

        assert [(b.currency_code, b.balance) for b in balances] == [
            ("AED", Decimal("500")),
            ("USD", Decimal("100")),
        ]

    def test_before_excludes_the_day(self, posting_service, balance_selector, cashbook, customer):
        _cash(posting_service, cashbook, customer, "100", when=date(2024, 3, 1))
        _cash(posting_service, cashbook, customer, "40", when=date(2024, 3, 10))

        [opening] = balance_selector.cash_book_balance(cashbook.id, before=date(2024, 3, 10))

        assert opening.balance == Decimal("100")
        assert balance_selector.cash_book_balance(cashbook.id, before=date(2024, 3, 1)) == []

    def test_replaced_lines_reflected(self, posting_service, balance_selector, cashbook, customer):
        header_id = _cash(posting_service, cashbook, customer, "100")

        posting_service.replace_lines(
            header_id, CashEntryInput(date(2024, 3, 15), cashbook.id, customer.id, "-30")
        )

        [balance] = balance_selector.cash_book_balance(cashbook.id)
        assert balance.balance == Decimal("-30")
