"""
BalanceSelector.account_ledger() tests.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from ledger_kernel.domain.inputs import BankTransferInput, CashEntryInput
from ledger_kernel.domain.kinds import TransactionKind
from ledger_kernel.exceptions import AccountNotFoundError


class TestAccountLedger:
    def test_unknown_account(self, balance_selector):
        with pytest.raises(AccountNotFoundError):
            balance_selector.account_ledger(uuid4(), date(2024, 1, 1), date(2024, 12, 31))

    def test_statement_of_partner(
        self, posting_service, balance_selector, ledger_config, cashbook, customer, supplier
    ):
        posting_service.post(
            TransactionKind.CASH_ENTRY,
            CashEntryInput(date(2024, 2, 1), cashbook.id, customer.id, "-500"),
        )
        posting_service.post(
            TransactionKind.BANK_TRANSFER,
            BankTransferInput(
                date(2024, 3, 1), customer.id, supplier.id, "100000", "50", "40", "wire"
            ),
        )
        posting_service.post(
            TransactionKind.CASH_ENTRY,
            CashEntryInput(date(2024, 3, 2), cashbook.id, customer.id, "100050"),
        )

        ledger = balance_selector.account_ledger(customer.id, date(2024, 3, 1), date(2024, 3, 31))

        assert ledger.account_code == "2001"
        assert ledger.account_name == "Alpha Trading LLC"
        assert ledger.opening_balance == Decimal("500")
        assert [r.running_base_balance for r in ledger.rows] == [
            Decimal("100550"), Decimal("500"),
        ]
        assert ledger.closing_balance == Decimal("500")
        assert ledger.rows[0].description == "WIRE"
        assert ledger.rows[0].transaction_type == (
            ledger_config.transaction_types[TransactionKind.BANK_TRANSFER].description
        )
        assert ledger.rows[1].credit == Decimal("100050")

    def test_document_and_base_columns(
        self, posting_service, balance_selector, usd_cashbook, customer
    ):
        posting_service.post(
            TransactionKind.CASH_ENTRY,
            CashEntryInput(date(2024, 3, 1), usd_cashbook.id, customer.id, "10"),
        )

        ledger = balance_selector.account_ledger(usd_cashbook.id, date(2024, 3, 1), date(2024, 3, 1))

        [row] = ledger.rows
        assert row.currency_code == "USD"
        assert row.debit_doc == Decimal("10")
        assert row.debit == Decimal("36.725")
        assert row.running_doc_balance == Decimal("10")
        assert ledger.closing_balance == Decimal("36.725")

    def test_account_without_movement(self, balance_selector, ref_data, capital_account):
        ledger = balance_selector.account_ledger(
            capital_account.id, date(2024, 1, 1), date(2024, 12, 31)
        )

        assert ledger.rows == ()
        assert ledger.opening_balance == ledger.closing_balance == Decimal("0")
