"""
LedgerPostingService.replace_lines() tests.

An edit recomputes the whole line set exactly as post() would and swaps
it in as one unit; status never changes and a header may only move within
its kind family.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import select

from ledger_kernel.domain.dtos import EntryStatus
from ledger_kernel.domain.inputs import (
    BankTransferInput,
    CashEntryInput,
    InterpartyTransferInput,
)
from ledger_kernel.domain.kinds import TransactionKind
from ledger_kernel.exceptions import (
    HeaderNotFoundError,
    InvalidAmountError,
    KindMismatchError,
)
from ledger_kernel.models.ledger import GLHeader, GLLine

TODAY = date(2024, 3, 15)


def _line_amounts(session, header_id):
    lines = session.execute(
        select(GLLine).where(GLLine.header_id == header_id).order_by(GLLine.line_seq)
    ).scalars()
    return [
        (line.account_id, line.debit, line.credit, line.debit_doc_currency,
         line.credit_doc_currency, line.exchange_rate, line.role)
        for line in lines
    ]


class TestReplaceLines:
    def test_amounts_recomputed(self, session, posting_service, cashbook, customer):
        header_id = posting_service.post(
            TransactionKind.CASH_ENTRY,
            CashEntryInput(TODAY, cashbook.id, customer.id, "100"),
        )

        posting_service.replace_lines(
            header_id,
            CashEntryInput(date(2024, 3, 20), cashbook.id, customer.id, "250", "corrected"),
        )

        header = session.get(GLHeader, header_id)
        assert header.transaction_date == date(2024, 3, 20)
        assert header.description == "CORRECTED"
        assert len(header.lines) == 2
        assert header.total_debits == Decimal("250")
        assert header.updated_by_id is not None

    def test_idempotent(self, session, posting_service, customer, supplier):
        inputs = BankTransferInput(TODAY, customer.id, supplier.id, "100000", "50", "40")
        header_id = posting_service.post(TransactionKind.BANK_TRANSFER, inputs)

        posting_service.replace_lines(header_id, inputs)
        first = _line_amounts(session, header_id)
        posting_service.replace_lines(header_id, inputs)
        second = _line_amounts(session, header_id)

        assert first == second
        assert len(first) == 3

    def test_voucher_number_kept(self, session, posting_service, cashbook, customer):
        header_id = posting_service.post(
            TransactionKind.CASH_ENTRY, CashEntryInput(TODAY, cashbook.id, customer.id, "1")
        )
        voucher_no = session.get(GLHeader, header_id).voucher_no

        posting_service.replace_lines(
            header_id, CashEntryInput(TODAY, cashbook.id, customer.id, "2")
        )

        assert session.get(GLHeader, header_id).voucher_no == voucher_no

    def test_status_unchanged(self, session, posting_service, cashbook, customer):
        header_id = posting_service.post(
            TransactionKind.CASH_ENTRY,
            CashEntryInput(TODAY, cashbook.id, customer.id, "1", status=EntryStatus.DRAFT),
        )

        posting_service.replace_lines(
            header_id,
            CashEntryInput(TODAY, cashbook.id, customer.id, "3", status=EntryStatus.POSTED),
        )

        assert session.get(GLHeader, header_id).status == EntryStatus.DRAFT

    def test_interparty_gains_commission(self, session, posting_service, settings, customer, supplier):
        header_id = posting_service.post(
            TransactionKind.INTERPARTY_TRANSFER,
            InterpartyTransferInput(TODAY, supplier.id, customer.id, "200"),
        )

        posting_service.replace_lines(
            header_id,
            InterpartyTransferInput(TODAY, supplier.id, customer.id, "200", commission="5"),
        )

        header = session.get(GLHeader, header_id)
        assert header.transaction_type_id == settings.type_id_for(
            TransactionKind.INTERPARTY_TRANSFER_COMMISSION
        )
        assert len(header.lines) == 3
        assert header.commission_line.credit == Decimal("10")

    def test_move_within_bank_family(self, session, posting_service, settings, customer, supplier):
        inputs = BankTransferInput(TODAY, customer.id, supplier.id, "100000", "50", "40")
        header_id = posting_service.post(TransactionKind.BANK_TRANSFER, inputs)

        posting_service.replace_lines(header_id, inputs, kind=TransactionKind.MANAGER_CHEQUE)

        header = session.get(GLHeader, header_id)
        assert header.transaction_type_id == settings.type_id_for(TransactionKind.MANAGER_CHEQUE)

    def test_cross_family_rejected(self, posting_service, cashbook, customer, supplier):
        header_id = posting_service.post(
            TransactionKind.CASH_ENTRY, CashEntryInput(TODAY, cashbook.id, customer.id, "1")
        )
        with pytest.raises(KindMismatchError):
            posting_service.replace_lines(
                header_id,
                BankTransferInput(TODAY, customer.id, supplier.id, "100000", "50", "40"),
                kind=TransactionKind.BANK_TRANSFER,
            )

    def test_inputs_of_other_family_rejected(self, posting_service, cashbook, customer, supplier):
        header_id = posting_service.post(
            TransactionKind.CASH_ENTRY, CashEntryInput(TODAY, cashbook.id, customer.id, "1")
        )
        with pytest.raises(KindMismatchError):
            posting_service.replace_lines(
                header_id,
                BankTransferInput(TODAY, customer.id, supplier.id, "100000", "50", "40"),
            )

    def test_unknown_header(self, posting_service, cashbook, customer):
        with pytest.raises(HeaderNotFoundError):
            posting_service.replace_lines(
                uuid4(), CashEntryInput(TODAY, cashbook.id, customer.id, "1")
            )

    def test_invalid_inputs_leave_lines_intact(self, session, posting_service, cashbook, customer):
        header_id = posting_service.post(
            TransactionKind.CASH_ENTRY, CashEntryInput(TODAY, cashbook.id, customer.id, "100")
        )
        before = _line_amounts(session, header_id)

        with pytest.raises(InvalidAmountError):
            posting_service.replace_lines(
                header_id, CashEntryInput(TODAY, cashbook.id, customer.id, "0")
            )

        assert _line_amounts(session, header_id) == before

    def test_logged(self, posting_service, cashbook, customer, captured_logs):
        header_id = posting_service.post(
            TransactionKind.CASH_ENTRY, CashEntryInput(TODAY, cashbook.id, customer.id, "1")
        )
        posting_service.replace_lines(
            header_id, CashEntryInput(TODAY, cashbook.id, customer.id, "2")
        )

        replaced = [r for r in captured_logs() if r["message"] == "ledger_lines_replaced"]
        assert replaced
        assert replaced[-1]["header_id"] == str(header_id)
        assert replaced[-1]["old_line_count"] == 2
        assert replaced[-1]["new_line_count"] == 2
