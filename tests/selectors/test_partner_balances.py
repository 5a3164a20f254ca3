"""
AccountSelector tests: classification lookup and partner positions.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

from ledger_kernel.domain.dtos import EntryStatus
from ledger_kernel.domain.inputs import CashEntryInput, InterpartyTransferInput
from ledger_kernel.domain.kinds import TransactionKind
from ledger_kernel.selectors.account_selector import AccountSelector


class TestAccountsByClassification:
    def test_business_partners(self, account_selector, ref_data):
        partners = account_selector.accounts_by_classification("Business Partner")

        assert [a.code for a in partners] == ["2001", "2002", "2003"]

    def test_case_insensitive(self, account_selector, ref_data):
        assert [a.code for a in account_selector.accounts_by_classification("  cash & BANK ")] == [
            "1001", "1002",
        ]

    def test_inactive_filtered(self, account_selector, ref_data, make_account):
        make_account("2999", "Dormant Partner", "Business Partner", is_active=False)

        active = account_selector.accounts_by_classification("Business Partner")
        everything = account_selector.accounts_by_classification("Business Partner", active_only=False)

        assert "2999" not in [a.code for a in active]
        assert "2999" in [a.code for a in everything]

    def test_unknown_subcategory(self, account_selector, ref_data):
        assert account_selector.accounts_by_classification("Suspense") == []


class TestPartnerBalances:
    def test_receivable_and_payable(self, posting_service, account_selector, cashbook, customer, supplier):
        posting_service.post(
            TransactionKind.CASH_ENTRY,
            CashEntryInput(date(2024, 3, 1), cashbook.id, customer.id, "-300"),
        )
        posting_service.post(
            TransactionKind.INTERPARTY_TRANSFER,
            InterpartyTransferInput(date(2024, 3, 2), supplier.id, customer.id, "100"),
        )

        balances = {b.account_code: b for b in account_selector.partner_balances("Business Partner")}

        assert balances["2001"].receivable == Decimal("400")
        assert balances["2001"].payable == Decimal("0")
        assert balances["2002"].payable == Decimal("100")
        assert balances["2002"].receivable == Decimal("0")
        assert balances["2003"].receivable == balances["2003"].payable == Decimal("0")

    def test_drafts_ignored(self, posting_service, account_selector, cashbook, customer):
        posting_service.post(
            TransactionKind.CASH_ENTRY,
            CashEntryInput(
                date(2024, 3, 1), cashbook.id, customer.id, "-300", status=EntryStatus.DRAFT
            ),
        )

        [first, *_] = account_selector.partner_balances("Business Partner")

        assert first.account_code == "2001"
        assert first.receivable == Decimal("0")

    def test_no_partners(self, account_selector, ref_data):
        assert account_selector.partner_balances("Suspense") == []

    def test_configured_subcategory_is_default(self, session, settings, account_selector):
        assert [b.account_code for b in account_selector.partner_balances()] == ["2001", "2002", "2003"]

        cash_as_partners = AccountSelector(
            session, replace(settings, business_partner_subcategory="Cash & Bank")
        )
        assert [b.account_code for b in cash_as_partners.partner_balances()] == ["1001", "1002"]
