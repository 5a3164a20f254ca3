"""
ReferenceDataService lookups.
"""

from ledger_kernel.domain.kinds import TransactionKind
from ledger_kernel.services.reference_data import ReferenceDataService


class TestLookups:
    def test_base_currency(self, session, ref_data, base_currency):
        assert ReferenceDataService(session).base_currency().id == base_currency.id

    def test_currency_by_code_ignores_case(self, session, ref_data, usd_currency):
        assert ReferenceDataService(session).currency_by_code(" usd ").id == usd_currency.id
        assert ReferenceDataService(session).currency_by_code("GBP") is None

    def test_account_by_code(self, session, ref_data, customer):
        assert ReferenceDataService(session).account_by_code("2001").id == customer.id

    def test_account_by_name(self, session, ref_data, supplier):
        assert ReferenceDataService(session).account_by_name("BETA exchange").id == supplier.id

    def test_ambiguous_name(self, session, ref_data, make_account):
        make_account("2101", "Twin Traders")
        make_account("2102", "twin traders")

        assert ReferenceDataService(session).account_by_name("Twin Traders") is None


class TestResolveSettings:
    def test_non_base_currency_rejected(self, session, ref_data, captured_logs):
        settings = ReferenceDataService(session).resolve_settings(
            "USD", "0000000005", {TransactionKind.CASH_ENTRY: "CASH"}
        )

        assert settings.base_currency_id is None
        assert "base_currency_unresolved" in {r["message"] for r in captured_logs()}

    def test_types_resolved(self, session, ref_data, ledger_config):
        code = ledger_config.type_code(TransactionKind.CASH_ENTRY)

        settings = ReferenceDataService(session).resolve_settings(
            "AED", "0000000005", {TransactionKind.CASH_ENTRY: code}
        )

        assert settings.type_id_for(TransactionKind.CASH_ENTRY) is not None
        assert settings.kind_for_type(settings.type_id_for(TransactionKind.CASH_ENTRY)) == (
            TransactionKind.CASH_ENTRY
        )
