"""
Commission strategy tests.

The three dealing conventions are kept distinct: per-100k spread for bank
transfers and manager cheques, direct spread for general trading, and a
flat commission shed by both legs of an interparty transfer.
"""

from decimal import Decimal

import pytest

from ledger_kernel.domain.commission import (
    CommissionBasis,
    DirectSpread,
    FlatCommission,
    PerHundredThousandSpread,
    strategy_for,
)
from ledger_kernel.domain.kinds import TransactionKind
from ledger_kernel.exceptions import InvalidAmountError, InvalidRateError


class TestPerHundredThousandSpread:
    def test_bank_transfer_scenario(self):
        result = PerHundredThousandSpread().compute(
            CommissionBasis(amount="100000", sales_rate="50", purchase_rate="40")
        )

        assert result.commission == Decimal("10")
        assert result.debit_leg == Decimal("100050")
        assert result.credit_leg == Decimal("100040")
        assert result.booked == Decimal("10")
        assert result.has_commission_line

    def test_partial_unit(self):
        result = PerHundredThousandSpread().compute(
            CommissionBasis(amount="250000", sales_rate="12", purchase_rate="10")
        )

        assert result.commission == Decimal("5")
        assert result.debit_leg == Decimal("250030")
        assert result.credit_leg == Decimal("250025")

    def test_equal_rates_have_no_commission_line(self):
        result = PerHundredThousandSpread().compute(
            CommissionBasis(amount="100000", sales_rate="45", purchase_rate="45")
        )

        assert result.commission == 0
        assert not result.has_commission_line

    def test_negative_spread_books_negative(self):
        result = PerHundredThousandSpread().compute(
            CommissionBasis(amount="100000", sales_rate="40", purchase_rate="50")
        )

        assert result.booked == Decimal("-10")

    def test_zero_rates_allowed(self):
        result = PerHundredThousandSpread().compute(
            CommissionBasis(amount="500", sales_rate="0", purchase_rate="0")
        )

        assert result.debit_leg == result.credit_leg == Decimal("500")

    @pytest.mark.parametrize("rate", ["abc", None, "-1", "NaN"])
    def test_invalid_rate(self, rate):
        with pytest.raises(InvalidRateError):
            PerHundredThousandSpread().compute(
                CommissionBasis(amount="100", sales_rate=rate, purchase_rate="1")
            )

    @pytest.mark.parametrize("amount", ["0", "-5", "", "x"])
    def test_invalid_amount(self, amount):
        with pytest.raises(InvalidAmountError):
            PerHundredThousandSpread().compute(
                CommissionBasis(amount=amount, sales_rate="1", purchase_rate="1")
            )


class TestDirectSpread:
    def test_general_trading_scenario(self):
        result = DirectSpread().compute(
            CommissionBasis(amount="1000", sales_rate="3.67", purchase_rate="3.60")
        )

        assert result.commission == Decimal("70.00")
        assert result.debit_leg == Decimal("3670.00")
        assert result.credit_leg == Decimal("3600.00")

    def test_commission_is_absolute(self):
        result = DirectSpread().compute(
            CommissionBasis(amount="1000", sales_rate="3.60", purchase_rate="3.67")
        )

        assert result.commission == Decimal("70.00")
        assert result.booked == Decimal("-70.00")

    def test_booked_at_stored_precision(self):
        rounded_away = DirectSpread().compute(
            CommissionBasis(amount="1", sales_rate="3.6700000004", purchase_rate="3.6700000003")
        )
        assert rounded_away.commission > 0
        assert rounded_away.booked == 0
        assert not rounded_away.has_commission_line

        one_unit = DirectSpread().compute(
            CommissionBasis(amount="1", sales_rate="3.6700000005", purchase_rate="3.6700000004")
        )
        assert one_unit.booked == Decimal("0.000000001")

    def test_zero_rate_rejected(self):
        with pytest.raises(InvalidRateError) as exc_info:
            DirectSpread().compute(
                CommissionBasis(amount="1000", sales_rate="0", purchase_rate="3.6")
            )
        assert exc_info.value.field == "sales_rate"


class TestFlatCommission:
    def test_interparty_scenario(self):
        result = FlatCommission().compute(CommissionBasis(amount="200", commission="5"))

        assert result.debit_leg == Decimal("205")
        assert result.credit_leg == Decimal("195")
        assert result.booked == Decimal("10")

    def test_missing_commission_is_zero(self):
        result = FlatCommission().compute(CommissionBasis(amount="200"))

        assert result.commission == 0
        assert result.debit_leg == result.credit_leg == Decimal("200")
        assert not result.has_commission_line

    def test_commission_must_be_below_amount(self):
        with pytest.raises(InvalidAmountError) as exc_info:
            FlatCommission().compute(CommissionBasis(amount="200", commission="200"))
        assert exc_info.value.field == "commission"

    def test_negative_commission_rejected(self):
        with pytest.raises(InvalidAmountError):
            FlatCommission().compute(CommissionBasis(amount="200", commission="-1"))


class TestStrategyLookup:
    def test_bank_kinds_share_strategy(self):
        assert isinstance(strategy_for(TransactionKind.BANK_TRANSFER), PerHundredThousandSpread)
        assert isinstance(strategy_for(TransactionKind.MANAGER_CHEQUE), PerHundredThousandSpread)

    def test_trading(self):
        assert isinstance(strategy_for(TransactionKind.GENERAL_TRADING), DirectSpread)

    def test_no_commission_for_cash_or_journal(self):
        assert strategy_for(TransactionKind.CASH_ENTRY) is None
        assert strategy_for(TransactionKind.JOURNAL_VOUCHER) is None
