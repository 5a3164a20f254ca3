"""
General trading posting rule.

A currency deal: the customer buys ``amount`` of the deal currency at the
sales rate, the supplier sells it at the purchase rate (DirectSpread).
Rates are quoted as base currency per unit, so the deal currency must use
the multiply conversion rule.  Lines are in the deal currency:

    Dr customer    doc amount, base amount * sales_rate     (rate = sales)
    Cr supplier    doc amount, base amount * purchase_rate  (rate = purchase)
    Cr commission  base = leg difference, doc = base / sales_rate
"""

from ledger_kernel.domain.commission import CommissionBasis, strategy_for
from ledger_kernel.domain.currency import ExchangeRateNote
from ledger_kernel.domain.dtos import LineSpec, PostingContext, PostingPlan
from ledger_kernel.domain.inputs import GeneralTradingInput
from ledger_kernel.domain.kinds import TransactionKind
from ledger_kernel.exceptions import InvalidCurrencyConfigurationError
from ledger_kernel.posting_rules.base import BasePostingRule
from ledger_kernel.posting_rules.commission_line import commission_line
from ledger_kernel.posting_rules.registry import register_rule


class GeneralTradingRule(BasePostingRule):
    input_type = GeneralTradingInput
    uses_commission = True

    @property
    def kinds(self) -> tuple[TransactionKind, ...]:
        return (TransactionKind.GENERAL_TRADING,)

    @property
    def version(self) -> int:
        return 1

    def _basis(self, inputs: GeneralTradingInput) -> CommissionBasis:
        return CommissionBasis(
            amount=inputs.amount,
            sales_rate=inputs.sales_rate,
            purchase_rate=inputs.purchase_rate,
        )

    def validate_inputs(self, kind, inputs: GeneralTradingInput) -> None:
        super().validate_inputs(kind, inputs)
        self.require_distinct(inputs.customer_account_id, inputs.supplier_account_id)
        strategy_for(kind).compute(self._basis(inputs))

    def account_ids(self, inputs: GeneralTradingInput):
        return {inputs.customer_account_id, inputs.supplier_account_id}

    def currency_ids(self, inputs: GeneralTradingInput):
        return {inputs.currency_id}

    def build(self, kind, inputs: GeneralTradingInput, ctx: PostingContext) -> PostingPlan:
        currency = ctx.currency(inputs.currency_id)
        if currency.is_base or currency.exchange_rate_note != ExchangeRateNote.MULTIPLY:
            raise InvalidCurrencyConfigurationError(
                currency.code,
                "general trading rates are quoted as base per unit; "
                "the deal currency must use the multiply rule",
            )

        result = strategy_for(kind).compute(self._basis(inputs))
        description = self.normalize_description(inputs.description)

        lines = [
            LineSpec.debit(
                inputs.customer_account_id,
                currency.id,
                amount_base=result.debit_leg,
                amount_doc=result.amount,
                exchange_rate=result.sales_rate,
                memo=description,
                sales_rate=result.sales_rate,
            ),
            LineSpec.credit(
                inputs.supplier_account_id,
                currency.id,
                amount_base=result.credit_leg,
                amount_doc=result.amount,
                exchange_rate=result.purchase_rate,
                memo=description,
                purchase_rate=result.purchase_rate,
            ),
        ]
        if result.has_commission_line:
            lines.append(
                commission_line(
                    ctx.commission_account_id,
                    currency,
                    booked=result.booked,
                    rate=result.sales_rate,
                    description=description,
                )
            )

        return PostingPlan(
            kind=kind,
            transaction_date=inputs.transaction_date,
            description=description,
            status=inputs.status,
            lines=tuple(lines),
            rule_version=self.version,
            commission=result,
        )


register_rule(GeneralTradingRule())
