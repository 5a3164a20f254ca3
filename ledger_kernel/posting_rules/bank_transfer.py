"""
Bank transfer / manager cheque posting rule.

Rates are quoted per 100,000 of principal (PerHundredThousandSpread).
All lines are in the base currency at rate 1:

    Dr customer    amount + amount/100000 * sales_rate      (sales_rate on line)
    Cr supplier    amount + amount/100000 * purchase_rate   (purchase_rate on line)
    Cr commission  difference of the two legs, when non-zero
"""

from ledger_kernel.domain.commission import CommissionBasis, strategy_for
from ledger_kernel.domain.dtos import LineSpec, PostingContext, PostingPlan
from ledger_kernel.domain.inputs import BankTransferInput
from ledger_kernel.domain.kinds import TransactionKind
from ledger_kernel.posting_rules.base import BasePostingRule
from ledger_kernel.posting_rules.commission_line import commission_line
from ledger_kernel.posting_rules.registry import register_rule


class BankTransferRule(BasePostingRule):
    input_type = BankTransferInput
    uses_commission = True

    @property
    def kinds(self) -> tuple[TransactionKind, ...]:
        return (TransactionKind.BANK_TRANSFER, TransactionKind.MANAGER_CHEQUE)

    @property
    def version(self) -> int:
        return 1

    def _basis(self, inputs: BankTransferInput) -> CommissionBasis:
        return CommissionBasis(
            amount=inputs.amount,
            sales_rate=inputs.sales_rate,
            purchase_rate=inputs.purchase_rate,
        )

    def validate_inputs(self, kind, inputs: BankTransferInput) -> None:
        super().validate_inputs(kind, inputs)
        self.require_distinct(inputs.customer_account_id, inputs.supplier_account_id)
        strategy_for(kind).compute(self._basis(inputs))

    def account_ids(self, inputs: BankTransferInput):
        return {inputs.customer_account_id, inputs.supplier_account_id}

    def build(self, kind, inputs: BankTransferInput, ctx: PostingContext) -> PostingPlan:
        result = strategy_for(kind).compute(self._basis(inputs))
        base = ctx.base_currency
        description = self.normalize_description(inputs.description)

        lines = [
            LineSpec.debit(
                inputs.customer_account_id,
                base.id,
                amount_base=result.debit_leg,
                amount_doc=result.debit_leg,
                exchange_rate=base.rate,
                memo=description,
                sales_rate=result.sales_rate,
            ),
            LineSpec.credit(
                inputs.supplier_account_id,
                base.id,
                amount_base=result.credit_leg,
                amount_doc=result.credit_leg,
                exchange_rate=base.rate,
                memo=description,
                purchase_rate=result.purchase_rate,
            ),
        ]
        if result.has_commission_line:
            lines.append(
                commission_line(
                    ctx.commission_account_id,
                    base,
                    booked=result.booked,
                    rate=base.rate,
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


register_rule(BankTransferRule())
