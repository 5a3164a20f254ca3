"""
Interparty transfer posting rule (IPT / IPTC).

Both legs shed a flat, user-supplied commission (FlatCommission).  All
lines are in the base currency at rate 1:

    Cr from-party  amount - commission
    Dr to-party    amount + commission
    Cr commission  2 * commission, when commission > 0

The header is booked as IPTC when a commission is present, else IPT.
"""

from ledger_kernel.domain.commission import CommissionBasis, FlatCommission
from ledger_kernel.domain.dtos import LineSpec, PostingContext, PostingPlan
from ledger_kernel.domain.inputs import InterpartyTransferInput
from ledger_kernel.domain.kinds import TransactionKind
from ledger_kernel.posting_rules.base import BasePostingRule
from ledger_kernel.posting_rules.commission_line import commission_line
from ledger_kernel.posting_rules.registry import register_rule


class InterpartyTransferRule(BasePostingRule):
    input_type = InterpartyTransferInput
    uses_commission = True

    _strategy = FlatCommission()

    @property
    def kinds(self) -> tuple[TransactionKind, ...]:
        return (
            TransactionKind.INTERPARTY_TRANSFER,
            TransactionKind.INTERPARTY_TRANSFER_COMMISSION,
        )

    @property
    def version(self) -> int:
        return 1

    def _basis(self, inputs: InterpartyTransferInput) -> CommissionBasis:
        return CommissionBasis(amount=inputs.amount, commission=inputs.commission)

    def validate_inputs(self, kind, inputs: InterpartyTransferInput) -> None:
        super().validate_inputs(kind, inputs)
        self.require_distinct(inputs.to_account_id, inputs.from_account_id)
        self._strategy.compute(self._basis(inputs))

    def resolve_kind(self, kind, inputs: InterpartyTransferInput) -> TransactionKind:
        result = self._strategy.compute(self._basis(inputs))
        if result.commission > 0:
            return TransactionKind.INTERPARTY_TRANSFER_COMMISSION
        return TransactionKind.INTERPARTY_TRANSFER

    def account_ids(self, inputs: InterpartyTransferInput):
        return {inputs.from_account_id, inputs.to_account_id}

    def build(self, kind, inputs: InterpartyTransferInput, ctx: PostingContext) -> PostingPlan:
        result = self._strategy.compute(self._basis(inputs))
        base = ctx.base_currency
        description = self.normalize_description(inputs.description)

        lines = [
            LineSpec.credit(
                inputs.from_account_id,
                base.id,
                amount_base=result.credit_leg,
                amount_doc=result.credit_leg,
                exchange_rate=base.rate,
                memo=description,
            ),
            LineSpec.debit(
                inputs.to_account_id,
                base.id,
                amount_base=result.debit_leg,
                amount_doc=result.debit_leg,
                exchange_rate=base.rate,
                memo=description,
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
            kind=self.resolve_kind(kind, inputs),
            transaction_date=inputs.transaction_date,
            description=description,
            status=inputs.status,
            lines=tuple(lines),
            rule_version=self.version,
            commission=result if result.commission > 0 else None,
        )


register_rule(InterpartyTransferRule())
