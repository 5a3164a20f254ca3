"""
Cash entry posting rule.

A signed document amount moves through a cashbook:

    amount > 0 (receipt)   Dr cashbook    Cr partner
    amount < 0 (payment)   Dr partner     Cr cashbook

Both lines are in the cashbook's currency at the same rate (the given rate,
or the currency's current rate), converted to base with to_base().
"""

from ledger_kernel.domain.currency import effective_rate, to_base
from ledger_kernel.domain.dtos import LineSpec, PostingContext, PostingPlan
from ledger_kernel.domain.inputs import CashEntryInput
from ledger_kernel.domain.kinds import TransactionKind
from ledger_kernel.domain.values import parse_rate, parse_signed_amount
from ledger_kernel.exceptions import NotACashbookError
from ledger_kernel.posting_rules.base import BasePostingRule
from ledger_kernel.posting_rules.registry import register_rule


class CashEntryRule(BasePostingRule):
    input_type = CashEntryInput

    @property
    def kinds(self) -> tuple[TransactionKind, ...]:
        return (TransactionKind.CASH_ENTRY,)

    @property
    def version(self) -> int:
        return 1

    def validate_inputs(self, kind, inputs: CashEntryInput) -> None:
        super().validate_inputs(kind, inputs)
        self.require_distinct(inputs.cashbook_account_id, inputs.partner_account_id)
        parse_signed_amount(inputs.amount, "amount")

    def account_ids(self, inputs: CashEntryInput):
        return {inputs.cashbook_account_id, inputs.partner_account_id}

    def build(self, kind, inputs: CashEntryInput, ctx: PostingContext) -> PostingPlan:
        cashbook = ctx.account(inputs.cashbook_account_id)
        if not cashbook.is_cashbook or cashbook.currency_id is None:
            raise NotACashbookError(str(cashbook.id))
        currency = ctx.currency(cashbook.currency_id)

        amount = parse_signed_amount(inputs.amount, "amount")
        given_rate = None
        if inputs.exchange_rate not in (None, ""):
            given_rate = parse_rate(inputs.exchange_rate, "exchange_rate", strictly_positive=True)
        rate = effective_rate(currency, given_rate)

        doc = abs(amount)
        base = to_base(doc, currency, rate)
        description = self.normalize_description(inputs.description)

        cashbook_line = dict(
            account_id=cashbook.id,
            currency_id=currency.id,
            amount_base=base,
            amount_doc=doc,
            exchange_rate=rate,
            memo=description,
        )
        partner_line = dict(cashbook_line, account_id=inputs.partner_account_id)

        if amount > 0:
            lines = (LineSpec.debit(**cashbook_line), LineSpec.credit(**partner_line))
        else:
            lines = (LineSpec.debit(**partner_line), LineSpec.credit(**cashbook_line))

        return PostingPlan(
            kind=kind,
            transaction_date=inputs.transaction_date,
            description=description,
            status=inputs.status,
            lines=lines,
            rule_version=self.version,
        )


register_rule(CashEntryRule())
