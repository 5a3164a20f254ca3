"""
Journal voucher posting rule.

Manual multi-line entry.  Each line names one account, exactly one of
debit/credit in its own currency (base currency when omitted) and a rate
(the currency's current rate when omitted).  Base amounts come from
to_base(); the service checks the total balances within tolerance.
"""

from ledger_kernel.domain.currency import effective_rate, to_base
from ledger_kernel.domain.dtos import LineSpec, PostingContext, PostingPlan
from ledger_kernel.domain.inputs import JournalLineInput, JournalVoucherInput
from ledger_kernel.domain.kinds import TransactionKind
from ledger_kernel.domain.values import is_blank_amount, parse_amount, parse_rate
from ledger_kernel.exceptions import InsufficientLinesError, InvalidLineError
from ledger_kernel.posting_rules.base import BasePostingRule
from ledger_kernel.posting_rules.registry import register_rule


class JournalVoucherRule(BasePostingRule):
    input_type = JournalVoucherInput

    @property
    def kinds(self) -> tuple[TransactionKind, ...]:
        return (TransactionKind.JOURNAL_VOUCHER,)

    @property
    def version(self) -> int:
        return 1

    def validate_inputs(self, kind, inputs: JournalVoucherInput) -> None:
        super().validate_inputs(kind, inputs)
        if len(inputs.lines) < 2:
            raise InsufficientLinesError(len(inputs.lines))
        for line_no, line in enumerate(inputs.lines, start=1):
            self._side_amount(line_no, line)

    @staticmethod
    def _side_amount(line_no: int, line: JournalLineInput):
        has_debit = not is_blank_amount(line.debit)
        has_credit = not is_blank_amount(line.credit)
        if has_debit == has_credit:
            raise InvalidLineError(line_no, "exactly one of debit or credit must be set")
        if has_debit:
            return True, parse_amount(line.debit, f"lines[{line_no}].debit")
        return False, parse_amount(line.credit, f"lines[{line_no}].credit")

    def account_ids(self, inputs: JournalVoucherInput):
        return {line.account_id for line in inputs.lines}

    def currency_ids(self, inputs: JournalVoucherInput):
        return {line.currency_id for line in inputs.lines if line.currency_id is not None}

    def build(self, kind, inputs: JournalVoucherInput, ctx: PostingContext) -> PostingPlan:
        description = self.normalize_description(inputs.description)
        lines = []
        for line_no, line in enumerate(inputs.lines, start=1):
            is_debit, doc = self._side_amount(line_no, line)
            currency = (
                ctx.currency(line.currency_id)
                if line.currency_id is not None
                else ctx.base_currency
            )
            given_rate = None
            if line.exchange_rate not in (None, ""):
                given_rate = parse_rate(
                    line.exchange_rate, f"lines[{line_no}].exchange_rate",
                    strictly_positive=True,
                )
            rate = effective_rate(currency, given_rate)
            factory = LineSpec.debit if is_debit else LineSpec.credit
            lines.append(
                factory(
                    line.account_id,
                    currency.id,
                    amount_base=to_base(doc, currency, rate),
                    amount_doc=doc,
                    exchange_rate=rate,
                    memo=self.normalize_description(line.narration) or description,
                )
            )

        return PostingPlan(
            kind=kind,
            transaction_date=inputs.transaction_date,
            description=description,
            status=inputs.status,
            lines=tuple(lines),
            rule_version=self.version,
        )


register_rule(JournalVoucherRule())
