"""
LedgerPostingService -- turns business inputs into persisted, balanced entries.

Responsibility:
    ``post(kind, inputs)`` validates the inputs, loads the referenced
    accounts and currencies once, asks the kind's posting rule for a
    PostingPlan, verifies it, and writes header + lines.
    ``replace_lines(header_id, inputs)`` recomputes the line set for an
    existing header exactly as ``post`` would and swaps it in.

Architecture position:
    Kernel > Services -- imperative shell around the pure posting rules.

Invariants enforced:
    - Every plan has at least two lines, each with one positive side.
    - Each line's base amount equals to_base(doc amount, currency, line rate)
      within the balance tolerance.
    - Sum of base debits equals sum of base credits within tolerance; the
      residue is then booked onto one line so the stored header balances
      exactly.
    - post and replace_lines each run inside one SAVEPOINT: either the whole
      header + line set is flushed or nothing is.  Readers never see a
      header with half its lines.
    - replace_lines locks the header row (SELECT ... FOR UPDATE) so
      concurrent edits of one header serialize in the store.
    - Status is fixed at creation; replace_lines never changes it.

Failure modes:
    - ValidationError subclasses: raised before any write.
    - PersistenceError: the store rejected the write; the savepoint is
      rolled back and the driver error is chained.
    - HeaderNotFoundError: replace_lines on an unknown header.

Non-goals:
    - Does NOT commit; the caller owns the transaction.
    - Does NOT retry.
"""

import time
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ledger_kernel.db.types import ZERO
from ledger_kernel.domain.currency import CurrencyInfo, to_base
from ledger_kernel.domain.dtos import (
    AccountInfo,
    EntryStatus,
    LineRole,
    LineSide,
    PostingContext,
    PostingPlan,
)
from ledger_kernel.domain.kinds import TransactionKind
from ledger_kernel.domain.settings import EngineSettings
from ledger_kernel.exceptions import (
    AccountInactiveError,
    AccountNotFoundError,
    ConversionMismatchError,
    CurrencyNotFoundError,
    HeaderNotFoundError,
    InsufficientLinesError,
    InvalidLineError,
    KindMismatchError,
    MissingSystemConfigurationError,
    PersistenceError,
    UnbalancedEntryError,
    UnknownTransactionKindError,
    ValidationError,
)
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.account import Account
from ledger_kernel.models.currency import Currency
from ledger_kernel.models.ledger import GLHeader, GLLine
from ledger_kernel.posting_rules import get_default_registry
from ledger_kernel.posting_rules.base import BasePostingRule
from ledger_kernel.posting_rules.registry import PostingRuleRegistry
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.sequence_service import SequenceService

logger = get_logger("services.posting")


class LedgerPostingService(BaseService[GLHeader]):
    """
    Posting engine entry point.

    Contract:
        Receives an explicit EngineSettings value (resolved once per
        process) and an actor id recorded on every written row.

    Usage:
        service = LedgerPostingService(session, settings, actor_id)
        header_id = service.post(TransactionKind.CASH_ENTRY, CashEntryInput(...))
        service.replace_lines(header_id, CashEntryInput(...))
        session.commit()
    """

    def __init__(
        self,
        session: Session,
        settings: EngineSettings,
        actor_id: UUID,
        registry: PostingRuleRegistry | None = None,
    ):
        super().__init__(session, actor_id)
        self._settings = settings
        self._registry = registry or get_default_registry()
        self._sequence_service = SequenceService(session)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def post(self, kind: TransactionKind | str, inputs: object) -> UUID:
        """
        Create a header and its lines from ``inputs`` as one atomic unit.

        Preconditions:
            - Referenced accounts exist and are active.
            - Base currency, the kind's transaction type and (for
              commission-bearing kinds) the commission account are
              configured in EngineSettings.

        Postconditions:
            - A header with a fresh voucher number and >= 2 balanced lines
              is flushed; status is the inputs' status (posted by default).

        Returns:
            The new header id.
        """
        kind = self._coerce_kind(kind)
        t0 = time.monotonic()
        with LogContext.bind(kind=kind.value, actor_id=self.actor_id):
            logger.info("ledger_post_started")
            rule = self._rule_for(kind)
            plan = self._build_plan(rule, kind, inputs)

            try:
                with self.session.begin_nested():
                    header = self._create_header(plan)
                    self._write_lines(header, plan)
            except SQLAlchemyError as exc:
                logger.error(
                    "persistence_failed",
                    extra={"operation": "post"},
                    exc_info=True,
                )
                raise PersistenceError("post", _driver_reason(exc)) from exc

            logger.info(
                "ledger_post_completed",
                extra={
                    "header_id": str(header.id),
                    "voucher_no": header.voucher_no,
                    "booked_kind": plan.kind.value,
                    "line_count": len(plan.lines),
                    "total_base": str(plan.total_debits),
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                },
            )
            return header.id

    def replace_lines(
        self,
        header_id: UUID,
        inputs: object,
        kind: TransactionKind | str | None = None,
    ) -> UUID:
        """
        Recompute and swap the full line set of an existing header.

        ``kind`` defaults to the header's current kind and may only move
        within the same family (e.g. IPT -> IPTC when a commission is
        added, bank transfer <-> manager cheque).

        Postconditions:
            - Header date, description, type and rule version reflect the
              new inputs; status is unchanged.
            - The old lines are gone and the new set is flushed, all in one
              savepoint.  Identical inputs produce identical line amounts.

        Returns:
            ``header_id``.
        """
        t0 = time.monotonic()
        with LogContext.bind(header_id=header_id, actor_id=self.actor_id):
            try:
                with self.session.begin_nested():
                    header = self._lock_header(header_id)
                    current_kind = self._settings.kind_for_type(header.transaction_type_id)
                    if current_kind is None:
                        raise MissingSystemConfigurationError(
                            "transaction_type",
                            f"header type {header.transaction_type_id} maps to no kind",
                        )
                    requested = self._coerce_kind(kind) if kind is not None else current_kind
                    if requested.family != current_kind.family:
                        raise KindMismatchError(current_kind.value, requested.value)

                    rule = self._rule_for(requested)
                    plan = self._build_plan(rule, requested, inputs)

                    old_line_count = len(header.lines)
                    header.transaction_date = plan.transaction_date
                    header.description = plan.description
                    header.transaction_type_id = self._settings.type_id_for(plan.kind)
                    header.posting_rule_version = plan.rule_version
                    header.updated_by_id = self.actor_id

                    header.lines.clear()
                    self.session.flush()
                    self._write_lines(header, plan)
            except SQLAlchemyError as exc:
                logger.error(
                    "persistence_failed",
                    extra={"operation": "replace_lines"},
                    exc_info=True,
                )
                raise PersistenceError("replace_lines", _driver_reason(exc)) from exc

            logger.info(
                "ledger_lines_replaced",
                extra={
                    "voucher_no": header.voucher_no,
                    "booked_kind": plan.kind.value,
                    "old_line_count": old_line_count,
                    "new_line_count": len(plan.lines),
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                },
            )
            return header.id

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def _coerce_kind(self, kind: TransactionKind | str) -> TransactionKind:
        try:
            return TransactionKind(kind)
        except ValueError:
            raise UnknownTransactionKindError(str(kind)) from None

    def _rule_for(self, kind: TransactionKind) -> BasePostingRule:
        rule = self._registry.get_rule(kind)
        if rule is None:
            raise UnknownTransactionKindError(kind.value)
        return rule

    def _build_plan(
        self, rule: BasePostingRule, kind: TransactionKind, inputs: object
    ) -> PostingPlan:
        """Validate, load reference data, build and verify.  No writes."""
        try:
            rule.validate_inputs(kind, inputs)
            booked_kind = rule.resolve_kind(kind, inputs)
            self._require_configuration(rule, booked_kind)
            ctx = self._load_context(rule, inputs)
            plan = rule.build(kind, inputs, ctx)
            self._verify_plan(plan, ctx)
            plan = self._absorb_residue(plan)
        except ValidationError as exc:
            logger.warning(
                "posting_rejected",
                extra={"error_code": exc.code, "reason": str(exc)},
            )
            raise
        return plan

    def _require_configuration(
        self, rule: BasePostingRule, kind: TransactionKind
    ) -> None:
        if self._settings.base_currency_id is None:
            raise MissingSystemConfigurationError("base_currency")
        if self._settings.type_id_for(kind) is None:
            raise MissingSystemConfigurationError("transaction_type", kind.value)
        if rule.uses_commission and self._settings.commission_account_id is None:
            raise MissingSystemConfigurationError("commission_account")

    def _load_context(self, rule: BasePostingRule, inputs: object) -> PostingContext:
        account_ids = set(rule.account_ids(inputs))
        if rule.uses_commission:
            account_ids.add(self._settings.commission_account_id)

        accounts: dict[UUID, AccountInfo] = {
            row.id: AccountInfo.from_model(row)
            for row in self.session.execute(
                select(Account).where(Account.id.in_(account_ids))
            ).scalars()
        }
        for account_id in account_ids:
            account = accounts.get(account_id)
            if account is None:
                raise AccountNotFoundError(str(account_id))
            if not account.is_active:
                raise AccountInactiveError(str(account_id))

        requested_currencies = set(rule.currency_ids(inputs))
        currency_ids = requested_currencies | {self._settings.base_currency_id}
        currency_ids |= {a.currency_id for a in accounts.values() if a.currency_id}
        currencies: dict[UUID, CurrencyInfo] = {
            row.id: CurrencyInfo.from_model(row)
            for row in self.session.execute(
                select(Currency).where(Currency.id.in_(currency_ids))
            ).scalars()
        }
        for currency_id in requested_currencies:
            if currency_id not in currencies:
                raise CurrencyNotFoundError(str(currency_id))
        if self._settings.base_currency_id not in currencies:
            raise MissingSystemConfigurationError(
                "base_currency", f"{self._settings.base_currency_id} not found"
            )

        return PostingContext(
            settings=self._settings,
            accounts=accounts,
            currencies=currencies,
        )

    def _verify_plan(self, plan: PostingPlan, ctx: PostingContext) -> None:
        tolerance = self._settings.balance_tolerance

        if plan.status not in (EntryStatus.DRAFT, EntryStatus.POSTED):
            raise ValidationError(f"Unknown entry status: {plan.status!r}")

        if len(plan.lines) < 2:
            raise InsufficientLinesError(len(plan.lines))

        for line_no, line in enumerate(plan.lines, start=1):
            ctx.account(line.account_id)
            if line.amount_base <= ZERO:
                raise InvalidLineError(line_no, "amounts must be positive after rounding")
            # a commission worth less than one stored unit of its currency
            if line.amount_doc <= ZERO and line.role != LineRole.COMMISSION:
                raise InvalidLineError(line_no, "amounts must be positive after rounding")
            expected = to_base(line.amount_doc, ctx.currency(line.currency_id), line.exchange_rate)
            if abs(expected - line.amount_base) > tolerance:
                raise ConversionMismatchError(line_no, str(expected), str(line.amount_base))

        sum_debit = plan.total_debits
        sum_credit = plan.total_credits
        balanced = (
            sum_debit > ZERO and sum_credit > ZERO and abs(sum_debit - sum_credit) <= tolerance
        )
        logger.info(
            "balance_validated",
            extra={
                "sum_debit": str(sum_debit),
                "sum_credit": str(sum_credit),
                "balanced": balanced,
            },
        )
        if not balanced:
            logger.warning(
                "unbalanced_entry",
                extra={"imbalance": str(sum_debit - sum_credit)},
            )
            raise UnbalancedEntryError(str(sum_debit), str(sum_credit), str(tolerance))

        if plan.commission is not None:
            logger.info(
                "commission_computed",
                extra={
                    "commission": str(plan.commission.commission),
                    "booked": str(plan.commission.booked),
                    "debit_leg": str(plan.commission.debit_leg),
                    "credit_leg": str(plan.commission.credit_leg),
                },
            )

    def _absorb_residue(self, plan: PostingPlan) -> PostingPlan:
        residue = plan.total_debits - plan.total_credits
        if residue == ZERO:
            return plan
        adjusted, line_no = plan.with_residue_booked(self._settings.base_currency_id)
        logger.info(
            "rounding_residue_booked",
            extra={"residue": str(residue), "line_no": line_no},
        )
        return adjusted

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _lock_header(self, header_id: UUID) -> GLHeader:
        header = self.session.execute(
            select(GLHeader)
            .where(GLHeader.id == header_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if header is None:
            raise HeaderNotFoundError(str(header_id))
        return header

    def _create_header(self, plan: PostingPlan) -> GLHeader:
        seq = self._sequence_service.next_value(SequenceService.GL_VOUCHER)
        header = GLHeader(
            voucher_no=self._settings.format_voucher(seq),
            seq=seq,
            transaction_date=plan.transaction_date,
            description=plan.description,
            transaction_type_id=self._settings.type_id_for(plan.kind),
            status=EntryStatus(plan.status).value,
            posting_rule_version=plan.rule_version,
            created_by_id=self.actor_id,
        )
        self.session.add(header)
        self.session.flush()
        return header

    def _write_lines(self, header: GLHeader, plan: PostingPlan) -> None:
        for line_seq, spec in enumerate(plan.lines, start=1):
            is_debit = spec.side == LineSide.DEBIT
            header.lines.append(
                GLLine(
                    line_seq=line_seq,
                    account_id=spec.account_id,
                    currency_id=spec.currency_id,
                    debit=spec.debit_amount,
                    credit=spec.credit_amount,
                    debit_doc_currency=spec.amount_doc if is_debit else ZERO,
                    credit_doc_currency=ZERO if is_debit else spec.amount_doc,
                    exchange_rate=spec.exchange_rate,
                    sales_rate=spec.sales_rate,
                    purchase_rate=spec.purchase_rate,
                    role=spec.role.value,
                    memo=spec.memo,
                    created_by_id=self.actor_id,
                )
            )
        self.session.flush()


def _driver_reason(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)
