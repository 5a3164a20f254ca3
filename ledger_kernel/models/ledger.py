"""
Module: ledger_kernel.models.ledger
Responsibility: ORM persistence for ledger headers (gl_headers) and ledger
    lines (gl_transactions) -- the financial record every balance and
    report is derived from.
Architecture position: Kernel > Models.  May import from db/ and domain enums.
    MUST NOT import from services/ or selectors/.

Invariants enforced:
    - voucher_no and seq are unique; seq is allocated from a locked
      counter row and orders headers sharing a transaction date.
    - A line carries exactly one positive side in base currency and the
      matching side in document currency (CHECK constraints).
    - Balance per header (sum of debit == sum of credit within tolerance)
      is enforced by LedgerPostingService before flush; is_balanced is a
      read-side convenience.

Failure modes:
    - IntegrityError on a line with both or neither side set, or on a
      duplicate voucher number.  LedgerPostingService wraps these as
      PersistenceError.
"""

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase, UUIDString
from ledger_kernel.db.types import ZERO
from ledger_kernel.domain.dtos import EntryStatus, LineRole

if TYPE_CHECKING:
    from ledger_kernel.models.account import Account
    from ledger_kernel.models.currency import Currency
    from ledger_kernel.models.transaction_type import TransactionType


class GLHeader(TrackedBase):
    """
    Ledger header -- one business transaction and the unit of atomicity.

    Contract:
        Created together with its lines by LedgerPostingService.post().
        Edits go through replace_lines(), which swaps the whole line set in
        one savepoint and never changes status.
    """

    __tablename__ = "gl_headers"

    __table_args__ = (
        UniqueConstraint("voucher_no", name="uq_gl_header_voucher"),
        UniqueConstraint("seq", name="uq_gl_header_seq"),
        Index("idx_gl_header_date", "transaction_date"),
        Index("idx_gl_header_status", "status"),
        Index("idx_gl_header_type", "transaction_type_id"),
    )

    voucher_no: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
    )

    # Insertion order; tiebreak for lines sharing a transaction date
    seq: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    transaction_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    description: Mapped[str] = mapped_column(
        String(1000),
        nullable=False,
        default="",
    )

    transaction_type_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("transaction_types.id"),
        nullable=False,
    )

    status: Mapped[EntryStatus] = mapped_column(
        String(10),
        nullable=False,
        default=EntryStatus.POSTED.value,
    )

    # Version of the posting rule that produced the current line set
    posting_rule_version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )

    lines: Mapped[list["GLLine"]] = relationship(
        back_populates="header",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="GLLine.line_seq",
    )

    transaction_type: Mapped["TransactionType"] = relationship()

    def __repr__(self) -> str:
        return f"<GLHeader {self.voucher_no} status={self.status}>"

    @property
    def total_debits(self) -> Decimal:
        return sum((line.debit for line in self.lines), ZERO)

    @property
    def total_credits(self) -> Decimal:
        return sum((line.credit for line in self.lines), ZERO)

    @property
    def is_balanced(self) -> bool:
        return self.total_debits == self.total_credits

    @property
    def commission_line(self) -> "GLLine | None":
        for line in self.lines:
            if line.role == LineRole.COMMISSION:
                return line
        return None


class GLLine(TrackedBase):
    """
    Ledger line -- one debit-or-credit movement against one account.

    Guarantees:
        - Exactly one of debit/credit is positive; the other is zero.
        - The document-currency side mirrors the base side.
        - exchange_rate is the rate used for this line, kept for history.
    """

    __tablename__ = "gl_transactions"

    __table_args__ = (
        CheckConstraint(
            "(debit > 0 AND credit = 0) OR (credit > 0 AND debit = 0)",
            name="ck_gl_line_one_side",
        ),
        CheckConstraint(
            "debit_doc_currency >= 0 AND credit_doc_currency >= 0",
            name="ck_gl_line_doc_non_negative",
        ),
        CheckConstraint(
            "(debit > 0 AND credit_doc_currency = 0) OR "
            "(credit > 0 AND debit_doc_currency = 0)",
            name="ck_gl_line_doc_side",
        ),
        CheckConstraint("exchange_rate > 0", name="ck_gl_line_rate_positive"),
        UniqueConstraint("header_id", "line_seq", name="uq_gl_line_seq"),
        Index("idx_gl_line_header", "header_id"),
        Index("idx_gl_line_account", "account_id"),
        Index("idx_gl_line_account_currency", "account_id", "currency_id"),
    )

    header_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("gl_headers.id", ondelete="CASCADE"),
        nullable=False,
    )

    line_seq: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    account_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("chart_of_accounts.id"),
        nullable=False,
    )

    currency_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("currencies.id"),
        nullable=False,
    )

    # Base currency
    debit: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False, default=ZERO)
    credit: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False, default=ZERO)

    # Line currency
    debit_doc_currency: Mapped[Decimal] = mapped_column(
        Numeric(38, 9), nullable=False, default=ZERO
    )
    credit_doc_currency: Mapped[Decimal] = mapped_column(
        Numeric(38, 9), nullable=False, default=ZERO
    )

    exchange_rate: Mapped[Decimal] = mapped_column(
        Numeric(38, 10),
        nullable=False,
    )

    sales_rate: Mapped[Decimal | None] = mapped_column(Numeric(38, 10), nullable=True)
    purchase_rate: Mapped[Decimal | None] = mapped_column(Numeric(38, 10), nullable=True)

    role: Mapped[LineRole] = mapped_column(
        String(20),
        nullable=False,
        default=LineRole.PRINCIPAL.value,
    )

    memo: Mapped[str | None] = mapped_column(
        String(1000),
        nullable=True,
    )

    header: Mapped[GLHeader] = relationship(
        back_populates="lines",
    )

    account: Mapped["Account"] = relationship()
    currency: Mapped["Currency"] = relationship()

    def __repr__(self) -> str:
        return f"<GLLine dr={self.debit} cr={self.credit} role={self.role}>"

    @property
    def doc_amount(self) -> Decimal:
        """Signed document-currency movement (debit positive)."""
        return self.debit_doc_currency - self.credit_doc_currency

    @property
    def base_amount(self) -> Decimal:
        """Signed base-currency movement (debit positive)."""
        return self.debit - self.credit
