"""
Module: ledger_kernel.models.currency
Responsibility: ORM persistence for currencies and their conversion rule.
Architecture position: Kernel > Models.  May import from db/ and domain enums.

Invariants enforced:
    - code is unique.
    - rate is positive.
    - At most one row has is_base = true (partial unique index).
    - The base currency has rate 1 and no conversion note; every other
      currency has a note (CHECK constraint).
"""

from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Index, Numeric, String, text
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase
from ledger_kernel.domain.currency import ExchangeRateNote


class Currency(TrackedBase):
    """
    Currency master row.

    Contract:
        The posting engine reads rate and exchange_rate_note when it needs
        a default line rate.  Lines keep their own exchange_rate, so later
        rate changes never rewrite history.
    """

    __tablename__ = "currencies"

    __table_args__ = (
        CheckConstraint("rate > 0", name="ck_currency_rate_positive"),
        CheckConstraint(
            "(is_base AND rate = 1 AND exchange_rate_note IS NULL) OR "
            "(NOT is_base AND exchange_rate_note IN ('multiply', 'divide'))",
            name="ck_currency_note",
        ),
        Index(
            "uq_currency_single_base",
            "is_base",
            unique=True,
            postgresql_where=text("is_base"),
            sqlite_where=text("is_base"),
        ),
    )

    code: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        unique=True,
    )

    name: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )

    # Conversion factor to the base currency
    rate: Mapped[Decimal] = mapped_column(
        Numeric(38, 10),
        nullable=False,
        default=Decimal("1"),
    )

    is_base: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    exchange_rate_note: Mapped[ExchangeRateNote | None] = mapped_column(
        String(10),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Currency {self.code} rate={self.rate} base={self.is_base}>"
