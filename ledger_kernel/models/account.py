"""
Module: ledger_kernel.models.account
Responsibility: ORM persistence for the chart of accounts and its
    category -> subcategory classification.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - Account code is unique.
    - A cashbook account always has a currency (CHECK constraint); that
      currency fixes the document currency of lines posted against it.
"""

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from ledger_kernel.models.currency import Currency


class AccountCategory(TrackedBase):
    """Top-level classification (e.g. Assets, Liabilities)."""

    __tablename__ = "account_categories"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    subcategories: Mapped[list["AccountSubCategory"]] = relationship(
        back_populates="category",
    )


class AccountSubCategory(TrackedBase):
    """Second-level classification (e.g. Business Partner, Cash & Bank)."""

    __tablename__ = "account_subcategories"

    category_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("account_categories.id"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    category: Mapped[AccountCategory] = relationship(
        back_populates="subcategories",
    )


class Account(TrackedBase):
    """
    Chart of Accounts entry.

    Guarantees:
        - code is unique and non-null.
        - is_cashbook implies currency_id is set.
    """

    __tablename__ = "chart_of_accounts"

    __table_args__ = (
        CheckConstraint(
            "NOT is_cashbook OR currency_id IS NOT NULL",
            name="ck_account_cashbook_currency",
        ),
        Index("idx_account_subcategory", "subcategory_id"),
        Index("idx_account_active", "is_active"),
    )

    code: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    alias: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    subcategory_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("account_subcategories.id"),
        nullable=True,
    )

    is_cashbook: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    currency_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("currencies.id"),
        nullable=True,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    subcategory: Mapped[AccountSubCategory | None] = relationship()
    currency: Mapped["Currency | None"] = relationship()

    def __repr__(self) -> str:
        return f"<Account {self.code}: {self.name}>"
