"""
Module: ledger_kernel.models.transaction_type
Responsibility: ORM persistence for transaction types (CASH, BNKT, JV ...).
    Which code maps to which transaction kind is configuration, resolved
    once into EngineSettings.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase


class TransactionType(TrackedBase):
    """Transaction type master row referenced by every ledger header."""

    __tablename__ = "transaction_types"

    code: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        unique=True,
    )

    description: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<TransactionType {self.code}>"
