"""
Module: ledger_kernel.db.base
Responsibility: Declarative base and audit mixin shared by every ledger table.
Architecture position: Kernel > DB.  Imported by models/ only; imports
    nothing from the kernel above db/.

Invariants enforced:
    - Every table has a uuid4 ``id`` stored as 36-character text, so the
      same schema runs on PostgreSQL and SQLite.
    - Annotated Decimal columns default to Numeric(38, 9); floats are never
      mapped.
    - Master-data and ledger rows carry who created and last edited them.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, ClassVar
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, Date, DateTime, Numeric, String, func
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """UUID column kept as its canonical string form."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Dialect) -> str | None:
        return None if value is None else str(value)

    def process_result_value(self, value: Any, dialect: Dialect) -> UUID | None:
        return None if value is None else UUID(str(value))


class Base(DeclarativeBase):
    type_annotation_map: ClassVar[dict] = {
        UUID: UUIDString(),
        Decimal: Numeric(38, 9),
        int: BigInteger,
        date: Date,
        datetime: DateTime(timezone=True),
    }

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)


class TrackedBase(Base):
    """
    Base for rows that record their author.

    ``created_by_id`` must be supplied on insert.  ``updated_at`` is
    refreshed by the database on every UPDATE; ``updated_by_id`` is set by
    the service making the edit.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now()
    )

    created_by_id: Mapped[UUID]
    updated_by_id: Mapped[UUID | None]
