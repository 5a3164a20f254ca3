"""
Counter rows behind SequenceService.  Locking a row serializes allocation
from that sequence.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base


class SequenceCounter(Base):
    __tablename__ = "sequence_counters"

    # e.g. "gl_voucher"
    name: Mapped[str] = mapped_column(String(50), unique=True)
    # last value handed out; 0 before first use
    current_value: Mapped[int] = mapped_column(default=0)
