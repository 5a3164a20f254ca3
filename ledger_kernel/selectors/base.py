"""
Module: ledger_kernel.selectors.base
Responsibility: Abstract base for read-only query selectors.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain/.  MUST NOT import from services/.

Invariants enforced:
    - Selectors accept a Session from the caller and never call add(),
      delete(), flush() or commit() on it.
    - Selectors return frozen dataclasses, not ORM instances.
"""

from abc import ABC
from decimal import Decimal

from sqlalchemy.orm import Session

from ledger_kernel.db.types import ZERO, to_stored_amount


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    The caller owns the session and its transaction scope, so every query a
    selector issues sees one snapshot.
    """

    def __init__(self, session: Session):
        self.session = session

    @staticmethod
    def _amount(value: Decimal | None) -> Decimal:
        """Aggregate results come back as None for empty groups."""
        if value is None:
            return to_stored_amount(ZERO)
        return to_stored_amount(Decimal(value))
