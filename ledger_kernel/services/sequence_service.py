"""
SequenceService -- gapless numbering from locked counter rows.

Each named sequence is one row of ``sequence_counters``.  Allocation locks
that row FOR UPDATE, so two postings can never draw the same number and
a rolled-back posting gives its number back.  Numbers are never derived
from MAX() over the ledger.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.sequence import SequenceCounter

logger = get_logger("services.sequence")


class SequenceService:
    """
    Allocates values from named counters inside the caller's transaction.

        seq = SequenceService(session).next_value(SequenceService.GL_VOUCHER)
    """

    GL_VOUCHER = "gl_voucher"

    def __init__(self, session: Session):
        self._session = session

    def next_value(self, sequence_name: str) -> int:
        """Lock the counter, creating it on first use, and return its next value."""
        counter = self._lock(sequence_name)
        if counter is None:
            self._create(sequence_name)
            counter = self._lock(sequence_name)

        counter.current_value += 1
        self._session.flush()
        logger.debug(
            "sequence_allocated",
            extra={"sequence_name": sequence_name, "value": counter.current_value},
        )
        return counter.current_value

    def current_value(self, sequence_name: str) -> int | None:
        """Last value handed out, or None for a sequence never used."""
        return self._session.scalar(
            select(SequenceCounter.current_value).where(SequenceCounter.name == sequence_name)
        )

    def _lock(self, sequence_name: str) -> SequenceCounter | None:
        stmt = (
            select(SequenceCounter)
            .where(SequenceCounter.name == sequence_name)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self._session.scalars(stmt).one_or_none()

    def _create(self, sequence_name: str) -> None:
        # A concurrent first use inserts the same name; the loser reuses its row.
        savepoint = self._session.begin_nested()
        try:
            self._session.add(SequenceCounter(name=sequence_name, current_value=0))
            self._session.flush()
        except IntegrityError:
            savepoint.rollback()
            logger.debug("sequence_counter_exists", extra={"sequence_name": sequence_name})
        else:
            savepoint.commit()
