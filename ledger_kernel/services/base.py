"""
Common shape of the kernel's write services.

A service is built around the caller's Session and flushes its writes;
it never commits.  session_scope(), a request handler or a test fixture
decides whether the work is kept.
"""

from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy.orm import Session

from ledger_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(Generic[ModelType]):
    """Holds the session and the actor stamped on rows the service writes."""

    def __init__(self, session: Session, actor_id: UUID | None = None):
        self.session = session
        self.actor_id = actor_id
