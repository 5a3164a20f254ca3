"""
Base posting rule protocol.

Posting rules turn validated business inputs into a balanced PostingPlan
deterministically.  Each rule is:
- Deterministic: same inputs and reference data always produce the same lines
- Versioned: the rule version is recorded on the GLHeader
- Pure: reads only the PostingContext it is handed, never the store
"""

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable
from uuid import UUID

from ledger_kernel.domain.dtos import PostingContext, PostingPlan
from ledger_kernel.domain.kinds import TransactionKind
from ledger_kernel.exceptions import IdenticalPartiesError, KindMismatchError


@runtime_checkable
class PostingRule(Protocol):
    """Protocol for posting rules."""

    @property
    def kinds(self) -> tuple[TransactionKind, ...]:
        """Transaction kinds this rule handles."""
        ...

    @property
    def version(self) -> int:
        """Version of this rule."""
        ...

    def build(self, kind: TransactionKind, inputs: object, ctx: PostingContext) -> PostingPlan:
        """Compute the header and lines for ``inputs``."""
        ...


class BasePostingRule(ABC):
    """
    Abstract base class for posting rules.

    Subclasses declare the input dataclass they accept, the accounts and
    currencies they reference (so the service loads them once), and build
    the plan.
    """

    input_type: type = object
    uses_commission: bool = False

    @property
    @abstractmethod
    def kinds(self) -> tuple[TransactionKind, ...]:
        pass

    @property
    @abstractmethod
    def version(self) -> int:
        pass

    @abstractmethod
    def build(self, kind: TransactionKind, inputs, ctx: PostingContext) -> PostingPlan:
        pass

    def validate_inputs(self, kind: TransactionKind, inputs: object) -> None:
        """
        Check that ``inputs`` belong to this rule.

        Override in subclasses to add party checks; call super() first.

        Raises:
            KindMismatchError: inputs of another family, or a kind this
                rule does not handle.
        """
        if kind not in self.kinds:
            raise KindMismatchError(
                "/".join(k.value for k in self.kinds), kind.value
            )
        if not isinstance(inputs, self.input_type):
            raise KindMismatchError(self.input_type.__name__, type(inputs).__name__)

    def resolve_kind(self, kind: TransactionKind, inputs) -> TransactionKind:
        """Kind the header is actually booked as.  Defaults to the requested kind."""
        return kind

    def account_ids(self, inputs) -> set[UUID]:
        return set()

    def currency_ids(self, inputs) -> set[UUID]:
        return set()

    @staticmethod
    def require_distinct(debit_party: UUID, credit_party: UUID) -> None:
        if debit_party == credit_party:
            raise IdenticalPartiesError(str(debit_party))

    @staticmethod
    def normalize_description(description: str | None) -> str:
        return (description or "").strip().upper()
