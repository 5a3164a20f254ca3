"""ORM models.  Importing this package registers every table on Base.metadata."""

from ledger_kernel.models.account import Account, AccountCategory, AccountSubCategory
from ledger_kernel.models.currency import Currency
from ledger_kernel.models.ledger import GLHeader, GLLine
from ledger_kernel.models.sequence import SequenceCounter
from ledger_kernel.models.transaction_type import TransactionType

__all__ = [
    "Account",
    "AccountCategory",
    "AccountSubCategory",
    "Currency",
    "GLHeader",
    "GLLine",
    "SequenceCounter",
    "TransactionType",
]
