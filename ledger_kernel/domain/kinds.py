"""Transaction kinds and the edit families they belong to."""

from enum import Enum


class TransactionKind(str, Enum):
    """Business event kinds the posting engine can turn into ledger lines."""

    CASH_ENTRY = "cash_entry"
    BANK_TRANSFER = "bank_transfer"
    MANAGER_CHEQUE = "manager_cheque"
    GENERAL_TRADING = "general_trading"
    INTERPARTY_TRANSFER = "interparty_transfer"
    INTERPARTY_TRANSFER_COMMISSION = "interparty_transfer_commission"
    JOURNAL_VOUCHER = "journal_voucher"

    @property
    def family(self) -> "KindFamily":
        return _FAMILIES[self]


class KindFamily(str, Enum):
    """Kinds sharing one input shape; an edit may move between kinds of a family."""

    CASH = "cash"
    BANK = "bank"
    TRADING = "trading"
    INTERPARTY = "interparty"
    JOURNAL = "journal"


_FAMILIES = {
    TransactionKind.CASH_ENTRY: KindFamily.CASH,
    TransactionKind.BANK_TRANSFER: KindFamily.BANK,
    TransactionKind.MANAGER_CHEQUE: KindFamily.BANK,
    TransactionKind.GENERAL_TRADING: KindFamily.TRADING,
    TransactionKind.INTERPARTY_TRANSFER: KindFamily.INTERPARTY,
    TransactionKind.INTERPARTY_TRANSFER_COMMISSION: KindFamily.INTERPARTY,
    TransactionKind.JOURNAL_VOUCHER: KindFamily.JOURNAL,
}

# Kinds whose headers can carry a commission line
COMMISSION_KINDS: tuple[TransactionKind, ...] = (
    TransactionKind.GENERAL_TRADING,
    TransactionKind.INTERPARTY_TRANSFER_COMMISSION,
    TransactionKind.MANAGER_CHEQUE,
    TransactionKind.BANK_TRANSFER,
)
