"""Posting rules.  Importing this package registers every built-in rule."""

from ledger_kernel.posting_rules import (  # noqa: F401
    bank_transfer,
    cash_entry,
    general_trading,
    interparty_transfer,
    journal_voucher,
)
from ledger_kernel.posting_rules.base import BasePostingRule, PostingRule
from ledger_kernel.posting_rules.registry import (
    PostingRuleRegistry,
    get_default_registry,
    register_rule,
)

__all__ = [
    "BasePostingRule",
    "PostingRule",
    "PostingRuleRegistry",
    "get_default_registry",
    "register_rule",
]
