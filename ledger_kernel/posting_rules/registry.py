"""
Kind -> posting rule lookup.

Rule modules register an instance at import time.  Each header stores the
version of the rule that built its lines, so older versions stay
resolvable after a newer one becomes current.
"""

from ledger_kernel.domain.kinds import TransactionKind
from ledger_kernel.posting_rules.base import PostingRule


class PostingRuleRegistry:
    """
    Rules by kind and version.

    A rule serving several kinds (bank transfer and manager cheque, IPT and
    IPTC) is filed under each of them.
    """

    def __init__(self):
        self._by_kind: dict[TransactionKind, dict[int, PostingRule]] = {}
        self._current: dict[TransactionKind, int] = {}

    def register(self, rule: PostingRule, set_default: bool = True) -> None:
        """File ``rule`` under its kinds; ``set_default`` makes it the current version."""
        for kind in rule.kinds:
            self._by_kind.setdefault(kind, {})[rule.version] = rule
            if set_default or kind not in self._current:
                self._current[kind] = rule.version

    def get_rule(self, kind: TransactionKind, version: int | None = None) -> PostingRule | None:
        """The rule for ``kind`` at ``version`` (current when omitted), or None."""
        versions = self._by_kind.get(kind)
        if not versions:
            return None
        return versions.get(self._current[kind] if version is None else version)

    def list_versions(self, kind: TransactionKind) -> list[int]:
        return sorted(self._by_kind.get(kind, ()))


_default_registry = PostingRuleRegistry()


def get_default_registry() -> PostingRuleRegistry:
    return _default_registry


def register_rule(rule: PostingRule, set_default: bool = True) -> None:
    _default_registry.register(rule, set_default)
