"""
Module: ledger_kernel.selectors.account_selector
Responsibility: The single account-classification query ("which accounts are
    business partners") and the receivable/payable position of those accounts.
Architecture position: Kernel > Selectors.
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ledger_kernel.db.types import ZERO, to_stored_amount
from ledger_kernel.domain.dtos import AccountInfo, EntryStatus
from ledger_kernel.domain.settings import EngineSettings
from ledger_kernel.models.account import Account, AccountSubCategory
from ledger_kernel.models.ledger import GLHeader, GLLine
from ledger_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class PartnerBalance:
    """Base-currency position of one partner: receivable or payable, never both."""

    account_id: UUID
    account_code: str
    account_name: str
    receivable: Decimal
    payable: Decimal


class AccountSelector(BaseSelector):
    """
    Partner lists default to the subcategory named by
    ``settings.business_partner_subcategory``.
    """

    def __init__(self, session: Session, settings: EngineSettings | None = None):
        super().__init__(session)
        self._partner_subcategory = (
            settings.business_partner_subcategory
            if settings is not None
            else EngineSettings.business_partner_subcategory
        )

    def accounts_by_classification(
        self,
        subcategory_name: str,
        active_only: bool = True,
    ) -> list[AccountInfo]:
        """Accounts whose subcategory name matches (case-insensitive), by code."""
        query = (
            select(Account)
            .join(AccountSubCategory, Account.subcategory_id == AccountSubCategory.id)
            .where(func.lower(AccountSubCategory.name) == subcategory_name.strip().lower())
            .order_by(Account.code)
        )
        if active_only:
            query = query.where(Account.is_active.is_(True))
        return [AccountInfo.from_model(a) for a in self.session.execute(query).scalars()]

    def partner_balances(self, subcategory_name: str | None = None) -> list[PartnerBalance]:
        """
        Net base balance over posted lines for every account in the subcategory.

        Without ``subcategory_name`` the configured partner subcategory is used.

        A net debit is a receivable, a net credit a payable.  Accounts without
        movement are listed with zero on both sides.
        """
        partners = self.accounts_by_classification(subcategory_name or self._partner_subcategory)
        if not partners:
            return []

        nets = {
            row.account_id: self._amount(row.net)
            for row in self.session.execute(
                select(
                    GLLine.account_id,
                    func.sum(GLLine.debit - GLLine.credit).label("net"),
                )
                .join(GLHeader, GLLine.header_id == GLHeader.id)
                .where(GLLine.account_id.in_([p.id for p in partners]))
                .where(GLHeader.status == EntryStatus.POSTED.value)
                .group_by(GLLine.account_id)
            ).all()
        }

        zero = to_stored_amount(ZERO)
        balances = []
        for partner in partners:
            net = nets.get(partner.id, zero)
            balances.append(
                PartnerBalance(
                    account_id=partner.id,
                    account_code=partner.code,
                    account_name=partner.name,
                    receivable=net if net > ZERO else zero,
                    payable=-net if net < ZERO else zero,
                )
            )
        return balances
