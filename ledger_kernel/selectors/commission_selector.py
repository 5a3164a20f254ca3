"""
Module: ledger_kernel.selectors.commission_selector
Responsibility: Commission reporting over posted headers.  Commission lines
    are located by their ``role`` tag only, never by memo text or account name.
Architecture position: Kernel > Selectors.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ledger_kernel.db.types import ZERO
from ledger_kernel.domain.dtos import EntryStatus, LineRole
from ledger_kernel.domain.kinds import COMMISSION_KINDS, TransactionKind
from ledger_kernel.domain.settings import EngineSettings
from ledger_kernel.models.account import Account
from ledger_kernel.models.currency import Currency
from ledger_kernel.models.ledger import GLHeader, GLLine
from ledger_kernel.models.transaction_type import TransactionType
from ledger_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class CommissionReportRow:
    """One commission-bearing header."""

    header_id: UUID
    voucher_no: str
    transaction_date: date
    kind: TransactionKind
    customer_code: str
    customer_name: str
    supplier_code: str
    supplier_name: str
    currency_code: str
    customer_amount: Decimal
    net_amount: Decimal
    commission: Decimal


@dataclass(frozen=True)
class CommissionSummaryRow:
    type_code: str
    description: str
    header_count: int
    total_commission: Decimal


class CommissionSelector(BaseSelector):
    """
    Commission income by header and by transaction type.

    ``commission`` is signed in base currency: positive when the commission
    account was credited, negative for a negative dealing spread.
    """

    def __init__(self, session: Session, settings: EngineSettings):
        super().__init__(session)
        self._settings = settings

    def commission_report(
        self,
        start: date,
        end: date,
        kinds: Iterable[TransactionKind] | None = None,
    ) -> list[CommissionReportRow]:
        """
        One row per posted header of ``kinds`` dated within [start, end].

        The customer is the principal debit line, the supplier the principal
        credit line.  ``net_amount`` is the customer amount less commission.
        Headers whose commission computed to zero carry commission 0.
        """
        kinds = tuple(kinds) if kinds is not None else COMMISSION_KINDS
        type_ids = {
            self._settings.type_id_for(kind): kind
            for kind in kinds
            if self._settings.type_id_for(kind) is not None
        }
        if not type_ids:
            return []

        headers = self.session.execute(
            select(GLHeader)
            .where(GLHeader.transaction_type_id.in_(list(type_ids)))
            .where(GLHeader.status == EntryStatus.POSTED.value)
            .where(GLHeader.transaction_date >= start)
            .where(GLHeader.transaction_date <= end)
            .order_by(GLHeader.transaction_date, GLHeader.seq)
        ).scalars().all()

        account_ids = {line.account_id for h in headers for line in h.lines}
        currency_ids = {line.currency_id for h in headers for line in h.lines}
        accounts = self._by_id(Account, account_ids)
        currencies = self._by_id(Currency, currency_ids)

        rows: list[CommissionReportRow] = []
        for header in headers:
            customer = supplier = None
            commission = ZERO
            for line in header.lines:
                if line.role == LineRole.COMMISSION:
                    commission += line.credit - line.debit
                elif line.debit > ZERO and customer is None:
                    customer = line
                elif line.credit > ZERO and supplier is None:
                    supplier = line
            if customer is None or supplier is None:
                continue
            customer_account = accounts[customer.account_id]
            supplier_account = accounts[supplier.account_id]
            rows.append(
                CommissionReportRow(
                    header_id=header.id,
                    voucher_no=header.voucher_no,
                    transaction_date=header.transaction_date,
                    kind=type_ids[header.transaction_type_id],
                    customer_code=customer_account.code,
                    customer_name=customer_account.name,
                    supplier_code=supplier_account.code,
                    supplier_name=supplier_account.name,
                    currency_code=currencies[customer.currency_id].code,
                    customer_amount=customer.debit,
                    net_amount=customer.debit - commission,
                    commission=commission,
                )
            )
        return rows

    def commission_summary(
        self,
        start: date | None = None,
        end: date | None = None,
    ) -> list[CommissionSummaryRow]:
        """Total commission per transaction type over posted headers, largest first."""
        query = (
            select(
                TransactionType.code,
                TransactionType.description,
                func.count(func.distinct(GLHeader.id)).label("header_count"),
                func.sum(GLLine.credit - GLLine.debit).label("total_commission"),
            )
            .join(GLHeader, GLLine.header_id == GLHeader.id)
            .join(TransactionType, GLHeader.transaction_type_id == TransactionType.id)
            .where(GLLine.role == LineRole.COMMISSION.value)
            .where(GLHeader.status == EntryStatus.POSTED.value)
            .group_by(TransactionType.code, TransactionType.description)
        )
        if start is not None:
            query = query.where(GLHeader.transaction_date >= start)
        if end is not None:
            query = query.where(GLHeader.transaction_date <= end)

        rows = [
            CommissionSummaryRow(
                type_code=row.code,
                description=row.description,
                header_count=row.header_count,
                total_commission=self._amount(row.total_commission),
            )
            for row in self.session.execute(query).all()
        ]
        rows.sort(key=lambda r: (-r.total_commission, r.type_code))
        return rows

    def _by_id(self, model, ids: set[UUID]) -> dict:
        if not ids:
            return {}
        return {
            row.id: row
            for row in self.session.execute(
                select(model).where(model.id.in_(ids))
            ).scalars()
        }
