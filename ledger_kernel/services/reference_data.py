"""
ReferenceDataService -- resolves configured codes into EngineSettings.

Responsibility:
    Turns the codes a configuration set names (base currency, commission
    account, transaction type per kind) into row ids exactly once, so the
    posting service receives an explicit EngineSettings value and never
    re-queries them per operation.  Also seeds missing transaction_types
    rows from configuration.

Failure modes:
    - Nothing is raised for unresolved codes: the corresponding setting is
      None and LedgerPostingService raises MissingSystemConfigurationError
      when an operation needs it.  Each unresolved code is logged at WARNING.
"""

from decimal import Decimal
from types import MappingProxyType
from typing import Mapping
from uuid import UUID

from sqlalchemy import func, select

from ledger_kernel.domain.kinds import TransactionKind
from ledger_kernel.domain.settings import EngineSettings
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.account import Account
from ledger_kernel.models.currency import Currency
from ledger_kernel.models.transaction_type import TransactionType
from ledger_kernel.services.base import BaseService

logger = get_logger("services.reference_data")


class ReferenceDataService(BaseService[TransactionType]):
    """Lookups of master data by code, used at process start-up."""

    def base_currency(self) -> Currency | None:
        return self.session.execute(
            select(Currency).where(Currency.is_base.is_(True))
        ).scalar_one_or_none()

    def currency_by_code(self, code: str) -> Currency | None:
        return self.session.execute(
            select(Currency).where(func.upper(Currency.code) == code.strip().upper())
        ).scalar_one_or_none()

    def account_by_code(self, code: str) -> Account | None:
        return self.session.execute(
            select(Account).where(Account.code == code.strip())
        ).scalar_one_or_none()

    def account_by_name(self, name: str) -> Account | None:
        """Case-insensitive name match; None when absent or ambiguous."""
        matches = self.session.execute(
            select(Account).where(func.lower(Account.name) == name.strip().lower())
        ).scalars().all()
        return matches[0] if len(matches) == 1 else None

    def ensure_transaction_types(self, types: Mapping[str, str]) -> dict[str, UUID]:
        """
        Create any transaction_types rows missing for ``types`` (code -> description).

        Returns:
            code -> id for every requested code.
        """
        existing = {
            row.code: row
            for row in self.session.execute(
                select(TransactionType).where(TransactionType.code.in_(list(types)))
            ).scalars()
        }
        for code, description in types.items():
            if code not in existing:
                row = TransactionType(
                    code=code, description=description, created_by_id=self.actor_id
                )
                self.session.add(row)
                existing[code] = row
                logger.info("transaction_type_created", extra={"code": code})
        self.session.flush()
        return {code: row.id for code, row in existing.items()}

    def resolve_settings(
        self,
        base_currency_code: str,
        commission_account_code: str,
        type_codes: Mapping[TransactionKind, str],
        *,
        balance_tolerance: Decimal = Decimal("0.01"),
        voucher_prefix: str = "GL",
        voucher_width: int = 8,
        business_partner_subcategory: str = "Business Partner",
    ) -> EngineSettings:
        """
        Resolve codes to ids once and return the frozen settings value.

        The configured base currency must also be the row flagged is_base;
        otherwise base_currency_id stays None.
        """
        base = self.currency_by_code(base_currency_code)
        if base is None or not base.is_base:
            logger.warning(
                "base_currency_unresolved",
                extra={"code": base_currency_code, "found": base is not None},
            )
            base = None

        commission = self.account_by_code(commission_account_code)
        if commission is None:
            logger.warning(
                "commission_account_unresolved",
                extra={"code": commission_account_code},
            )

        rows = {
            row.code: row.id
            for row in self.session.execute(
                select(TransactionType).where(
                    TransactionType.code.in_(list(type_codes.values()))
                )
            ).scalars()
        }
        type_ids: dict[TransactionKind, UUID] = {}
        for kind, code in type_codes.items():
            if code in rows:
                type_ids[kind] = rows[code]
            else:
                logger.warning(
                    "transaction_type_unresolved",
                    extra={"kind": kind.value, "code": code},
                )

        settings = EngineSettings(
            base_currency_id=base.id if base else None,
            commission_account_id=commission.id if commission else None,
            transaction_type_ids=MappingProxyType(type_ids),
            balance_tolerance=balance_tolerance,
            voucher_prefix=voucher_prefix,
            voucher_width=voucher_width,
            business_partner_subcategory=business_partner_subcategory,
        )
        logger.info(
            "engine_settings_resolved",
            extra={
                "base_currency_id": settings.base_currency_id,
                "commission_account_id": settings.commission_account_id,
                "resolved_kinds": sorted(k.value for k in type_ids),
            },
        )
        return settings
