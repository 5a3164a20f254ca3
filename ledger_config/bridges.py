"""
Config -> Kernel bridges.

Converts a LedgerConfig into kernel inputs.  Lives here because the kernel
must never import ledger_config.

Usage:
    config = get_active_config()
    with session_scope() as session:
        settings = build_engine_settings(session, config)
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from ledger_config.schema import LedgerConfig
from ledger_kernel.domain.settings import EngineSettings
from ledger_kernel.services.reference_data import ReferenceDataService


def build_engine_settings(session: Session, config: LedgerConfig) -> EngineSettings:
    """Resolve the configured codes against the database, once."""
    return ReferenceDataService(session).resolve_settings(
        base_currency_code=config.base_currency,
        commission_account_code=config.commission_account_code,
        type_codes={kind: t.code for kind, t in config.transaction_types.items()},
        balance_tolerance=config.balance_tolerance,
        voucher_prefix=config.voucher.prefix,
        voucher_width=config.voucher.width,
        business_partner_subcategory=config.business_partner_subcategory,
    )


def seed_transaction_types(
    session: Session, config: LedgerConfig, actor_id: UUID
) -> dict[str, UUID]:
    """Create the transaction_types rows the configuration refers to."""
    return ReferenceDataService(session, actor_id).ensure_transaction_types(
        {t.code: t.description for t in config.transaction_types.values()}
    )
