"""Resolved engine settings: the system accounts, base currency and type ids."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping
from uuid import UUID

from ledger_kernel.domain.kinds import TransactionKind


@dataclass(frozen=True)
class EngineSettings:
    """
    Explicit configuration value passed into the posting service.

    Resolved once per process by ReferenceDataService.resolve_settings().
    Unresolved entries are None and surface as
    MissingSystemConfigurationError when an operation needs them.
    """

    base_currency_id: UUID | None
    commission_account_id: UUID | None
    transaction_type_ids: Mapping[TransactionKind, UUID] = field(
        default_factory=lambda: MappingProxyType({})
    )
    balance_tolerance: Decimal = Decimal("0.01")
    voucher_prefix: str = "GL"
    voucher_width: int = 8
    business_partner_subcategory: str = "Business Partner"

    def type_id_for(self, kind: TransactionKind) -> UUID | None:
        return self.transaction_type_ids.get(kind)

    def kind_for_type(self, type_id: UUID) -> TransactionKind | None:
        for kind, candidate in self.transaction_type_ids.items():
            if candidate == type_id:
                return kind
        return None

    def format_voucher(self, seq: int) -> str:
        return f"{self.voucher_prefix}{seq:0{self.voucher_width}d}"
