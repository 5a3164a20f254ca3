"""
LedgerConfig schema.

The typed, frozen form of a YAML configuration set.  Produced by the
loader, consumed by bridges.build_engine_settings().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping

from ledger_kernel.domain.kinds import TransactionKind


@dataclass(frozen=True)
class TransactionTypeDef:
    """One transaction_types row a kind is booked under."""

    code: str
    description: str


@dataclass(frozen=True)
class VoucherNumbering:
    prefix: str = "GL"
    width: int = 8


@dataclass(frozen=True)
class LedgerConfig:
    """Validated configuration set.  ``checksum`` identifies the source YAML."""

    config_id: str
    version: int
    base_currency: str
    commission_account_code: str
    business_partner_subcategory: str
    balance_tolerance: Decimal
    voucher: VoucherNumbering
    transaction_types: Mapping[TransactionKind, TransactionTypeDef] = field(
        default_factory=lambda: MappingProxyType({})
    )
    checksum: str = ""

    def type_code(self, kind: TransactionKind) -> str:
        return self.transaction_types[kind].code
