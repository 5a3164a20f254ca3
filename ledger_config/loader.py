"""
Configuration Loader (``ledger_config.loader``).

Responsibility
--------------
Loads a YAML configuration set and parses it into a frozen
``LedgerConfig``.  Runtime callers use ``ledger_config.get_active_config()``
rather than this module directly.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Invalid values (unknown kind, bad tolerance, missing kind mapping)
  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from ledger_config.schema import LedgerConfig, TransactionTypeDef, VoucherNumbering
from ledger_kernel.domain.kinds import TransactionKind


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_decimal(value: Any, field_name: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError(f"{field_name}: not a decimal: {value!r}") from None


def parse_transaction_types(
    data: dict[str, Any],
) -> MappingProxyType:
    """Parse the kind -> transaction type mapping; every kind must be mapped."""
    parsed: dict[TransactionKind, TransactionTypeDef] = {}
    for kind_name, entry in data.items():
        try:
            kind = TransactionKind(kind_name)
        except ValueError:
            raise ValueError(f"transaction_types: unknown kind {kind_name!r}") from None
        if isinstance(entry, str):
            entry = {"code": entry, "description": entry}
        parsed[kind] = TransactionTypeDef(
            code=str(entry["code"]),
            description=str(entry.get("description", entry["code"])),
        )

    missing = [k.value for k in TransactionKind if k not in parsed]
    if missing:
        raise ValueError(f"transaction_types: no code for {', '.join(missing)}")

    codes = [t.code for t in parsed.values()]
    if len(set(codes)) != len(codes):
        raise ValueError("transaction_types: codes must be unique")

    return MappingProxyType(parsed)


def parse_config(data: dict[str, Any]) -> LedgerConfig:
    """
    Parse a ``LedgerConfig`` from a dict.

    Raises:
        KeyError: if a required key is missing.
        ValueError: if a value is out of range.
    """
    tolerance = parse_decimal(data.get("balance_tolerance", "0.01"), "balance_tolerance")
    if tolerance <= 0:
        raise ValueError("balance_tolerance must be positive")

    voucher_data = data.get("voucher") or {}
    voucher = VoucherNumbering(
        prefix=str(voucher_data.get("prefix", "GL")),
        width=int(voucher_data.get("width", 8)),
    )
    if voucher.width < 1:
        raise ValueError("voucher.width must be at least 1")

    base_currency = str(data["base_currency"]).strip().upper()
    if not base_currency:
        raise ValueError("base_currency must not be empty")

    return LedgerConfig(
        config_id=str(data.get("config_id", "default")),
        version=int(data.get("version", 1)),
        base_currency=base_currency,
        commission_account_code=str(data["commission_account_code"]),
        business_partner_subcategory=str(
            data.get("business_partner_subcategory", "Business Partner")
        ),
        balance_tolerance=tolerance,
        voucher=voucher,
        transaction_types=parse_transaction_types(data["transaction_types"]),
        checksum=compute_checksum(data),
    )


def load_config(path: Path) -> LedgerConfig:
    """Load and parse a configuration set file."""
    return parse_config(load_yaml_file(path))
