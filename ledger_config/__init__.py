"""
ledger_config -- single public entrypoint for ledger configuration.

Responsibility:
    ``get_active_config()`` is the only way runtime code obtains
    configuration: which currency is base, which account books commission,
    which transaction type code each kind is booked under, and the voucher
    numbering and balance tolerance.  The kernel never imports this
    package; ``bridges.build_engine_settings()`` turns a LedgerConfig into
    the kernel's EngineSettings.

Failure modes:
    - ``FileNotFoundError`` -- the requested configuration file is missing.
    - ``KeyError`` / ``ValueError`` -- required keys missing or invalid.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``ledger_config_loaded`` log entry with the config id, version and
    SHA-256 checksum of the source YAML.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ledger_config.loader import load_config
from ledger_config.schema import LedgerConfig, TransactionTypeDef, VoucherNumbering

_logger = logging.getLogger("ledger_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"

__all__ = [
    "LedgerConfig",
    "TransactionTypeDef",
    "VoucherNumbering",
    "get_active_config",
]


def get_active_config(config_path: Path | None = None) -> LedgerConfig:
    """
    Load, validate and return the active configuration set.

    Callers hold the returned value for the life of the process; it is not
    cached here.

    Args:
        config_path: Override path to a YAML configuration set.
            Defaults to ledger_config/sets/default.yaml.
    """
    path = Path(config_path) if config_path else _DEFAULT_CONFIG_PATH
    config = load_config(path)

    _logger.info(
        "ledger_config_loaded",
        extra={
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "base_currency": config.base_currency,
            "transaction_type_count": len(config.transaction_types),
        },
    )
    return config
