"""Configuration management and credential helpers.

This module loads environment variables from a local ``.env`` file if one is
present so that credentials such as the signing mnemonic are available without
manual exports.  Values in the real environment take precedence over those in
the file.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ZERO_APP_DATA = "0x" + "00" * 32

# Quote deadline: orders expire thirty minutes after they are quoted.
DEADLINE_OFFSET_MS = 30 * 60 * 1000

DEFAULT_SLIPPAGE_BIPS = 100
BIPS_DENOMINATOR = 10_000

MAX_UINT256 = 2**256 - 1


def _load_env_file(path: str = ".env") -> None:
    """Populate :mod:`os.environ` with key/value pairs from *path*.

    Lines starting with ``#`` or lacking an ``=`` separator are ignored.
    Existing keys are not overwritten. Values wrapped in single or double
    quotes are unquoted to match typical ``.env`` file behavior.
    """

    try:
        for line in Path(path).read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            value = value.strip()
            if (value.startswith('"') and value.endswith('"')) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            os.environ.setdefault(key.strip(), value)
    except FileNotFoundError:
        # Environment variables may be supplied via shell exports instead.
        pass


_load_env_file()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    log_level: str = "INFO"
    # Optional log file path; when set, logs also write to this file.
    log_file: str | None = None
    log_max_bytes: int = 1_000_000
    log_backup_count: int = 3

    # Signing credential (BIP-39 seed phrase, first derivation path)
    mnemonic: str | None = None

    # Network selection; the order definition's ``chainId`` wins when present.
    chain_id: int | None = None
    infura_key: str | None = None
    rpc_url: str | None = None

    # Order metadata hash attached to every order unless the file sets one.
    app_data: str = ZERO_APP_DATA
    default_slippage_bips: int = DEFAULT_SLIPPAGE_BIPS

    # Transaction handling
    number_confirmations_wait: int = 1
    tx_wait_timeout_secs: float = 600.0
    # Ceiling for gas price; ``None`` disables the guard.
    max_gas_price_gwei: int | None = None

    # Remote services. Empty values fall back to the per-network defaults.
    order_book_url: str | None = None
    safe_service_url: str | None = None
    http_timeout_secs: float = 10.0
    http_max_retries: int = 3
    http_backoff_secs: float = 0.5

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        extra="ignore",
    )

    @field_validator("chain_id", "max_gas_price_gwei", mode="before")
    @classmethod
    def _blank_as_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("app_data", mode="before")
    @classmethod
    def _default_app_data(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return ZERO_APP_DATA
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return str(value).strip().upper() or "INFO"


# Singleton settings instance populated on import.
settings = Settings()


__all__ = [
    "BIPS_DENOMINATOR",
    "DEADLINE_OFFSET_MS",
    "DEFAULT_SLIPPAGE_BIPS",
    "MAX_UINT256",
    "Settings",
    "ZERO_APP_DATA",
    "settings",
]
