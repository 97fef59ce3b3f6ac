"""Runtime settings read from the environment (and a local .env file)."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

PAYMENT_KEY_HEX_LEN = 64  # 32 bytes
PAYMENT_IV_HEX_LEN = 32  # 16 bytes


class ConfigError(Exception):
    """Raised when a setting is missing or malformed."""


def _env(name: str, default: str | None = None):
    return field(default_factory=lambda: os.getenv(name, default))


def _env_flag(name: str):
    return field(
        default_factory=lambda: os.getenv(name, "false").strip().lower() in ("1", "true", "yes")
    )


def _env_int(name: str, default: int):
    def read() -> int:
        value = os.getenv(name)
        if value is None or not value.strip():
            return default
        try:
            return int(value)
        except ValueError as e:
            raise ConfigError(f"{name} must be an integer, got {value!r}") from e

    return field(default_factory=read)


@dataclass
class Settings:
    encryption_key: str | None = _env("ENCRYPTION_KEY")
    encryption_iv: str | None = _env("ENCRYPTION_IV")
    require_payment_key: bool = _env_flag("REQUIRE_PAYMENT_KEY")
    keys_dir: str = _env("KEYS_DIR", "keys")
    qr_width: int = _env_int("QR_WIDTH", 300)
    db_host: str = _env("DB_HOST", "127.0.0.1")
    db_port: int = _env_int("DB_PORT", 3306)
    db_user: str = _env("DB_USER", "flightbook")
    db_password: str = _env("DB_PASSWORD", "flightbook")
    db_name: str = _env("DB_NAME", "flightbook")

    @property
    def keys_path(self) -> Path:
        return Path(self.keys_dir)

    def payment_key_material(self) -> tuple[bytes, bytes] | None:
        """Return (key, iv) from hex settings, or None when neither is set."""
        if not self.encryption_key and not self.encryption_iv:
            return None
        if not (self.encryption_key and self.encryption_iv):
            raise ConfigError("ENCRYPTION_KEY and ENCRYPTION_IV must be set together")
        key = _parse_hex("ENCRYPTION_KEY", self.encryption_key, PAYMENT_KEY_HEX_LEN)
        iv = _parse_hex("ENCRYPTION_IV", self.encryption_iv, PAYMENT_IV_HEX_LEN)
        return key, iv


def _parse_hex(name: str, value: str, expected_len: int) -> bytes:
    value = value.strip()
    if len(value) != expected_len:
        raise ConfigError(f"{name} must be {expected_len} hex characters, got {len(value)}")
    try:
        return bytes.fromhex(value)
    except ValueError as e:
        raise ConfigError(f"{name} is not valid hex") from e
