"""AES-256-CBC + PKCS#7 payment encryption (use library)."""
from __future__ import annotations

import json
import logging
import os
from typing import Any

from cryptography.hazmat.primitives import padding as sym_padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from flightbook.config import ConfigError, Settings

logger = logging.getLogger(__name__)

KEY_SIZE = 32  # bytes
IV_SIZE = 16  # bytes
BLOCK_BITS = 128


class EncryptionError(Exception):
    """Raised when payment data cannot be encrypted."""


class DecryptionError(Exception):
    """Raised when ciphertext cannot be decrypted to its exact plaintext."""


def _check_lengths(key: bytes, iv: bytes, exc: type[Exception]) -> None:
    if len(key) != KEY_SIZE:
        raise exc(f"AES-256 key must be {KEY_SIZE} bytes, got {len(key)}")
    if len(iv) != IV_SIZE:
        raise exc(f"CBC IV must be {IV_SIZE} bytes, got {len(iv)}")


def aes_encrypt_cbc_hex(key: bytes, iv: bytes, plaintext: bytes) -> str:
    _check_lengths(key, iv, EncryptionError)
    try:
        padder = sym_padding.PKCS7(BLOCK_BITS).padder()
        padded = padder.update(plaintext) + padder.finalize()
        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
        ct = encryptor.update(padded) + encryptor.finalize()
    except (TypeError, ValueError) as e:
        raise EncryptionError("Encryption failed") from e
    return ct.hex()


def aes_decrypt_cbc_hex(key: bytes, iv: bytes, ciphertext_hex: str) -> bytes:
    _check_lengths(key, iv, DecryptionError)
    try:
        ct = bytes.fromhex(ciphertext_hex)
    except (TypeError, ValueError) as e:
        raise DecryptionError("Ciphertext is not valid hex") from e
    if not ct or len(ct) % (BLOCK_BITS // 8) != 0:
        raise DecryptionError("Ciphertext length is not a whole number of blocks")
    try:
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ct) + decryptor.finalize()
        unpadder = sym_padding.PKCS7(BLOCK_BITS).unpadder()
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        # bad padding: corrupt ciphertext or the wrong key/IV
        raise DecryptionError("Decryption failed") from e


class PaymentCipher:
    """Encrypts payment payloads with one key/IV pair for the process."""

    def __init__(self, key: bytes, iv: bytes, ephemeral: bool = False):
        _check_lengths(key, iv, EncryptionError)
        self._key = key
        self._iv = iv
        self.ephemeral = ephemeral

    @classmethod
    def generate(cls) -> "PaymentCipher":
        return cls(os.urandom(KEY_SIZE), os.urandom(IV_SIZE), ephemeral=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> "PaymentCipher":
        material = settings.payment_key_material()
        if material is not None:
            return cls(*material)
        if settings.require_payment_key:
            raise ConfigError("ENCRYPTION_KEY/ENCRYPTION_IV are required but not set")
        logger.warning(
            "ENCRYPTION_KEY/ENCRYPTION_IV not set; using a random key for this process. "
            "Payment data stored now cannot be decrypted after a restart."
        )
        return cls.generate()

    def encrypt(self, plaintext: bytes | str) -> str:
        if isinstance(plaintext, str):
            plaintext = plaintext.encode("utf-8")
        return aes_encrypt_cbc_hex(self._key, self._iv, plaintext)

    def decrypt(self, ciphertext_hex: str) -> bytes:
        return aes_decrypt_cbc_hex(self._key, self._iv, ciphertext_hex)

    def encrypt_json(self, payment: Any) -> str:
        """Strings are encrypted as-is, anything else as compact JSON."""
        if isinstance(payment, str):
            return self.encrypt(payment)
        try:
            text = json.dumps(payment, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise EncryptionError("Payment data is not JSON serializable") from e
        return self.encrypt(text)

    def decrypt_json(self, ciphertext_hex: str) -> Any:
        """Inverse of ``encrypt_json``; a payment stored as a plain string comes back as str."""
        plaintext = self.decrypt(ciphertext_hex)
        try:
            text = plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecryptionError("Decrypted payment data is not valid UTF-8") from e
        try:
            return json.loads(text)
        except ValueError:
            return text
