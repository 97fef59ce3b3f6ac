"""RSASSA-PKCS1-v1_5 / SHA-256 signatures over booking digests."""
from __future__ import annotations

import binascii

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding as asy_padding
from cryptography.hazmat.primitives.asymmetric import rsa

from flightbook.common.utils import b64d, b64e
from flightbook.crypto.keys import KeyMaterial


class SigningError(Exception):
    """Raised when a digest cannot be signed."""


def sign(digest: bytes, private_key: rsa.RSAPrivateKey) -> str:
    """Sign ``digest`` and return the signature as base64."""
    try:
        sig = private_key.sign(
            digest,
            asy_padding.PKCS1v15(),
            hashes.SHA256(),
        )
    except (AttributeError, TypeError, ValueError, UnsupportedAlgorithm) as e:
        raise SigningError("Failed to create digital signature") from e
    return b64e(sig)


def verify(digest: bytes, signature: str, public_key: rsa.RSAPublicKey) -> bool:
    """True only if ``signature`` is a valid signature of ``digest``.

    Malformed input counts as an invalid signature.
    """
    try:
        sig = b64d(signature)
        public_key.verify(
            sig,
            digest,
            asy_padding.PKCS1v15(),
            hashes.SHA256(),
        )
    except (InvalidSignature, binascii.Error, AttributeError, TypeError, ValueError):
        return False
    return True


class SignatureEngine:
    """Signs and verifies with the deployment key pair."""

    def __init__(self, key_material: KeyMaterial):
        self._keys = key_material

    @property
    def fingerprint(self) -> str:
        return self._keys.fingerprint

    def sign(self, digest: bytes) -> str:
        return sign(digest, self._keys.private_key)

    def verify(self, digest: bytes, signature: str | None) -> bool:
        if not signature:
            return False
        return verify(digest, signature, self._keys.public_key)
