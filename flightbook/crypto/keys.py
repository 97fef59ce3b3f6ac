"""RSA key pair for booking signatures: generate, persist, load."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from flightbook.common.utils import sha256_hex

logger = logging.getLogger(__name__)

KEY_SIZE = 2048
PUBLIC_EXPONENT = 65537
PRIVATE_KEY_FILE = "private.pem"
PUBLIC_KEY_FILE = "public.pem"


class KeyMaterialError(Exception):
    """Raised when the signing key pair is missing, unreadable or inconsistent."""


@dataclass(frozen=True)
class KeyMaterial:
    private_key: rsa.RSAPrivateKey
    public_key: rsa.RSAPublicKey

    @property
    def public_pem(self) -> bytes:
        return public_key_pem(self.public_key)

    @property
    def fingerprint(self) -> str:
        der = self.public_key.public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        return sha256_hex(der)

    @classmethod
    def from_pem(cls, private_pem: bytes, public_pem: bytes | None = None) -> "KeyMaterial":
        private_key = load_private_key_pem(private_pem)
        if public_pem is None:
            return cls(private_key, private_key.public_key())
        public_key = load_public_key_pem(public_pem)
        if public_key.public_numbers() != private_key.public_key().public_numbers():
            raise KeyMaterialError("public key does not belong to the private key")
        return cls(private_key, public_key)


def private_key_pem(key: rsa.RSAPrivateKey) -> bytes:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def public_key_pem(key: rsa.RSAPublicKey) -> bytes:
    return key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def generate_key_pair() -> tuple[bytes, bytes]:
    """Return (public_pem, private_pem) for a fresh RSA-2048 pair."""
    key = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=KEY_SIZE)
    return public_key_pem(key.public_key()), private_key_pem(key)


def load_private_key_pem(data: bytes) -> rsa.RSAPrivateKey:
    try:
        key = serialization.load_pem_private_key(data, password=None)
    except (TypeError, ValueError) as e:
        raise KeyMaterialError("unable to parse private key") from e
    if not isinstance(key, rsa.RSAPrivateKey):
        raise KeyMaterialError("private key is not an RSA key")
    return key


def load_public_key_pem(data: bytes) -> rsa.RSAPublicKey:
    try:
        key = serialization.load_pem_public_key(data)
    except (TypeError, ValueError) as e:
        raise KeyMaterialError("unable to parse public key") from e
    if not isinstance(key, rsa.RSAPublicKey):
        raise KeyMaterialError("public key is not an RSA key")
    return key


def write_key_pair(key_dir: Path, public_pem: bytes, private_pem: bytes) -> None:
    key_dir.mkdir(parents=True, exist_ok=True)
    private_path = key_dir / PRIVATE_KEY_FILE
    # owner-only from creation
    fd = os.open(private_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "wb") as f:
        f.write(private_pem)
    # an existing file keeps its old mode through O_CREAT
    os.chmod(private_path, 0o600)
    (key_dir / PUBLIC_KEY_FILE).write_bytes(public_pem)


def load_or_create_key_material(key_dir: Path | str) -> KeyMaterial:
    """Load the deployment key pair, creating it on first start.

    The pair is never regenerated while either file exists: replacing it would
    make every stored signature unverifiable.
    """
    key_dir = Path(key_dir)
    private_path = key_dir / PRIVATE_KEY_FILE
    public_path = key_dir / PUBLIC_KEY_FILE

    try:
        if private_path.exists() and public_path.exists():
            material = KeyMaterial.from_pem(private_path.read_bytes(), public_path.read_bytes())
            logger.info("RSA keys loaded from %s (fingerprint %s)", key_dir, material.fingerprint[:16])
            return material

        if private_path.exists():
            material = KeyMaterial.from_pem(private_path.read_bytes())
            public_path.write_bytes(material.public_pem)
            logger.warning("public key missing; rebuilt %s from the private key", public_path)
            return material

        if public_path.exists():
            raise KeyMaterialError(
                f"{public_path} exists without {private_path}; refusing to generate a new pair"
            )

        public_pem, private_pem = generate_key_pair()
        write_key_pair(key_dir, public_pem, private_pem)
        material = KeyMaterial.from_pem(private_pem, public_pem)
        logger.info("RSA keys generated and saved to %s (fingerprint %s)", key_dir, material.fingerprint[:16])
        return material
    except OSError as e:
        raise KeyMaterialError(f"unable to read or write key files in {key_dir}") from e
