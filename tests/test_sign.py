"""Tests for RSA/SHA-256 signing and verification."""

import pytest

from flightbook.common.protocol import Passenger
from flightbook.common.utils import b64d, b64e
from flightbook.crypto.digest import build_digest
from flightbook.crypto.sign import SignatureEngine, SigningError, sign, verify


class TestSignVerify:
    def test_round_trip(self, fb1000, key_material):
        digest = build_digest(fb1000)
        signature = sign(digest, key_material.private_key)
        assert verify(digest, signature, key_material.public_key) is True

    def test_signature_is_base64_of_256_bytes(self, fb1000, key_material):
        signature = sign(build_digest(fb1000), key_material.private_key)
        assert len(b64d(signature)) == 256

    def test_pkcs1v15_is_deterministic(self, fb1000, engine):
        digest = build_digest(fb1000)
        assert engine.sign(digest) == engine.sign(digest)

    def test_tampered_price_fails(self, fb1000, engine):
        signature = engine.sign(build_digest(fb1000))
        fb1000.total_price = 5501
        assert engine.verify(build_digest(fb1000), signature) is False

    def test_tampered_passenger_name_fails(self, fb1000, engine):
        signature = engine.sign(build_digest(fb1000))
        fb1000.passengers[0].name = "B Sharma"
        assert engine.verify(build_digest(fb1000), signature) is False

    def test_reordered_passengers_fail(self, fb1000, engine):
        alice = Passenger(name="Alice", age_category="Adult")
        bob = Passenger(name="Bob", age_category="Child")
        original = fb1000.model_copy(update={"passengers": [alice, bob]})
        reordered = fb1000.model_copy(update={"passengers": [bob, alice]})
        sig_reordered = engine.sign(build_digest(reordered))
        assert engine.verify(build_digest(original), sig_reordered) is False
        assert engine.verify(build_digest(reordered), sig_reordered) is True

    def test_wrong_public_key_fails(self, fb1000, key_material, other_key_material):
        digest = build_digest(fb1000)
        signature = sign(digest, key_material.private_key)
        assert verify(digest, signature, other_key_material.public_key) is False


class TestMalformedInput:
    """Bad signatures are a negative answer, never an exception."""

    @pytest.mark.parametrize("signature", ["", "not base64 !!", "QUJD", "é"])
    def test_garbage_signature_is_false(self, fb1000, key_material, signature):
        assert verify(build_digest(fb1000), signature, key_material.public_key) is False

    def test_truncated_signature_is_false(self, fb1000, engine):
        digest = build_digest(fb1000)
        assert engine.verify(digest, engine.sign(digest)[:50]) is False

    def test_missing_signature_is_false(self, fb1000, engine):
        assert engine.verify(build_digest(fb1000), None) is False

    def test_flipped_bit_is_false(self, fb1000, engine):
        digest = build_digest(fb1000)
        raw = bytearray(b64d(engine.sign(digest)))
        raw[10] ^= 0x01
        assert engine.verify(digest, b64e(bytes(raw))) is False

    def test_unusable_private_key_raises_signing_error(self, fb1000):
        with pytest.raises(SigningError):
            sign(build_digest(fb1000), object())


class TestSignatureEngine:
    def test_fingerprint_matches_key_material(self, key_material):
        assert SignatureEngine(key_material).fingerprint == key_material.fingerprint
        assert len(key_material.fingerprint) == 64
