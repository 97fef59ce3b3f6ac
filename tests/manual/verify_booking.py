"""Offline check of an exported booking against the deployment public key.

Usage: python tests/manual/verify_booking.py booking.json keys/public.pem
"""
import json
import sys

from flightbook.common.protocol import BookingRecord
from flightbook.crypto.digest import build_digest
from flightbook.crypto.keys import load_public_key_pem
from flightbook.crypto.sign import verify


def verify_exported_booking(booking_path: str, public_key_path: str) -> bool:
    with open(booking_path, "r", encoding="utf-8") as f:
        booking = BookingRecord.model_validate(json.load(f))

    if not booking.digital_signature:
        raise ValueError("Booking export has no digitalSignature")

    digest = build_digest(booking)
    print("[*] Booking:", booking.booking_id)
    print("[*] Digest: ", digest.decode("utf-8"))
    print("[*] Stored signature:", booking.digital_signature[:50] + "...")

    with open(public_key_path, "rb") as f:
        public_key = load_public_key_pem(f.read())

    ok = verify(digest, booking.digital_signature, public_key)
    print("[*] Signature is", "VALID" if ok else "INVALID")
    return ok


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print("Usage: verify_booking.py <booking.json> <public.pem>")
        sys.exit(2)
    sys.exit(0 if verify_exported_booking(sys.argv[1], sys.argv[2]) else 1)
