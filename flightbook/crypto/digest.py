"""Canonical byte encoding of the signed part of a booking.

Signing, verification, re-signing and migration must all go through
``build_digest``; any change to the field set, key names, key order or
formatting here invalidates every signature already stored.
"""
from __future__ import annotations

import json

from flightbook.common.protocol import BookingRecord
from flightbook.common.utils import iso_utc_ms

# key names follow the stored document so existing signatures keep verifying
SIGNED_FIELDS = (
    "bookingId",
    "user",
    "flightNumber",
    "from",
    "to",
    "departureDate",
    "totalPrice",
    "passengers",
)


def signed_fields(booking: BookingRecord) -> dict:
    """Ordered mapping of exactly the fields covered by the signature."""
    return {
        "bookingId": booking.booking_id,
        "user": str(booking.owner_ref),
        "flightNumber": booking.flight_number,
        "from": booking.origin,
        "to": booking.destination,
        "departureDate": iso_utc_ms(booking.departure_date),
        "totalPrice": booking.total_price,
        "passengers": [
            {"name": p.name, "ageCategory": p.age_category} for p in booking.passengers
        ],
    }


def build_digest(booking: BookingRecord) -> bytes:
    fields = signed_fields(booking)
    return json.dumps(fields, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
