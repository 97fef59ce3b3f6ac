"""Boarding-pass QR codes.

The payload carries only a 50-character prefix of the booking signature as a
display hint. It is not verifiable on its own; authenticity is always checked
by rebuilding the digest from the stored booking.
"""
from __future__ import annotations

import io
import json
from dataclasses import dataclass

import qrcode
from PIL import Image
from qrcode.constants import ERROR_CORRECT_H

from flightbook.common.protocol import BookingRecord
from flightbook.common.utils import b64e, iso_utc_ms

SIGNATURE_PREFIX_LEN = 50
DEFAULT_WIDTH = 300


@dataclass(frozen=True)
class BoardingPass:
    payload: str
    png: bytes

    @property
    def data_url(self) -> str:
        return "data:image/png;base64," + b64e(self.png)


def build_payload(booking: BookingRecord, signature: str) -> str:
    fields = {
        "bookingId": booking.booking_id,
        "passengerName": booking.lead_passenger.name,
        "flightNumber": booking.flight_number,
        "from": booking.origin,
        "to": booking.destination,
        "departureDate": iso_utc_ms(booking.departure_date),
        "signature": signature[:SIGNATURE_PREFIX_LEN],
    }
    return json.dumps(fields, separators=(",", ":"), ensure_ascii=False)


def render_qr_png(text: str, width: int = DEFAULT_WIDTH) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECT_H,
        box_size=10,
        border=1,
    )
    qr.add_data(text)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white").get_image()
    img = img.convert("L").resize((width, width), Image.Resampling.NEAREST)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def build_boarding_pass(
    booking: BookingRecord, signature: str, width: int = DEFAULT_WIDTH
) -> BoardingPass:
    payload = build_payload(booking, signature)
    return BoardingPass(payload=payload, png=render_qr_png(payload, width))
