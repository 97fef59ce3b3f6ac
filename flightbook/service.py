"""Booking lifecycle around the integrity core.

Creation signs before anything is persisted; verification always rebuilds
the digest from the stored booking and never looks at QR payloads.
"""
from __future__ import annotations

import logging
import secrets
from typing import Any, Optional

from pydantic import ValidationError

from flightbook.boarding import DEFAULT_WIDTH, BoardingPass, build_boarding_pass
from flightbook.common.protocol import (
    BookingDetails,
    BookingRecord,
    BookingRequest,
    VerificationResult,
)
from flightbook.common.utils import now_ms, utcnow
from flightbook.config import Settings
from flightbook.crypto.aes import EncryptionError, PaymentCipher
from flightbook.crypto.digest import build_digest
from flightbook.crypto.keys import load_or_create_key_material
from flightbook.crypto.sign import SignatureEngine
from flightbook.storage.base import BookingExists, BookingStore

logger = logging.getLogger(__name__)

VERIFIED_MESSAGE = "Booking is authentic"
NOT_VERIFIED_MESSAGE = "Booking verification failed"
MAX_ID_ATTEMPTS = 5

# request keys an admin may change, mapped to record fields
ADMIN_EDITABLE = {
    "flightNumber": "flight_number",
    "from": "origin",
    "to": "destination",
    "departureDate": "departure_date",
    "returnDate": "return_date",
    "totalPrice": "total_price",
    "bookingStatus": "booking_status",
    "paymentStatus": "payment_status",
}
SIGNED_RECORD_FIELDS = {"flight_number", "origin", "destination", "departure_date", "total_price"}


class BookingNotFound(Exception):
    """No booking with the given id."""


class BookingStateError(Exception):
    """The booking is not in a state that allows the operation."""


def new_booking_id() -> str:
    return f"FB{now_ms()}{secrets.randbelow(1000)}"


class BookingService:
    def __init__(
        self,
        store: BookingStore,
        engine: SignatureEngine,
        cipher: Optional[PaymentCipher] = None,
        qr_width: int = DEFAULT_WIDTH,
    ):
        self.store = store
        self.engine = engine
        self.cipher = cipher
        self.qr_width = qr_width

    def _load(self, booking_id: str) -> BookingRecord:
        booking = self.store.load(booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)
        return booking

    def _sign(self, booking: BookingRecord) -> None:
        """Sign the booking in place and attach a fresh boarding pass."""
        booking.digital_signature = self.engine.sign(build_digest(booking))
        booking.qr_code = build_boarding_pass(
            booking, booking.digital_signature, self.qr_width
        ).data_url

    def _encrypt_payment(self, booking_id: str, payment: Any) -> Optional[str]:
        if self.cipher is None:
            logger.error("booking %s: no payment cipher configured; payment info not stored", booking_id)
            return None
        try:
            return self.cipher.encrypt_json(payment)
        except EncryptionError:
            logger.exception("booking %s: payment encryption failed; payment info not stored", booking_id)
            return None

    def create_booking(self, owner_ref: str, request: BookingRequest | dict) -> BookingRecord:
        """Create, sign and persist a booking.

        Signing errors propagate and nothing is saved. A payment encryption
        failure only drops the payment blob.
        """
        if not isinstance(request, BookingRequest):
            request = BookingRequest.model_validate(request)

        booking = BookingRecord(
            booking_id=new_booking_id(),
            owner_ref=owner_ref,
            flight_number=request.flight_number,
            origin=request.origin,
            destination=request.destination,
            departure_date=request.departure_date,
            return_date=request.return_date,
            trip_type=request.trip_type,
            passengers=request.passengers,
            total_price=request.total_price,
            meals=request.meals,
            payment_status="completed",
        )
        if request.payment_info is not None:
            booking.encrypted_payment_info = self._encrypt_payment(
                booking.booking_id, request.payment_info
            )

        # the id is part of the digest, so a fresh id means a fresh signature
        for _ in range(MAX_ID_ATTEMPTS):
            self._sign(booking)
            try:
                self.store.insert(booking)
                break
            except BookingExists:
                logger.warning("booking id %s already taken; drawing a new one", booking.booking_id)
                booking.booking_id = new_booking_id()
        else:
            raise BookingStateError(f"no free booking id after {MAX_ID_ATTEMPTS} attempts")

        logger.info("booking %s created for %s on %s", booking.booking_id, owner_ref, booking.flight_number)
        return booking.public_view()

    def get_booking(self, booking_id: str) -> BookingRecord:
        return self._load(booking_id).public_view()

    def list_bookings(self, owner_ref: str) -> list[BookingRecord]:
        return [b.public_view() for b in self.store.list_by_owner(owner_ref)]

    def verify_booking(self, booking_id: str) -> VerificationResult:
        booking = self._load(booking_id)
        verified = self.engine.verify(build_digest(booking), booking.digital_signature)
        if not verified:
            logger.warning("booking %s failed signature verification", booking_id)
        return VerificationResult(
            verified=verified,
            message=VERIFIED_MESSAGE if verified else NOT_VERIFIED_MESSAGE,
            booking_details=BookingDetails(
                booking_id=booking.booking_id,
                flight_number=booking.flight_number,
                origin=booking.origin,
                destination=booking.destination,
                status=booking.booking_status,
            ),
        )

    def get_boarding_pass(self, booking_id: str) -> BoardingPass:
        booking = self._load(booking_id)
        if not booking.digital_signature:
            raise BookingStateError(f"booking {booking_id} has no signature")
        return build_boarding_pass(booking, booking.digital_signature, self.qr_width)

    def get_payment_info(self, booking_id: str) -> Any:
        booking = self._load(booking_id)
        if not booking.encrypted_payment_info:
            return None
        if self.cipher is None:
            raise BookingStateError("no payment cipher configured")
        return self.cipher.decrypt_json(booking.encrypted_payment_info)

    def cancel_booking(self, booking_id: str) -> BookingRecord:
        booking = self._load(booking_id)
        if booking.booking_status == "cancelled":
            raise BookingStateError("Booking is already cancelled")
        if booking.booking_status == "completed":
            raise BookingStateError("Cannot cancel completed booking")
        booking.booking_status = "cancelled"
        booking.payment_status = "refunded"
        booking.updated_at = utcnow()
        self.store.save(booking)
        return booking.public_view()

    def admin_update(
        self, booking_id: str, changes: dict[str, Any], resign: bool = False
    ) -> BookingRecord:
        """Apply a privileged edit.

        Editing a signed field without ``resign`` leaves the old signature in
        place, so later verification reports the booking as tampered.
        """
        unknown = set(changes) - set(ADMIN_EDITABLE)
        if unknown:
            raise ValueError(f"fields not editable: {sorted(unknown)}")

        booking = self._load(booking_id)
        data = booking.model_dump(by_alias=True)
        data.update(changes)
        try:
            updated = BookingRecord.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"invalid update for booking {booking_id}") from e

        touched = {
            ADMIN_EDITABLE[k]
            for k in changes
            if getattr(updated, ADMIN_EDITABLE[k]) != getattr(booking, ADMIN_EDITABLE[k])
        }
        updated.updated_at = utcnow()
        if touched & SIGNED_RECORD_FIELDS:
            if resign:
                self._sign(updated)
                logger.info("booking %s re-signed after admin edit of %s", booking_id, sorted(touched))
            else:
                logger.warning(
                    "booking %s: admin edit of signed fields %s invalidates its signature",
                    booking_id,
                    sorted(touched & SIGNED_RECORD_FIELDS),
                )
        self.store.save(updated)
        return updated.public_view()

    def resign_booking(self, booking_id: str) -> BookingRecord:
        booking = self._load(booking_id)
        self._sign(booking)
        booking.updated_at = utcnow()
        self.store.save(booking)
        logger.info("booking %s re-signed", booking_id)
        return booking.public_view()

    def resign_all(self) -> tuple[int, int]:
        """Re-sign every stored booking; returns (succeeded, failed)."""
        ok = failed = 0
        for booking in self.store.all():
            try:
                self._sign(booking)
                booking.updated_at = utcnow()
                self.store.save(booking)
                ok += 1
            except Exception:
                logger.exception("failed to re-sign booking %s", booking.booking_id)
                failed += 1
        return ok, failed

    def delete_booking(self, booking_id: str) -> None:
        if not self.store.delete(booking_id):
            raise BookingNotFound(booking_id)


def build_service(settings: Settings | None = None, store: BookingStore | None = None) -> BookingService:
    """Wire key material, payment cipher and store at startup.

    Key or configuration errors propagate: the service must not start
    without working key material.
    """
    settings = settings or Settings()
    engine = SignatureEngine(load_or_create_key_material(settings.keys_path))
    cipher = PaymentCipher.from_settings(settings)
    if store is None:
        from flightbook.storage.db import DBConfig, MySQLBookingStore

        store = MySQLBookingStore(DBConfig.from_settings(settings))
    return BookingService(store, engine, cipher, qr_width=settings.qr_width)
