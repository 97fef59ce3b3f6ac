"""Process-local booking store for development and tests."""
from __future__ import annotations

import threading
from typing import Optional

from flightbook.common.protocol import BookingRecord
from flightbook.storage.base import BookingExists


class InMemoryBookingStore:
    def __init__(self):
        self._lock = threading.Lock()
        self._bookings: dict[str, BookingRecord] = {}

    def load(self, booking_id: str) -> Optional[BookingRecord]:
        with self._lock:
            booking = self._bookings.get(booking_id)
        # callers get their own copy; edits only land through save()
        return booking.model_copy(deep=True) if booking is not None else None

    def insert(self, booking: BookingRecord) -> None:
        with self._lock:
            if booking.booking_id in self._bookings:
                raise BookingExists(booking.booking_id)
            self._bookings[booking.booking_id] = booking.model_copy(deep=True)

    def save(self, booking: BookingRecord) -> None:
        with self._lock:
            self._bookings[booking.booking_id] = booking.model_copy(deep=True)

    def list_by_owner(self, owner_ref: str) -> list[BookingRecord]:
        with self._lock:
            found = [b for b in self._bookings.values() if b.owner_ref == str(owner_ref)]
        found.sort(key=lambda b: b.created_at, reverse=True)
        return [b.model_copy(deep=True) for b in found]

    def all(self) -> list[BookingRecord]:
        with self._lock:
            return [b.model_copy(deep=True) for b in self._bookings.values()]

    def delete(self, booking_id: str) -> bool:
        with self._lock:
            return self._bookings.pop(booking_id, None) is not None
