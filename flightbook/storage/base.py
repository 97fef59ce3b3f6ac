"""Booking store interface used by the service layer."""
from __future__ import annotations

from typing import Iterable, Optional, Protocol

from flightbook.common.protocol import BookingRecord


class BookingExists(Exception):
    """Raised by ``insert`` when the booking id is already taken."""


class BookingStore(Protocol):
    def load(self, booking_id: str) -> Optional[BookingRecord]: ...

    def insert(self, booking: BookingRecord) -> None: ...

    def save(self, booking: BookingRecord) -> None: ...

    def list_by_owner(self, owner_ref: str) -> list[BookingRecord]: ...

    def all(self) -> Iterable[BookingRecord]: ...

    def delete(self, booking_id: str) -> bool: ...
