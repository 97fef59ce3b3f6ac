"""Pydantic models: passenger, meal, booking request, booking record, verification result.

Field names are snake_case; aliases carry the stored document's camelCase
keys (``from``/``to`` for the route, ``user`` for the owner).
"""
from __future__ import annotations

import datetime
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from flightbook.common.utils import to_utc_ms, utcnow

AgeCategory = Literal["Child", "Adult", "Elder"]
TripType = Literal["oneWay", "roundWay"]
BookingStatus = Literal["confirmed", "cancelled", "completed"]
PaymentStatus = Literal["pending", "completed", "failed", "refunded"]


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Passenger(_Model):
    name: str = Field(min_length=1)
    age_category: AgeCategory = Field(alias="ageCategory")
    # not signed; seat assignment may change after booking
    seat_number: Optional[str] = Field(default=None, alias="seatNumber")


class Meal(_Model):
    item: str
    quantity: int = 1
    price: float = 0


def _utc_ms(value: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
    if value is None:
        return None
    return to_utc_ms(value)


class BookingRequest(_Model):
    """What a customer submits when booking."""

    flight_number: str = Field(alias="flightNumber", min_length=1)
    origin: str = Field(alias="from", min_length=1)
    destination: str = Field(alias="to", min_length=1)
    departure_date: datetime.datetime = Field(alias="departureDate")
    return_date: Optional[datetime.datetime] = Field(default=None, alias="returnDate")
    trip_type: TripType = Field(default="oneWay", alias="tripType")
    passengers: list[Passenger] = Field(min_length=1)
    total_price: int = Field(alias="totalPrice", ge=0)
    payment_info: Union[dict[str, Any], str, None] = Field(default=None, alias="paymentInfo")
    meals: list[Meal] = Field(default_factory=list)

    @field_validator("departure_date", "return_date")
    @classmethod
    def normalize_dates(cls, value: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
        return _utc_ms(value)


class BookingRecord(_Model):
    """A stored booking."""

    booking_id: str = Field(alias="bookingId", min_length=1)
    owner_ref: str = Field(alias="user", min_length=1)
    flight_number: str = Field(alias="flightNumber")
    origin: str = Field(alias="from")
    destination: str = Field(alias="to")
    departure_date: datetime.datetime = Field(alias="departureDate")
    return_date: Optional[datetime.datetime] = Field(default=None, alias="returnDate")
    trip_type: TripType = Field(default="oneWay", alias="tripType")
    passengers: list[Passenger] = Field(min_length=1)
    total_price: int = Field(alias="totalPrice")
    meals: list[Meal] = Field(default_factory=list)
    encrypted_payment_info: Optional[str] = Field(default=None, alias="encryptedPaymentInfo")
    payment_status: PaymentStatus = Field(default="pending", alias="paymentStatus")
    booking_status: BookingStatus = Field(default="confirmed", alias="bookingStatus")
    digital_signature: Optional[str] = Field(default=None, alias="digitalSignature")
    qr_code: Optional[str] = Field(default=None, alias="qrCode")
    booking_confirmation_sent: bool = Field(default=False, alias="bookingConfirmationSent")
    created_at: datetime.datetime = Field(default_factory=utcnow, alias="createdAt")
    updated_at: datetime.datetime = Field(default_factory=utcnow, alias="updatedAt")

    @field_validator("departure_date", "return_date", "created_at", "updated_at")
    @classmethod
    def normalize_dates(cls, value: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
        return _utc_ms(value)

    @field_validator("owner_ref", mode="before")
    @classmethod
    def owner_as_str(cls, value: Any) -> Any:
        # owner ids may arrive as ints or ObjectId-like objects
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @property
    def lead_passenger(self) -> Passenger:
        return self.passengers[0]

    def public_view(self) -> "BookingRecord":
        """Copy without the payment ciphertext."""
        return self.model_copy(update={"encrypted_payment_info": None}, deep=True)


class BookingDetails(_Model):
    booking_id: str = Field(alias="bookingId")
    flight_number: str = Field(alias="flightNumber")
    origin: str
    destination: str
    status: BookingStatus


class VerificationResult(_Model):
    verified: bool
    message: str
    booking_details: BookingDetails = Field(alias="bookingDetails")
