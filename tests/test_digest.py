"""Tests for the canonical booking digest."""

import datetime

from flightbook.common.protocol import Passenger
from flightbook.crypto.digest import SIGNED_FIELDS, build_digest, signed_fields

FB1000_DIGEST = (
    b'{"bookingId":"FB1000","user":"U1","flightNumber":"AI-101","from":"DEL","to":"BOM",'
    b'"departureDate":"2025-03-01T06:00:00.000Z","totalPrice":5500,'
    b'"passengers":[{"name":"A Sharma","ageCategory":"Adult"}]}'
)


class TestDigestEncoding:
    """Exact byte layout of the digest."""

    def test_reference_booking_bytes(self, fb1000):
        assert build_digest(fb1000) == FB1000_DIGEST

    def test_key_order_is_fixed(self, fb1000):
        assert tuple(signed_fields(fb1000)) == SIGNED_FIELDS

    def test_repeatable(self, fb1000):
        assert build_digest(fb1000) == build_digest(fb1000.model_copy(deep=True))

    def test_non_utc_departure_is_normalized(self, fb1000):
        ist = datetime.timezone(datetime.timedelta(hours=5, minutes=30))
        shifted = fb1000.model_copy(
            update={"departure_date": datetime.datetime(2025, 3, 1, 11, 30, tzinfo=ist)}
        )
        # model_copy skips validation; the digest still formats in UTC
        assert build_digest(shifted) == FB1000_DIGEST

    def test_naive_departure_is_treated_as_utc(self, fb1000):
        data = fb1000.model_dump()
        data["departure_date"] = datetime.datetime(2025, 3, 1, 6, 0)
        assert build_digest(type(fb1000).model_validate(data)) == FB1000_DIGEST

    def test_milliseconds_are_kept_and_microseconds_dropped(self, fb1000):
        data = fb1000.model_dump()
        data["departure_date"] = datetime.datetime(
            2025, 3, 1, 6, 0, 0, 123456, tzinfo=datetime.timezone.utc
        )
        digest = build_digest(type(fb1000).model_validate(data))
        assert b'"departureDate":"2025-03-01T06:00:00.123Z"' in digest

    def test_non_ascii_names_stay_utf8(self, fb1000):
        fb1000.passengers[0].name = "José Núñez"
        assert "José Núñez".encode("utf-8") in build_digest(fb1000)


class TestDigestFieldSet:
    """Which edits change the digest and which do not."""

    def test_seat_number_is_not_signed(self, fb1000):
        before = build_digest(fb1000)
        fb1000.passengers[0].seat_number = "14C"
        assert build_digest(fb1000) == before

    def test_status_and_payment_are_not_signed(self, fb1000):
        before = build_digest(fb1000)
        fb1000.booking_status = "cancelled"
        fb1000.payment_status = "refunded"
        fb1000.encrypted_payment_info = "00ff"
        fb1000.qr_code = "data:image/png;base64,AAAA"
        assert build_digest(fb1000) == before

    def test_price_change_alters_digest(self, fb1000):
        before = build_digest(fb1000)
        fb1000.total_price = 5501
        assert build_digest(fb1000) != before

    def test_passenger_name_change_alters_digest(self, fb1000):
        before = build_digest(fb1000)
        fb1000.passengers[0].name = "A Sharmaa"
        assert build_digest(fb1000) != before

    def test_passenger_order_matters(self, fb1000):
        alice = Passenger(name="Alice", age_category="Adult")
        bob = Passenger(name="Bob", age_category="Child")
        first = fb1000.model_copy(update={"passengers": [alice, bob]})
        second = fb1000.model_copy(update={"passengers": [bob, alice]})
        assert build_digest(first) != build_digest(second)
