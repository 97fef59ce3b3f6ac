"""Shared fixtures: one RSA key pair per session, fixed payment key, sample bookings."""

import datetime

import pytest

from flightbook.common.protocol import BookingRecord, Passenger
from flightbook.crypto.aes import PaymentCipher
from flightbook.crypto.keys import KeyMaterial, generate_key_pair
from flightbook.crypto.sign import SignatureEngine
from flightbook.service import BookingService
from flightbook.storage.memory import InMemoryBookingStore

PAYMENT_KEY = bytes(range(32))
PAYMENT_IV = bytes(range(16, 32))


@pytest.fixture(scope="session")
def key_pems():
    return generate_key_pair()


@pytest.fixture(scope="session")
def key_material(key_pems):
    public_pem, private_pem = key_pems
    return KeyMaterial.from_pem(private_pem, public_pem)


@pytest.fixture(scope="session")
def other_key_material():
    public_pem, private_pem = generate_key_pair()
    return KeyMaterial.from_pem(private_pem, public_pem)


@pytest.fixture
def engine(key_material):
    return SignatureEngine(key_material)


@pytest.fixture
def payment_key():
    return PAYMENT_KEY, PAYMENT_IV


@pytest.fixture
def cipher(payment_key):
    return PaymentCipher(*payment_key)


@pytest.fixture
def store():
    return InMemoryBookingStore()


@pytest.fixture
def service(store, engine, cipher):
    return BookingService(store, engine, cipher)


@pytest.fixture
def fb1000():
    """The reference booking used across the suite."""
    return BookingRecord(
        booking_id="FB1000",
        owner_ref="U1",
        flight_number="AI-101",
        origin="DEL",
        destination="BOM",
        departure_date=datetime.datetime(2025, 3, 1, 6, 0, tzinfo=datetime.timezone.utc),
        total_price=5500,
        passengers=[Passenger(name="A Sharma", age_category="Adult")],
    )


@pytest.fixture
def booking_request():
    return {
        "flightNumber": "AI-202",
        "from": "BOM",
        "to": "BLR",
        "departureDate": "2025-04-10T09:15:00.000Z",
        "passengers": [
            {"name": "Alice", "ageCategory": "Adult", "seatNumber": "12A"},
            {"name": "Bob", "ageCategory": "Child"},
        ],
        "totalPrice": 9800,
        "paymentInfo": {"cardNumber": "4111111111111111", "expiry": "12/27", "holder": "Alice"},
        "meals": [{"item": "Veg Thali", "quantity": 2, "price": 350}],
    }
