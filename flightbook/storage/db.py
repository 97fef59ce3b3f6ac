"""MySQL bookings table (pymysql)."""
from __future__ import annotations

import argparse
import datetime
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import pymysql
import pymysql.cursors
import pymysql.err
from pymysql.constants import ER

from flightbook.common.protocol import BookingRecord
from flightbook.config import Settings
from flightbook.storage.base import BookingExists

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS bookings (
    booking_id VARCHAR(64) PRIMARY KEY,
    user_ref VARCHAR(64) NOT NULL,
    flight_number VARCHAR(32) NOT NULL,
    origin VARCHAR(64) NOT NULL,
    destination VARCHAR(64) NOT NULL,
    departure_date DATETIME(3) NOT NULL,
    return_date DATETIME(3) NULL,
    trip_type VARCHAR(16) NOT NULL DEFAULT 'oneWay',
    passengers TEXT NOT NULL,
    meals TEXT NOT NULL,
    total_price BIGINT NOT NULL,
    encrypted_payment_info TEXT NULL,
    payment_status VARCHAR(16) NOT NULL DEFAULT 'pending',
    booking_status VARCHAR(16) NOT NULL DEFAULT 'confirmed',
    digital_signature TEXT NULL,
    qr_code MEDIUMTEXT NULL,
    booking_confirmation_sent TINYINT(1) NOT NULL DEFAULT 0,
    created_at DATETIME(3) NOT NULL,
    updated_at DATETIME(3) NOT NULL,
    INDEX idx_bookings_user (user_ref, created_at)
) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
"""

COLUMNS = (
    "booking_id",
    "user_ref",
    "flight_number",
    "origin",
    "destination",
    "departure_date",
    "return_date",
    "trip_type",
    "passengers",
    "meals",
    "total_price",
    "encrypted_payment_info",
    "payment_status",
    "booking_status",
    "digital_signature",
    "qr_code",
    "booking_confirmation_sent",
    "created_at",
    "updated_at",
)
_COLS = ", ".join(COLUMNS)
_PLACEHOLDERS = ", ".join(f"%({c})s" for c in COLUMNS)


@dataclass
class DBConfig:
    host: str = "127.0.0.1"
    port: int = 3306
    user: str = "flightbook"
    password: str = "flightbook"
    db: str = "flightbook"

    @classmethod
    def from_settings(cls, settings: Settings) -> "DBConfig":
        return cls(
            host=settings.db_host,
            port=settings.db_port,
            user=settings.db_user,
            password=settings.db_password,
            db=settings.db_name,
        )


def get_conn(cfg: DBConfig | None = None):
    if cfg is None:
        cfg = DBConfig.from_settings(Settings())
    return pymysql.connect(
        host=cfg.host,
        port=cfg.port,
        user=cfg.user,
        password=cfg.password,
        db=cfg.db,
        charset="utf8mb4",
        autocommit=True,
        cursorclass=pymysql.cursors.DictCursor,
    )


def init_schema(cfg: DBConfig | None = None):
    conn = get_conn(cfg)
    with conn, conn.cursor() as cur:
        cur.execute(SCHEMA)


def _naive_utc(dt: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
    # DATETIME columns carry no zone; everything stored is UTC
    if dt is None:
        return None
    return dt.astimezone(datetime.timezone.utc).replace(tzinfo=None)


def booking_to_row(booking: BookingRecord) -> dict[str, Any]:
    return {
        "booking_id": booking.booking_id,
        "user_ref": booking.owner_ref,
        "flight_number": booking.flight_number,
        "origin": booking.origin,
        "destination": booking.destination,
        "departure_date": _naive_utc(booking.departure_date),
        "return_date": _naive_utc(booking.return_date),
        "trip_type": booking.trip_type,
        "passengers": json.dumps(
            [p.model_dump(by_alias=True) for p in booking.passengers], ensure_ascii=False
        ),
        "meals": json.dumps([m.model_dump() for m in booking.meals], ensure_ascii=False),
        "total_price": booking.total_price,
        "encrypted_payment_info": booking.encrypted_payment_info,
        "payment_status": booking.payment_status,
        "booking_status": booking.booking_status,
        "digital_signature": booking.digital_signature,
        "qr_code": booking.qr_code,
        "booking_confirmation_sent": int(booking.booking_confirmation_sent),
        "created_at": _naive_utc(booking.created_at),
        "updated_at": _naive_utc(booking.updated_at),
    }


def row_to_booking(row: dict[str, Any]) -> BookingRecord:
    return BookingRecord(
        booking_id=row["booking_id"],
        owner_ref=row["user_ref"],
        flight_number=row["flight_number"],
        origin=row["origin"],
        destination=row["destination"],
        departure_date=row["departure_date"],
        return_date=row.get("return_date"),
        trip_type=row.get("trip_type") or "oneWay",
        passengers=json.loads(row["passengers"]),
        meals=json.loads(row.get("meals") or "[]"),
        total_price=row["total_price"],
        encrypted_payment_info=row.get("encrypted_payment_info"),
        payment_status=row.get("payment_status") or "pending",
        booking_status=row.get("booking_status") or "confirmed",
        digital_signature=row.get("digital_signature"),
        qr_code=row.get("qr_code"),
        booking_confirmation_sent=bool(row.get("booking_confirmation_sent")),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class MySQLBookingStore:
    def __init__(self, cfg: DBConfig | None = None):
        self.cfg = cfg or DBConfig.from_settings(Settings())

    def load(self, booking_id: str) -> Optional[BookingRecord]:
        conn = get_conn(self.cfg)
        with conn, conn.cursor() as cur:
            cur.execute("SELECT * FROM bookings WHERE booking_id = %s", (booking_id,))
            row = cur.fetchone()
        return row_to_booking(row) if row else None

    def insert(self, booking: BookingRecord) -> None:
        conn = get_conn(self.cfg)
        try:
            with conn, conn.cursor() as cur:
                cur.execute(
                    f"INSERT INTO bookings ({_COLS}) VALUES ({_PLACEHOLDERS})",
                    booking_to_row(booking),
                )
        except pymysql.err.IntegrityError as e:
            if e.args and e.args[0] == ER.DUP_ENTRY:
                raise BookingExists(booking.booking_id) from e
            raise
        logger.debug("inserted booking %s", booking.booking_id)

    def save(self, booking: BookingRecord) -> None:
        row = booking_to_row(booking)
        updates = ", ".join(f"{c} = VALUES({c})" for c in COLUMNS if c != "booking_id")
        conn = get_conn(self.cfg)
        with conn, conn.cursor() as cur:
            cur.execute(
                f"INSERT INTO bookings ({_COLS}) VALUES ({_PLACEHOLDERS}) "
                f"ON DUPLICATE KEY UPDATE {updates}",
                row,
            )
        logger.debug("saved booking %s", booking.booking_id)

    def list_by_owner(self, owner_ref: str) -> list[BookingRecord]:
        conn = get_conn(self.cfg)
        with conn, conn.cursor() as cur:
            cur.execute(
                "SELECT * FROM bookings WHERE user_ref = %s ORDER BY created_at DESC",
                (str(owner_ref),),
            )
            rows = cur.fetchall()
        return [row_to_booking(r) for r in rows]

    def all(self) -> list[BookingRecord]:
        conn = get_conn(self.cfg)
        with conn, conn.cursor() as cur:
            cur.execute("SELECT * FROM bookings ORDER BY created_at")
            rows = cur.fetchall()
        return [row_to_booking(r) for r in rows]

    def delete(self, booking_id: str) -> bool:
        conn = get_conn(self.cfg)
        with conn, conn.cursor() as cur:
            deleted = cur.execute("DELETE FROM bookings WHERE booking_id = %s", (booking_id,))
        return bool(deleted)


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--init", action="store_true", help="initialize DB schema")
    args = parser.parse_args()
    if args.init:
        init_schema()
        print("Initialized DB schema.")


if __name__ == "__main__":
    main()
