"""Helper signatures: now_ms, b64e, b64d, sha256_hex, timestamps."""
from __future__ import annotations

import base64
import datetime
import time
from hashlib import sha256


def now_ms() -> int:
    return int(time.time() * 1000)


def utcnow() -> datetime.datetime:
    return to_utc_ms(datetime.datetime.now(datetime.timezone.utc))


def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")


def b64d(s: str) -> bytes:
    # strict: reject characters outside the base64 alphabet
    return base64.b64decode(s.encode("ascii"), validate=True)


def sha256_hex(data: bytes) -> str:
    return sha256(data).hexdigest()


def to_utc_ms(dt: datetime.datetime) -> datetime.datetime:
    """Normalize to an aware UTC datetime truncated to milliseconds.

    Naive values are taken to be UTC already.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    dt = dt.astimezone(datetime.timezone.utc)
    return dt.replace(microsecond=(dt.microsecond // 1000) * 1000)


def iso_utc_ms(dt: datetime.datetime) -> str:
    """Format as YYYY-MM-DDTHH:MM:SS.mmmZ."""
    dt = to_utc_ms(dt)
    return f"{dt:%Y-%m-%dT%H:%M:%S}.{dt.microsecond // 1000:03d}Z"
