"""Packed-integer codec used by the passport circuit.

The circuit binds short byte strings (country codes, addresses, ``YYMMDD``
dates) into a single field element by reading the bytes as one unsigned
big-endian integer. Public signals carry that integer as a decimal string.

Leading zero bytes do not survive the round trip: ``b"\\x00\\x01"`` and
``b"\\x01"`` encode to the same value, which matches how the circuit and the
registry compare them.
"""
from __future__ import annotations

import re
from datetime import date, datetime, timezone

from ..errors import SignalFormatError

_DECIMAL_RE = re.compile(r"[0-9]+")
DATE_FORMAT = "%y%m%d"


def parse_decimal(value: str, path: str) -> int:
    """Return the integer held by a decimal signal or raise :class:`SignalFormatError`."""
    if not isinstance(value, str) or not _DECIMAL_RE.fullmatch(value):
        raise SignalFormatError({path: "must be a decimal integer"})
    return int(value)


def int_to_bytes(value: int) -> bytes:
    if value < 0:
        raise ValueError("packed values are unsigned")
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def encode_bytes(raw: bytes) -> str:
    """Pack raw bytes into the decimal form found in the public signals."""
    return str(int.from_bytes(raw, "big"))


def decode_text(value: str, path: str) -> str:
    """Unpack a decimal signal into the ASCII text it carries (e.g. ``"UKR"``).

    Bytes that are not ASCII are replaced, so a forged value can never match a
    real code but also never raises.
    """
    return int_to_bytes(parse_decimal(value, path)).decode("ascii", errors="replace")


def encode_text(text: str) -> str:
    return encode_bytes(text.encode("ascii"))


def decode_date(value: str, path: str) -> date | None:
    """Unpack a ``YYMMDD`` date signal. Returns None for a well-formed
    integer that does not hold a calendar date."""
    text = decode_text(value, path)
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError:
        return None


def encode_date(day: date) -> str:
    return encode_text(day.strftime(DATE_FORMAT))


def date_to_datetime(day: date) -> datetime:
    """Midnight UTC of ``day``; all date bounds are compared at this instant."""
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
