"""Opaque cursor tokens for keyset pagination.

A cursor carries the sort value and id of a boundary row. It is the hex
encoding of the UTF-8 text ``"<sort_value>|<id>"``, which keeps it free of
characters that need escaping in URLs.

Tokens are not signed. A client can forge one, which only moves it to
another page of rows it is already allowed to see.
"""

import string
from datetime import UTC, datetime, timedelta

from lims.constants import CURSOR_DELIMITER

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_HEX_DIGITS = frozenset(string.hexdigits)


def _to_hex(raw: str) -> str:
    return raw.encode("utf-8").hex()


def _split_token(cursor: str) -> tuple[str, str] | None:
    """Hex-decode a token and split it on the first delimiter."""
    if len(cursor) % 2 != 0 or not _HEX_DIGITS.issuperset(cursor):
        return None
    try:
        raw = bytes.fromhex(cursor).decode("utf-8")
    except (ValueError, UnicodeDecodeError):
        return None

    value, sep, row_id = raw.partition(CURSOR_DELIMITER)
    # float() and int() tolerate padding and digit separators, tokens do not
    if not sep or value != value.strip() or "_" in value:
        return None
    return value, row_id


def encode_cursor(sort_value: float, id: str) -> str:
    """Encode a numeric sort value and row id into a cursor token."""
    return _to_hex(f"{float(sort_value)!r}{CURSOR_DELIMITER}{id}")


def decode_cursor(cursor: str) -> tuple[float, str] | None:
    """Decode a token produced by :func:`encode_cursor`.

    Returns:
        ``(sort_value, id)``, or None if the token is malformed
    """
    parts = _split_token(cursor)
    if parts is None:
        return None
    value, row_id = parts
    try:
        return float(value), row_id
    except ValueError:
        return None


def encode_cursor_datetime(timestamp_micros: int, id: str) -> str:
    """Encode a timestamp (microseconds since epoch) and row id."""
    return _to_hex(f"{int(timestamp_micros)}{CURSOR_DELIMITER}{id}")


def decode_cursor_datetime(cursor: str) -> tuple[int, str] | None:
    """Decode a token produced by :func:`encode_cursor_datetime`."""
    parts = _split_token(cursor)
    if parts is None:
        return None
    value, row_id = parts
    try:
        return int(value), row_id
    except ValueError:
        return None


def datetime_to_micros(value: datetime) -> int:
    """Convert a datetime to microseconds since epoch. Naive values are UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return (value - _EPOCH) // timedelta(microseconds=1)


def micros_to_datetime(timestamp_micros: int) -> datetime:
    """Inverse of :func:`datetime_to_micros`, always timezone-aware UTC."""
    return _EPOCH + timedelta(microseconds=timestamp_micros)
