"""
Utility functions shared across the SDK

Timestamp handling, document id generation and hex helpers. All timestamps
are timezone-aware UTC with millisecond precision so that their rendered form
survives a storage round trip unchanged.
"""

import re
import time
import uuid
from datetime import datetime, timezone
from typing import Union

from .exceptions import ValidationError

HEX_PATTERN = re.compile(r'^(0x)?[0-9a-fA-F]*$')


def now_utc() -> datetime:
    """
    Current UTC time truncated to milliseconds.

    Returns:
        datetime: Timezone-aware UTC datetime
    """
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """
    Format a datetime as ISO-8601 UTC with milliseconds and a Z suffix.

    Args:
        dt: Datetime to format (naive values are taken as UTC)

    Returns:
        str: e.g. "2025-01-02T03:04:05.678Z"
    """
    return ensure_utc(dt).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """
    Parse an ISO-8601 timestamp into a timezone-aware UTC datetime.

    Args:
        value: ISO-8601 string (a trailing Z is accepted) or datetime

    Returns:
        datetime: Timezone-aware UTC datetime

    Raises:
        ValidationError: If the value is not a valid timestamp
    """
    if isinstance(value, datetime):
        return ensure_utc(value)

    if not isinstance(value, str) or not value:
        raise ValidationError(f"Invalid timestamp: {value!r}", details={'value': repr(value)})

    try:
        return ensure_utc(datetime.fromisoformat(value.replace('Z', '+00:00')))
    except ValueError as e:
        raise ValidationError(f"Invalid timestamp format: {value}", details={'original_error': str(e)})


def generate_document_id() -> str:
    """
    Generate an opaque unique document identifier.

    Returns:
        str: Identifier of the form "doc_<epoch-ms>_<9 hex chars>"
    """
    return f"doc_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def normalize_hex(value: Union[str, bytes]) -> str:
    """
    Normalize a hex string or raw bytes to lowercase 0x-prefixed hex.

    Args:
        value: Hex string (with or without 0x) or raw bytes

    Returns:
        str: Lowercase hex string with 0x prefix

    Raises:
        ValidationError: If the string contains non-hex characters or has odd length
    """
    if isinstance(value, (bytes, bytearray)):
        return '0x' + bytes(value).hex()

    if not isinstance(value, str) or not HEX_PATTERN.match(value):
        raise ValidationError("Value is not a hex string", details={'value': repr(value)[:80]})

    digits = value[2:] if value.startswith('0x') else value
    if len(digits) % 2 != 0:
        raise ValidationError("Hex string must have even length", details={'length': len(digits)})

    return '0x' + digits.lower()


def hex_to_bytes(value: str) -> bytes:
    """Decode a hex string with or without 0x prefix."""
    return bytes.fromhex(normalize_hex(value)[2:])
