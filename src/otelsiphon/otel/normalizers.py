"""
Field normalizers for OTLP log records.

Pure helpers that turn OTLP wire encodings (nanosecond decimal strings,
hex/base64 identifiers, severity numbers) into the flat record's storage
form. None of them raise: malformed input degrades to a documented default.
"""

import base64
import binascii
import logging
import re
from datetime import UTC, datetime, timedelta
from typing import Any

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_NANOS_PER_MILLI = 1_000_000

_DECIMAL_PATTERN = re.compile(r"[+-]?[0-9]+")
_HEX_PATTERN = re.compile(r"[0-9a-fA-F]+")
_WHITESPACE_PATTERN = re.compile(r"[\t\n\f\r ]+")

SEVERITY_NAMES: tuple[str, ...] = (
    "UNSPECIFIED",
    "TRACE", "TRACE2", "TRACE3", "TRACE4",
    "DEBUG", "DEBUG2", "DEBUG3", "DEBUG4",
    "INFO", "INFO2", "INFO3", "INFO4",
    "WARN", "WARN2", "WARN3", "WARN4",
    "ERROR", "ERROR2", "ERROR3", "ERROR4",
    "FATAL", "FATAL2", "FATAL3", "FATAL4",
)  # fmt: skip

UNSPECIFIED = SEVERITY_NAMES[0]


def _parse_nanos(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _DECIMAL_PATTERN.fullmatch(value.strip()):
        return int(value.strip())
    return None


def nano_timestamp_to_int(value: Any) -> int:
    """Parse a nanosecond timestamp into an int, 0 when absent or malformed."""
    nanos = _parse_nanos(value)
    return nanos if nanos is not None else 0


def nano_timestamp_to_iso(value: Any) -> str | None:
    """
    Convert a nanosecond epoch timestamp to an ISO-8601 UTC string.

    Sub-millisecond precision is truncated (toward zero). The result always
    carries three fractional digits and a ``Z`` suffix, e.g.
    ``2023-11-14T22:13:20.000Z``.

    Args:
        value: Decimal string (or int) of nanoseconds since the Unix epoch

    Returns:
        ISO string, or None if the value is absent, empty, unparseable or
        outside the representable date range
    """
    if value is None or value == "":
        return None

    nanos = _parse_nanos(value)
    if nanos is None:
        logger.debug("Ignoring malformed nanosecond timestamp %r", value)
        return None

    millis = abs(nanos) // _NANOS_PER_MILLI
    if nanos < 0:
        millis = -millis

    try:
        instant = _EPOCH + timedelta(milliseconds=millis)
    except OverflowError:
        logger.debug("Nanosecond timestamp %r out of range", value)
        return None
    return format_iso(instant)


def format_iso(instant: datetime) -> str:
    """Format an aware datetime as a millisecond-precision ISO-8601 UTC string."""
    return instant.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def identifier_to_hex(value: Any) -> str | None:
    """
    Normalize a trace or span identifier to lowercase hex.

    Values made only of hex digits are returned unchanged (case included).
    Anything else is treated as base64 and re-encoded as lowercase hex. A
    value that is neither is returned as-is.
    """
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        logger.debug("Ignoring non-string identifier %r", value)
        return None

    if _HEX_PATTERN.fullmatch(value):
        return value

    compact = _WHITESPACE_PATTERN.sub("", value)
    if len(compact) % 4:
        compact += "=" * (-len(compact) % 4)
    try:
        raw = base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError):
        # Neither hex nor base64: passed through unchanged.
        return value
    return raw.hex()


def resolve_severity(severity_number: Any, severity_text: Any) -> str:
    """
    Resolve the display severity of a log record.

    Producer-supplied text always wins. Otherwise the OTLP severity number
    (0-24) is looked up; anything out of range resolves to ``UNSPECIFIED``.
    """
    if isinstance(severity_text, str) and severity_text:
        return severity_text

    if (
        isinstance(severity_number, int)
        and not isinstance(severity_number, bool)
        and 0 <= severity_number < len(SEVERITY_NAMES)
    ):
        return SEVERITY_NAMES[severity_number]
    return UNSPECIFIED
