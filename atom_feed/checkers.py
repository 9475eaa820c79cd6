"""Syntax checks for URI references, mail addresses and RFC 3339 timestamps.

Every check raises a ``ValueError`` subclass on failure. The validators turn
the exception message into a validation issue without rewording it.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from urllib.parse import urlsplit

from email_validator import (
    SPECIAL_USE_DOMAIN_NAMES,
    EmailNotValidError,
    validate_email,
)

__all__ = [
    "EmailNotValidError",
    "InvalidURIError",
    "TimeFormatError",
    "check_email",
    "check_uri",
    "parse_rfc3339",
]

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_PORT = re.compile(r"(?::\d*)?")

_RFC3339 = re.compile(
    r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"[Tt](?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})$"
)


class InvalidURIError(ValueError):
    """Raised when a string is not a syntactically valid URI reference."""


class TimeFormatError(ValueError):
    """Raised when a string is not an RFC 3339 timestamp."""


def check_uri(value: str) -> None:
    """Raise InvalidURIError unless value is a syntactically valid URI reference."""
    if _CONTROL_CHARS.search(value):
        raise InvalidURIError(f'parse "{value}": invalid control character in URL')
    if value.startswith(":"):
        raise InvalidURIError(f'parse "{value}": missing protocol scheme')

    bad_escape = _BAD_ESCAPE.search(value)
    if bad_escape:
        start = bad_escape.start()
        raise InvalidURIError(
            f'parse "{value}": invalid URL escape "{value[start:start + 3]}"'
        )

    try:
        parts = urlsplit(value)
    except ValueError as exc:
        raise InvalidURIError(f'parse "{value}": {exc}') from exc

    # Any run of digits is a valid port; its range is not checked.
    host = parts.netloc.rpartition("@")[2]
    if host.startswith("["):
        port = host.partition("]")[2]
    else:
        colon = host.find(":")
        port = host[colon:] if colon != -1 else ""
    if not _PORT.fullmatch(port):
        raise InvalidURIError(f'parse "{value}": invalid port "{port}" after host')


def check_email(value: str) -> None:
    """Raise EmailNotValidError unless value is a syntactically valid address.

    Only syntax is checked. Dotless and reserved domains such as ``localhost``
    or ``printer.local`` are accepted; a reserved top label is replaced with a
    neutral one before validation.
    """
    local, at, domain = value.rpartition("@")
    if at:
        labels = domain.split(".")
        if labels[-1].lower() in SPECIAL_USE_DOMAIN_NAMES:
            labels[-1] = "example"
        value = local + at + ".".join(labels)
    validate_email(value, check_deliverability=False, globally_deliverable=False)


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC 3339 timestamp into a timezone-aware datetime."""
    match = _RFC3339.match(value)
    if match is None:
        raise TimeFormatError(
            f'parsing time "{value}" as RFC 3339: cannot parse "{value}"'
        )

    offset = match.group("offset")
    try:
        if offset in ("Z", "z"):
            tzinfo = timezone.utc
        else:
            hours, minutes = int(offset[1:3]), int(offset[4:6])
            if hours > 23 or minutes > 59:
                raise ValueError("time zone offset out of range")
            delta = timedelta(hours=hours, minutes=minutes)
            tzinfo = timezone(-delta if offset[0] == "-" else delta)

        fraction = (match.group("fraction") or "")[:6].ljust(6, "0")
        return datetime(
            int(match.group("year")),
            int(match.group("month")),
            int(match.group("day")),
            int(match.group("hour")),
            int(match.group("minute")),
            int(match.group("second")),
            int(fraction),
            tzinfo=tzinfo,
        )
    except ValueError as exc:
        raise TimeFormatError(f'parsing time "{value}": {exc}') from exc
