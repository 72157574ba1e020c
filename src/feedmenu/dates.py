"""Feed date parsing using feedparser's date handlers."""

from datetime import datetime, timezone
from time import struct_time
from typing import Callable

from feedparser.datetimes.rfc822 import _parse_date_rfc822
from feedparser.datetimes.w3dtf import _parse_date_w3dtf

from feedmenu.models import FeedFormat


class DateParseError(Exception):
    """Raised when a date string does not match its format family."""


DateParser = Callable[[str, FeedFormat], datetime]


_HANDLERS = {
    FeedFormat.RSS: _parse_date_rfc822,
    FeedFormat.ATOM: _parse_date_w3dtf,
}


def parse_date(value: str, fmt: FeedFormat) -> datetime:
    """Parse a feed date into an aware UTC datetime.

    RSS dates are RFC 822, ATOM dates are ISO 8601 (W3C-DTF). Only the
    handler for the given family is tried.

    Raises:
        DateParseError: If the value is empty or not a valid date for ``fmt``.
    """
    text = (value or "").strip()
    if not text:
        raise DateParseError("Empty date")

    try:
        time_struct = _HANDLERS[fmt](text)
    except (ValueError, OverflowError, IndexError, KeyError, TypeError) as e:
        raise DateParseError(f"Invalid {fmt.value} date {text!r}: {e}") from e

    if not isinstance(time_struct, struct_time):
        raise DateParseError(f"Invalid {fmt.value} date {text!r}")

    try:
        return datetime(*time_struct[:6], tzinfo=timezone.utc)
    except (ValueError, OverflowError) as e:
        raise DateParseError(f"Invalid {fmt.value} date {text!r}: {e}") from e
