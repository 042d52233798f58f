"""Calendar-date helpers.

Dates are stored as plain ``YYYY-MM-DD`` strings. Parsing them into
``datetime.date`` (never a timezone-aware datetime) keeps "Jan 5" from
drifting to "Jan 4" when the local offset is negative.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta, timezone

logger = logging.getLogger("jtrack")

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def today() -> date:
    return date.today()


def today_iso() -> str:
    """Today's local date as ``YYYY-MM-DD``."""
    return today().isoformat()


def now_timestamp() -> str:
    """UTC timestamp used for ``createdAt`` / ``lastUpdated``."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso_date(value: date | datetime | str | None) -> date | None:
    """Parse a stored date into a ``date``; ``None`` if it can't be read.

    Accepts ``YYYY-MM-DD`` as well as full ISO timestamps, in which case the
    date part is taken as-is.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None
    if ISO_DATE_RE.match(text):
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        logger.debug("Unparseable date: %r", value)
        return None


def format_date_for_input(value: date | datetime | str | None) -> str:
    """``YYYY-MM-DD`` for a form field, or ``""``."""
    if not value:
        return ""
    if isinstance(value, str) and ISO_DATE_RE.match(value):
        return value
    parsed = parse_iso_date(value)
    return parsed.isoformat() if parsed else ""


def format_date_for_display(value: date | datetime | str | None) -> str:
    """Short display form such as ``Jan 5``."""
    if not value:
        return ""
    parsed = parse_iso_date(value)
    if parsed is None:
        return "Invalid date"
    return f"{parsed.strftime('%b')} {parsed.day}"


def format_long_date(value: date | datetime | str | None) -> str:
    """Display form with year, e.g. ``Jan 5, 2025``."""
    if not value:
        return ""
    parsed = parse_iso_date(value)
    if parsed is None:
        return "Invalid date"
    return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"


def add_days(value: date | datetime | str, days: int) -> date:
    """Return ``value + days``. Raises ``ValueError`` if ``value`` is unreadable."""
    parsed = parse_iso_date(value)
    if parsed is None:
        raise ValueError(f"Not a calendar date: {value!r}")
    return parsed + timedelta(days=days)


def days_between(first: date | datetime | str, second: date | datetime | str) -> int:
    """Whole days between two dates, always non-negative. 0 if either is unreadable."""
    a = parse_iso_date(first)
    b = parse_iso_date(second)
    if a is None or b is None:
        return 0
    return abs((b - a).days)
