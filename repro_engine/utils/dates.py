"""Calendar-date helpers.

Only whole dates are stored and compared, so nothing here deals with
time-of-day or timezones.
"""

import re
from datetime import date, datetime, timedelta
from typing import Any

from repro_engine.core.exceptions import InvalidDateError

_ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_BR_RE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")


def parse_date(value: Any) -> date:
    """Parse a caller-supplied literal (YYYY-MM-DD or DD/MM/YYYY).

    ``date`` instances pass through unchanged. Anything else, including
    impossible calendar dates such as 2024-02-30, raises InvalidDateError.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value or "").strip()
    if m := _ISO_RE.match(text):
        year, month, day = m.groups()
    elif m := _BR_RE.match(text):
        day, month, year = m.groups()
    else:
        raise InvalidDateError(value)

    try:
        return date(int(year), int(month), int(day))
    except ValueError as e:
        raise InvalidDateError(value) from e


def normalize_date(value: Any) -> str:
    """Normalize a date literal to canonical YYYY-MM-DD."""
    return parse_date(value).isoformat()


def add_days(value: Any, days: int) -> date:
    """Return ``value`` shifted by ``days`` calendar days."""
    return parse_date(value) + timedelta(days=days)


def parse_optional_date(value: Any, default: date | None = None) -> date | None:
    """Like parse_date, but None and blank strings yield ``default``."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    return parse_date(value)


def coerce_stored_date(value: Any) -> date | None:
    """Coerce a value read back from storage to a date.

    Depending on the column type the driver hands back a date, a datetime or
    a string (possibly with a time part), so this is lenient where parse_date
    is strict.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if len(text) >= 10 and _ISO_RE.match(text[:10]):
        return date.fromisoformat(text[:10])
    return parse_date(text)
