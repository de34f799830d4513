"""
Date Utilities

Defensive date parsing for model-supplied deadlines and the week_of
computation for progress logs.
"""

import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, Optional

logger = logging.getLogger(__name__)

_WEEKDAYS = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}

_WRITTEN_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%B %d, %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
)

_RELATIVE_PREFIX_RE = re.compile(r"^(by|on|before|due|until)\s+", re.IGNORECASE)
_WEEKDAY_RE = re.compile(
    r"^(?:(next|this)\s+)?(monday|tuesday|wednesday|thursday|friday|saturday|sunday)$",
    re.IGNORECASE,
)


def week_start(today: date) -> date:
    """
    Return the Monday of the week containing `today`.

    Sunday belongs to the week that started six days earlier.

    Args:
        today: Reference date (a datetime is reduced to its date)

    Returns:
        The most recent Monday, or `today` itself when it is a Monday
    """
    if isinstance(today, datetime):
        today = today.date()
    return today - timedelta(days=today.weekday())


def parse_deadline(value: Any, today: Optional[date] = None) -> Optional[date]:
    """
    Parse a deadline string into a date, returning None when it can't be resolved.

    Accepts ISO dates/datetimes, a handful of written formats, and simple
    relative phrases ("today", "tomorrow", "by Friday", "next Monday",
    "end of week"). Never raises.

    Args:
        value: Raw deadline from the model (usually a string)
        today: Reference date for relative phrases (defaults to date.today())

    Returns:
        Parsed date, or None
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    today = today or date.today()

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in _WRITTEN_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    parsed = _parse_relative(text, today)
    if parsed is None:
        logger.debug(f"Unparseable deadline dropped: value={text!r}")
    return parsed


def _parse_relative(text: str, today: date) -> Optional[date]:
    phrase = _RELATIVE_PREFIX_RE.sub("", text.lower()).strip().rstrip(".")

    if phrase in ("today", "tonight", "eod", "end of day"):
        return today
    if phrase == "tomorrow":
        return today + timedelta(days=1)
    if phrase in ("end of week", "end of the week", "eow"):
        return today + timedelta(days=(_WEEKDAYS["friday"] - today.weekday()) % 7)

    match = _WEEKDAY_RE.match(phrase)
    if not match:
        return None

    modifier, day_name = match.groups()
    target = _WEEKDAYS[day_name.lower()]
    days_ahead = (target - today.weekday()) % 7
    if modifier and modifier.lower() == "next" and days_ahead == 0:
        days_ahead = 7
    return today + timedelta(days=days_ahead)
