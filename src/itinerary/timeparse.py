"""12-hour time label parsing.

Schedule times are free-form display strings such as "9:00 AM", "8:30am",
"10:00am-10:30am PST" or the sentinel "TBD". Only the first time token in the
string is used. Parsing never raises: failures come back as a
TimeParseFailure, and the minute-of-day helpers map them to
UNPARSEABLE_MINUTES so they sort after every real time.
"""

import re
from datetime import date, datetime, time
from typing import Literal, NamedTuple

from src.itinerary.logging import get_logger
from src.itinerary.models import UNSCHEDULED

log = get_logger(__name__)

# Sorts after every minute of the day (0-1439)
UNPARSEABLE_MINUTES = 9999

DEFAULT_DAY_DATES: dict[str, date] = {
    "monday": date(2026, 2, 2),
    "tuesday": date(2026, 2, 3),
}

# H:MM or HH:MM, optional whitespace, AM/PM in any case. The lookbehind stops
# "110:00 AM" from matching as 10:00.
_TIME_TOKEN = re.compile(r"(?<!\d)(\d{1,2}):(\d{2})\s*([AaPp][Mm])")


class ParsedTime(NamedTuple):
    """A valid 12-hour wall-clock time."""

    hour: int  # 1-12
    minute: int  # 0-59
    meridiem: Literal["AM", "PM"]

    @property
    def hour24(self) -> int:
        if self.meridiem == "AM":
            return 0 if self.hour == 12 else self.hour
        return 12 if self.hour == 12 else self.hour + 12

    @property
    def minutes(self) -> int:
        return self.hour24 * 60 + self.minute

    def canonical(self) -> str:
        return f"{self.hour}:{self.minute:02d} {self.meridiem}"


class TimeParseFailure(NamedTuple):
    text: str
    reason: Literal["unscheduled", "no_time_token", "out_of_range"]


def parse_time(display: str | None) -> ParsedTime | TimeParseFailure:
    """Parse the first 12-hour time token in a display string.

    Args:
        display: Display label, e.g. "1:30 PM" or "10:00am-10:30am PST".

    Returns:
        ParsedTime on success, TimeParseFailure otherwise.
    """
    text = display or ""
    if text.strip().upper() == UNSCHEDULED:
        return TimeParseFailure(text, "unscheduled")

    match = _TIME_TOKEN.search(text)
    if not match:
        return TimeParseFailure(text, "no_time_token")

    hour = int(match.group(1))
    minute = int(match.group(2))
    if not (1 <= hour <= 12 and 0 <= minute <= 59):
        return TimeParseFailure(text, "out_of_range")

    return ParsedTime(hour, minute, match.group(3).upper())


def parse_time_to_minutes(display: str | None) -> int:
    """Minutes since midnight, or UNPARSEABLE_MINUTES for TBD/unparseable input."""
    parsed = parse_time(display)
    if isinstance(parsed, TimeParseFailure):
        return UNPARSEABLE_MINUTES
    return parsed.minutes


def canonical_time(display: str | None) -> str | None:
    """Normalise a time label to "H:MM AM"/"H:MM PM" ("08:30am" -> "8:30 AM")."""
    parsed = parse_time(display)
    if isinstance(parsed, TimeParseFailure):
        return None
    return parsed.canonical()


def resolve_day_date(day: str, day_dates: dict[str, date] | None = None) -> date:
    """Map a day label to its calendar date.

    Unknown labels fall back to the first known day.
    """
    dates = {k.strip().lower(): v for k, v in (day_dates or DEFAULT_DAY_DATES).items()}
    resolved = dates.get(day.strip().lower())
    if resolved is None:
        # dict order is the configured order, so the first entry is the first day
        fallback_day, resolved = next(iter(dates.items()))
        log.warning("unknown_event_day", day=day, fallback=fallback_day)
    return resolved


def event_datetime(
    day: str, display: str | None, day_dates: dict[str, date] | None = None
) -> datetime | None:
    """Absolute (naive, venue-local) start datetime for a day/time pair.

    Returns:
        The datetime, or None if the time does not parse.
    """
    parsed = parse_time(display)
    if isinstance(parsed, TimeParseFailure):
        return None
    return datetime.combine(
        resolve_day_date(day, day_dates), time(parsed.hour24, parsed.minute)
    )


def to_absolute_timestamp(
    day: str, display: str | None, day_dates: dict[str, date] | None = None
) -> str | None:
    """Calendar timestamp in YYYYMMDDTHHMMSS form (no timezone suffix).

    Returns:
        The timestamp string, or None if the time does not parse.
    """
    moment = event_datetime(day, display, day_dates)
    if moment is None:
        return None
    return moment.strftime("%Y%m%dT%H%M%S")
