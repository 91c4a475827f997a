"""
Rental date/time arithmetic.

Rental dates and times are entered as local wall-clock values at a fixed UTC
offset. Everything here works on timezone-aware datetimes so comparisons with
"now" (UTC) are exact.
"""

import math
from datetime import date, datetime, time, timedelta, timezone

_CLOCK_FORMATS = ("%H:%M", "%I:%M %p")
_ONE_DAY = timedelta(days=1)


def rental_timezone(offset_hours: float) -> timezone:
    return timezone(timedelta(hours=offset_hours))


def parse_clock(value: str) -> time:
    """Parse a 24-hour ``HH:MM`` or a stored ``h:mm AM/PM`` display string."""
    text = value.strip().upper()
    for fmt in _CLOCK_FORMATS:
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Unrecognised time of day: {value!r}")


def to_local_datetime(day: date | str, clock: time | str, tz: timezone) -> datetime:
    if isinstance(day, str):
        day = date.fromisoformat(day)
    if isinstance(clock, str):
        clock = parse_clock(clock)
    return datetime.combine(day, clock, tzinfo=tz)


def format_12_hour(clock: time | str) -> str:
    """Format a time of day as ``h:mm AM/PM`` (``00:05`` -> ``12:05 AM``)."""
    if isinstance(clock, str):
        clock = parse_clock(clock)
    period = "PM" if clock.hour >= 12 else "AM"
    hour = clock.hour % 12 or 12
    return f"{hour}:{clock.minute:02d} {period}"


def days_rented(start: datetime, end: datetime) -> int:
    """Inclusive day count: a same-day rental is one day, day0 -> day2 is three."""
    return max(0, math.ceil((end - start) / _ONE_DAY + 1))


def rental_price(start: datetime, end: datetime, rent_rate: float) -> float:
    return days_rented(start, end) * rent_rate
