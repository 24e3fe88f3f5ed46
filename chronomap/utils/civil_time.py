"""
Civil time conversion utilities for the timeline engine.

Instants are handled as float milliseconds since the Unix epoch on the
proleptic Gregorian calendar. Python datetimes cannot represent year 0 or
earlier, so calendar fields are derived with the days-from-civil algorithm,
which works for any year. All conversions are reversible.
"""

import datetime
import math
from typing import Tuple, Union

from .error_handler import InvalidInstant, OutOfRangeInput

# Unix epoch (January 1, 1970)
UNIX_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)

# Constants for time conversions
MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR

# Days in a 400-year Gregorian cycle
DAYS_PER_ERA = 146097
# Days from 0000-03-01 to 1970-01-01
EPOCH_DAY_OFFSET = 719468

Instant = Union[datetime.datetime, datetime.date, int, float]


def days_from_civil(year: int, month: int, day: int) -> int:
    """
    Convert a proleptic Gregorian date to days since 1970-01-01.

    Args:
        year: Astronomical year (0 is 1 BC, -1 is 2 BC)
        month: Month 1-12
        day: Day of month 1-31

    Returns:
        int: Days relative to the Unix epoch (negative before 1970)
    """
    year -= month <= 2
    era = year // 400
    year_of_era = year - era * 400
    day_of_year = (153 * (month + (-3 if month > 2 else 9)) + 2) // 5 + day - 1
    day_of_era = year_of_era * 365 + year_of_era // 4 - year_of_era // 100 + day_of_year
    return era * DAYS_PER_ERA + day_of_era - EPOCH_DAY_OFFSET


def civil_from_days(days: int) -> Tuple[int, int, int]:
    """
    Convert days since 1970-01-01 to a proleptic Gregorian date.

    Args:
        days: Days relative to the Unix epoch

    Returns:
        tuple: (year, month, day)
    """
    days += EPOCH_DAY_OFFSET
    era = days // DAYS_PER_ERA
    day_of_era = days - era * DAYS_PER_ERA
    year_of_era = (day_of_era - day_of_era // 1460 + day_of_era // 36524
                   - day_of_era // 146096) // 365
    year = year_of_era + era * 400
    day_of_year = day_of_era - (365 * year_of_era + year_of_era // 4 - year_of_era // 100)
    month_index = (5 * day_of_year + 2) // 153
    day = day_of_year - (153 * month_index + 2) // 5 + 1
    month = month_index + 3 if month_index < 10 else month_index - 9
    return (year + (month <= 2), month, day)


def days_in_month(year: int, month: int) -> int:
    """Get the number of days in a month of the proleptic Gregorian calendar."""
    if month == 12:
        return days_from_civil(year + 1, 1, 1) - days_from_civil(year, 12, 1)
    return days_from_civil(year, month + 1, 1) - days_from_civil(year, month, 1)


def from_civil(year: int, month: int = 1, day: int = 1, hour: int = 0,
               minute: int = 0, second: int = 0, millisecond: float = 0) -> float:
    """
    Build an instant from calendar fields (UTC).

    Returns:
        float: Milliseconds since the Unix epoch
    """
    return float(
        days_from_civil(year, month, day) * MS_PER_DAY
        + hour * MS_PER_HOUR
        + minute * MS_PER_MINUTE
        + second * MS_PER_SECOND
        + millisecond
    )


def split_instant(ms: float) -> Tuple[int, int, int, int, int, int, float]:
    """
    Split an instant into UTC calendar fields.

    Args:
        ms: Milliseconds since the Unix epoch

    Returns:
        tuple: (year, month, day, hour, minute, second, millisecond)
    """
    ms = ensure_finite(ms)
    days = math.floor(ms / MS_PER_DAY)
    remainder = ms - days * MS_PER_DAY
    whole = int(remainder)
    hour, whole = divmod(whole, MS_PER_HOUR)
    minute, whole = divmod(whole, MS_PER_MINUTE)
    second, millis = divmod(whole, MS_PER_SECOND)
    year, month, day = civil_from_days(days)
    return (year, month, day, hour, minute, second, millis + (remainder - int(remainder)))


def year_of(ms: float) -> int:
    """Get the UTC calendar year of an instant."""
    return civil_from_days(math.floor(ensure_finite(ms) / MS_PER_DAY))[0]


def add_months(ms: float, months: int) -> float:
    """
    Shift an instant by whole calendar months.

    The day of month is clamped to the length of the target month, so
    January 31 plus one month is the last day of February.

    Args:
        ms: Milliseconds since the Unix epoch
        months: Number of months to add (negative to subtract)

    Returns:
        float: Shifted instant in milliseconds
    """
    year, month, day, hour, minute, second, millis = split_instant(ms)
    month_index = year * 12 + (month - 1) + months
    new_year, new_month = divmod(month_index, 12)
    new_month += 1
    day = min(day, days_in_month(new_year, new_month))
    return from_civil(new_year, new_month, day, hour, minute, second, millis)


def ensure_finite(value) -> float:
    """
    Validate that a numeric instant is finite.

    Raises:
        OutOfRangeInput: If the value is NaN or infinite
    """
    value = float(value)
    if not math.isfinite(value):
        raise OutOfRangeInput("Instant must be a finite number", value)
    return value


def to_ms(value: Instant) -> float:
    """
    Convert a datetime, date or numeric instant to epoch milliseconds.

    Naive datetimes are taken as UTC. Aware datetimes are converted from their
    local fields, so offsets at the edges of the datetime range still map to
    an instant. Numbers are taken as milliseconds since the Unix epoch.

    Args:
        value: Instant to convert

    Returns:
        float: Milliseconds since the Unix epoch

    Raises:
        OutOfRangeInput: If a numeric value is NaN or infinite
        InvalidInstant: If the value is not an instant at all
    """
    if isinstance(value, datetime.datetime):
        local_ms = from_civil(
            value.year, value.month, value.day,
            value.hour, value.minute, value.second,
            value.microsecond / 1000.0,
        )
        offset = value.utcoffset()
        if offset is None:
            return local_ms
        return local_ms - offset.total_seconds() * MS_PER_SECOND

    if isinstance(value, datetime.date):
        return from_civil(value.year, value.month, value.day)

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInstant(f"Unsupported instant type: {type(value).__name__}", value)

    return ensure_finite(value)


def to_datetime(ms: float) -> datetime.datetime:
    """
    Convert epoch milliseconds to a timezone-aware UTC datetime.

    Raises:
        OutOfRangeInput: If the instant is outside years 1..9999
    """
    ms = ensure_finite(ms)
    year, month, day, hour, minute, second, millis = split_instant(ms)
    if not datetime.MINYEAR <= year <= datetime.MAXYEAR:
        raise OutOfRangeInput(f"Year {year} cannot be represented as a datetime", ms)
    base = datetime.datetime(year, month, day, hour, minute, second, tzinfo=datetime.timezone.utc)
    try:
        # rounding may carry into the next second
        return base + datetime.timedelta(microseconds=int(round(millis * 1000)))
    except OverflowError:
        raise OutOfRangeInput("Instant cannot be represented as a datetime", ms)


def now_ms() -> float:
    """Get the current time as epoch milliseconds."""
    return to_ms(datetime.datetime.now(datetime.timezone.utc))


EARLIEST_DATETIME = datetime.datetime(datetime.MINYEAR, 1, 1, tzinfo=datetime.timezone.utc)
EARLIEST_MS = to_ms(EARLIEST_DATETIME)
