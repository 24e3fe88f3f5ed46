"""
Time Axis - Tick generation and tick label formatting for the timeline axis.

Tick intervals step through calendar units from one second up to multi-year
spans, picking the smallest interval that yields at most the requested
number of ticks. Labels follow the timeline convention:

- year 0 is rendered as "0000-MM-DD"
- dates in the current calendar year carry the time of day ("YYYY-MM-DD HH:MM")
- every other year is rendered as "YYYY-MM-DD"
"""

import math

from ..utils.civil_time import (
    MS_PER_DAY,
    MS_PER_HOUR,
    MS_PER_MINUTE,
    MS_PER_SECOND,
    add_months,
    from_civil,
    now_ms,
    split_instant,
    to_ms,
    year_of,
)

# Sunday 1970-01-04 relative to the epoch, used to align week ticks
WEEK_ALIGNMENT_MS = 3 * MS_PER_DAY

# (unit, step, approximate duration in ms)
TICK_INTERVALS = [
    ('second', 1, MS_PER_SECOND),
    ('second', 5, 5 * MS_PER_SECOND),
    ('second', 15, 15 * MS_PER_SECOND),
    ('second', 30, 30 * MS_PER_SECOND),
    ('minute', 1, MS_PER_MINUTE),
    ('minute', 5, 5 * MS_PER_MINUTE),
    ('minute', 15, 15 * MS_PER_MINUTE),
    ('minute', 30, 30 * MS_PER_MINUTE),
    ('hour', 1, MS_PER_HOUR),
    ('hour', 3, 3 * MS_PER_HOUR),
    ('hour', 6, 6 * MS_PER_HOUR),
    ('hour', 12, 12 * MS_PER_HOUR),
    ('day', 1, MS_PER_DAY),
    ('day', 2, 2 * MS_PER_DAY),
    ('week', 1, 7 * MS_PER_DAY),
    ('month', 1, 30 * MS_PER_DAY),
    ('month', 3, 90 * MS_PER_DAY),
    ('year', 1, 365 * MS_PER_DAY),
]

MS_PER_YEAR = 365.2425 * MS_PER_DAY

# Hard cap on generated ticks, guards against pathological count values
MAX_TICKS = 1000


def choose_interval(span_ms: float, count: int = 10):
    """
    Pick the tick interval for a visible span.

    Args:
        span_ms (float): Width of the visible window in milliseconds
        count (int): Approximate number of ticks wanted

    Returns:
        tuple: (unit, step) such as ('day', 2) or ('year', 50)
    """
    count = max(1, int(count))
    target = span_ms / count

    for unit, step, duration in TICK_INTERVALS:
        if duration >= target:
            return (unit, step)

    return ('year', _nice_year_step(target / MS_PER_YEAR))


def _nice_year_step(years: float) -> int:
    """Round a year count up to 1, 2 or 5 times a power of ten."""
    if years <= 1:
        return 1
    magnitude = 10 ** math.floor(math.log10(years))
    for multiple in (1, 2, 5, 10):
        if multiple * magnitude >= years:
            return int(multiple * magnitude)
    return int(10 * magnitude)


def tick_values(start_ms: float, end_ms: float, count: int = 10):
    """
    Generate calendar-aligned tick instants within [start_ms, end_ms].

    Args:
        start_ms (float): Window start in epoch milliseconds
        end_ms (float): Window end in epoch milliseconds
        count (int): Approximate number of ticks wanted

    Returns:
        list: Tick instants in epoch milliseconds, ascending
    """
    if end_ms < start_ms:
        start_ms, end_ms = end_ms, start_ms
    if end_ms == start_ms:
        return [start_ms]

    unit, step = choose_interval(end_ms - start_ms, count)

    if unit in ('second', 'minute', 'hour', 'day', 'week'):
        step_ms = {
            'second': MS_PER_SECOND,
            'minute': MS_PER_MINUTE,
            'hour': MS_PER_HOUR,
            'day': MS_PER_DAY,
            'week': 7 * MS_PER_DAY,
        }[unit] * step
        offset = WEEK_ALIGNMENT_MS if unit == 'week' else 0
        first = math.ceil((start_ms - offset) / step_ms) * step_ms + offset
        ticks = []
        value = first
        while value <= end_ms and len(ticks) < MAX_TICKS:
            ticks.append(float(value))
            value += step_ms
        return ticks

    if unit == 'month':
        year, month = split_instant(start_ms)[:2]
        month_index = year * 12 + (month - 1)
        month_index = -(-month_index // step) * step
        value = from_civil(month_index // 12, month_index % 12 + 1, 1)
        if value < start_ms:
            value = add_months(value, step)
        ticks = []
        while value <= end_ms and len(ticks) < MAX_TICKS:
            ticks.append(value)
            value = add_months(value, step)
        return ticks

    year = year_of(start_ms)
    year = -(-year // step) * step
    ticks = []
    value = from_civil(year)
    if value < start_ms:
        year += step
        value = from_civil(year)
    while value <= end_ms and len(ticks) < MAX_TICKS:
        ticks.append(value)
        year += step
        value = from_civil(year)
    return ticks


def format_tick(instant, now=None) -> str:
    """
    Format a tick instant as an axis label.

    Args:
        instant: Tick instant (datetime or epoch milliseconds)
        now: Reference instant deciding the current year (defaults to now)

    Returns:
        str: Formatted label, e.g. '0000-03-01', '1492-10-12' or '2026-10-19 14:30'
    """
    year, month, day, hour, minute = split_instant(to_ms(instant))[:5]
    current_year = year_of(now_ms() if now is None else to_ms(now))

    if year < 0:
        date_part = f"-{-year:04d}-{month:02d}-{day:02d}"
    else:
        date_part = f"{year:04d}-{month:02d}-{day:02d}"

    if year == current_year:
        return f"{date_part} {hour:02d}:{minute:02d}"
    return date_part


def axis_ticks(scale, count: int = 10, now=None):
    """
    Get labelled ticks for a scale's current domain.

    Args:
        scale: TimeScale (usually the effective scale)
        count (int): Approximate number of ticks wanted
        now: Reference instant for the current-year rule

    Returns:
        list: (instant_ms, pixel, label) tuples, ascending
    """
    reference = now_ms() if now is None else to_ms(now)
    return [
        (value, scale(value), format_tick(value, reference))
        for value in scale.ticks(count)
    ]
