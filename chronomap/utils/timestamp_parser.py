"""
Timestamp Parser Utility
========================

This module normalizes the date values found in event records to timezone-aware
UTC datetimes. Unlike a best-effort parser, every failure raises
TimestampParseError so that a bad date never reaches the scale arithmetic.

Supported Formats:
- Python datetime and date objects
- Epoch milliseconds (int or float)
- ISO 8601 strings (with or without offset, trailing 'Z' accepted)
- Plain 'YYYY-MM-DD' and 'YYYY-MM-DD HH:MM[:SS]' strings

Author: chronomap
Version: 1.0
"""

import datetime
import logging
import math
from typing import Iterable, Optional, Tuple, Union

from .civil_time import to_datetime
from .error_handler import InvalidInstant, OutOfRangeInput

# Configure logger
logger = logging.getLogger(__name__)


class TimestampParseError(InvalidInstant):
    """Exception raised when timestamp parsing fails."""
    pass


class TimestampParser:
    """
    Parser that turns event date values into UTC datetimes.

    Numeric values are interpreted as milliseconds since the Unix epoch,
    matching how browser-side event feeds serialize dates.
    """

    FALLBACK_FORMATS = [
        "%Y-%m-%dT%H:%M:%S.%fZ",      # 2023-11-13T16:00:00.000Z
        "%Y-%m-%dT%H:%M:%SZ",          # 2023-11-13T16:00:00Z
        "%Y-%m-%d %H:%M:%S.%f",        # 2023-11-13 16:00:00.000
        "%Y-%m-%d %H:%M:%S",           # 2023-11-13 16:00:00
        "%Y-%m-%d %H:%M",              # 2023-11-13 16:00
        "%Y-%m-%d",                    # 2023-11-13
        "%Y/%m/%d",                    # 2023/11/13
    ]

    @staticmethod
    def parse_timestamp(timestamp: Union[str, int, float, datetime.date, datetime.datetime]) -> datetime.datetime:
        """
        Parse a timestamp from various formats and return a UTC datetime.

        Args:
            timestamp: Timestamp as string, epoch milliseconds, date or datetime

        Returns:
            datetime.datetime: Parsed timestamp, timezone-aware in UTC

        Raises:
            TimestampParseError: If the value cannot be parsed into a valid instant

        Examples:
            >>> TimestampParser.parse_timestamp("2021-01-01")
            datetime.datetime(2021, 1, 1, 0, 0, tzinfo=datetime.timezone.utc)

            >>> TimestampParser.parse_timestamp(1609459200000)
            datetime.datetime(2021, 1, 1, 0, 0, tzinfo=datetime.timezone.utc)
        """
        if timestamp is None:
            raise TimestampParseError("Missing timestamp", timestamp)

        if isinstance(timestamp, datetime.datetime):
            return TimestampParser._ensure_utc(timestamp)

        if isinstance(timestamp, datetime.date):
            return datetime.datetime(timestamp.year, timestamp.month, timestamp.day,
                                     tzinfo=datetime.timezone.utc)

        if isinstance(timestamp, bool):
            raise TimestampParseError("Boolean is not a timestamp", timestamp)

        if isinstance(timestamp, (int, float)):
            return TimestampParser._parse_epoch_ms(timestamp)

        if isinstance(timestamp, str):
            if not timestamp.strip():
                raise TimestampParseError("Empty timestamp string", timestamp)
            return TimestampParser._parse_string_timestamp(timestamp)

        raise TimestampParseError(f"Unknown timestamp type: {type(timestamp).__name__}", timestamp)

    @staticmethod
    def _parse_epoch_ms(value: Union[int, float]) -> datetime.datetime:
        """
        Parse epoch milliseconds.

        Args:
            value: Milliseconds since January 1, 1970

        Returns:
            datetime.datetime: Parsed timestamp in UTC
        """
        if not math.isfinite(value):
            raise TimestampParseError("Timestamp must be finite", value)
        try:
            return to_datetime(value)
        except OutOfRangeInput as e:
            raise TimestampParseError(f"Epoch milliseconds out of range: {e.message}", value)

    @staticmethod
    def _parse_string_timestamp(timestamp_str: str) -> datetime.datetime:
        """
        Parse string timestamp in various formats.

        Tries datetime.fromisoformat() first and falls back to the explicit
        format list, then to a numeric string.
        """
        timestamp_str = timestamp_str.strip()

        try:
            dt = datetime.datetime.fromisoformat(timestamp_str.replace('Z', '+00:00'))
            return TimestampParser._ensure_utc(dt)
        except ValueError:
            pass

        for fmt in TimestampParser.FALLBACK_FORMATS:
            try:
                dt = datetime.datetime.strptime(timestamp_str, fmt)
            except ValueError:
                continue
            return TimestampParser._ensure_utc(dt)

        try:
            numeric_value = float(timestamp_str)
        except ValueError:
            logger.debug(f"Failed to parse string timestamp: {timestamp_str}")
            raise TimestampParseError(f"Unrecognized timestamp format: {timestamp_str!r}", timestamp_str)

        return TimestampParser._parse_epoch_ms(numeric_value)

    @staticmethod
    def _ensure_utc(dt: datetime.datetime) -> datetime.datetime:
        """
        Ensure datetime object is timezone-aware in UTC.

        Naive datetimes are assumed to already be in UTC.

        Raises:
            TimestampParseError: If the UTC value falls outside the datetime range
        """
        if dt.tzinfo is None:
            return dt.replace(tzinfo=datetime.timezone.utc)
        try:
            return dt.astimezone(datetime.timezone.utc)
        except OverflowError:
            raise TimestampParseError(f"Timestamp is outside the supported range in UTC: {dt.isoformat()}", dt)

    @staticmethod
    def format_timestamp(dt: Optional[datetime.datetime], format_str: str = "%Y-%m-%d %H:%M:%S") -> str:
        """
        Format datetime object as string.

        Returns:
            str: Formatted timestamp string, or empty string if dt is None
        """
        if dt is None:
            return ""

        return dt.strftime(format_str)

    @staticmethod
    def get_time_bounds(timestamps: Iterable) -> Tuple[Optional[datetime.datetime], Optional[datetime.datetime]]:
        """
        Get earliest and latest timestamps from a list.

        Args:
            timestamps: Timestamps in any supported format

        Returns:
            tuple: (earliest, latest) or (None, None) if the list is empty

        Raises:
            TimestampParseError: If any timestamp is invalid
        """
        parsed = [TimestampParser.parse_timestamp(ts) for ts in timestamps]

        if not parsed:
            return (None, None)

        return (min(parsed), max(parsed))
