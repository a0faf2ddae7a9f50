# utils.py
# Helper functions for clock arithmetic, formatting, and logging setup

import datetime
import logging
import re
from typing import Optional, Tuple

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

# Import configuration constants
from config import TIME_INCREMENT_MINUTES, LOG_FILE_PATH

CLOCK_PATTERN = re.compile(r'^(\d{1,2}):(\d{2})$')


# --- Logging Setup ---
def setup_logging():
    """Configures basic file logging."""
    logging.basicConfig(
        level=logging.DEBUG,
        format='%(asctime)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
        filename=LOG_FILE_PATH,
        filemode='a'
    )
    logging.info("--- Logging initialized ---")


# --- Clock Arithmetic ---
def clock_to_minutes(value: str) -> int:
    """Converts an HH:MM string into minutes since midnight.

    Raises ValueError when the string is not a valid 24-hour clock time.
    """
    match = CLOCK_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Not an HH:MM time: {value!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Time out of range: {value!r}")
    return hour * 60 + minute


def minutes_between(start: str, end: str) -> int:
    """Minutes from start to end. Negative when end is earlier than start."""
    return clock_to_minutes(end) - clock_to_minutes(start)


def validate_clock_format(value: str) -> bool:
    """Check if string matches HH:MM format."""
    try:
        clock_to_minutes(value)
        return True
    except ValueError:
        return False


def snap_time_to_interval(dt: datetime.datetime, interval_minutes: int = TIME_INCREMENT_MINUTES) -> datetime.datetime:
    """Rounds a datetime object down to the nearest specified minute interval."""
    if not isinstance(dt, datetime.datetime):
        return datetime.datetime.now()  # Fallback
    if interval_minutes <= 0:
        return dt

    discard = datetime.timedelta(minutes=dt.minute % interval_minutes,
                                 seconds=dt.second,
                                 microseconds=dt.microsecond)
    return dt - discard


# --- Formatting ---
def format_clock(dt: datetime.datetime) -> str:
    """Formats the wall-clock part of a datetime as HH:MM."""
    if not isinstance(dt, datetime.datetime):
        return ""
    return dt.strftime('%H:%M')


def format_hours(minutes: float) -> str:
    return f"{minutes / 60:.2f}"


def format_elapsed(seconds: int) -> str:
    """Formats a number of seconds as HH:MM:SS."""
    sign = "-" if seconds < 0 else ""
    hours, rest = divmod(abs(int(seconds)), 3600)
    mins, secs = divmod(rest, 60)
    return f"{sign}{hours:02d}:{mins:02d}:{secs:02d}"


# --- Dates ---
def normalize_date(value: str) -> str:
    """Parses a user-typed date and returns it as YYYY-MM-DD, or "" if it can't be read."""
    if not isinstance(value, str) or not value.strip():
        return ""
    try:
        return date_parser.parse(value.strip(), yearfirst=True).date().isoformat()
    except (ValueError, OverflowError):
        return ""


def month_range(year: int, month: int) -> Tuple[datetime.date, datetime.date]:
    """First day of the month and first day of the following month."""
    first = datetime.date(year, month, 1)
    return first, first + relativedelta(months=1)


def parse_date_string(date_str: str) -> Optional[datetime.date]:
    """Parses a YYYY-MM-DD string into a date object."""
    try:
        return datetime.datetime.strptime(date_str, '%Y-%m-%d').date()
    except (ValueError, TypeError):
        return None
