"""Wall-clock time helpers shared by the resolver, generator and booking path.

All dates and times are local wall-clock values; nothing here converts
between time zones.
"""

import re
from datetime import date, datetime, timedelta

from clinic_scheduler.scheduling.errors import TimeFormatError

WEEKDAY_KEYS = ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')
MINUTES_PER_DAY = 24 * 60

_CLOCK_TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):([0-5]\d)$')
_ISO_DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def day_key_of(day: date) -> str:
    return WEEKDAY_KEYS[day.weekday()]


def to_minutes(value: str) -> int:
    """Parse a zero-padded 24-hour ``HH:MM`` string into minutes past midnight."""
    if not isinstance(value, str):
        raise TimeFormatError(f'Expected a time string in HH:MM format, got {value!r}.')

    match = _CLOCK_TIME_PATTERN.match(value)
    if not match:
        raise TimeFormatError(f'Invalid time {value!r}; expected zero-padded HH:MM.')

    return int(match.group(1)) * 60 + int(match.group(2))


def format_minutes(minutes: int) -> str:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f'{minutes} is not a minute of the day.')
    return f'{minutes // 60:02d}:{minutes % 60:02d}'


def parse_iso_date(value: date | str) -> date:
    # datetime is a date subclass; callers pass calendar days only
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if not isinstance(value, str) or not _ISO_DATE_PATTERN.match(value):
        raise TimeFormatError(f'Invalid date {value!r}; expected YYYY-MM-DD.')

    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise TimeFormatError(f'Invalid date {value!r}; expected YYYY-MM-DD.') from exc


def at_minutes(day: date, minutes: int) -> datetime:
    return datetime.combine(day, datetime.min.time()) + timedelta(minutes=minutes)


def minutes_of(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


def overlaps(start_a, end_a, start_b, end_b) -> bool:
    """Half-open interval intersection; touching intervals do not overlap."""
    return start_a < end_b and start_b < end_a
