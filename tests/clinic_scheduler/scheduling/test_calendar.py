from datetime import date, datetime

import pytest

from clinic_scheduler.scheduling.calendar import (
    at_minutes,
    day_key_of,
    format_minutes,
    overlaps,
    parse_iso_date,
    to_minutes,
)
from clinic_scheduler.scheduling.errors import TimeFormatError


@pytest.mark.parametrize(
    ('day', 'expected_key'),
    [
        (date(2026, 1, 4), 'sunday'),
        (date(2026, 1, 5), 'monday'),
        (date(2026, 1, 7), 'wednesday'),
        (date(2026, 1, 10), 'saturday'),
    ],
)
def test_day_key_of_uses_local_weekday(day: date, expected_key: str) -> None:
    assert day_key_of(day) == expected_key


@pytest.mark.parametrize(
    ('value', 'expected_minutes'),
    [('00:00', 0), ('09:30', 570), ('17:00', 1020), ('23:59', 1439)],
)
def test_to_minutes_parses_zero_padded_times(value: str, expected_minutes: int) -> None:
    assert to_minutes(value) == expected_minutes


@pytest.mark.parametrize('value', ['9:00', '24:00', '12:60', '0900', '', ' 09:00', '09:00:00', None, 900])
def test_to_minutes_rejects_malformed_times(value) -> None:
    with pytest.raises(TimeFormatError):
        to_minutes(value)


def test_time_format_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        to_minutes('noon')


def test_format_minutes_round_trips_clock_times() -> None:
    assert format_minutes(0) == '00:00'
    assert format_minutes(545) == '09:05'
    assert to_minutes(format_minutes(1439)) == 1439


def test_format_minutes_rejects_values_outside_the_day() -> None:
    with pytest.raises(ValueError):
        format_minutes(1440)


def test_parse_iso_date_accepts_strings_and_dates() -> None:
    assert parse_iso_date('2026-01-07') == date(2026, 1, 7)
    assert parse_iso_date(date(2026, 1, 7)) == date(2026, 1, 7)
    assert parse_iso_date(datetime(2026, 1, 7, 15, 30)) == date(2026, 1, 7)


@pytest.mark.parametrize('value', ['2026-1-7', '2026-02-30', '20260107', '07/01/2026', 'tomorrow', None])
def test_parse_iso_date_rejects_malformed_dates(value) -> None:
    with pytest.raises(TimeFormatError):
        parse_iso_date(value)


def test_at_minutes_builds_wall_clock_datetime() -> None:
    assert at_minutes(date(2026, 1, 5), 570) == datetime(2026, 1, 5, 9, 30)


@pytest.mark.parametrize(
    ('interval_a', 'interval_b', 'expected'),
    [
        ((540, 570), (570, 600), False),
        ((570, 600), (540, 570), False),
        ((540, 600), (570, 630), True),
        ((540, 660), (570, 600), True),
        ((540, 570), (600, 630), False),
        ((540, 570), (540, 570), True),
    ],
)
def test_overlaps_uses_half_open_intervals(interval_a, interval_b, expected: bool) -> None:
    assert overlaps(*interval_a, *interval_b) is expected
