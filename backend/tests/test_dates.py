"""Local calendar helpers: parsing never shifts the day, malformed input yields None."""
from datetime import date

import pytest

from arenabook.utils.dates import (
    add_years,
    format_date,
    format_hhmm,
    is_weekend,
    iter_days,
    parse_hhmm,
    parse_local_date,
    weekday_index,
    weekday_key,
    weekday_name,
)


class TestParseLocalDate:
    def test_valid_date(self):
        assert parse_local_date("2024-06-10") == date(2024, 6, 10)

    @pytest.mark.parametrize("value", [None, "", "2024-6-10", "10/06/2024", "2024-06-10T00:00", "abcd-ef-gh"])
    def test_malformed_shape_is_none(self, value):
        assert parse_local_date(value) is None

    def test_impossible_calendar_date_is_none(self):
        assert parse_local_date("2024-02-30") is None
        assert parse_local_date("2023-13-01") is None

    def test_round_trip_format(self):
        assert format_date(parse_local_date("2024-01-05")) == "2024-01-05"


class TestWeekdays:
    def test_sunday_is_zero_saturday_is_six(self):
        assert weekday_index(date(2024, 6, 9)) == 0
        assert weekday_index(date(2024, 6, 10)) == 1
        assert weekday_index(date(2024, 6, 15)) == 6

    def test_keys_and_names(self):
        assert weekday_key(date(2024, 6, 5)) == "wed"
        assert weekday_name(date(2024, 6, 5)) == "Wednesday"

    def test_weekend(self):
        assert is_weekend(date(2024, 6, 8))
        assert is_weekend(date(2024, 6, 9))
        assert not is_weekend(date(2024, 6, 10))


class TestDateArithmetic:
    def test_add_years_leap_day_falls_back(self):
        assert add_years(date(2024, 2, 29), 1) == date(2025, 2, 28)
        assert add_years(date(2024, 6, 3), 1) == date(2025, 6, 3)

    def test_iter_days_inclusive(self):
        days = list(iter_days(date(2024, 6, 29), date(2024, 7, 1)))
        assert days == [date(2024, 6, 29), date(2024, 6, 30), date(2024, 7, 1)]

    def test_iter_days_empty_when_reversed(self):
        assert list(iter_days(date(2024, 7, 1), date(2024, 6, 30))) == []


class TestWallClock:
    def test_parse_hhmm(self):
        assert parse_hhmm("00:00") == 0
        assert parse_hhmm("13:45") == 13 * 60 + 45
        assert parse_hhmm(" 08:30 ") == 510

    @pytest.mark.parametrize("value", ["", "8:00", "24:00", "12:60", "noon", "12-00"])
    def test_parse_hhmm_rejects(self, value):
        with pytest.raises(ValueError):
            parse_hhmm(value)

    def test_format_hhmm_wraps_midnight(self):
        assert format_hhmm(9 * 60 + 5) == "09:05"
        assert format_hhmm(24 * 60 + 30) == "00:30"
