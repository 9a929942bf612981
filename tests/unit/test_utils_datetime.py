"""
Tests for refit/utils/datetime_utils.py

Covers UTC normalisation, ISO parsing, local-time helpers and day arithmetic.
"""

from datetime import date, datetime, timedelta

import pytest
import pytz

from refit.utils.datetime_utils import (
    days_between,
    end_of_day,
    ensure_utc,
    get_local_now,
    get_local_tz,
    is_overdue,
    local_today,
    parse_iso,
    start_of_day,
    to_iso,
    utc_date_key,
    utc_now,
    utc_today,
)


class TestEnsureUtc:
    """Tests for ensure_utc."""

    def test_none_returns_none(self):
        assert ensure_utc(None) is None

    def test_naive_is_taken_as_utc(self):
        result = ensure_utc(datetime(2024, 6, 15, 10, 0))
        assert result == datetime(2024, 6, 15, 10, 0, tzinfo=pytz.UTC)

    def test_aware_is_converted(self):
        rome = pytz.timezone("Europe/Rome").localize(datetime(2024, 6, 15, 12, 0))
        assert ensure_utc(rome) == datetime(2024, 6, 15, 10, 0, tzinfo=pytz.UTC)

    def test_utc_now_is_aware(self):
        assert utc_now().tzinfo is not None


class TestParseIso:
    """Tests for parse_iso."""

    @pytest.mark.parametrize("text", [
        "2024-06-15T10:00:00Z",
        "2024-06-15T10:00:00.000Z",
        "2024-06-15T12:00:00+02:00",
        "2024-06-15T10:00:00",
    ])
    def test_timestamps(self, text):
        assert parse_iso(text) == datetime(2024, 6, 15, 10, 0, tzinfo=pytz.UTC)

    def test_date_only_is_midnight_utc(self):
        assert parse_iso("2024-06-15") == datetime(2024, 6, 15, tzinfo=pytz.UTC)
        assert parse_iso(date(2024, 6, 15)) == datetime(2024, 6, 15, tzinfo=pytz.UTC)

    @pytest.mark.parametrize("value", [None, "", "not a date", "2024-13-45"])
    def test_unparseable_gives_none(self, value):
        assert parse_iso(value) is None

    def test_to_iso(self):
        assert to_iso(datetime(2024, 6, 15, 10, 0)) == "2024-06-15T10:00:00+00:00"
        assert to_iso(None) is None


class TestLocalTime:
    """Tests for the local timezone helpers."""

    def test_local_tz(self):
        assert isinstance(get_local_tz(), pytz.BaseTzInfo)

    def test_local_now_is_naive_wall_clock(self):
        local = get_local_now(datetime(2024, 6, 15, 10, 0, tzinfo=pytz.UTC))
        assert local.tzinfo is None
        assert local == datetime(2024, 6, 15, 12, 0)

    def test_local_today_can_differ_from_utc_today(self):
        late = datetime(2024, 6, 15, 23, 30, tzinfo=pytz.UTC)
        assert utc_today(late) == date(2024, 6, 15)
        assert local_today(late) == date(2024, 6, 16)


class TestDayArithmetic:
    """Tests for day boundaries and differences."""

    def test_day_bounds(self):
        dt = datetime(2024, 6, 15, 10, 30, tzinfo=pytz.UTC)
        assert start_of_day(dt) == datetime(2024, 6, 15, tzinfo=pytz.UTC)
        assert end_of_day(dt).hour == 23
        assert end_of_day(dt).microsecond == 999999

    def test_utc_date_key(self):
        assert utc_date_key(datetime(2024, 6, 15, 23, 30, tzinfo=pytz.timezone("Etc/GMT+2"))) == "2024-06-16"

    @pytest.mark.parametrize("hours,days", [(0, 0), (23, 0), (24, 1), (47, 1), (-25, -1)])
    def test_days_between_truncates(self, hours, days):
        start = datetime(2024, 6, 15, tzinfo=pytz.UTC)
        assert days_between(start, start + timedelta(hours=hours)) == days

    def test_is_overdue(self):
        now = datetime(2024, 6, 15, 10, 0, tzinfo=pytz.UTC)
        assert is_overdue(now - timedelta(minutes=1), now)
        assert not is_overdue(now + timedelta(minutes=1), now)
        assert not is_overdue(None, now)
