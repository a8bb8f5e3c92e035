"""Tests for clock helpers."""

from datetime import datetime, timedelta, timezone

from quake_timelapse.foundation.clock import add_months, as_utc, isoformat_z


class TestAddMonths:
    def test_simple_step(self) -> None:
        assert add_months(datetime(1980, 1, 1), 1) == datetime(1980, 2, 1)

    def test_year_rollover(self) -> None:
        assert add_months(datetime(1980, 12, 15), 1) == datetime(1981, 1, 15)

    def test_day_is_clamped_to_month_length(self) -> None:
        assert add_months(datetime(1980, 1, 31), 1) == datetime(1980, 2, 29)

    def test_keeps_time_and_zone(self) -> None:
        start = datetime(1980, 1, 1, 6, 30, tzinfo=timezone.utc)
        assert add_months(start, 14) == datetime(1981, 3, 1, 6, 30, tzinfo=timezone.utc)


class TestFormatting:
    def test_isoformat_z(self) -> None:
        assert isoformat_z(datetime(1980, 1, 1, 6, 17, 45, 250000, tzinfo=timezone.utc)) == "1980-01-01T06:17:45.250Z"

    def test_as_utc_converts_offsets(self) -> None:
        eastern = datetime(1980, 1, 1, 1, 0, tzinfo=timezone(timedelta(hours=1)))
        assert as_utc(eastern) == datetime(1980, 1, 1, 0, 0, tzinfo=timezone.utc)
        assert as_utc(eastern).utcoffset() == timedelta(0)
