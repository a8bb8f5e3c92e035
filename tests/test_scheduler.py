"""Tests for the WindowScheduler and Window model."""

from datetime import datetime, timedelta, timezone

import pytest

from quake_timelapse.core.scheduler import WindowScheduler
from quake_timelapse.domain.window import Window

_START = datetime(1980, 1, 1, tzinfo=timezone.utc)
_WIDTH = timedelta(hours=4)


class TestWindow:
    def test_end_must_follow_start(self) -> None:
        with pytest.raises(Exception):
            Window(start=_START, end=_START)

    def test_closed_only_strictly_past_end(self) -> None:
        window = Window(start=_START, end=_START + _WIDTH)
        assert not window.is_closed_by(_START + _WIDTH)
        assert window.is_closed_by(_START + _WIDTH + timedelta(milliseconds=1))

    def test_label_is_window_start(self) -> None:
        window = Window(start=_START, end=_START + _WIDTH)
        assert window.label == "1980-01-01 00:00:00 UTC"

    def test_window_is_immutable(self) -> None:
        window = Window(start=_START, end=_START + _WIDTH)
        with pytest.raises(Exception):
            window.start = _START + _WIDTH


class TestWindowScheduler:
    def test_initial_window(self) -> None:
        scheduler = WindowScheduler(_START, _WIDTH)
        assert scheduler.current == Window(start=_START, end=_START + _WIDTH)
        assert scheduler.advances == 0

    def test_nth_advance_is_deterministic(self) -> None:
        scheduler = WindowScheduler(_START, _WIDTH)
        for n in range(1, 50):
            window = scheduler.advance()
            assert window.start == _START + n * _WIDTH
            assert window.end == _START + (n + 1) * _WIDTH

    def test_windows_are_contiguous_and_unique(self) -> None:
        scheduler = WindowScheduler(_START, _WIDTH)
        windows = [scheduler.current] + [scheduler.advance() for _ in range(10)]
        for prev, nxt in zip(windows, windows[1:]):
            assert prev.end == nxt.start
        assert len({w.start for w in windows}) == len(windows)

    def test_from_range_divides_evenly(self) -> None:
        scheduler = WindowScheduler.from_range(_START, _START + timedelta(days=1), 6)
        assert scheduler.width == _WIDTH

    def test_fractional_width_does_not_drift(self) -> None:
        end = _START + timedelta(days=1, milliseconds=7)
        scheduler = WindowScheduler.from_range(_START, end, 86400)
        for _ in range(5000):
            scheduler.advance()
        assert scheduler.current.start == _START + scheduler.width * 5000

    def test_rejects_non_positive_width(self) -> None:
        with pytest.raises(ValueError):
            WindowScheduler(_START, timedelta(0))

    def test_rejects_non_positive_window_count(self) -> None:
        with pytest.raises(ValueError):
            WindowScheduler.from_range(_START, _START + _WIDTH, 0)
