"""WindowScheduler: steps a fixed-width window across the global range.

The n-th call to advance() yields
``[global_start + n·width, global_start + (n+1)·width)``.

Each call advances exactly once.  The scheduler never looks at event
timestamps, so a quiet period longer than one window makes the window
lag behind elapsed time until further events push it forward.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from quake_timelapse.domain.window import Window

logger = logging.getLogger(__name__)


class WindowScheduler:
    """Owns the current Window and advances it one width at a time.

    Args:
        global_start: Start of the first window.
        width: Fixed window width; must be positive.
    """

    def __init__(self, global_start: datetime, width: timedelta) -> None:
        if width <= timedelta(0):
            raise ValueError("window width must be positive")
        self._global_start = global_start
        self._width = width
        self._advances = 0
        self._current = Window(start=global_start, end=global_start + width)

    @classmethod
    def from_range(cls, global_start: datetime, global_end: datetime, window_count: int) -> WindowScheduler:
        """Split ``[global_start, global_end)`` into *window_count* equal windows."""
        if window_count <= 0:
            raise ValueError("window_count must be positive")
        return cls(global_start, (global_end - global_start) / window_count)

    @property
    def current(self) -> Window:
        return self._current

    @property
    def width(self) -> timedelta:
        return self._width

    @property
    def advances(self) -> int:
        """How many times advance() has been called."""
        return self._advances

    def advance(self) -> Window:
        """Shift the current window forward by one width and return it."""
        self._advances += 1
        # Recomputed from the origin so repeated shifts never accumulate drift
        start = self._global_start + self._width * self._advances
        self._current = Window(start=start, end=start + self._width)
        logger.debug("Advanced to window %d starting %s", self._advances, start.isoformat())
        return self._current
