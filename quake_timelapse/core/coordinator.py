"""FrameCoordinator: turns a sorted event stream into numbered frames.

Per event:
    1. If the event lies past the current window's end, the window closes:
       a. the frame index names the artifact;
       b. an existing artifact is skipped (resume), otherwise the current
          markers are rendered with the window start as caption and persisted;
       c. markers decay;
       d. the frame index and the window advance once.
    2. The event is projected and added to the tracker.

Resume works by replaying the whole stream: in-memory decay state is
rebuilt from scratch while already-persisted frames are not re-rendered.
A trailing, partially filled window is never flushed.

Nothing here is concurrent.  The next event is not consumed until the
previous window's emit/skip decision and decay step have completed.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Iterable, Protocol

from quake_timelapse.core.projection import CoordinateMapper
from quake_timelapse.core.scheduler import WindowScheduler
from quake_timelapse.domain.entity import VisualEntity
from quake_timelapse.domain.event import Event
from quake_timelapse.domain.window import Window
from quake_timelapse.store.entity_tracker import EntityTracker
from quake_timelapse.store.frame_store import FrameStore, RenderFailure

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    def render(self, entities: Iterable[VisualEntity], label: str) -> bytes:
        ...


class CoordinatorState(str, Enum):
    """Explicit states of the frame state machine."""

    AWAITING_EVENT = "awaiting_event"
    WINDOW_CLOSE_CHECK = "window_close_check"
    EMIT_OR_SKIP = "emit_or_skip"
    ADVANCE_AND_DECAY = "advance_and_decay"
    DONE = "done"


class FrameOutcome(str, Enum):
    RENDERED = "rendered"
    SKIPPED = "skipped"


class RunSummary:
    """Progress counters for one coordinator run.

    This is an observability object, not a control mechanism.
    """

    __slots__ = (
        "events_processed",
        "frames_rendered",
        "frames_skipped",
        "frame_index",
        "active_entities",
        "window_start",
        "last_event_at",
        "exhausted_early",
    )

    def __init__(self) -> None:
        self.events_processed: int = 0
        self.frames_rendered: int = 0
        self.frames_skipped: int = 0
        self.frame_index: int = 0
        self.active_entities: int = 0
        self.window_start: datetime | None = None
        self.last_event_at: datetime | None = None
        self.exhausted_early: bool = False

    @property
    def frames_closed(self) -> int:
        return self.frames_rendered + self.frames_skipped

    def to_dict(self) -> dict:
        return {
            "events_processed": self.events_processed,
            "frames_rendered": self.frames_rendered,
            "frames_skipped": self.frames_skipped,
            "frame_index": self.frame_index,
            "active_entities": self.active_entities,
            "window_start": self.window_start.isoformat() if self.window_start else None,
            "last_event_at": self.last_event_at.isoformat() if self.last_event_at else None,
            "exhausted_early": self.exhausted_early,
        }


class FrameCoordinator:
    """Single-pass state machine over a time-sorted event stream.

    Args:
        scheduler: Owns the current window.
        tracker: Owns the fading markers.
        mapper: Projects event coordinates onto the canvas.
        renderer: Produces encoded frame bytes from markers and a caption.
        frames: Artifact store used for the existence probe and persistence.
        global_end: End of the configured range; used only to report a
             source that ran out early.
        catch_up_gaps: When True, an event more than one window ahead closes
             every window in between (one frame each).  Off by default, so a
             single boundary check advances exactly once.
    """

    def __init__(
        self,
        scheduler: WindowScheduler,
        tracker: EntityTracker,
        mapper: CoordinateMapper,
        renderer: Renderer,
        frames: FrameStore,
        *,
        global_end: datetime | None = None,
        catch_up_gaps: bool = False,
    ) -> None:
        self._scheduler = scheduler
        self._tracker = tracker
        self._mapper = mapper
        self._renderer = renderer
        self._frames = frames
        self._global_end = global_end
        self._catch_up_gaps = catch_up_gaps
        self._frame_index = 0
        self._state = CoordinatorState.AWAITING_EVENT
        self._summary = RunSummary()

    # ── Public API ───────────────────────────────────────────────────────

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def frame_index(self) -> int:
        return self._frame_index

    @property
    def window(self) -> Window:
        return self._scheduler.current

    @property
    def summary(self) -> RunSummary:
        self._summary.frame_index = self._frame_index
        self._summary.active_entities = len(self._tracker)
        self._summary.window_start = self._scheduler.current.start
        return self._summary

    def process(self, event: Event) -> list[FrameOutcome]:
        """Consume one event; return the outcome of every window it closed."""
        if self._state is CoordinatorState.DONE:
            raise RuntimeError("coordinator has already finished")

        self._summary.events_processed += 1
        outcomes: list[FrameOutcome] = []

        self._state = CoordinatorState.WINDOW_CLOSE_CHECK
        while self._scheduler.current.is_closed_by(event.timestamp):
            outcomes.append(self._close_window())
            if not self._catch_up_gaps:
                break

        self._tracker.add(event, self._mapper.map(event.longitude, event.latitude))
        self._summary.last_event_at = event.timestamp
        self._state = CoordinatorState.AWAITING_EVENT
        return outcomes

    def run(self, events: Iterable[Event]) -> RunSummary:
        """Drain *events* in order and return the final summary.

        Any exception aborts the run immediately; the partially filled
        trailing window is dropped either way.
        """
        for event in events:
            self.process(event)
        return self.finish()

    def finish(self) -> RunSummary:
        """Mark the stream as exhausted.  No trailing frame is emitted."""
        self._state = CoordinatorState.DONE
        summary = self.summary
        if self._global_end is not None and self._scheduler.current.end < self._global_end:
            summary.exhausted_early = True
            logger.info(
                "Event source ended before %s; last window starts %s",
                self._global_end.isoformat(),
                self._scheduler.current.start.isoformat(),
            )
        logger.info(
            "Run complete: %d event(s), %d frame(s) written, %d skipped",
            summary.events_processed,
            summary.frames_rendered,
            summary.frames_skipped,
        )
        return summary

    # ── Internals ────────────────────────────────────────────────────────

    def _close_window(self) -> FrameOutcome:
        self._state = CoordinatorState.EMIT_OR_SKIP
        outcome = self._emit_or_skip()

        self._state = CoordinatorState.ADVANCE_AND_DECAY
        self._tracker.decay()
        self._frame_index += 1
        self._scheduler.advance()
        self._state = CoordinatorState.WINDOW_CLOSE_CHECK
        return outcome

    def _emit_or_skip(self) -> FrameOutcome:
        index = self._frame_index
        path = self._frames.path_for(index)

        if self._frames.exists(index):
            self._summary.frames_skipped += 1
            logger.info(
                "Frame already exists: %s (events processed: %d)",
                path,
                self._summary.events_processed,
            )
            return FrameOutcome.SKIPPED

        label = self._scheduler.current.label
        try:
            data = self._renderer.render(self._tracker.entities, label)
        except RenderFailure:
            raise
        except Exception as exc:
            raise RenderFailure(index, str(exc)) from exc

        self._frames.write(index, data)
        self._summary.frames_rendered += 1
        logger.info(
            "Wrote frame to %s (events processed: %d, markers: %d)",
            path,
            self._summary.events_processed,
            len(self._tracker),
        )
        return FrameOutcome.RENDERED
