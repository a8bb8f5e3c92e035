"""In-memory set of fading markers with per-frame decay and eviction.

Design notes:
    - The tracker exclusively owns its VisualEntity objects.  All mutation
      goes through add() and decay().
    - decay() is a single pass: every marker is aged, then expired markers
      are dropped by rebuilding the collection, so eviction can never skip
      a neighbour.
    - Alpha is not clamped here; that is the renderer's concern.
"""

from __future__ import annotations

import logging

from quake_timelapse.domain.entity import VisualEntity
from quake_timelapse.domain.event import Event

logger = logging.getLogger(__name__)


class EntityTracker:
    """Owns the active markers.

    Args:
        duration: Number of decay steps a marker survives; it is removed on
             the first step where its age exceeds this value.
        decay_rate: Per-step alpha reduction.  Defaults to ``1 / duration``.
    """

    def __init__(self, duration: int = 12, decay_rate: float | None = None) -> None:
        if duration <= 0:
            raise ValueError("duration must be positive")
        self._duration = duration
        self._decay_rate = decay_rate if decay_rate is not None else 1.0 / duration
        self._entities: list[VisualEntity] = []

    # ── Public API ───────────────────────────────────────────────────────

    def add(self, event: Event, position: tuple[float, float]) -> VisualEntity:
        """Create a full-opacity marker for *event* at *position*.  No deduplication."""
        entity = VisualEntity.from_event(event, position)
        self._entities.append(entity)
        return entity

    def decay(self) -> int:
        """Age every marker by one step and evict expired ones.

        Returns the number of evicted markers.
        """
        for entity in self._entities:
            entity.decay(self._decay_rate)
        survivors = [e for e in self._entities if not e.is_expired(self._duration)]
        evicted = len(self._entities) - len(survivors)
        self._entities = survivors
        if evicted:
            logger.debug("Evicted %d expired marker(s), %d remain", evicted, len(survivors))
        return evicted

    @property
    def entities(self) -> list[VisualEntity]:
        """Read-only snapshot of the active markers, in insertion order."""
        return list(self._entities)

    @property
    def duration(self) -> int:
        return self._duration

    @property
    def decay_rate(self) -> float:
        return self._decay_rate

    def __len__(self) -> int:
        return len(self._entities)
