"""VisualEntity: the fading on-screen marker derived from one Event.

Lifecycle:  created (alpha=1.0, age=0) → decayed once per closed window → evicted
    - Each decay step lowers alpha by a fixed rate and ages the marker by one frame.
    - The tracker evicts a marker on the first step where ``age > duration``.

Entities are mutated *only* by the EntityTracker that owns them.
"""

from __future__ import annotations

from quake_timelapse.domain.event import Event


class VisualEntity:
    """Positioned, radius-bearing marker with decaying opacity."""

    __slots__ = ("x", "y", "radius", "alpha", "age")

    def __init__(self, x: float, y: float, radius: float, alpha: float = 1.0, age: int = 0) -> None:
        self.x = x
        self.y = y
        self.radius = radius
        self.alpha = alpha
        self.age = age

    @classmethod
    def from_event(cls, event: Event, position: tuple[float, float]) -> VisualEntity:
        """Build a fresh marker for *event* at an already-projected screen position."""
        x, y = position
        return cls(x=x, y=y, radius=event.magnitude * event.magnitude)

    def decay(self, rate: float) -> None:
        """Apply one decay step.  Alpha is not clamped here."""
        self.alpha -= rate
        self.age += 1

    def is_expired(self, duration: int) -> bool:
        return self.age > duration

    def __repr__(self) -> str:
        return (
            f"VisualEntity(x={self.x:.1f}, y={self.y:.1f}, radius={self.radius:.2f}, "
            f"alpha={self.alpha:.3f}, age={self.age})"
        )
