"""Window: a fixed-width time slice that buckets events for one frame."""

from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import BaseModel, Field, model_validator


class Window(BaseModel):
    """Immutable half-open interval ``[start, end)``."""

    start: datetime = Field(..., description="Inclusive lower bound (UTC-aware)")
    end: datetime = Field(..., description="Upper bound")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def end_must_follow_start(self) -> Window:
        if self.end <= self.start:
            raise ValueError("window end must be after window start")
        return self

    @property
    def width(self) -> timedelta:
        return self.end - self.start

    def is_closed_by(self, timestamp: datetime) -> bool:
        """True if an event at *timestamp* lies past this window's end."""
        return timestamp > self.end

    @property
    def label(self) -> str:
        """Human-readable window start, used as the on-image caption."""
        return self.start.strftime("%Y-%m-%d %H:%M:%S UTC")
