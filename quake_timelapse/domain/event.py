"""Canonical Event model: one row of the earthquake catalog.

An Event is immutable and validated at the ingestion boundary so that
downstream code (tracker, coordinator, renderer) never has to re-check
field types.  Only the five leading catalog columns are modelled.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from quake_timelapse.foundation.clock import as_utc


class Event(BaseModel):
    """A single geophysical event as delivered by the event source."""

    timestamp: datetime = Field(..., description="When the event occurred (UTC-aware)")
    latitude: float = Field(..., description="Decimal degrees, north positive")
    longitude: float = Field(..., description="Decimal degrees, east positive")
    depth: float = Field(..., description="Depth in kilometres")
    magnitude: float = Field(..., description="Reported magnitude")

    model_config = {"frozen": True, "allow_inf_nan": False}

    @field_validator("timestamp")
    @classmethod
    def timestamp_must_be_aware(cls, v: datetime) -> datetime:
        # Catalog exports occasionally omit the zone designator
        return as_utc(v)
