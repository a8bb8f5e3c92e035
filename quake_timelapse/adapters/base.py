"""Abstract base for event sources.

An event source answers one question: "which catalog rows fall between
these two instants?"  It returns the rows as CSV text, header included,
sorted by time ascending.

Architectural rules:
    1. fetch() must not overlap ranges on its own; the caller steps ranges.
    2. fetch() returns text or raises; it never returns partial data silently.
    3. No source may parse rows into Events; that is the ingestion adapter's job.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class EventSource(ABC):
    """Base class for catalog providers."""

    @abstractmethod
    def fetch(self, start: datetime, end: datetime) -> str:
        """Return the CSV rows for ``[start, end)``, header first.

        Raises:
            SourceError: If the provider could not answer.
        """
        ...

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Human-readable name of the provider."""
        ...
