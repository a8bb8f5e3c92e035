"""Ingestion adapter: catalog text in, validated Events out.

Two directions live here:

    Download:  step consecutive, non-overlapping calendar-month ranges
               through an EventSource and concatenate the answers into one
               CSV stream, keeping only the first header.
    Read:      lazily turn catalog lines into Events, skipping the header.
               The iterator is single-pass; a new pass starts from the top.

Expected catalog columns (extra trailing columns are ignored):
    time,latitude,longitude,depth,mag,...

Malformed rows are fatal: they raise ParseError and nothing is skipped.
"""

from __future__ import annotations

import csv
import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator, TextIO

from pydantic import ValidationError

from quake_timelapse.adapters.base import EventSource
from quake_timelapse.domain.event import Event
from quake_timelapse.foundation.clock import add_months

logger = logging.getLogger(__name__)

_FIELDS = ("timestamp", "latitude", "longitude", "depth", "magnitude")


class ParseError(Exception):
    """Raised when a catalog row cannot be turned into an Event."""

    def __init__(self, line_number: int, reason: str) -> None:
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"Line {line_number}: {reason}")


class OutOfOrderError(ParseError):
    """Raised when a row's timestamp is earlier than the previous row's."""


# ── Read ─────────────────────────────────────────────────────────────────────


def parse_row(fields: list[str], line_number: int) -> Event:
    """Build an Event from the leading catalog columns of one row."""
    if len(fields) < len(_FIELDS):
        raise ParseError(line_number, f"expected at least {len(_FIELDS)} fields, got {len(fields)}")

    raw = dict(zip(_FIELDS, (f.strip() for f in fields)))
    for name, value in raw.items():
        if not value:
            raise ParseError(line_number, f"missing value for '{name}'")

    try:
        return Event.model_validate(raw)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ParseError(line_number, problems) from exc


def read_events(lines: Iterable[str], *, strict_ordering: bool = True) -> Iterator[Event]:
    """Yield one Event per data line, discarding the header line.

    Blank lines are ignored.

    Raises:
        ParseError: On the first malformed row.
        OutOfOrderError: If *strict_ordering* and a timestamp decreases.
    """
    previous: datetime | None = None
    reader = csv.reader(lines)
    for fields in reader:
        line_number = reader.line_num
        if line_number == 1:
            continue
        if not fields or all(not f.strip() for f in fields):
            continue

        event = parse_row(fields, line_number)
        if strict_ordering and previous is not None and event.timestamp < previous:
            raise OutOfOrderError(
                line_number,
                f"timestamp {event.timestamp.isoformat()} precedes {previous.isoformat()}",
            )
        previous = event.timestamp
        yield event


def read_event_file(path: Path | str, *, strict_ordering: bool = True) -> Iterator[Event]:
    """Stream Events from a catalog file on disk."""
    with open(path, "r", encoding="utf-8", newline="") as fh:
        yield from read_events(fh, strict_ordering=strict_ordering)


# ── Download ─────────────────────────────────────────────────────────────────


def month_ranges(start: datetime, end: datetime, step_months: int = 1) -> Iterator[tuple[datetime, datetime]]:
    """Yield contiguous ``[lo, hi)`` ranges of *step_months* from *start*.

    Stepping stops once a range would begin after *end*.
    """
    if step_months <= 0:
        raise ValueError("step_months must be positive")
    steps = 0
    lo = start
    while lo <= end:
        hi = add_months(start, (steps + 1) * step_months)
        yield lo, hi
        steps += 1
        lo = hi


def collect_ranges(
    source: EventSource,
    start: datetime,
    end: datetime,
    step_months: int = 1,
) -> Iterator[str]:
    """Fetch each range in order; drop the header of every answer but the first."""
    first = True
    for lo, hi in month_ranges(start, end, step_months):
        text = source.fetch(lo, hi)
        if not first:
            newline = text.find("\n")
            text = text[newline + 1:] if newline != -1 else ""
        first = False
        if text and not text.endswith("\n"):
            text += "\n"
        yield text


def download_catalog(
    source: EventSource,
    out: TextIO,
    start: datetime,
    end: datetime,
    step_months: int = 1,
) -> int:
    """Write the concatenated catalog for ``[start, end]`` to *out*.

    Returns the number of ranges fetched.
    """
    count = 0
    for chunk in collect_ranges(source, start, end, step_months):
        out.write(chunk)
        count += 1
    logger.info("Fetched %d range(s) from %s", count, source.source_name)
    return count
