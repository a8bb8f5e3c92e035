"""UsgsEventSource: queries the USGS FDSN event web service.

Request shape:
    GET {url}?format=csv&orderby=time-asc&starttime=<ISO>&endtime=<ISO>

FDSN treats endtime as inclusive, so the request stops one millisecond
short of the range end to keep consecutive ranges disjoint.

A non-200 response aborts with the response body attached.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

import requests

from quake_timelapse.adapters.base import EventSource
from quake_timelapse.foundation.clock import isoformat_z

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://earthquake.usgs.gov/fdsnws/event/1/query"
_ENDTIME_GUARD = timedelta(milliseconds=1)


class SourceError(Exception):
    """Raised when the event source cannot deliver a range."""

    def __init__(self, reason: str, status_code: int | None = None, body: str = "") -> None:
        self.reason = reason
        self.status_code = status_code
        self.body = body
        super().__init__(f"Event source failed: {reason}")


class UsgsEventSource(EventSource):
    """Fetches time-sorted CSV catalog slices over HTTP."""

    def __init__(
        self,
        url: str = DEFAULT_URL,
        timeout: float = 60.0,
        session: requests.Session | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def source_name(self) -> str:
        return "usgs_fdsn"

    def fetch(self, start: datetime, end: datetime) -> str:
        params = {
            "format": "csv",
            "orderby": "time-asc",
            "starttime": isoformat_z(start),
            "endtime": isoformat_z(end - _ENDTIME_GUARD),
        }
        logger.info("Fetching %s..%s from %s", params["starttime"], params["endtime"], self._url)
        try:
            response = self._session.get(self._url, params=params, timeout=self._timeout)
        except requests.RequestException as exc:
            raise SourceError(str(exc)) from exc

        if response.status_code != 200:
            raise SourceError(
                f"HTTP {response.status_code} for {params['starttime']}..{params['endtime']}",
                status_code=response.status_code,
                body=response.text,
            )
        logger.debug("Received %d bytes", len(response.content))
        return response.text

    def close(self) -> None:
        self._session.close()
