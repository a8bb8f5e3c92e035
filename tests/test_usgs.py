"""Tests for the USGS FDSN event source.  HTTP is mocked at the session level."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
import requests

from quake_timelapse.adapters.usgs import SourceError, UsgsEventSource

_START = datetime(1980, 1, 1, tzinfo=timezone.utc)
_END = datetime(1980, 2, 1, tzinfo=timezone.utc)


def _session(status_code: int = 200, text: str = "time,latitude\n") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.content = text.encode()
    session = MagicMock(spec=requests.Session)
    session.get.return_value = response
    return session


class TestUsgsEventSource:
    def test_returns_body_text(self) -> None:
        source = UsgsEventSource(session=_session(text="header\nrow\n"))
        assert source.fetch(_START, _END) == "header\nrow\n"

    def test_query_parameters(self) -> None:
        session = _session()
        UsgsEventSource("https://example.test/query", timeout=5, session=session).fetch(_START, _END)
        args, kwargs = session.get.call_args
        assert args == ("https://example.test/query",)
        assert kwargs["params"] == {
            "format": "csv",
            "orderby": "time-asc",
            "starttime": "1980-01-01T00:00:00.000Z",
            "endtime": "1980-01-31T23:59:59.999Z",
        }
        assert kwargs["timeout"] == 5

    def test_consecutive_ranges_do_not_share_an_instant(self) -> None:
        session = _session()
        source = UsgsEventSource(session=session)
        source.fetch(_START, _END)
        source.fetch(_END, datetime(1980, 3, 1, tzinfo=timezone.utc))
        first, second = (c.kwargs["params"] for c in session.get.call_args_list)
        assert first["endtime"] < second["starttime"]
        assert second["starttime"] == "1980-02-01T00:00:00.000Z"

    def test_non_200_raises_with_body(self) -> None:
        source = UsgsEventSource(session=_session(status_code=400, text="Bad Request: too many"))
        with pytest.raises(SourceError) as info:
            source.fetch(_START, _END)
        assert info.value.status_code == 400
        assert "too many" in info.value.body

    def test_transport_error_is_wrapped(self) -> None:
        session = _session()
        session.get.side_effect = requests.ConnectionError("offline")
        with pytest.raises(SourceError) as info:
            UsgsEventSource(session=session).fetch(_START, _END)
        assert info.value.status_code is None

    def test_source_name(self) -> None:
        assert UsgsEventSource(session=_session()).source_name == "usgs_fdsn"
