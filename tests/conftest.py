"""Shared fixtures."""

import pytest
from starlette.requests import Request


@pytest.fixture
def make_request():
    """Build a Starlette request carrying the given headers."""

    def _make(headers: dict[str, str] | None = None, method: str = "POST") -> Request:
        raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
        return Request({"type": "http", "method": method, "path": "/", "headers": raw})

    return _make
