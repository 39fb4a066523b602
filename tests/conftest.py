"""
Pytest configuration and fixtures
"""

import os
import tempfile
from pathlib import Path
from typing import Any, Callable, List, Optional

import pytest

from asnetkit import ExponentialBackoffRetrier, Session, SessionConfig
from asnetkit.models import RequestSpec
from asnetkit.transport.base import AsyncTransport, FileResponse, Transport, TransportResponse

JSON_HEADERS = {"Content-Type": "application/json; charset=utf-8"}


def ok(body: bytes = b'{"ok": true}', status: int = 200, headers=None) -> TransportResponse:
    return TransportResponse(status_code=status, headers=dict(headers or JSON_HEADERS), body=body)


def _write_temp(body: bytes) -> Path:
    fd, name = tempfile.mkstemp(prefix="asnetkit-test-")
    with os.fdopen(fd, "wb") as fh:
        fh.write(body)
    return Path(name)


class StubTransport(Transport):
    """
    Scripted transport for testing.

    Each call pops the next scripted item: a ``TransportResponse`` is
    returned, an exception is raised. When the script runs out the last
    item repeats. ``on_send`` runs before every call.
    """

    def __init__(self, *script: Any, on_send: Optional[Callable[[RequestSpec], None]] = None):
        self.script: List[Any] = list(script) or [ok()]
        self.calls: List[RequestSpec] = []
        self.on_send = on_send
        self.closed = False

    def _next(self, spec: RequestSpec) -> Any:
        self.calls.append(spec)
        if self.on_send is not None:
            self.on_send(spec)
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, BaseException):
            raise item
        return item

    def send(self, spec, timeout=None, cancel_event=None) -> TransportResponse:
        return self._next(spec)

    def send_for_file(self, spec, timeout=None, cancel_event=None) -> FileResponse:
        response = self._next(spec)
        return FileResponse(
            status_code=response.status_code,
            headers=response.headers,
            path=_write_temp(response.body),
        )

    def close(self) -> None:
        self.closed = True

    @property
    def call_count(self) -> int:
        return len(self.calls)


class AsyncStubTransport(AsyncTransport):
    """Asyncio counterpart of ``StubTransport``."""

    def __init__(self, *script: Any, on_send=None):
        self.sync = StubTransport(*script, on_send=on_send)

    @property
    def calls(self) -> List[RequestSpec]:
        return self.sync.calls

    async def send(self, spec, timeout=None) -> TransportResponse:
        return self.sync.send(spec, timeout)

    async def send_for_file(self, spec, timeout=None) -> FileResponse:
        return self.sync.send_for_file(spec, timeout)


@pytest.fixture
def no_wait_retrier():
    """Default retry budget without backoff delays"""
    return ExponentialBackoffRetrier(max_retries=2, base_delay=0.0)


@pytest.fixture
def test_config():
    return SessionConfig(timeout=5.0, max_workers=2)


@pytest.fixture
def make_session(test_config, no_wait_retrier):
    """Factory for sessions that are closed after the test"""
    sessions = []

    def factory(transport=None, **kwargs):
        kwargs.setdefault("retrier", no_wait_retrier)
        kwargs.setdefault("config", test_config)
        session = Session(transport=transport, **kwargs)
        sessions.append(session)
        return session

    yield factory
    for session in sessions:
        session.close()
