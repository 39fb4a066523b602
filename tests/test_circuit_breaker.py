"""
Tests for the circuit breaker transport.
"""

import pytest

from asnetkit.exceptions import (
    RequestCancelledError,
    TransportConnectionError,
    TransportError,
    UnderlyingError,
)
from asnetkit.models import RequestSpec
from asnetkit.transport import CircuitBreakerTransport

from .conftest import StubTransport, ok

SPEC = RequestSpec(url="https://api.example.com/health")


class TestCircuitBreakerTransport:
    """Test failing fast once the circuit opens."""

    def test_passes_responses_through(self):
        transport = CircuitBreakerTransport(StubTransport(ok(b"up")))
        assert transport.send(SPEC).body == b"up"

    def test_opens_after_consecutive_failures(self):
        inner = StubTransport(TransportConnectionError("offline"))
        transport = CircuitBreakerTransport(inner, fail_max=2, reset_timeout=60)

        with pytest.raises(TransportConnectionError):
            transport.send(SPEC)
        with pytest.raises(TransportError):
            transport.send(SPEC)
        with pytest.raises(TransportError, match="is open"):
            transport.send(SPEC)

        assert inner.call_count == 2

    def test_cancellation_does_not_count(self):
        inner = StubTransport(RequestCancelledError())
        transport = CircuitBreakerTransport(inner, fail_max=1)

        for _ in range(3):
            with pytest.raises(RequestCancelledError):
                transport.send(SPEC)
        assert inner.call_count == 3

    def test_open_circuit_reported_as_underlying_error(self, make_session):
        inner = StubTransport(TransportConnectionError("offline"))
        transport = CircuitBreakerTransport(inner, fail_max=1)
        session = make_session(transport)

        with pytest.raises(UnderlyingError):
            session.request(SPEC.url).data()
        assert inner.call_count == 1

    def test_close_closes_inner(self):
        inner = StubTransport()
        CircuitBreakerTransport(inner).close()
        assert inner.closed
