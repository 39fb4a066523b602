"""
Circuit breaker wrapper for blocking transports.

Stops calling a failing transport once consecutive failures reach
``fail_max``. While the circuit is open every call fails fast with a
``TransportError``, which the executor hands to the retrier like any other
transport failure.
"""

import logging
from typing import Any, Optional

from pybreaker import CircuitBreaker, CircuitBreakerError, CircuitBreakerListener

from ..exceptions import RequestCancelledError, TransportError
from ..models import RequestSpec
from .base import FileResponse, Transport, TransportResponse

logger = logging.getLogger("asnetkit.cb")


class LoggingListener(CircuitBreakerListener):
    """Listener that logs circuit breaker state changes"""

    def state_change(self, cb, old_state, new_state):
        logger.warning(
            "CircuitBreaker %s state change %s -> %s",
            cb.name,
            getattr(old_state, "name", old_state),
            getattr(new_state, "name", new_state),
        )

    def failure(self, cb, exc):
        logger.debug("CircuitBreaker %s failure: %s", cb.name, exc)


def create_circuit_breaker(
    name: str, fail_max: int = 5, reset_timeout: int = 60
) -> CircuitBreaker:
    """
    Create a pybreaker.CircuitBreaker with logging listener.

    Cancellations are excluded so that aborting requests never opens the
    circuit.

    Args:
        name: Circuit breaker name for logging
        fail_max: Number of consecutive failures to open circuit (default: 5)
        reset_timeout: Seconds before trying half-open state (default: 60)
    """
    return CircuitBreaker(
        fail_max=fail_max,
        reset_timeout=reset_timeout,
        name=name,
        listeners=[LoggingListener()],
        exclude=[RequestCancelledError],
    )


class CircuitBreakerTransport(Transport):
    """
    Transport decorator guarding another transport with a circuit breaker.

    Example:
        >>> transport = CircuitBreakerTransport(RequestsTransport(), fail_max=3)
        >>> session = Session(transport=transport)
    """

    def __init__(
        self,
        transport: Transport,
        breaker: Optional[CircuitBreaker] = None,
        name: str = "asnetkit_transport_cb",
        fail_max: int = 5,
        reset_timeout: int = 60,
    ):
        self.transport = transport
        self.breaker = breaker or create_circuit_breaker(
            name=name, fail_max=fail_max, reset_timeout=reset_timeout
        )

    def _call(self, fn, *args):
        try:
            return self.breaker.call(fn, *args)
        except CircuitBreakerError as e:
            raise TransportError(f"Circuit {self.breaker.name} is open: {e}") from e

    def send(
        self,
        spec: RequestSpec,
        timeout: Optional[float] = None,
        cancel_event: Optional[Any] = None,
    ) -> TransportResponse:
        return self._call(self.transport.send, spec, timeout, cancel_event)

    def send_for_file(
        self,
        spec: RequestSpec,
        timeout: Optional[float] = None,
        cancel_event: Optional[Any] = None,
    ) -> FileResponse:
        return self._call(self.transport.send_for_file, spec, timeout, cancel_event)

    def close(self) -> None:
        self.transport.close()
