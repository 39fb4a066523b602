"""
Transports for asnetkit.
"""

from .base import AsyncTransport, FileResponse, Transport, TransportResponse
from .requests_transport import RequestsTransport
from .aiohttp_transport import AiohttpTransport
from .circuit_breaker import CircuitBreakerTransport, create_circuit_breaker

__all__ = [
    "Transport",
    "AsyncTransport",
    "TransportResponse",
    "FileResponse",
    "RequestsTransport",
    "AiohttpTransport",
    "CircuitBreakerTransport",
    "create_circuit_breaker",
]
