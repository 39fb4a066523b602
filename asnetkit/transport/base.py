"""
Base transport interfaces.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, NamedTuple, Optional

from ..models import RequestSpec


class TransportResponse(NamedTuple):
    """Status, headers and body of one answered request"""

    status_code: int
    headers: Dict[str, str]
    body: bytes
    url: Optional[str] = None


class FileResponse(NamedTuple):
    """Status and headers of an answered request whose body is in a temp file"""

    status_code: int
    headers: Dict[str, str]
    path: Path
    url: Optional[str] = None


class Transport(ABC):
    """
    Abstract base class for blocking transports.

    A transport performs exactly one request per call. It must not retry:
    retries belong to the executor and its retrier.
    """

    @abstractmethod
    def send(
        self,
        spec: RequestSpec,
        timeout: Optional[float] = None,
        cancel_event: Optional[Any] = None,
    ) -> TransportResponse:
        """
        Send one HTTP request.

        Args:
            spec: Request to send
            timeout: Timeout in seconds
            cancel_event: Flag polled while reading the body; once set the
                read is abandoned

        Returns:
            The response, whatever its status code

        Raises:
            TransportError: When no response was received
        """
        raise NotImplementedError

    @abstractmethod
    def send_for_file(
        self,
        spec: RequestSpec,
        timeout: Optional[float] = None,
        cancel_event: Optional[Any] = None,
    ) -> FileResponse:
        """
        Send one HTTP request and write the body to a temporary file.

        The caller owns the returned temp file.

        Raises:
            TransportError: When no response was received
        """
        raise NotImplementedError

    def close(self) -> None:
        """Release transport resources."""
        return None


class AsyncTransport(ABC):
    """Abstract base class for asyncio transports."""

    @abstractmethod
    async def send(self, spec: RequestSpec, timeout: Optional[float] = None) -> TransportResponse:
        raise NotImplementedError

    @abstractmethod
    async def send_for_file(
        self, spec: RequestSpec, timeout: Optional[float] = None
    ) -> FileResponse:
        raise NotImplementedError

    async def close(self) -> None:
        return None
