"""
Aiohttp-based transport (asynchronous).
"""

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

import aiohttp

from ..exceptions import TransportConnectionError, TransportError, TransportTimeoutError
from ..models import RequestSpec
from .base import AsyncTransport, FileResponse, TransportResponse

logger = logging.getLogger("asnetkit.transport")


class AiohttpTransport(AsyncTransport):
    """
    Asynchronous transport using aiohttp.

    Cancellation is asyncio task cancellation: the executor cancels the task
    awaiting ``send`` and aiohttp releases the connection.
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None, chunk_size: int = 64 * 1024):
        """
        Initialize aiohttp transport.

        Args:
            session: Optional aiohttp.ClientSession instance
            chunk_size: Bytes read per iteration when writing downloads
        """
        self._external_session = session is not None
        self.session = session
        self.chunk_size = chunk_size

    async def __aenter__(self) -> "AiohttpTransport":
        """Context manager entry."""
        self._ensure_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession()
        return self.session

    def _request(self, spec: RequestSpec, timeout: Optional[float]):
        session = self._ensure_session()
        return session.request(
            method=spec.method.value,
            url=spec.url,
            headers=spec.headers.to_dict(),
            data=spec.body,
            timeout=aiohttp.ClientTimeout(total=timeout),
        )

    async def send(self, spec: RequestSpec, timeout: Optional[float] = None) -> TransportResponse:
        """
        Send HTTP request using aiohttp library.

        Raises:
            TransportTimeoutError: On request timeout
            TransportConnectionError: On network connectivity issues
        """
        try:
            async with self._request(spec, timeout) as response:
                body = await response.read()
                return TransportResponse(
                    status_code=response.status,
                    headers=dict(response.headers),
                    body=body,
                    url=str(response.url),
                )
        except asyncio.TimeoutError as e:
            raise TransportTimeoutError(f"Request timed out: {e}") from e
        except aiohttp.ClientConnectionError as e:
            raise TransportConnectionError(f"Network request failed: {e}") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Network request failed: {e}") from e

    async def send_for_file(
        self, spec: RequestSpec, timeout: Optional[float] = None
    ) -> FileResponse:
        fd, name = tempfile.mkstemp(prefix="asnetkit-", suffix=".download")
        path = Path(name)
        try:
            with os.fdopen(fd, "wb") as fh:
                async with self._request(spec, timeout) as response:
                    async for chunk in response.content.iter_chunked(self.chunk_size):
                        fh.write(chunk)
                    result = FileResponse(
                        status_code=response.status,
                        headers=dict(response.headers),
                        path=path,
                        url=str(response.url),
                    )
        except asyncio.TimeoutError as e:
            path.unlink(missing_ok=True)
            raise TransportTimeoutError(f"Request timed out: {e}") from e
        except aiohttp.ClientConnectionError as e:
            path.unlink(missing_ok=True)
            raise TransportConnectionError(f"Network request failed: {e}") from e
        except aiohttp.ClientError as e:
            path.unlink(missing_ok=True)
            raise TransportError(f"Network request failed: {e}") from e
        except BaseException:
            path.unlink(missing_ok=True)
            raise
        logger.debug("Downloaded %s to %s", spec.url, path)
        return result

    async def close(self) -> None:
        """Close the session."""
        if not self._external_session and self.session and not self.session.closed:
            await self.session.close()
