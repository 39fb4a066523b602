"""
Requests-based transport (synchronous).
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Iterator, Optional

import requests

from ..exceptions import (
    RequestCancelledError,
    TransportConnectionError,
    TransportError,
    TransportTimeoutError,
)
from ..models import RequestSpec
from .base import FileResponse, Transport, TransportResponse

logger = logging.getLogger("asnetkit.transport")

CHUNK_SIZE = 64 * 1024


class RequestsTransport(Transport):
    """
    Blocking transport using the requests library.

    Features:
    - Connection reuse via a ``requests.Session``
    - Body read in chunks so a cancellation flag can abort the read
    - No retries: urllib3 retries are left disabled
    """

    def __init__(self, session: Optional[requests.Session] = None, chunk_size: int = CHUNK_SIZE):
        """
        Initialize requests transport.

        Args:
            session: Optional requests.Session instance
            chunk_size: Bytes read per iteration of the body stream
        """
        self._external_session = session is not None
        self.session = session or requests.Session()
        self.chunk_size = chunk_size

    def _open(self, spec: RequestSpec, timeout: Optional[float]) -> requests.Response:
        try:
            return self.session.request(
                method=spec.method.value,
                url=spec.url,
                headers=spec.headers.to_dict(),
                data=spec.body,
                timeout=timeout,
                stream=True,
                allow_redirects=True,
            )
        except requests.exceptions.Timeout as e:
            raise TransportTimeoutError(f"Request timed out: {e}") from e
        except requests.exceptions.ConnectionError as e:
            raise TransportConnectionError(f"Network request failed: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Network request failed: {e}") from e

    def _chunks(self, response: requests.Response, cancel_event: Optional[Any]) -> Iterator[bytes]:
        try:
            for chunk in response.iter_content(chunk_size=self.chunk_size):
                if cancel_event is not None and cancel_event.is_set():
                    raise RequestCancelledError()
                yield chunk
        except requests.exceptions.Timeout as e:
            raise TransportTimeoutError(f"Reading response timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransportConnectionError(f"Reading response failed: {e}") from e

    def send(
        self,
        spec: RequestSpec,
        timeout: Optional[float] = None,
        cancel_event: Optional[Any] = None,
    ) -> TransportResponse:
        """
        Send HTTP request using requests library.

        Raises:
            TransportTimeoutError: On request timeout
            TransportConnectionError: On network connectivity issues
            RequestCancelledError: If ``cancel_event`` was set while reading
        """
        response = self._open(spec, timeout)
        with response:
            body = b"".join(self._chunks(response, cancel_event))
            return TransportResponse(
                status_code=response.status_code,
                headers=dict(response.headers),
                body=body,
                url=response.url,
            )

    def send_for_file(
        self,
        spec: RequestSpec,
        timeout: Optional[float] = None,
        cancel_event: Optional[Any] = None,
    ) -> FileResponse:
        response = self._open(spec, timeout)
        fd, name = tempfile.mkstemp(prefix="asnetkit-", suffix=".download")
        path = Path(name)
        try:
            with response, os.fdopen(fd, "wb") as fh:
                for chunk in self._chunks(response, cancel_event):
                    fh.write(chunk)
        except BaseException:
            path.unlink(missing_ok=True)
            raise
        logger.debug("Downloaded %s to %s", spec.url, path)
        return FileResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            path=path,
            url=response.url,
        )

    def close(self) -> None:
        if not self._external_session:
            self.session.close()
