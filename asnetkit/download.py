"""
Downloads: stream a response to a temporary file, then move it into place.
"""

import errno
import logging
import os
import shutil
from concurrent.futures import Future
from pathlib import Path
from typing import Optional, Union

from .exceptions import FileMoveError, ServerError
from .executor import Executor
from .models import HTTPHeaders
from .request import BaseRequest, Completion
from .result import Result
from .transport.base import AsyncTransport, FileResponse, Transport
from .validation import ValidationPolicy, is_acceptable

logger = logging.getLogger("asnetkit.download")

PathLike = Union[str, "os.PathLike[str]"]


def move_into_place(source: Path, destination: Path) -> Path:
    """
    Move ``source`` to ``destination``, replacing any existing file.

    Raises:
        FileMoveError: If the destination cannot be written
    """
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        # shutil.move puts the file inside a directory destination; copy2 follows links
        if destination.is_symlink():
            destination.unlink()
        elif destination.is_dir():
            raise IsADirectoryError(errno.EISDIR, "Destination is a directory", str(destination))
        shutil.move(str(source), str(destination))
    except OSError as e:
        source.unlink(missing_ok=True)
        raise FileMoveError(e, destination) from e
    return destination


class DownloadOperation:
    """Dispatch into a temp file, validate, then move to ``destination``."""

    def __init__(self, destination: PathLike):
        self.destination = Path(destination)

    def dispatch(self, transport: Transport, spec, timeout, cancel_event) -> FileResponse:
        return transport.send_for_file(spec, timeout=timeout, cancel_event=cancel_event)

    async def dispatch_async(self, transport: AsyncTransport, spec, timeout) -> FileResponse:
        return await transport.send_for_file(spec, timeout=timeout)

    def finish(self, raw: FileResponse, policy: ValidationPolicy) -> Path:
        content_type = HTTPHeaders(raw.headers).get("Content-Type")
        if not is_acceptable(raw.status_code, content_type, policy):
            try:
                body = raw.path.read_bytes()
            finally:
                raw.path.unlink(missing_ok=True)
            raise ServerError(raw.status_code, body, content_type)
        destination = move_into_place(raw.path, self.destination)
        logger.debug("Moved download to %s", destination)
        return destination

    def discard(self, raw: FileResponse) -> None:
        raw.path.unlink(missing_ok=True)


class DownloadRequest(BaseRequest):
    """
    A request whose response body is written to ``destination``.

    Example:
        >>> path = session.download("https://example.com/report.pdf", "/tmp/report.pdf").file()
    """

    def __init__(self, session, destination: PathLike, spec=None, error=None):
        super().__init__(session, spec=spec, error=error)
        self.destination = Path(destination)

    def _new_executor(self) -> Executor:
        return self.session.new_executor(
            self.spec, self.error, self.policy, DownloadOperation(self.destination)
        )

    def response(self, completion: Completion) -> Future:
        """Execute on the worker pool and pass the destination path to ``completion``."""
        executor = self._new_executor()
        self._track(executor)

        def job() -> None:
            try:
                result = executor.run()
            except Exception as e:
                result = Result.failure(e)
            finally:
                self._untrack(executor)
            completion(result)

        return self.session.submit(job)

    def result(self, timeout: Optional[float] = None) -> Result:
        handoff: Future = Future()
        self.response(handoff.set_result)
        return handoff.result(timeout)

    def file(self, timeout: Optional[float] = None) -> Path:
        """
        Block until the download has been moved into place.

        Raises:
            ServerError: If the response failed validation
            FileMoveError: If the destination could not be written
        """
        return self.result(timeout).unwrap()

    def __repr__(self) -> str:
        return f"DownloadRequest({self.spec.url if self.spec else self.error!r} -> {self.destination})"
