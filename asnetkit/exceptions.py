"""
Exception classes for asnetkit.

Every failure of a request surfaces as exactly one of the
``NetworkKitError`` subclasses below. Transport failures are raised by
transports as ``TransportError`` and only reach callers wrapped in
``UnderlyingError``.
"""

from typing import Optional


class NetworkKitError(Exception):
    """Base exception for all asnetkit errors."""

    pass


class ConfigurationError(NetworkKitError):
    """Session configuration error."""

    pass


class InvalidURLError(NetworkKitError):
    """
    Malformed input URL.

    Detected before any network activity; never retried.
    """

    def __init__(self, url: object, reason: Optional[str] = None):
        self.url = url
        self.reason = reason
        message = f"Invalid URL: {url!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ParameterEncodingError(NetworkKitError):
    """Request parameters could not be encoded into a query or body."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"Parameter encoding failed: {cause}")


class RequestAdaptationError(NetworkKitError):
    """
    An adapter rejected or failed to transform the request.

    Adaptation is deterministic for a given request, so it is never retried.
    """

    def __init__(self, cause: BaseException, adapter: object = None):
        self.cause = cause
        self.adapter = adapter
        super().__init__(f"Request adaptation failed: {cause}")


class UnderlyingError(NetworkKitError):
    """Transport-level failure after the retrier declined or gave up."""

    def __init__(self, cause: BaseException, attempts: int = 1):
        self.cause = cause
        self.attempts = attempts
        super().__init__(f"Underlying error: {cause}")


class ServerError(NetworkKitError):
    """
    The server answered but the response failed validation.

    Raised for unacceptable status codes and content types alike.
    """

    def __init__(
        self,
        status_code: int,
        body: Optional[bytes] = None,
        content_type: Optional[str] = None,
    ):
        self.status_code = status_code
        self.body = body
        self.content_type = content_type
        super().__init__(f"Server error with status code {status_code}")

    def __repr__(self) -> str:
        return (
            f"ServerError(status_code={self.status_code}, "
            f"content_type={self.content_type!r}, "
            f"body_length={len(self.body) if self.body is not None else None})"
        )


class SerializationError(NetworkKitError):
    """Response bytes could not be parsed into the requested shape."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"Serialization failed: {cause}")


class RequestCancelledError(NetworkKitError):
    """The caller cancelled the request before it completed."""

    def __init__(self, message: str = "Cancelled"):
        super().__init__(message)


class FileMoveError(NetworkKitError):
    """A finished download could not be moved to its destination."""

    def __init__(self, cause: BaseException, destination: object = None):
        self.cause = cause
        self.destination = destination
        super().__init__(f"Could not move download to {destination}: {cause}")


class TransportError(NetworkKitError):
    """
    Transport-level failure.

    Raised by transports when no HTTP response was received. The executor
    hands these to the retrier and never passes them to callers unwrapped.
    """

    pass


class TransportConnectionError(TransportError):
    """Network connectivity error."""

    pass


class TransportTimeoutError(TransportError):
    """Request timeout error."""

    pass
