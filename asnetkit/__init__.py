"""
asnetkit

A thin HTTP client layer over requests and aiohttp: request building,
adapters, retry on transport failure, response validation and typed
deserialization, usable with callbacks, blocking calls or asyncio.
"""

import logging

from .__version__ import __version__
from .adapters import (
    AdapterChain,
    BearerTokenAdapter,
    DefaultHeadersAdapter,
    FunctionAdapter,
    IdempotencyKeyAdapter,
    RequestAdapter,
)
from .async_session import AsyncDataRequest, AsyncDownloadRequest, AsyncSession
from .config import SessionConfig
from .download import DownloadRequest
from .encoding import Destination, JSONEncoding, URLEncoding, build_request
from .exceptions import (
    ConfigurationError,
    FileMoveError,
    InvalidURLError,
    NetworkKitError,
    ParameterEncodingError,
    RequestAdaptationError,
    RequestCancelledError,
    SerializationError,
    ServerError,
    TransportConnectionError,
    TransportError,
    TransportTimeoutError,
    UnderlyingError,
)
from .executor import AsyncExecutor, Executor, ExecutorState
from .models import HTTPHeaders, HTTPMethod, RequestSpec, ResponsePayload
from .multipart import MultipartFormData, parse_multipart
from .request import DataRequest
from .result import Result
from .retry import ExponentialBackoffRetrier, FunctionRetrier, NeverRetrier, RequestRetrier
from .session import Session, default_session
from .validation import ValidationPolicy

logging.getLogger("asnetkit").addHandler(logging.NullHandler())

__all__ = [
    "AdapterChain",
    "AsyncDataRequest",
    "AsyncDownloadRequest",
    "AsyncExecutor",
    "AsyncSession",
    "BearerTokenAdapter",
    "ConfigurationError",
    "DataRequest",
    "DefaultHeadersAdapter",
    "Destination",
    "DownloadRequest",
    "Executor",
    "ExecutorState",
    "ExponentialBackoffRetrier",
    "FileMoveError",
    "FunctionAdapter",
    "FunctionRetrier",
    "HTTPHeaders",
    "HTTPMethod",
    "IdempotencyKeyAdapter",
    "InvalidURLError",
    "JSONEncoding",
    "MultipartFormData",
    "NetworkKitError",
    "NeverRetrier",
    "ParameterEncodingError",
    "RequestAdaptationError",
    "RequestAdapter",
    "RequestCancelledError",
    "RequestRetrier",
    "RequestSpec",
    "ResponsePayload",
    "Result",
    "SerializationError",
    "ServerError",
    "Session",
    "SessionConfig",
    "TransportConnectionError",
    "TransportError",
    "TransportTimeoutError",
    "URLEncoding",
    "UnderlyingError",
    "ValidationPolicy",
    "build_request",
    "default_session",
    "parse_multipart",
    "__version__",
]
