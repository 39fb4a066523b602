"""
Blocking session: builds requests and runs them on a worker pool.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple, Union

from .adapters import AdapterChain, AdapterLike
from .config import SessionConfig
from .download import DownloadRequest, PathLike
from .encoding import Destination, ParameterEncoding, URLEncoding, build_request
from .exceptions import ConfigurationError, InvalidURLError, ParameterEncodingError
from .executor import Executor
from .logging_setup import setup_logging
from .models import HeadersInput, HTTPHeaders, HTTPMethod, RequestSpec
from .multipart import MultipartFormData, make_boundary
from .request import DataRequest
from .retry import ExponentialBackoffRetrier, RequestRetrier
from .transport.base import AsyncTransport, Transport
from .transport.requests_transport import RequestsTransport
from .validation import ValidationPolicy

logger = logging.getLogger("asnetkit.session")

_DEFAULT = object()

BuildOutcome = Tuple[Optional[RequestSpec], Optional[BaseException]]


class RequestBuilder:
    """
    Request construction shared by ``Session`` and ``AsyncSession``.

    Construction failures are returned, not raised: the request handle
    carries them and completes with them without touching the network.
    """

    config: SessionConfig

    def _headers(self, headers: HeadersInput) -> HTTPHeaders:
        base = HTTPHeaders({"User-Agent": self.config.user_agent}).updated(
            self.config.default_headers
        )
        return base.updated(headers) if headers else base

    def _build(
        self,
        url: Any,
        method: Union[HTTPMethod, str],
        parameters: Optional[Mapping[str, Any]],
        encoding: Optional[ParameterEncoding],
        headers: HeadersInput,
    ) -> BuildOutcome:
        try:
            return build_request(url, method, parameters, encoding, self._headers(headers)), None
        except (InvalidURLError, ParameterEncodingError) as e:
            logger.debug("Request construction failed for %r: %s", url, e)
            return None, e

    def _build_upload(
        self, data: bytes, url: Any, method: Union[HTTPMethod, str], headers: HeadersInput
    ) -> BuildOutcome:
        spec, error = self._build(url, method, None, URLEncoding(Destination.QUERY_STRING), headers)
        if spec is None:
            return None, error
        spec = spec.with_body(bytes(data)).with_header("Content-Length", str(len(data)))
        if "Content-Type" not in spec.headers:
            spec = spec.with_header("Content-Type", "application/octet-stream")
        return spec, None

    def _build_multipart(
        self,
        form: MultipartFormData,
        url: Any,
        method: Union[HTTPMethod, str],
        headers: HeadersInput,
        boundary: Optional[str],
    ) -> BuildOutcome:
        boundary = boundary or make_boundary()
        merged = HTTPHeaders(headers).set("Content-Type", form.content_type(boundary))
        spec, error = self._build(url, method, None, URLEncoding(Destination.QUERY_STRING), merged)
        if spec is None:
            return None, error
        return spec.with_body(form.encode(boundary)), None


class Session(RequestBuilder):
    """
    Entry point for blocking requests.

    Features:
    - Query, form, JSON and multipart request construction
    - Adapter chain applied before every dispatch
    - Retry with exponential backoff on transport failures
    - Callback and blocking consumption

    Examples:
        >>> session = Session(adapters=[BearerTokenAdapter(lambda: token_store.current)])
        >>> user = session.request("https://api.example.com/me").validate().decode(User)
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        transport: Optional[Transport] = None,
        adapters: Iterable[AdapterLike] = (),
        retrier: Any = _DEFAULT,
    ):
        """
        Initialize session.

        Args:
            config: Session configuration (default: ``SessionConfig()``)
            transport: Blocking transport (default: ``RequestsTransport()``)
            adapters: Request adapters, applied in order
            retrier: Retry policy; ``None`` disables retries. Defaults to an
                ``ExponentialBackoffRetrier`` built from ``config``

        Raises:
            ConfigurationError: If ``transport`` is not a blocking transport
        """
        self.config = config or SessionConfig()
        if self.config.debug:
            setup_logging(debug=True)

        if transport is not None and isinstance(transport, AsyncTransport):
            raise ConfigurationError("Session needs a blocking transport; use AsyncSession")
        if transport is not None and not isinstance(transport, Transport):
            raise ConfigurationError(f"Not a transport: {transport!r}")

        self.transport = transport or RequestsTransport()
        self.adapters = AdapterChain(adapters)
        if retrier is _DEFAULT:
            retrier = ExponentialBackoffRetrier(
                max_retries=self.config.max_retries,
                base_delay=self.config.retry_base_delay,
            )
        self.retrier: Optional[RequestRetrier] = retrier
        self._pool = ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="asnetkit"
        )
        self._closed = False

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def add_adapter(self, adapter: AdapterLike) -> None:
        self.adapters.append(adapter)

    def new_executor(
        self,
        spec: Optional[RequestSpec],
        error: Optional[BaseException],
        policy: ValidationPolicy,
        operation: Any,
    ) -> Executor:
        return Executor(
            spec,
            transport=self.transport,
            adapters=self.adapters.copy(),
            retrier=self.retrier,
            policy=policy,
            timeout=self.config.timeout,
            operation=operation,
            error=error,
        )

    def submit(self, job: Callable[[], None]) -> Future:
        if self._closed:
            raise RuntimeError("Session is closed")
        return self._pool.submit(job)

    # ========================================================================
    # Requests
    # ========================================================================

    def request(
        self,
        url: Any,
        method: Union[HTTPMethod, str] = HTTPMethod.GET,
        params: Optional[Mapping[str, Any]] = None,
        encoding: Optional[ParameterEncoding] = None,
        headers: HeadersInput = None,
    ) -> DataRequest:
        """
        Create a data request.

        Args:
            url: Absolute request URL
            method: HTTP method
            params: Parameters, placed according to ``encoding``
            encoding: ``URLEncoding()`` (default) or ``JSONEncoding()``
            headers: Extra headers

        Returns:
            DataRequest; nothing is sent until a response method is called
        """
        spec, error = self._build(url, method, params, encoding, headers)
        return DataRequest(self, spec=spec, error=error)

    def upload(
        self,
        data: bytes,
        url: Any,
        method: Union[HTTPMethod, str] = HTTPMethod.POST,
        headers: HeadersInput = None,
    ) -> DataRequest:
        """Create a request sending ``data`` as the raw body."""
        spec, error = self._build_upload(data, url, method, headers)
        return DataRequest(self, spec=spec, error=error)

    def upload_multipart(
        self,
        form: MultipartFormData,
        url: Any,
        method: Union[HTTPMethod, str] = HTTPMethod.POST,
        headers: HeadersInput = None,
        boundary: Optional[str] = None,
    ) -> DataRequest:
        """Create a request sending ``form`` as a multipart/form-data body."""
        spec, error = self._build_multipart(form, url, method, headers, boundary)
        return DataRequest(self, spec=spec, error=error)

    def download(
        self,
        url: Any,
        destination: PathLike,
        method: Union[HTTPMethod, str] = HTTPMethod.GET,
        params: Optional[Mapping[str, Any]] = None,
        headers: HeadersInput = None,
    ) -> DownloadRequest:
        """Create a request whose body is saved to ``destination``."""
        spec, error = self._build(url, method, params, None, headers)
        return DownloadRequest(self, destination, spec=spec, error=error)

    def close(self) -> None:
        """Wait for running requests, then release the worker pool and transport."""
        if self._closed:
            return
        self._closed = True
        self._pool.shutdown(wait=True)
        self.transport.close()


_default_session: Optional[Session] = None
_default_lock = threading.Lock()


def default_session() -> Session:
    """Shared session with the default configuration, created on first use."""
    global _default_session
    with _default_lock:
        if _default_session is None:
            _default_session = Session()
        return _default_session
