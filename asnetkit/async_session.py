"""
Asynchronous session built on aiohttp.
"""

import logging
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Type, TypeVar, Union

from .adapters import AdapterChain, AdapterLike
from .config import SessionConfig
from .download import DownloadOperation, PathLike
from .encoding import ParameterEncoding
from .exceptions import ConfigurationError
from .executor import AsyncExecutor, DataOperation
from .logging_setup import setup_logging
from .models import HeadersInput, HTTPMethod, RequestSpec, ResponsePayload
from .multipart import MultipartFormData
from .request import serialize_result
from .result import Result
from .retry import ExponentialBackoffRetrier, RequestRetrier
from .serializers import (
    DataSerializer,
    DecodableSerializer,
    JSONSerializer,
    PayloadSerializer,
    ResponseSerializer,
    StringSerializer,
)
from .session import RequestBuilder
from .transport.aiohttp_transport import AiohttpTransport
from .transport.base import AsyncTransport
from .validation import DEFAULT_STATUS_CODES, ValidationPolicy

logger = logging.getLogger("asnetkit.async")

T = TypeVar("T")

_DEFAULT = object()


class _AsyncRequest:
    def __init__(
        self,
        session: "AsyncSession",
        spec: Optional[RequestSpec] = None,
        error: Optional[BaseException] = None,
    ):
        self.session = session
        self.spec = spec
        self.error = error
        self.policy = ValidationPolicy()
        self._executors: List[AsyncExecutor] = []
        self._cancelled = False

    def validate(
        self,
        status_codes: range = DEFAULT_STATUS_CODES,
        content_types: Optional[Sequence[str]] = None,
    ):
        self.policy = ValidationPolicy(
            acceptable_status_codes=status_codes,
            acceptable_content_types=list(content_types) if content_types is not None else None,
        )
        return self

    def cancel(self) -> None:
        """Cancel running executions; must be called from the event loop thread."""
        self._cancelled = True
        for executor in list(self._executors):
            executor.cancel()

    async def _run(self, operation: Any) -> Result:
        executor = self.session.new_executor(self.spec, self.error, self.policy, operation)
        if self._cancelled:
            executor.cancel()
        self._executors.append(executor)
        try:
            return await executor.run()
        finally:
            self._executors.remove(executor)


class AsyncDataRequest(_AsyncRequest):
    """
    Data request for ``AsyncSession``.

    Example:
        >>> async with AsyncSession() as session:
        ...     body = await session.request("https://httpbin.org/get").validate().json()
    """

    async def result(self, serializer: ResponseSerializer) -> Result:
        return serialize_result(await self._run(DataOperation()), serializer)

    async def payload(self) -> ResponsePayload:
        return (await self.result(PayloadSerializer())).unwrap()

    async def data(self) -> bytes:
        return (await self.result(DataSerializer())).unwrap()

    async def string(self, encoding: Optional[str] = None) -> str:
        return (await self.result(StringSerializer(encoding))).unwrap()

    async def json(self, **loads_kwargs: Any) -> Any:
        return (await self.result(JSONSerializer(**loads_kwargs))).unwrap()

    async def decode(self, model: Type[T]) -> T:
        return (await self.result(DecodableSerializer(model))).unwrap()


class AsyncDownloadRequest(_AsyncRequest):
    def __init__(self, session: "AsyncSession", destination: PathLike, spec=None, error=None):
        super().__init__(session, spec=spec, error=error)
        self.destination = Path(destination)

    async def result(self) -> Result:
        return await self._run(DownloadOperation(self.destination))

    async def file(self) -> Path:
        return (await self.result()).unwrap()


class AsyncSession(RequestBuilder):
    """
    Entry point for asyncio requests.

    Shares request construction, adapters, retry and validation with
    ``Session``; transport calls and retry waits are awaited instead of
    blocking a worker thread.

    Example:
        >>> async def main():
        ...     async with AsyncSession() as session:
        ...         user = await session.request("https://api.example.com/me").decode(User)
        >>>
        >>> asyncio.run(main())
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        transport: Optional[AsyncTransport] = None,
        adapters: Iterable[AdapterLike] = (),
        retrier: Any = _DEFAULT,
    ):
        self.config = config or SessionConfig()
        if self.config.debug:
            setup_logging(debug=True)
        if transport is not None and not isinstance(transport, AsyncTransport):
            raise ConfigurationError("AsyncSession needs an asyncio transport; use Session")

        self.transport = transport or AiohttpTransport()
        self.adapters = AdapterChain(adapters)
        if retrier is _DEFAULT:
            retrier = ExponentialBackoffRetrier(
                max_retries=self.config.max_retries,
                base_delay=self.config.retry_base_delay,
            )
        self.retrier: Optional[RequestRetrier] = retrier

    async def __aenter__(self) -> "AsyncSession":
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit - closes the transport."""
        await self.close()

    def add_adapter(self, adapter: AdapterLike) -> None:
        self.adapters.append(adapter)

    def new_executor(
        self,
        spec: Optional[RequestSpec],
        error: Optional[BaseException],
        policy: ValidationPolicy,
        operation: Any,
    ) -> AsyncExecutor:
        return AsyncExecutor(
            spec,
            transport=self.transport,
            adapters=self.adapters.copy(),
            retrier=self.retrier,
            policy=policy,
            timeout=self.config.timeout,
            operation=operation,
            error=error,
        )

    def request(
        self,
        url: Any,
        method: Union[HTTPMethod, str] = HTTPMethod.GET,
        params: Optional[Mapping[str, Any]] = None,
        encoding: Optional[ParameterEncoding] = None,
        headers: HeadersInput = None,
    ) -> AsyncDataRequest:
        spec, error = self._build(url, method, params, encoding, headers)
        return AsyncDataRequest(self, spec=spec, error=error)

    def upload(
        self,
        data: bytes,
        url: Any,
        method: Union[HTTPMethod, str] = HTTPMethod.POST,
        headers: HeadersInput = None,
    ) -> AsyncDataRequest:
        spec, error = self._build_upload(data, url, method, headers)
        return AsyncDataRequest(self, spec=spec, error=error)

    def upload_multipart(
        self,
        form: MultipartFormData,
        url: Any,
        method: Union[HTTPMethod, str] = HTTPMethod.POST,
        headers: HeadersInput = None,
        boundary: Optional[str] = None,
    ) -> AsyncDataRequest:
        spec, error = self._build_multipart(form, url, method, headers, boundary)
        return AsyncDataRequest(self, spec=spec, error=error)

    def download(
        self,
        url: Any,
        destination: PathLike,
        method: Union[HTTPMethod, str] = HTTPMethod.GET,
        params: Optional[Mapping[str, Any]] = None,
        headers: HeadersInput = None,
    ) -> AsyncDownloadRequest:
        spec, error = self._build(url, method, params, None, headers)
        return AsyncDownloadRequest(self, destination, spec=spec, error=error)

    async def close(self) -> None:
        await self.transport.close()
