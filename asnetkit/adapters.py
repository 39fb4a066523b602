"""
Request adapters: transforms applied to a request before dispatch.
"""

from abc import ABC, abstractmethod
from typing import Callable, Collection, Iterable, List, Optional, Sequence, Union

from .exceptions import RequestAdaptationError
from .models import HeadersInput, HTTPHeaders, HTTPMethod, RequestSpec
from .utils.idempotency import check_idempotency_key, make_idempotency_key


class RequestAdapter(ABC):
    """
    Abstract base class for request adapters.

    An adapter receives a ``RequestSpec`` and returns a new one. It may raise
    any exception to reject the request; the executor reports that as
    ``RequestAdaptationError`` and never dispatches.
    """

    @abstractmethod
    def adapt(self, spec: RequestSpec) -> RequestSpec:
        """
        Transform a request.

        Args:
            spec: Request to transform

        Returns:
            The transformed request
        """
        raise NotImplementedError


AdapterLike = Union[RequestAdapter, Callable[[RequestSpec], RequestSpec]]


class FunctionAdapter(RequestAdapter):
    """Adapter wrapping a plain ``spec -> spec`` callable."""

    def __init__(self, fn: Callable[[RequestSpec], RequestSpec]):
        self.fn = fn

    def adapt(self, spec: RequestSpec) -> RequestSpec:
        return self.fn(spec)

    def __repr__(self) -> str:
        return f"FunctionAdapter({getattr(self.fn, '__name__', self.fn)!r})"


def as_adapter(adapter: AdapterLike) -> RequestAdapter:
    if isinstance(adapter, RequestAdapter):
        return adapter
    if callable(adapter):
        return FunctionAdapter(adapter)
    raise TypeError(f"Not a request adapter: {adapter!r}")


class BearerTokenAdapter(RequestAdapter):
    """
    Set ``Authorization: Bearer <token>`` from a token provider.

    The provider is called on every adaptation so rotated tokens are picked
    up by the next request. A ``None`` token leaves the request unchanged.
    """

    def __init__(self, token_provider: Callable[[], Optional[str]]):
        self.token_provider = token_provider

    def adapt(self, spec: RequestSpec) -> RequestSpec:
        token = self.token_provider()
        if token is None:
            return spec
        return spec.with_header("Authorization", f"Bearer {token}")


class DefaultHeadersAdapter(RequestAdapter):
    """Set a fixed group of headers, overwriting existing values."""

    def __init__(self, headers: HeadersInput):
        self.headers = HTTPHeaders(headers)

    def adapt(self, spec: RequestSpec) -> RequestSpec:
        return spec.with_headers(self.headers)


class IdempotencyKeyAdapter(RequestAdapter):
    """
    Add an ``Idempotency-Key`` header to unsafe requests.

    A key already present on the request is kept after checking it against
    ``check_idempotency_key``; an invalid key fails adaptation.
    """

    HEADER = "Idempotency-Key"

    def __init__(
        self,
        methods: Collection[Union[HTTPMethod, str]] = (HTTPMethod.POST, HTTPMethod.PATCH),
        key_factory: Callable[[], str] = make_idempotency_key,
    ):
        self.methods = frozenset(HTTPMethod(str(m).upper()) for m in methods)
        self.key_factory = key_factory

    def adapt(self, spec: RequestSpec) -> RequestSpec:
        if spec.method not in self.methods:
            return spec
        provided = spec.headers.get(self.HEADER)
        if provided is not None:
            check_idempotency_key(provided)
            return spec
        return spec.with_header(self.HEADER, self.key_factory())


class AdapterChain:
    """
    Ordered list of adapters.

    The output of adapter *i* is the input of adapter *i+1*. An empty chain
    returns its input unchanged.
    """

    def __init__(self, adapters: Iterable[AdapterLike] = ()):
        self._adapters: List[RequestAdapter] = [as_adapter(a) for a in adapters]

    @property
    def adapters(self) -> Sequence[RequestAdapter]:
        return tuple(self._adapters)

    def append(self, adapter: AdapterLike) -> None:
        self._adapters.append(as_adapter(adapter))

    def copy(self) -> "AdapterChain":
        return AdapterChain(self._adapters)

    def apply(self, spec: RequestSpec) -> RequestSpec:
        """
        Run every adapter in registration order.

        Raises:
            RequestAdaptationError: On the first adapter that fails
        """
        for adapter in self._adapters:
            try:
                result = adapter.adapt(spec)
            except RequestAdaptationError:
                raise
            except Exception as e:
                raise RequestAdaptationError(e, adapter=adapter) from e
            if not isinstance(result, RequestSpec):
                raise RequestAdaptationError(
                    TypeError(f"{adapter!r} returned {type(result).__name__}, not RequestSpec"),
                    adapter=adapter,
                )
            spec = result
        return spec

    def __len__(self) -> int:
        return len(self._adapters)
