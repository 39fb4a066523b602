"""
Request handles returned by ``Session``.

Callback methods are the primitive: each one runs a fresh executor on the
session's worker pool and calls the completion exactly once with a
``Result``. The blocking accessors wrap a callback method around a
single-use ``Future`` and wait for it.
"""

import threading
from concurrent.futures import Future
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Sequence, Type, TypeVar

from .exceptions import SerializationError
from .executor import DataOperation, Executor
from .models import RequestSpec, ResponsePayload
from .result import Result
from .serializers import (
    DataSerializer,
    DecodableSerializer,
    JSONSerializer,
    PayloadSerializer,
    ResponseSerializer,
    StringSerializer,
)
from .validation import DEFAULT_STATUS_CODES, ValidationPolicy

if TYPE_CHECKING:
    from .session import Session

T = TypeVar("T")

Completion = Callable[[Result], None]


def serialize_result(result: Result, serializer: Callable[[Any], Any]) -> Result:
    """
    Apply ``serializer`` to a successful result; failures pass through.

    Any exception raised by the serializer becomes a ``SerializationError``
    failure, so callers always receive a ``Result``.
    """
    if result.is_failure:
        return result
    try:
        return Result.success(serializer(result.value))
    except SerializationError as e:
        return Result.failure(e)
    except Exception as e:
        return Result.failure(SerializationError(e))


class BaseRequest:
    """Validation policy and cancellation shared by every request handle."""

    def __init__(
        self,
        session: "Session",
        spec: Optional[RequestSpec] = None,
        error: Optional[BaseException] = None,
    ):
        self.session = session
        self.spec = spec
        self.error = error
        self.policy = ValidationPolicy()
        self._executors: List[Any] = []
        self._lock = threading.Lock()
        self._cancelled = False

    def validate(
        self,
        status_codes: range = DEFAULT_STATUS_CODES,
        content_types: Optional[Sequence[str]] = None,
    ):
        """
        Set the acceptable status range and content types.

        Args:
            status_codes: Half-open range of acceptable status codes
            content_types: Substrings of which the Content-Type header must
                contain one; ``None`` accepts any content type

        Returns:
            The request, for chaining
        """
        self.policy = ValidationPolicy(
            acceptable_status_codes=status_codes,
            acceptable_content_types=list(content_types) if content_types is not None else None,
        )
        return self

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """
        Cancel every execution of this request, running or future.

        A cancelled execution completes with ``RequestCancelledError`` and
        issues no further transport calls.
        """
        with self._lock:
            self._cancelled = True
            executors = list(self._executors)
        for executor in executors:
            executor.cancel()

    def _track(self, executor: Any) -> None:
        with self._lock:
            self._executors.append(executor)
            if self._cancelled:
                executor.cancel()

    def _untrack(self, executor: Any) -> None:
        with self._lock:
            if executor in self._executors:
                self._executors.remove(executor)


class DataRequest(BaseRequest):
    """
    A request whose response body is read into memory.

    Examples:
        >>> session.request("https://httpbin.org/get").validate().response_json(print)

        >>> data = session.request("https://httpbin.org/get").validate().json()
    """

    def _new_executor(self) -> Executor:
        return self.session.new_executor(self.spec, self.error, self.policy, DataOperation())

    def response_serialized(self, serializer: ResponseSerializer, completion: Completion) -> Future:
        """
        Execute on the worker pool and pass the serialized result to ``completion``.

        Returns:
            Future resolved once ``completion`` has returned
        """
        executor = self._new_executor()
        self._track(executor)

        def job() -> None:
            try:
                result = serialize_result(executor.run(), serializer)
            except Exception as e:
                result = Result.failure(e)
            finally:
                self._untrack(executor)
            completion(result)

        return self.session.submit(job)

    def response(self, completion: Completion) -> Future:
        return self.response_serialized(PayloadSerializer(), completion)

    def response_data(self, completion: Completion) -> Future:
        return self.response_serialized(DataSerializer(), completion)

    def response_string(self, completion: Completion, encoding: Optional[str] = None) -> Future:
        return self.response_serialized(StringSerializer(encoding), completion)

    def response_json(self, completion: Completion, **loads_kwargs: Any) -> Future:
        return self.response_serialized(JSONSerializer(**loads_kwargs), completion)

    def response_decodable(self, model: Type[T], completion: Completion) -> Future:
        return self.response_serialized(DecodableSerializer(model), completion)

    def result(self, serializer: ResponseSerializer, timeout: Optional[float] = None) -> Result:
        """Block until the serialized result is available."""
        handoff: Future = Future()
        self.response_serialized(serializer, handoff.set_result)
        return handoff.result(timeout)

    def payload(self, timeout: Optional[float] = None) -> ResponsePayload:
        return self.result(PayloadSerializer(), timeout).unwrap()

    def data(self, timeout: Optional[float] = None) -> bytes:
        return self.result(DataSerializer(), timeout).unwrap()

    def string(self, encoding: Optional[str] = None, timeout: Optional[float] = None) -> str:
        return self.result(StringSerializer(encoding), timeout).unwrap()

    def json(self, timeout: Optional[float] = None, **loads_kwargs: Any) -> Any:
        return self.result(JSONSerializer(**loads_kwargs), timeout).unwrap()

    def decode(self, model: Type[T], timeout: Optional[float] = None) -> T:
        """
        Block and validate the JSON body into ``model``.

        Raises:
            SerializationError: If the body does not match ``model``
        """
        return self.result(DecodableSerializer(model), timeout).unwrap()

    def __repr__(self) -> str:
        if self.spec is None:
            return f"DataRequest(error={self.error!r})"
        return f"DataRequest({self.spec.method.value} {self.spec.url})"
