"""
Request execution: adapt, dispatch, retry, validate.

An executor runs exactly one logical call and is discarded afterwards:

    IDLE -> ADAPTING -> DISPATCHING -> (RETRY_WAIT -> DISPATCHING)*
         -> VALIDATING -> COMPLETED_SUCCESS | COMPLETED_FAILURE

Only transport failures reach the retrier. Adaptation failures, rejected
responses and cancellations complete the call immediately.
"""

import asyncio
import logging
import threading
import time
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

from .adapters import AdapterChain
from .exceptions import RequestCancelledError, UnderlyingError
from .metrics import outcome_label, record_request, record_retry
from .models import RequestSpec, ResponsePayload
from .result import Result
from .retry import RequestRetrier
from .transport.base import AsyncTransport, Transport, TransportResponse
from .utils.redact import redact_headers
from .validation import ValidationPolicy, validate_payload

logger = logging.getLogger("asnetkit.executor")

T = TypeVar("T")


class ExecutorState(str, Enum):
    IDLE = "idle"
    ADAPTING = "adapting"
    DISPATCHING = "dispatching"
    RETRY_WAIT = "retry_wait"
    VALIDATING = "validating"
    COMPLETED_SUCCESS = "completed_success"
    COMPLETED_FAILURE = "completed_failure"

    @property
    def is_terminal(self) -> bool:
        return self in (ExecutorState.COMPLETED_SUCCESS, ExecutorState.COMPLETED_FAILURE)


class AttemptState:
    """Per-call mutable state, owned by one executor."""

    def __init__(self, cancel_event: Any):
        self.attempt_index = 0
        self.current_spec: Optional[RequestSpec] = None
        self.cancel_event = cancel_event

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()


class DataOperation:
    """Dispatch into memory and validate into a ``ResponsePayload``."""

    def dispatch(self, transport: Transport, spec: RequestSpec, timeout, cancel_event) -> TransportResponse:
        return transport.send(spec, timeout=timeout, cancel_event=cancel_event)

    async def dispatch_async(self, transport: AsyncTransport, spec: RequestSpec, timeout) -> TransportResponse:
        return await transport.send(spec, timeout=timeout)

    def finish(self, raw: TransportResponse, policy: ValidationPolicy) -> ResponsePayload:
        payload = ResponsePayload(
            body=raw.body,
            status_code=raw.status_code,
            headers=raw.headers,
            url=raw.url,
        )
        return validate_payload(payload, policy)

    def discard(self, raw: Any) -> None:
        return None


class _BaseExecutor(Generic[T]):
    def __init__(
        self,
        spec: Optional[RequestSpec],
        adapters: Optional[AdapterChain] = None,
        retrier: Optional[RequestRetrier] = None,
        policy: Optional[ValidationPolicy] = None,
        timeout: Optional[float] = None,
        operation: Any = None,
        error: Optional[BaseException] = None,
    ):
        if spec is None and error is None:
            raise ValueError("Executor needs a request spec or a construction error")
        self.initial_spec = spec
        self.stored_error = error
        self.adapters = adapters if adapters is not None else AdapterChain()
        self.retrier = retrier
        self.policy = policy or ValidationPolicy()
        self.timeout = timeout
        self.operation = operation or DataOperation()
        self.state = ExecutorState.IDLE

    @property
    def method(self) -> str:
        return self.initial_spec.method.value if self.initial_spec is not None else "UNKNOWN"

    def _ensure_idle(self) -> None:
        if self.state is not ExecutorState.IDLE:
            raise RuntimeError("Executor has already run; create one executor per call")

    def _begin(self) -> RequestSpec:
        if self.stored_error is not None:
            raise self.stored_error
        self.state = ExecutorState.ADAPTING
        spec = self.adapters.apply(self.initial_spec)
        self.attempt.current_spec = spec
        return spec

    def _check_cancelled(self) -> None:
        if self.attempt.cancelled:
            raise RequestCancelledError()

    def _approve_retry(self, spec: RequestSpec, error: BaseException) -> bool:
        if self.retrier is None:
            return False
        approved = self.retrier.should_retry(spec, error, self.attempt.attempt_index)
        logger.debug(
            "Transport failure on %s %s attempt=%d retry=%s: %s",
            spec.method.value,
            spec.url,
            self.attempt.attempt_index,
            approved,
            error,
        )
        return approved

    def _log_dispatch(self, spec: RequestSpec) -> None:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Request %s %s attempt=%d headers=%s",
                spec.method.value,
                spec.url,
                self.attempt.attempt_index,
                redact_headers(spec.headers),
            )

    def _complete(self, value: Any, error: Optional[BaseException], started: float) -> Result:
        if error is None:
            self.state = ExecutorState.COMPLETED_SUCCESS
            result: Result = Result.success(value)
        else:
            self.state = ExecutorState.COMPLETED_FAILURE
            result = Result.failure(error)
        latency = time.monotonic() - started
        record_request(self.method, outcome_label(error), latency)
        logger.debug(
            "Completed %s %s in %.3fs: %s",
            self.method,
            self.initial_spec.url if self.initial_spec is not None else "-",
            latency,
            "success" if error is None else type(error).__name__,
        )
        return result


class Executor(_BaseExecutor[T]):
    """
    Blocking executor for one logical call.

    ``run`` performs the whole state machine in the calling thread and
    invokes the completion sink exactly once. ``cancel`` may be called from
    any thread.

    Example:
        >>> executor = Executor(spec, transport=RequestsTransport(), retrier=ExponentialBackoffRetrier())
        >>> result = executor.run(lambda r: None)
    """

    def __init__(self, spec: Optional[RequestSpec], transport: Optional[Transport] = None, **kwargs):
        super().__init__(spec, **kwargs)
        self.transport = transport
        self.attempt = AttemptState(threading.Event())

    def cancel(self) -> None:
        self.attempt.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.attempt.cancelled

    def run(self, completion: Optional[Callable[[Result], None]] = None) -> Result:
        self._ensure_idle()
        started = time.monotonic()
        try:
            value = self._execute()
        except Exception as e:
            result = self._complete(None, e, started)
        else:
            result = self._complete(value, None, started)
        if completion is not None:
            completion(result)
        return result

    def _execute(self) -> T:
        spec = self._begin()
        if self.transport is None:
            raise ValueError("Executor needs a transport")

        while True:
            self._check_cancelled()
            self.state = ExecutorState.DISPATCHING
            self._log_dispatch(spec)
            try:
                raw = self.operation.dispatch(
                    self.transport, spec, self.timeout, self.attempt.cancel_event
                )
            except RequestCancelledError:
                raise
            except Exception as e:
                error: BaseException = e
            else:
                if self.attempt.cancelled:
                    self.operation.discard(raw)
                    raise RequestCancelledError()
                self.state = ExecutorState.VALIDATING
                return self.operation.finish(raw, self.policy)

            self._check_cancelled()
            if not self._approve_retry(spec, error):
                raise UnderlyingError(error, attempts=self.attempt.attempt_index + 1) from error

            self.state = ExecutorState.RETRY_WAIT
            delay = self.retrier.retry_delay(self.attempt.attempt_index)
            record_retry(spec.method.value)
            if self.attempt.cancel_event.wait(delay):
                raise RequestCancelledError()
            self.attempt.attempt_index += 1


class AsyncExecutor(_BaseExecutor[T]):
    """
    Asyncio executor for one logical call.

    ``cancel`` aborts the in-flight transport call and any retry wait.
    """

    def __init__(self, spec: Optional[RequestSpec], transport: Optional[AsyncTransport] = None, **kwargs):
        super().__init__(spec, **kwargs)
        self.transport = transport
        self.attempt = AttemptState(asyncio.Event())

    def cancel(self) -> None:
        self.attempt.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.attempt.cancelled

    async def run(self) -> Result:
        self._ensure_idle()
        started = time.monotonic()
        try:
            value = await self._execute()
        except Exception as e:
            return self._complete(None, e, started)
        return self._complete(value, None, started)

    async def _dispatch(self, spec: RequestSpec) -> Any:
        dispatch = asyncio.ensure_future(
            self.operation.dispatch_async(self.transport, spec, self.timeout)
        )
        cancelled = asyncio.ensure_future(self.attempt.cancel_event.wait())
        try:
            await asyncio.wait({dispatch, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            dispatch.cancel()
            raise
        finally:
            cancelled.cancel()
        if not dispatch.done():
            dispatch.cancel()
            try:
                await dispatch
            except asyncio.CancelledError:
                pass
            raise RequestCancelledError()
        return dispatch.result()

    async def _wait_or_cancel(self, delay: float) -> bool:
        try:
            await asyncio.wait_for(self.attempt.cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True

    async def _execute(self) -> T:
        spec = self._begin()
        if self.transport is None:
            raise ValueError("Executor needs a transport")

        while True:
            self._check_cancelled()
            self.state = ExecutorState.DISPATCHING
            self._log_dispatch(spec)
            try:
                raw = await self._dispatch(spec)
            except RequestCancelledError:
                raise
            except Exception as e:
                error: BaseException = e
            else:
                if self.attempt.cancelled:
                    self.operation.discard(raw)
                    raise RequestCancelledError()
                self.state = ExecutorState.VALIDATING
                return self.operation.finish(raw, self.policy)

            self._check_cancelled()
            if not self._approve_retry(spec, error):
                raise UnderlyingError(error, attempts=self.attempt.attempt_index + 1) from error

            self.state = ExecutorState.RETRY_WAIT
            delay = self.retrier.retry_delay(self.attempt.attempt_index)
            record_retry(spec.method.value)
            if await self._wait_or_cancel(delay):
                raise RequestCancelledError()
            self.attempt.attempt_index += 1
