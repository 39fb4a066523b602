"""
Retry policies consulted after transport-level failures.
"""

import random
from abc import ABC, abstractmethod
from typing import Callable, Optional, Tuple, Type

from .models import RequestSpec


class RequestRetrier(ABC):
    """
    Abstract base class for retry policies.

    The executor only consults a retrier after a transport failure; server
    answers, validation failures and adaptation failures are never retried.
    """

    @abstractmethod
    def should_retry(self, spec: RequestSpec, error: BaseException, attempt: int) -> bool:
        """
        Decide whether to reissue ``spec`` after ``error``.

        Args:
            spec: The adapted request that failed
            error: The transport error
            attempt: Zero-based index of the attempt that failed

        Returns:
            True to reissue the request
        """
        raise NotImplementedError

    def retry_delay(self, attempt: int) -> float:
        """Seconds to wait before reissuing after attempt ``attempt``."""
        return 0.0


class ExponentialBackoffRetrier(RequestRetrier):
    """
    Retry up to ``max_retries`` times with exponential backoff.

    Attempt ``n`` waits ``base_delay * 2**n`` seconds: with the defaults the
    first retry waits 0.6s and the second 1.2s. ``jitter`` adds a uniform
    random delay in ``[0, jitter)`` and ``max_delay`` caps the total.
    """

    def __init__(
        self,
        max_retries: int = 2,
        base_delay: float = 0.6,
        jitter: float = 0.0,
        max_delay: Optional[float] = None,
        retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    ):
        if max_retries < 0:
            raise ValueError("max_retries must not be negative")
        if base_delay < 0:
            raise ValueError("base_delay must not be negative")
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.jitter = jitter
        self.max_delay = max_delay
        self.retry_on = retry_on

    def should_retry(self, spec: RequestSpec, error: BaseException, attempt: int) -> bool:
        if attempt >= self.max_retries:
            return False
        return isinstance(error, self.retry_on)

    def retry_delay(self, attempt: int) -> float:
        delay = self.base_delay * (2**attempt)
        if self.jitter:
            delay += random.uniform(0, self.jitter)
        if self.max_delay is not None:
            delay = min(self.max_delay, delay)
        return delay

    def __repr__(self) -> str:
        return (
            f"ExponentialBackoffRetrier(max_retries={self.max_retries}, "
            f"base_delay={self.base_delay})"
        )


class NeverRetrier(RequestRetrier):
    """Decline every retry."""

    def should_retry(self, spec: RequestSpec, error: BaseException, attempt: int) -> bool:
        return False


class FunctionRetrier(RequestRetrier):
    """Retrier built from a ``(spec, error, attempt) -> bool`` callable."""

    def __init__(
        self,
        fn: Callable[[RequestSpec, BaseException, int], bool],
        delay: Callable[[int], float] = lambda attempt: 0.0,
    ):
        self.fn = fn
        self.delay = delay

    def should_retry(self, spec: RequestSpec, error: BaseException, attempt: int) -> bool:
        return bool(self.fn(spec, error, attempt))

    def retry_delay(self, attempt: int) -> float:
        return self.delay(attempt)
