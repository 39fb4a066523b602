"""
Success-or-failure value delivered to completion callbacks.
"""

from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class Result(Generic[T]):
    """
    Outcome of one request: either a value or a ``NetworkKitError``.

    Example:
        >>> def on_result(result):
        ...     if result.is_success:
        ...         print(result.value)
        ...     else:
        ...         print("failed:", result.error)
    """

    __slots__ = ("_value", "_error")

    def __init__(self, value: Optional[T] = None, error: Optional[BaseException] = None):
        self._value = value
        self._error = error

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException) -> "Result[T]":
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self._error is None

    @property
    def is_failure(self) -> bool:
        return self._error is not None

    @property
    def value(self) -> Optional[T]:
        return self._value

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    def unwrap(self) -> T:
        """Return the value or raise the stored error."""
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore[return-value]

    def map(self, fn: Callable[[T], U]) -> "Result[U]":
        if self._error is not None:
            return Result(error=self._error)
        return Result(value=fn(self._value))  # type: ignore[arg-type]

    def __repr__(self) -> str:
        if self._error is not None:
            return f"Result.failure({self._error!r})"
        return f"Result.success({self._value!r})"
