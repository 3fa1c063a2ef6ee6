"""Success-or-failure value returned by repository and facade calls."""

from __future__ import annotations

from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class Result(Generic[T]):
    """Outcome of an operation that may fail.

    Exactly one of ``value`` and ``error`` is meaningful. Callers inspect
    ``is_success`` (or call :meth:`get_or_raise`) instead of catching.
    """

    __slots__ = ("_value", "_error")

    def __init__(self, value: Optional[T] = None, error: Optional[BaseException] = None) -> None:
        self._value = value
        self._error = error

    @classmethod
    def success(cls, value: T = None) -> "Result[T]":
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
    def error(self) -> Optional[BaseException]:
        return self._error

    def get_or_none(self) -> Optional[T]:
        return self._value if self._error is None else None

    def get_or_raise(self) -> T:
        if self._error is not None:
            raise self._error
        return self._value

    def map(self, transform: Callable[[T], U]) -> "Result[U]":
        """Apply ``transform`` to a successful value.

        Exceptions raised by ``transform`` turn into a failed result.
        """
        if self._error is not None:
            return Result.failure(self._error)
        try:
            return Result.success(transform(self._value))
        except Exception as exc:
            return Result.failure(exc)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return self._value == other._value and self._error is other._error

    def __repr__(self) -> str:
        if self._error is not None:
            return f"Result.failure({self._error!r})"
        return f"Result.success({self._value!r})"
