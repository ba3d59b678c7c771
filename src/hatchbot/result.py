"""Uniform success/failure outcome returned by every bot operation."""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

UNKNOWN_ERROR = "Unknown error"


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    """Outcome of an operation.

    ``error`` is set exactly when ``success`` is False.
    """

    success: bool
    error: str | None = None
    data: T | None = None

    def __post_init__(self) -> None:
        if self.success and self.error is not None:
            raise ValueError("successful result cannot carry an error")
        if not self.success and not self.error:
            raise ValueError("failed result requires an error message")

    def __bool__(self) -> bool:
        return self.success


def success(data: T | None = None) -> Result[T]:
    return Result(success=True, error=None, data=data)


def failure(
    message: str | BaseException | None = UNKNOWN_ERROR, data: Any = None
) -> Result[Any]:
    if isinstance(message, BaseException):
        text = str(message) or message.__class__.__name__
    else:
        text = message or UNKNOWN_ERROR
    return Result(success=False, error=text, data=data)


def with_error_handling(
    fn: Callable[..., Awaitable[T]],
) -> Callable[..., Awaitable[Result[T]]]:
    """Wrap an async callable so it returns a Result instead of raising."""

    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> Result[T]:
        try:
            value = await fn(*args, **kwargs)
        except Exception as exc:
            logger.exception(
                "result.wrapped_error",
                function=getattr(fn, "__qualname__", repr(fn)),
                error=str(exc),
            )
            return failure(exc)
        return success(value)

    return wrapper
