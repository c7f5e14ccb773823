from __future__ import annotations

from collections.abc import Callable, Coroutine
from functools import wraps
from typing import Any, TypeVar

T = TypeVar("T")


def status_tuple(
    fn: Callable[..., Coroutine[Any, Any, T]],
) -> Callable[..., Coroutine[Any, Any, tuple[bool, T | str]]]:
    """Make an adapter coroutine return ``(ok, value)`` instead of raising.

    On failure ``value`` is the exception message, or the exception type name
    when the message is empty (``asyncio.wait_for`` raises a bare
    ``TimeoutError``).
    """

    @wraps(fn)
    async def wrapper(self: Any, *args: Any, **kwargs: Any) -> tuple[bool, T | str]:
        try:
            return True, await fn(self, *args, **kwargs)
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            self.logger.warning(f"{fn.__name__} failed: {message}")
            return False, message

    return wrapper  # type: ignore[return-value]
