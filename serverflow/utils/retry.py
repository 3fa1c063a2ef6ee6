from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from ..result import Result

T = TypeVar("T")

logger = logging.getLogger(__name__)


def compute_backoff(
    attempt: int,
    initial_delay: float = 1.0,
    factor: float = 2.0,
    max_delay: float = 10.0,
) -> float:
    """Compute the capped exponential delay before retry number ``attempt``.

    ``attempt`` is zero based: the wait after the first failure is
    ``initial_delay``.
    """
    delay = initial_delay
    for _ in range(attempt):
        delay = min(delay * factor, max_delay)
    return min(delay, max_delay)


async def retry_io(
    operation: Callable[[], Awaitable[T]],
    times: int = 3,
    initial_delay: float = 1.0,
    factor: float = 2.0,
    max_delay: float = 10.0,
) -> Result[T]:
    """Run ``operation`` up to ``times`` times with exponential backoff.

    Sleeps happen only between attempts. The failure of the final attempt is
    returned unchanged inside the result.

    Args:
        operation: Zero-argument coroutine factory.
        times: Total number of attempts (at least one is always made).
        initial_delay: Seconds to wait after the first failure.
        factor: Multiplier applied to the delay after each wait.
        max_delay: Upper bound for a single wait, in seconds.
    """
    current_delay = initial_delay
    for attempt in range(max(times, 1) - 1):
        try:
            return Result.success(await operation())
        except Exception as exc:
            logger.debug(
                f"Attempt {attempt + 1}/{times} failed: {exc!r}; retrying in {current_delay:.3f}s"
            )
            await asyncio.sleep(current_delay)
            current_delay = min(current_delay * factor, max_delay)

    try:
        return Result.success(await operation())
    except Exception as exc:
        return Result.failure(exc)
