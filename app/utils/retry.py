"""
Retry Executor
Runs a failable coroutine with pure exponential backoff (no jitter)
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from app.core.errors import is_retryable_error, parse_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(initial_delay: float, attempt: int) -> float:
    """Delay in milliseconds before the retry that follows `attempt` (0-based)."""
    return initial_delay * (2 ** attempt)


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    initial_delay: float = 1000,
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
) -> T:
    """
    Await `operation()` up to `max_retries + 1` times.

    Non-retryable failures propagate on first occurrence. Retryable ones are
    retried after `initial_delay * 2**attempt` milliseconds until the retries
    run out, then the last failure is raised.
    """
    sleep = sleep or asyncio.sleep
    max_retries = max(max_retries, 0)
    last_error: Optional[BaseException] = None

    for attempt in range(max_retries + 1):
        try:
            return await operation()
        except Exception as e:
            last_error = e

            if not is_retryable_error(e):
                raise

            if attempt == max_retries:
                break

            delay = backoff_delay(initial_delay, attempt)
            message, _ = parse_error(e)
            logger.warning(f"Retry attempt {attempt + 1}/{max_retries} after {delay:g}ms: {message}")
            await sleep(delay / 1000)

    message, _ = parse_error(last_error)
    logger.error(f"Giving up after {max_retries + 1} attempts: {message}")
    raise last_error
