"""
Retry utilities with exponential backoff.

Used by the REST collaborators (Bonzo Finance API). The relay core never
retries on its own: a failed turn is reported to the caller instead.
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Awaitable, Callable, ParamSpec, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
P = ParamSpec("P")


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 2  # retries after the first attempt
    base_delay: float = 5.0  # seconds
    max_delay: float = 60.0
    exponential_base: float = 2.0
    jitter: float = 1.0  # upper bound of the random extra delay, seconds
    retryable_exceptions: tuple[type[BaseException], ...] = field(
        default_factory=lambda: (TimeoutError, ConnectionError)
    )

    def delay_for(self, attempt: int) -> float:
        delay = min(self.base_delay * (self.exponential_base**attempt), self.max_delay)
        if self.jitter:
            delay += random.uniform(0, self.jitter)
        return delay


DEFAULT_RETRY_CONFIG = RetryConfig()


async def execute_with_retry(
    func: Callable[P, Awaitable[T]],
    *args: P.args,
    config: RetryConfig | None = None,
    on_retry: Callable[[int, BaseException], None] | None = None,
    **kwargs: P.kwargs,
) -> T:
    """
    Await ``func`` until it succeeds or the retry budget is spent.

    Only exceptions listed in ``config.retryable_exceptions`` are retried;
    anything else propagates immediately. After the last attempt the final
    exception is re-raised.
    """
    config = config or DEFAULT_RETRY_CONFIG
    attempts = config.max_retries + 1
    name = getattr(func, "__name__", repr(func))

    for attempt in range(attempts):
        try:
            return await func(*args, **kwargs)
        except config.retryable_exceptions as e:
            if attempt >= attempts - 1:
                logger.error("All %d attempts failed for %s. Last error: %s", attempts, name, e)
                raise

            delay = config.delay_for(attempt)
            logger.warning(
                "Attempt %d/%d failed for %s: %s. Retrying in %.1fs...",
                attempt + 1,
                attempts,
                name,
                e,
                delay,
            )
            if on_retry:
                on_retry(attempt + 1, e)
            await asyncio.sleep(delay)

    raise RuntimeError(f"Unexpected state in retry logic for {name}")
