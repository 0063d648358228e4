"""Retry with exponential backoff for calls to external services."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from ledger_ml.errors import DependencyUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    *,
    service: str,
    attempts: int = 3,
    base_delay: float = 1.0,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
) -> T:
    """Await `operation()` up to `attempts` times.

    Waits `base_delay * 2**n` seconds after the n-th failure (1s, 2s, 4s with
    the defaults). Raises `DependencyUnavailableError` once attempts run out.
    """
    last_error: BaseException | None = None
    for attempt in range(attempts):
        try:
            return await operation()
        except retry_on as e:
            last_error = e
            if attempt == attempts - 1:
                break
            delay = base_delay * 2**attempt
            logger.warning(
                "%s call failed (attempt %d/%d), retrying in %.1fs: %s",
                service,
                attempt + 1,
                attempts,
                delay,
                e,
            )
            await asyncio.sleep(delay)

    logger.error("%s unavailable after %d attempts: %s", service, attempts, last_error)
    raise DependencyUnavailableError(service, last_error)  # type: ignore[arg-type]
