"""Background job runner.

Jobs are coroutine factories so a failed attempt can be retried with a fresh
coroutine. Every task is owned by the runner until it finishes; `shutdown()`
waits for pending jobs.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

JobFactory = Callable[[], Awaitable[object]]


class JobRunner:
    """Runs named asynchronous jobs with retry and logging."""

    def __init__(self, max_attempts: int = 3, base_delay: float = 1.0):
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._tasks: set[asyncio.Task] = set()
        self._closed = False
        self.succeeded = 0
        self.failed = 0

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, name: str, job: JobFactory) -> asyncio.Task | None:
        """Schedule `job` on the running loop; None once the runner is shut down."""
        if self._closed:
            logger.warning("Job runner closed, dropping job %s", name)
            return None

        task = asyncio.create_task(self._run(name, job), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.debug("Submitted job %s", name)
        return task

    async def _run(self, name: str, job: JobFactory) -> None:
        for attempt in range(1, self._max_attempts + 1):
            try:
                await job()
            except asyncio.CancelledError:
                logger.warning("Job %s cancelled", name)
                raise
            except Exception as e:
                if attempt == self._max_attempts:
                    self.failed += 1
                    logger.error(
                        "Job %s failed after %d attempts: %s",
                        name,
                        attempt,
                        e,
                        exc_info=True,
                    )
                    return
                delay = self._base_delay * 2 ** (attempt - 1)
                logger.warning(
                    "Job %s failed (attempt %d/%d), retrying in %.1fs: %s",
                    name,
                    attempt,
                    self._max_attempts,
                    delay,
                    e,
                )
                await asyncio.sleep(delay)
            else:
                self.succeeded += 1
                logger.info("Job %s completed", name)
                return

    async def shutdown(self, timeout: float | None = 30.0) -> None:
        """Stop accepting jobs and wait for the pending ones (cancel on timeout)."""
        self._closed = True
        if not self._tasks:
            return

        logger.info("Waiting for %d background jobs", len(self._tasks))
        tasks = list(self._tasks)
        _, still_running = await asyncio.wait(tasks, timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            logger.warning("Cancelled %d unfinished background jobs", len(still_running))
            await asyncio.gather(*still_running, return_exceptions=True)
