import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from functools import partial
from typing import Any, Callable, Optional, Set

logger = logging.getLogger(__name__)


class SideChannel:
    """
    Fault-tolerant, fire-and-forget side effects.

    A task submitted here is never awaited by the request that scheduled
    it. Whatever it raises is written to the log and dropped; it can never
    fail the primary operation. At most max_pending tasks are queued or
    running; anything submitted beyond that is dropped with a warning.
    """

    def __init__(
        self,
        executor: Optional[Executor] = None,
        max_workers: int = 2,
        max_pending: int = 100,
    ):
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="side-channel"
        )
        self.max_pending = max_pending
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()

    def submit(self, description: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Optional[Future]:
        with self._lock:
            if len(self._pending) >= self.max_pending:
                logger.warning(
                    f"Side task dropped ({description}): {len(self._pending)} tasks already pending"
                )
                return None
            try:
                future = self._executor.submit(fn, *args, **kwargs)
            except RuntimeError as e:
                # Executor already shut down
                logger.error(f"Side task not scheduled ({description}): {e}")
                return None
            self._pending.add(future)

        future.add_done_callback(partial(self._finished, description))
        return future

    def _finished(self, description: str, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

        if future.cancelled():
            logger.warning(f"Side task cancelled: {description}")
            return

        exc = future.exception()
        if exc is not None:
            logger.error(f"Side task failed ({description}): {exc}", exc_info=exc)
        else:
            logger.debug(f"Side task done: {description}")

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def flush(self, timeout: Optional[float] = None) -> None:
        """Block until every task scheduled so far has finished"""
        with self._lock:
            pending = list(self._pending)
        if pending:
            wait(pending, timeout=timeout)

    def shutdown(self, wait_for_tasks: bool = True) -> None:
        self._executor.shutdown(wait=wait_for_tasks)
