"""Fire-and-forget execution of background work on a thread pool."""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from contextvars import copy_context
from typing import Any, Callable, Optional

from jobportal.logging import get_logger
from jobportal.logging.context import log_context

logger = get_logger(__name__, component="dispatcher")


class DispatcherShutdownError(RuntimeError):
    """Raised when work is submitted after shutdown."""

    pass


class BackgroundDispatcher:
    """Runs tasks off the caller's thread.

    The submitted callable is wrapped so that its start, completion and any
    failure are logged; failures are swallowed and the returned Future
    resolves to None in that case. The caller's logging context travels
    with the task.
    """

    def __init__(self, max_workers: int = 4, logger_instance: Optional[logging.Logger] = None):
        self.max_workers = max_workers
        self.logger = logger_instance or logger
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="jobportal-worker"
        )
        self._shutdown = False

    def submit(self, task_name: str, fn: Callable[..., Any], *args: Any) -> Future:
        """Schedule fn(*args) and return immediately.

        Raises:
            DispatcherShutdownError: If shutdown() has already been called
        """
        if self._shutdown:
            raise DispatcherShutdownError(f"Cannot submit {task_name!r}: dispatcher is shut down")

        ctx = copy_context()
        return self._executor.submit(ctx.run, self._run, task_name, fn, args)

    def _run(self, task_name: str, fn: Callable[..., Any], args: tuple) -> Any:
        with log_context(task=task_name):
            started = time.monotonic()
            self.logger.debug(
                f"Task {task_name} started", extra={"event": "dispatcher.task.started"}
            )
            try:
                value = fn(*args)
            except Exception as e:
                self.logger.error(
                    f"Task {task_name} failed: {e}",
                    exc_info=True,
                    extra={"event": "dispatcher.task.failed", "error_type": type(e).__name__},
                )
                return None

            self.logger.debug(
                f"Task {task_name} completed",
                extra={
                    "event": "dispatcher.task.completed",
                    "duration_ms": round((time.monotonic() - started) * 1000, 1),
                },
            )
            return value

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work; with wait=True block until queued tasks finish."""
        if self._shutdown:
            return
        self._shutdown = True
        self.logger.info(
            "Shutting down background dispatcher",
            extra={"event": "dispatcher.shutdown", "wait": wait},
        )
        self._executor.shutdown(wait=wait)
