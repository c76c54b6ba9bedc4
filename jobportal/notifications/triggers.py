"""Entry points that start notification fan-outs without blocking the caller."""

from concurrent.futures import Future
from typing import Any, Callable, Optional

from jobportal.dispatch import BackgroundDispatcher, DispatcherShutdownError
from jobportal.logging import get_logger

from .service import JobMatchNotifier

logger = get_logger(__name__, component="triggers")


class MatchTriggers:
    """Hands fan-outs to the background dispatcher.

    Callers (job approval, skill creation) get control back immediately; the
    notifier logs its own outcome. Once the dispatcher is shut down, triggers
    are logged and dropped and None is returned.
    """

    def __init__(self, notifier: JobMatchNotifier, dispatcher: BackgroundDispatcher):
        self.notifier = notifier
        self.dispatcher = dispatcher

    def job_approved(self, job_id: int) -> Optional[Future]:
        logger.info(
            f"Job {job_id} approved, scheduling match notifications",
            extra={"event": "triggers.job_approved", "job_id": job_id},
        )
        return self._submit(f"notify_for_job:{job_id}", self.notifier.notify_for_job, job_id)

    def skills_added(self, user_id: int) -> Optional[Future]:
        logger.info(
            f"Skills added for user {user_id}, scheduling match notifications",
            extra={"event": "triggers.skills_added", "user_id": user_id},
        )
        return self._submit(f"notify_for_user:{user_id}", self.notifier.notify_for_user, user_id)

    def _submit(self, task_name: str, fn: Callable[..., Any], subject_id: int) -> Optional[Future]:
        try:
            return self.dispatcher.submit(task_name, fn, subject_id)
        except DispatcherShutdownError as e:
            logger.warning(
                f"Dropped {task_name}: {e}",
                extra={"event": "triggers.dropped", "task_name": task_name},
            )
            return None
