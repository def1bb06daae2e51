"""
Waiting on asynchronous OpenAI jobs (file batches, assistant runs).

Polling happens at a constant interval until the job leaves its pending
statuses. Only one terminal status counts as success; everything else is
raised as JobFailed. Stopping the wait (timeout or cancel) never cancels
the remote job itself.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, FrozenSet, Optional

from pdf_openai_querytool.errors import JobCancelled, JobFailed, JobTimeout

logger = logging.getLogger(__name__)

BATCH_PENDING: FrozenSet[str] = frozenset({"queued", "in_progress"})
RUN_PENDING: FrozenSet[str] = frozenset({"queued", "in_progress", "cancelling"})
SUCCESS = "completed"


@dataclass(frozen=True)
class PollPolicy:
    interval: float = 1.4
    max_wait: Optional[float] = None
    cancel: Optional[threading.Event] = None


def wait_for_job(
    poll: Callable[[], Any],
    policy: PollPolicy,
    *,
    pending: FrozenSet[str] = BATCH_PENDING,
    success: str = SUCCESS,
    initial: Any = None,
    what: str = "job",
    clock: Callable[[], float] = time.monotonic,
) -> Any:
    """
    Poll until the job's `status` is terminal and return the final object.

    `initial` is the object returned when the job was created; when it is
    already terminal no poll is made. Raises JobFailed for any terminal
    status other than `success`, JobTimeout once `policy.max_wait` seconds
    have elapsed, and JobCancelled when `policy.cancel` is set.
    """
    cancel = policy.cancel or threading.Event()
    started = clock()
    job = initial
    status = _status(job) if job is not None else None
    polls = 0

    while status is None or status in pending:
        if cancel.wait(policy.interval):
            raise JobCancelled(what)
        job = poll()
        polls += 1
        status = _status(job)
        logger.debug("%s status after poll %d: %s", what, polls, status)
        if status in pending and policy.max_wait is not None and clock() - started >= policy.max_wait:
            raise JobTimeout(what, clock() - started, status)

    if status != success:
        raise JobFailed(what, status, _error_detail(job))
    return job


def _status(job: Any) -> str:
    return str(getattr(job, "status", None) or "unknown")


def _error_detail(job: Any) -> Optional[str]:
    last_error = getattr(job, "last_error", None)
    if last_error is None:
        required_action = getattr(job, "required_action", None)
        action_type = getattr(required_action, "type", None)
        return f"required action: {action_type}" if action_type else None
    message = getattr(last_error, "message", None)
    code = getattr(last_error, "code", None)
    if message and code:
        return f"{code}: {message}"
    return message or code or None
