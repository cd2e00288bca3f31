"""Poll loop that drives a provider job from its identifier to a terminal state.

The same loop serves image edits, motion-control videos, transcriptions and
the client-side video poll in ``genproxy.client``: callers inject the status
fetch and a ``PollPolicy`` instead of carrying their own timing constants.

Waiting is done with asyncio primitives, so a job being polled only
suspends its own task.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple

from genproxy.errors import JobTimedOut, PollCancelled, PollError, ProviderFailure
from genproxy.jobs.models import JobRecord, JobState

logger = logging.getLogger(__name__)

COMPLETED_STATUS = "completed"
FAILED_STATUS = "failed"

# Statuses the provider documents as still running. Anything else that is
# neither completed nor failed is still retried, but logged loudly.
IN_PROGRESS_STATUSES = frozenset(
    {"created", "pending", "queued", "starting", "processing", "running", "in_progress"}
)


@dataclass(frozen=True)
class PollPolicy:
    interval_s: float
    max_attempts: int

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.interval_s < 0:
            raise ValueError("interval_s must not be negative")


@dataclass
class StatusResponse:
    """One answer from a status endpoint: HTTP status plus decoded body."""
    http_status: int
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.http_status < 300


StatusFetcher = Callable[[str], Awaitable[StatusResponse]]
Sleeper = Callable[[float], Awaitable[Any]]


@dataclass
class PollOutcome:
    job: JobRecord
    provider_status: Optional[int] = None

    @property
    def state(self) -> JobState:
        return self.job.state

    @property
    def payload(self) -> Any:
        return self.job.payload

    @property
    def error(self) -> Optional[str]:
        return self.job.error

    def raise_for_state(self) -> Any:
        """Return the completed payload, or raise the matching typed error."""
        state = self.job.state
        if state == JobState.COMPLETED:
            return self.job.payload
        if state == JobState.FAILED:
            raise ProviderFailure(self.job.error or "Job failed")
        if state == JobState.TIMED_OUT:
            raise JobTimedOut(self.job.error or "Job timed out")
        if state == JobState.POLL_ERROR:
            raise PollError(self.job.error or "Polling failed", self.provider_status)
        raise RuntimeError(f"Job {self.job.job_id} is not terminal ({state.value})")


def classify_status(response: StatusResponse) -> Tuple[JobState, Any, Optional[str]]:
    """Map one status response to (state, payload, error message)."""
    if not response.ok:
        return (
            JobState.POLL_ERROR,
            response.body,
            f"Polling error: {response.http_status} - {response.body}",
        )

    body = response.body if isinstance(response.body, dict) else {}
    status = body.get("status")
    if status == COMPLETED_STATUS:
        return JobState.COMPLETED, body, None
    if status == FAILED_STATUS:
        return JobState.FAILED, body, body.get("error") or "Unknown error"

    if status not in IN_PROGRESS_STATUSES:
        logger.warning("Unrecognized job status %r, treating as still processing", status)
    return JobState.PROCESSING, body, None


async def _wait(interval_s: float, cancel: Optional[asyncio.Event], sleep: Optional[Sleeper]) -> None:
    if sleep is not None:
        await sleep(interval_s)
        return
    if cancel is None:
        await asyncio.sleep(interval_s)
        return
    try:
        await asyncio.wait_for(cancel.wait(), timeout=interval_s)
    except asyncio.TimeoutError:
        pass


async def poll_job(
    job: JobRecord,
    fetch_status: StatusFetcher,
    policy: PollPolicy,
    cancel: Optional[asyncio.Event] = None,
    sleep: Optional[Sleeper] = None,
) -> PollOutcome:
    """Check ``job`` until it is terminal or the attempt budget runs out.

    Poll errors (transport failures, non-2xx answers) stop the loop at once
    and are never retried. Setting ``cancel`` stops further status checks
    and raises ``PollCancelled``.
    """
    while True:
        if cancel is not None and cancel.is_set():
            logger.info("Polling cancelled for job %s after %d attempt(s)", job.job_id, job.attempts)
            raise PollCancelled(f"Polling cancelled for job {job.job_id}")

        try:
            response = await fetch_status(job.job_id)
        except Exception as exc:
            job.attempts += 1
            job.error = f"Polling error: {exc}"
            job.advance(JobState.POLL_ERROR)
            logger.error("Status check for job %s raised: %s", job.job_id, exc)
            return PollOutcome(job)

        job.attempts += 1
        state, payload, error = classify_status(response)

        if state != JobState.PROCESSING:
            job.payload = payload
            job.error = error
            job.advance(state)
            log = logger.info if state == JobState.COMPLETED else logger.error
            log(
                "Job %s (%s) finished as %s after %d attempt(s)%s",
                job.job_id,
                job.kind.value,
                state.value,
                job.attempts,
                f": {error}" if error else "",
            )
            return PollOutcome(job, response.http_status)

        if job.state == JobState.PENDING:
            job.advance(JobState.PROCESSING)
        logger.debug(
            "Job %s status %r, attempt %d/%d",
            job.job_id,
            payload.get("status"),
            job.attempts,
            policy.max_attempts,
        )

        if job.attempts >= policy.max_attempts:
            job.error = f"Job {job.job_id} timed out after {job.attempts} status checks"
            job.advance(JobState.TIMED_OUT)
            logger.error(job.error)
            return PollOutcome(job, response.http_status)

        await _wait(policy.interval_s, cancel, sleep)
