"""Job and result data models for provider-side async work."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


class JobKind(str, Enum):
    IMAGE = "image-generation"
    VIDEO = "video-generation"
    TRANSCRIPTION = "transcription"


class JobState(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed-out"
    POLL_ERROR = "poll-error"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset(
    {JobState.COMPLETED, JobState.FAILED, JobState.TIMED_OUT, JobState.POLL_ERROR}
)


class JobRecord(BaseModel):
    """One outstanding unit of work at the provider.

    Lives only for the request (or client polling session) that created it.
    State moves forward only: pending -> processing -> terminal.
    """
    job_id: str = Field(frozen=True)
    kind: JobKind = Field(frozen=True)
    submitted_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), frozen=True
    )
    attempts: int = 0
    state: JobState = JobState.PENDING
    error: Optional[str] = None
    payload: Any = None

    def advance(self, state: JobState) -> None:
        if self.state.is_terminal:
            raise ValueError(
                f"Job {self.job_id} is already {self.state.value}, cannot move to {state.value}"
            )
        if state == JobState.PENDING and self.state != JobState.PENDING:
            raise ValueError(f"Job {self.job_id} cannot return to pending")
        self.state = state


class ResultKind(str, Enum):
    IMAGE_URLS = "image-urls"
    VIDEO_URLS = "video-urls"
    TEXT = "text"


class GenerationResult(BaseModel):
    """Normalized output of a completed job."""
    kind: ResultKind
    payload: List[str]

    @field_validator("payload")
    @classmethod
    def _non_empty(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("result payload must not be empty")
        return value
