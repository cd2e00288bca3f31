import pytest
from pydantic import ValidationError

from genproxy.jobs.models import GenerationResult, JobKind, JobRecord, JobState, ResultKind


def test_terminal_state_never_regresses():
    job = JobRecord(job_id="j", kind=JobKind.TRANSCRIPTION)
    job.advance(JobState.PROCESSING)
    job.advance(JobState.COMPLETED)

    with pytest.raises(ValueError):
        job.advance(JobState.PROCESSING)
    with pytest.raises(ValueError):
        job.advance(JobState.FAILED)


def test_processing_cannot_return_to_pending():
    job = JobRecord(job_id="j", kind=JobKind.VIDEO)
    job.advance(JobState.PROCESSING)
    with pytest.raises(ValueError):
        job.advance(JobState.PENDING)


def test_job_identity_is_immutable():
    job = JobRecord(job_id="j", kind=JobKind.VIDEO)
    with pytest.raises(ValidationError):
        job.job_id = "other"
    assert job.attempts == 0
    assert job.state == JobState.PENDING
    assert job.submitted_at.tzinfo is not None


def test_result_payload_must_not_be_empty():
    with pytest.raises(ValidationError):
        GenerationResult(kind=ResultKind.IMAGE_URLS, payload=[])
    assert GenerationResult(kind=ResultKind.TEXT, payload=["hi"]).payload == ["hi"]
