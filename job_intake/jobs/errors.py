"""Typed failures raised from inside the job submission critical section."""

from __future__ import annotations

from uuid import UUID


class JobSubmissionError(RuntimeError):
    """Base exception for server-side job submission failures.

    Attributes:
        error_code: Deterministic error code for API responses.
        job_id: Identifier of the persisted job when one exists.
    """

    error_code = "JOB_SUBMISSION_ERROR"

    def __init__(self, message: str, job_id: UUID | None = None):
        super().__init__(message)
        self.job_id = job_id


class JobPersistenceError(JobSubmissionError):
    """Job store write failed; no job exists and the reservation will expire."""

    error_code = "JOB_PERSISTENCE_ERROR"


class JobPublishError(JobSubmissionError):
    """Job was persisted but its creation event was not delivered."""

    error_code = "JOB_PUBLISH_ERROR"


class JobFinalizeError(JobSubmissionError):
    """Job was created and announced but its response could not be cached."""

    error_code = "JOB_FINALIZE_ERROR"


class JobReplayError(JobSubmissionError):
    """Cached response for a finalized key could not be decoded."""

    error_code = "JOB_REPLAY_ERROR"
