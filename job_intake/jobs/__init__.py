"""Job layer package for idempotent submission orchestration."""

from .errors import (
    JobFinalizeError,
    JobPersistenceError,
    JobPublishError,
    JobReplayError,
    JobSubmissionError,
)
from .interfaces import (
    SUBMISSION_CACHED,
    SUBMISSION_CONFLICT,
    SUBMISSION_CREATED,
    SUBMISSION_REJECTED,
    JobSubmissionOutcome,
    JobSubmissionPort,
)
from .submission_orchestrator import JobSubmissionOrchestrator

__all__ = [
    "SUBMISSION_CREATED",
    "SUBMISSION_CACHED",
    "SUBMISSION_CONFLICT",
    "SUBMISSION_REJECTED",
    "JobSubmissionOutcome",
    "JobSubmissionPort",
    "JobSubmissionOrchestrator",
    "JobSubmissionError",
    "JobPersistenceError",
    "JobPublishError",
    "JobFinalizeError",
    "JobReplayError",
]
