"""Typed interfaces for job-layer orchestration responsibilities."""

from dataclasses import dataclass
from typing import Any, Final, Protocol
from uuid import UUID

from job_intake.domain import JobRecord

SUBMISSION_CREATED: Final[str] = "created"
SUBMISSION_CACHED: Final[str] = "cached"
SUBMISSION_CONFLICT: Final[str] = "conflict"
SUBMISSION_REJECTED: Final[str] = "rejected"


@dataclass(frozen=True)
class JobSubmissionOutcome:
    """Result contract for one job submission.

    Attributes:
        kind: One of `created`, `cached`, `conflict`, `rejected`.
        job: Created or replayed job for `created` and `cached`.
        reason: Human-readable reason for `conflict` and `rejected`.
    """

    kind: str
    job: JobRecord | None = None
    reason: str | None = None


class JobSubmissionPort(Protocol):
    """Port definition for idempotent job submission and owner-scoped reads."""

    def job_submit(
        self,
        owner_id: str,
        idempotency_key: str | None,
        job_type: str,
        payload: Any,
    ) -> JobSubmissionOutcome:
        """Submit one job creation request at most once per idempotency key.

        Args:
            owner_id: Authenticated owner identifier.
            idempotency_key: Caller-supplied idempotency key.
            job_type: Job type label.
            payload: JSON-serializable payload or None.

        Returns:
            JobSubmissionOutcome: Classified submission result.

        Raises:
            JobSubmissionError: Raised for failures inside the critical section.
        """

    def job_get(self, owner_id: str, job_id: UUID) -> JobRecord | None:
        """Fetch one job scoped to its owner.

        Args:
            owner_id: Authenticated owner identifier.
            job_id: Job identifier.

        Returns:
            JobRecord | None: Matching job or None.

        Raises:
            RuntimeError: Raised when the job store read fails.
        """

    def job_list(self, owner_id: str, limit: int, offset: int) -> list[JobRecord]:
        """List jobs scoped to their owner, newest first.

        Args:
            owner_id: Authenticated owner identifier.
            limit: Maximum number of jobs.
            offset: Number of jobs to skip.

        Returns:
            list[JobRecord]: Ordered jobs.

        Raises:
            RuntimeError: Raised when the job store read fails.
        """
