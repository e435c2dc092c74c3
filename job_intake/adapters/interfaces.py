"""Typed interfaces for adapter-layer responsibilities."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from job_intake.domain import JobRecord


@dataclass(frozen=True)
class JobCreatedEvent:
    """Projection of a newly created job announced to downstream consumers.

    Attributes:
        job_id: Created job identifier.
        job_type: Job type label.
        payload: Serialized payload text or None.
        owner_id: Owner identifier.
    """

    job_id: UUID
    job_type: str
    payload: str | None
    owner_id: str

    @classmethod
    def from_job(cls, job: JobRecord) -> "JobCreatedEvent":
        """Build the event projection for one job record.

        Args:
            job: Persisted job record.

        Returns:
            JobCreatedEvent: Event projection.
        """

        return cls(job_id=job.job_id, job_type=job.job_type, payload=job.payload, owner_id=job.owner_id)

    def event_as_payload(self) -> dict[str, object]:
        """Return JSON-serializable event body.

        Returns:
            dict[str, object]: Event body.
        """

        return {
            "event": "job.created",
            "job_id": str(self.job_id),
            "type": self.job_type,
            "payload": self.payload,
            "owner_id": self.owner_id,
        }


class JobEventPublisherPort(Protocol):
    """Port definition for announcing job creation downstream."""

    def publisher_target_name(self) -> str:
        """Return publisher target identifier for diagnostics.

        Returns:
            str: Human-readable target identifier.

        Raises:
            RuntimeError: Raised when target metadata is unavailable.
        """

    def publisher_publish_job_created(self, event: JobCreatedEvent) -> None:
        """Deliver one job-created event.

        Args:
            event: Event to deliver.

        Returns:
            None: Event is delivered as side effect.

        Raises:
            ConnectionError: Raised when the event could not be delivered.
        """
