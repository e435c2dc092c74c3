"""Job-layer submission orchestrator with exactly-once creation per idempotency key."""

from __future__ import annotations

import json
import logging
from typing import Any
from uuid import UUID

from job_intake.adapters import JobCreatedEvent, JobEventPublisherPort
from job_intake.db import JobRepositoryPort
from job_intake.domain import JobRecord, domain_job_snapshot_decode, domain_job_snapshot_encode
from job_intake.idempotency import IdempotencyCoordinator, InvalidIdempotencyKeyError, idempotency_validate_key

from .errors import JobFinalizeError, JobPersistenceError, JobPublishError, JobReplayError
from .interfaces import (
    SUBMISSION_CACHED,
    SUBMISSION_CONFLICT,
    SUBMISSION_CREATED,
    SUBMISSION_REJECTED,
    JobSubmissionOutcome,
    JobSubmissionPort,
)

logger = logging.getLogger(__name__)


class JobSubmissionOrchestrator(JobSubmissionPort):
    """Concrete orchestrator for idempotent job creation.

    Only the caller that wins the reservation touches the job store or the
    publisher. Failures inside the critical section are raised to the caller
    and never retried here.
    """

    def __init__(
        self,
        coordinator: IdempotencyCoordinator,
        job_repository: JobRepositoryPort,
        event_publisher: JobEventPublisherPort,
    ):
        """Initialize submission orchestrator dependencies.

        Args:
            coordinator: Idempotency coordinator.
            job_repository: DB-layer job store.
            event_publisher: Adapter announcing job creation.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if coordinator is None:
            raise ValueError("coordinator must not be None")
        if job_repository is None:
            raise ValueError("job_repository must not be None")
        if event_publisher is None:
            raise ValueError("event_publisher must not be None")

        self._coordinator = coordinator
        self._job_repository = job_repository
        self._event_publisher = event_publisher

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
            JobSubmissionOutcome: `created`, `cached`, `conflict`, or `rejected`.

        Raises:
            ValueError: Raised when owner_id is blank.
            CoordinationStoreError: Raised when the coordination store is unavailable.
            JobPersistenceError: Raised when the job could not be stored.
            JobPublishError: Raised when the stored job could not be announced.
            JobFinalizeError: Raised when the final response could not be cached.
            JobReplayError: Raised when a cached response could not be decoded.
        """

        normalized_owner_id = (owner_id or "").strip()
        if not normalized_owner_id:
            raise ValueError("owner_id must not be blank")

        try:
            normalized_key = idempotency_validate_key(idempotency_key)
        except InvalidIdempotencyKeyError as error:
            return JobSubmissionOutcome(kind=SUBMISSION_REJECTED, reason=f"invalid key: {error}")

        normalized_job_type = (job_type or "").strip()
        if not normalized_job_type:
            return JobSubmissionOutcome(kind=SUBMISSION_REJECTED, reason="job type must not be blank")

        try:
            payload_text = self._job_serialize_payload(payload)
        except ValueError as error:
            return JobSubmissionOutcome(kind=SUBMISSION_REJECTED, reason=str(error))

        classification = self._coordinator.idempotency_classify(owner_id=normalized_owner_id, key=normalized_key)
        logger.debug(
            "Idempotency key=%s for owner_id=%s classified as %s",
            normalized_key,
            normalized_owner_id,
            classification.state,
        )
        if classification.classification_is_finalized():
            return JobSubmissionOutcome(
                kind=SUBMISSION_CACHED,
                job=self._job_decode_cached_response(normalized_key, classification.cached_response),
            )
        if classification.classification_is_in_flight():
            logger.info(
                "Submission conflict for owner_id=%s key=%s: reservation held", normalized_owner_id, normalized_key
            )
            return JobSubmissionOutcome(kind=SUBMISSION_CONFLICT, reason="job is being processed")

        if not self._coordinator.idempotency_reserve(owner_id=normalized_owner_id, key=normalized_key):
            logger.info(
                "Submission conflict for owner_id=%s key=%s: reservation lost", normalized_owner_id, normalized_key
            )
            return JobSubmissionOutcome(kind=SUBMISSION_CONFLICT, reason="job is being processed")

        try:
            job = self._job_repository.db_job_insert(
                owner_id=normalized_owner_id,
                job_type=normalized_job_type,
                payload=payload_text,
            )
        except (RuntimeError, ConnectionError, TimeoutError) as error:
            logger.exception("Job persistence failed for owner_id=%s key=%s", normalized_owner_id, normalized_key)
            raise JobPersistenceError("failed to persist job") from error

        try:
            self._event_publisher.publisher_publish_job_created(JobCreatedEvent.from_job(job))
        except (ConnectionError, TimeoutError, RuntimeError) as error:
            logger.error(
                "Job %s persisted but job-created event was not delivered to %s: %s",
                job.job_id,
                self._event_publisher.publisher_target_name(),
                error,
            )
            raise JobPublishError(f"job {job.job_id} persisted but not announced", job_id=job.job_id) from error

        try:
            self._coordinator.idempotency_finalize(
                owner_id=normalized_owner_id,
                key=normalized_key,
                response=domain_job_snapshot_encode(job),
            )
        except (RuntimeError, ValueError) as error:
            logger.exception("Job %s created but its response could not be cached", job.job_id)
            raise JobFinalizeError(f"job {job.job_id} created but response not cached", job_id=job.job_id) from error

        logger.info("Created job %s type=%s for owner_id=%s", job.job_id, job.job_type, job.owner_id)
        return JobSubmissionOutcome(kind=SUBMISSION_CREATED, job=job)

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

        return self._job_repository.db_job_get_by_id(job_id=job_id, owner_id=owner_id)

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

        return self._job_repository.db_job_list_by_owner(owner_id=owner_id, limit=limit, offset=offset)

    def _job_serialize_payload(self, payload: Any) -> str | None:
        """Serialize the opaque payload to JSON text.

        Args:
            payload: JSON-compatible value or None.

        Returns:
            str | None: JSON text, or None when no payload was given.

        Raises:
            ValueError: Raised when the payload is not JSON-serializable.
        """

        if payload is None:
            return None
        try:
            return json.dumps(payload, separators=(",", ":"), allow_nan=False)
        except (TypeError, ValueError) as error:
            raise ValueError("invalid payload") from error

    def _job_decode_cached_response(self, key: str, cached_response: str | None) -> JobRecord:
        """Decode a finalized snapshot for replay.

        Args:
            key: Idempotency key for diagnostics.
            cached_response: Cached snapshot text.

        Returns:
            JobRecord: Replayed job.

        Raises:
            JobReplayError: Raised when the snapshot cannot be decoded.
        """

        try:
            return domain_job_snapshot_decode(cached_response or "")
        except ValueError as error:
            logger.error("Cached response for key=%s could not be decoded: %s", key, error)
            raise JobReplayError("failed to decode cached job response") from error
