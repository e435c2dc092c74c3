"""Regression tests for idempotent job submission orchestration."""
# pylint: disable=duplicate-code

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import pytest

from job_intake.adapters import JobCreatedEvent, JobEventPublishError
from job_intake.db import CoordinationStoreError
from job_intake.domain import JOB_STATUS_PENDING, JobRecord
from job_intake.idempotency import IdempotencyCoordinator, IdempotencyCoordinatorConfig
from job_intake.jobs import (
    SUBMISSION_CACHED,
    SUBMISSION_CONFLICT,
    SUBMISSION_CREATED,
    SUBMISSION_REJECTED,
    JobFinalizeError,
    JobPersistenceError,
    JobPublishError,
    JobReplayError,
    JobSubmissionOrchestrator,
)

_OWNER_A = "owner-a"
_OWNER_B = "owner-b"


class _InMemoryCoordinationStore:
    """Thread-safe expiring store stub with a manually advanced clock."""

    def __init__(self):
        """Initialize empty store at clock zero.

        Returns:
            None: Initializer does not return values.
        """

        self.now_seconds = 0.0
        self.fail_writes = False
        self.access_count = 0
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[str, float]] = {}

    def store_set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Store value when the key is absent or expired.

        Args:
            key: Store key.
            value: Value.
            ttl_seconds: Lifetime.

        Returns:
            bool: True when stored.
        """

        with self._lock:
            self.access_count += 1
            existing = self._entries.get(key)
            if existing is not None and existing[1] > self.now_seconds:
                return False
            self._entries[key] = (value, self.now_seconds + ttl_seconds)
            return True

    def store_get(self, key: str) -> str | None:
        """Return live value or None.

        Args:
            key: Store key.

        Returns:
            str | None: Live value.
        """

        with self._lock:
            self.access_count += 1
            existing = self._entries.get(key)
            if existing is None or existing[1] <= self.now_seconds:
                return None
            return existing[0]

    def store_set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Overwrite value, or fail when configured to.

        Args:
            key: Store key.
            value: Value.
            ttl_seconds: Lifetime.

        Raises:
            CoordinationStoreError: Raised when `fail_writes` is set.
        """

        if self.fail_writes:
            raise CoordinationStoreError("store unavailable")
        with self._lock:
            self.access_count += 1
            self._entries[key] = (value, self.now_seconds + ttl_seconds)

    def store_expiry_for(self, key_suffix: str) -> float | None:
        """Return expiry of the single key ending with the suffix.

        Args:
            key_suffix: Key suffix to match.

        Returns:
            float | None: Expiry clock value.
        """

        with self._lock:
            for key, (_, expires_at) in self._entries.items():
                if key.endswith(key_suffix):
                    return expires_at
        return None

    def store_put_raw(self, key: str, value: str, ttl_seconds: int) -> None:
        """Seed one raw entry for replay tests."""

        with self._lock:
            self._entries[key] = (value, self.now_seconds + ttl_seconds)


class _InMemoryJobRepository:
    """Owner-scoped job repository stub recording inserts."""

    def __init__(self):
        """Initialize empty repository.

        Returns:
            None: Initializer does not return values.
        """

        self.fail_inserts = False
        self.insert_started = threading.Event()
        self.insert_release: threading.Event | None = None
        self._lock = threading.Lock()
        self._jobs: list[JobRecord] = []
        self._clock = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

    @property
    def jobs(self) -> list[JobRecord]:
        """Return a copy of stored jobs."""

        with self._lock:
            return list(self._jobs)

    def db_job_insert(self, owner_id: str, job_type: str, payload: str | None) -> JobRecord:
        """Store one pending job.

        Args:
            owner_id: Owner identifier.
            job_type: Job type.
            payload: Payload text.

        Returns:
            JobRecord: Stored job.

        Raises:
            RuntimeError: Raised when `fail_inserts` is set.
        """

        self.insert_started.set()
        if self.insert_release is not None:
            self.insert_release.wait(timeout=5)
        if self.fail_inserts:
            raise RuntimeError("failed to insert job")
        with self._lock:
            self._clock = self._clock + timedelta(seconds=1)
            job = JobRecord(
                job_id=uuid4(),
                owner_id=owner_id,
                job_type=job_type,
                payload=payload,
                status=JOB_STATUS_PENDING,
                created_at_utc=self._clock,
                updated_at_utc=self._clock,
            )
            self._jobs.append(job)
            return job

    def db_job_get_by_id(self, job_id: UUID, owner_id: str) -> JobRecord | None:
        """Return owner-scoped job or None."""

        with self._lock:
            for job in self._jobs:
                if job.job_id == job_id and job.owner_id == owner_id:
                    return job
        return None

    def db_job_list_by_owner(self, owner_id: str, limit: int, offset: int) -> list[JobRecord]:
        """Return owner jobs newest first."""

        with self._lock:
            owned_jobs = [job for job in self._jobs if job.owner_id == owner_id]
        owned_jobs.sort(key=lambda job: job.created_at_utc, reverse=True)
        return owned_jobs[offset : offset + limit]


class _RecordingPublisher:
    """Publisher stub that records delivered events."""

    def __init__(self, fail: bool = False):
        """Initialize publisher stub.

        Args:
            fail: Whether every publish raises.
        """

        self.fail = fail
        self.events: list[JobCreatedEvent] = []
        self._lock = threading.Lock()

    def publisher_target_name(self) -> str:
        """Return deterministic target label."""

        return "stub://jobs.created"

    def publisher_publish_job_created(self, event: JobCreatedEvent) -> None:
        """Record event or raise.

        Args:
            event: Event to record.

        Raises:
            JobEventPublishError: Raised when `fail` is set.
        """

        if self.fail:
            raise JobEventPublishError("broker unreachable")
        with self._lock:
            self.events.append(event)


def _build_orchestrator(
    store: _InMemoryCoordinationStore | None = None,
    repository: _InMemoryJobRepository | None = None,
    publisher: _RecordingPublisher | None = None,
) -> tuple[JobSubmissionOrchestrator, _InMemoryCoordinationStore, _InMemoryJobRepository, _RecordingPublisher]:
    """Build orchestrator wired to in-memory collaborators.

    Returns:
        tuple: Orchestrator and its collaborators.
    """

    resolved_store = store or _InMemoryCoordinationStore()
    resolved_repository = repository or _InMemoryJobRepository()
    resolved_publisher = publisher or _RecordingPublisher()
    orchestrator = JobSubmissionOrchestrator(
        coordinator=IdempotencyCoordinator(
            store=resolved_store,
            config=IdempotencyCoordinatorConfig(reservation_ttl_seconds=30, retention_ttl_seconds=86400),
        ),
        job_repository=resolved_repository,
        event_publisher=resolved_publisher,
    )
    return orchestrator, resolved_store, resolved_repository, resolved_publisher


def test_jobs_submission_walkthrough_created_replayed_isolated_and_rejected() -> None:
    """Create, replay, isolate by key, and reject an empty key.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when outcomes diverge from the idempotency contract.
    """

    orchestrator, _, repository, publisher = _build_orchestrator()
    first_key = str(uuid4())
    second_key = str(uuid4())

    first = orchestrator.job_submit(_OWNER_A, first_key, "sleep", {"seconds": 5})
    assert first.kind == SUBMISSION_CREATED
    assert first.job is not None
    assert first.job.status == JOB_STATUS_PENDING
    assert first.job.payload == '{"seconds":5}'

    replay = orchestrator.job_submit(_OWNER_A, first_key, "sleep", {"seconds": 5})
    assert replay.kind == SUBMISSION_CACHED
    assert replay.job == first.job

    other = orchestrator.job_submit(_OWNER_A, second_key, "sleep", {"seconds": 5})
    assert other.kind == SUBMISSION_CREATED
    assert other.job is not None
    assert other.job.job_id != first.job.job_id

    rejected = orchestrator.job_submit(_OWNER_A, "", "sleep", {"seconds": 5})
    assert rejected.kind == SUBMISSION_REJECTED
    assert rejected.reason is not None and rejected.reason.startswith("invalid key")

    assert len(repository.jobs) == 2
    assert [event.job_id for event in publisher.events] == [first.job.job_id, other.job.job_id]


def test_jobs_submission_concurrent_same_key_creates_exactly_one_job() -> None:
    """Concurrent identical submissions produce one job and one event.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when more than one job or event is produced.
    """

    orchestrator, _, repository, publisher = _build_orchestrator()
    shared_key = str(uuid4())
    start_barrier = threading.Barrier(16)

    def _submit():
        start_barrier.wait(timeout=5)
        return orchestrator.job_submit(_OWNER_A, shared_key, "sleep", {"seconds": 5})

    with ThreadPoolExecutor(max_workers=16) as executor:
        outcomes = list(executor.map(lambda _: _submit(), range(16)))

    created = [outcome for outcome in outcomes if outcome.kind == SUBMISSION_CREATED]
    assert len(created) == 1
    assert len(repository.jobs) == 1
    assert len(publisher.events) == 1
    for outcome in outcomes:
        assert outcome.kind in {SUBMISSION_CREATED, SUBMISSION_CACHED, SUBMISSION_CONFLICT}
        if outcome.kind == SUBMISSION_CACHED:
            assert outcome.job == created[0].job


def test_jobs_submission_second_caller_gets_conflict_while_first_in_flight() -> None:
    """A submission arriving during the winner's critical section is told to retry.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when the second caller is not rejected with conflict.
    """

    repository = _InMemoryJobRepository()
    repository.insert_release = threading.Event()
    orchestrator, _, _, publisher = _build_orchestrator(repository=repository)
    shared_key = str(uuid4())
    winner_outcomes = []

    winner = threading.Thread(
        target=lambda: winner_outcomes.append(orchestrator.job_submit(_OWNER_A, shared_key, "sleep", None))
    )
    winner.start()
    assert repository.insert_started.wait(timeout=5)

    loser = orchestrator.job_submit(_OWNER_A, shared_key, "sleep", None)
    repository.insert_release.set()
    winner.join(timeout=5)

    assert loser.kind == SUBMISSION_CONFLICT
    assert winner_outcomes[0].kind == SUBMISSION_CREATED
    assert len(repository.jobs) == 1
    assert len(publisher.events) == 1


def test_jobs_submission_abandoned_reservation_blocks_until_ttl_expires() -> None:
    """An unfinalized reservation yields conflict until it expires, then a fresh create.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when expiry semantics are not honored.
    """

    orchestrator, store, repository, _ = _build_orchestrator()
    abandoned_key = str(uuid4())
    assert IdempotencyCoordinator(store=store).idempotency_reserve(_OWNER_A, abandoned_key)

    store.now_seconds = 29.0
    assert orchestrator.job_submit(_OWNER_A, abandoned_key, "sleep", None).kind == SUBMISSION_CONFLICT
    assert repository.jobs == []

    store.now_seconds = 30.0
    outcome = orchestrator.job_submit(_OWNER_A, abandoned_key, "sleep", None)
    assert outcome.kind == SUBMISSION_CREATED
    assert len(repository.jobs) == 1


def test_jobs_submission_finalized_response_uses_retention_window() -> None:
    """Finalized entries outlive the reservation TTL and expire after retention.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when retention semantics are not honored.
    """

    orchestrator, store, repository, _ = _build_orchestrator()
    key = str(uuid4())
    created = orchestrator.job_submit(_OWNER_A, key, "sleep", None)

    assert store.store_expiry_for(key) == 86400
    store.now_seconds = 3600.0
    assert orchestrator.job_submit(_OWNER_A, key, "sleep", None).job == created.job

    store.now_seconds = 86400.0
    assert orchestrator.job_submit(_OWNER_A, key, "sleep", None).kind == SUBMISSION_CREATED
    assert len(repository.jobs) == 2


def test_jobs_submission_same_key_is_scoped_per_owner() -> None:
    """The same idempotency key under two owners creates two jobs.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when owners share idempotency records.
    """

    orchestrator, _, repository, _ = _build_orchestrator()
    key = str(uuid4())

    first = orchestrator.job_submit(_OWNER_A, key, "sleep", None)
    second = orchestrator.job_submit(_OWNER_B, key, "sleep", None)

    assert first.kind == SUBMISSION_CREATED
    assert second.kind == SUBMISSION_CREATED
    assert len(repository.jobs) == 2


@pytest.mark.parametrize(
    "raw_key",
    [None, "   ", "not-a-uuid", "{12345678-1234-5678-1234-567812345678}", "12345678123456781234567812345678"],
)
def test_jobs_submission_rejects_invalid_keys_without_side_effects(raw_key: str | None) -> None:
    """Malformed keys are rejected before any store, job, or publish access.

    Args:
        raw_key: Candidate malformed key.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when side effects occur.
    """

    orchestrator, store, repository, publisher = _build_orchestrator()

    outcome = orchestrator.job_submit(_OWNER_A, raw_key, "sleep", None)

    assert outcome.kind == SUBMISSION_REJECTED
    assert store.access_count == 0
    assert repository.jobs == []
    assert publisher.events == []


def test_jobs_submission_rejects_blank_type_and_unserializable_payload() -> None:
    """Request-shape errors are rejected before reservation.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when invalid requests reserve the key.
    """

    orchestrator, store, repository, _ = _build_orchestrator()
    key = str(uuid4())

    assert orchestrator.job_submit(_OWNER_A, key, "  ", None).kind == SUBMISSION_REJECTED
    invalid_payload = orchestrator.job_submit(_OWNER_A, key, "sleep", {"bad": object()})
    assert invalid_payload.kind == SUBMISSION_REJECTED
    assert invalid_payload.reason == "invalid payload"
    assert store.access_count == 0

    assert orchestrator.job_submit(_OWNER_A, key, "sleep", None).kind == SUBMISSION_CREATED
    assert len(repository.jobs) == 1


def test_jobs_submission_lost_reservation_race_is_logged_once(caplog: pytest.LogCaptureFixture) -> None:
    """A reservation lost between classify and reserve yields one conflict log line.

    Returns:
        None: Assertions validate behavior.
    """

    class _StaleReadStore(_InMemoryCoordinationStore):
        """Store whose reads lag behind a competing writer."""

        def store_get(self, key: str) -> str | None:
            super().store_get(key)
            return None

    orchestrator, store, repository, _ = _build_orchestrator(store=_StaleReadStore())
    key = str(uuid4())
    store.store_put_raw(f"idempotency:{_OWNER_A}:{key}", IdempotencyCoordinator.IN_PROGRESS_SENTINEL, 30)

    with caplog.at_level(logging.INFO, logger="job_intake"):
        outcome = orchestrator.job_submit(_OWNER_A, key, "sleep", None)

    assert outcome.kind == SUBMISSION_CONFLICT
    assert repository.jobs == []
    conflict_messages = [
        record.getMessage() for record in caplog.records if "reservation" in record.getMessage().lower()
    ]
    assert conflict_messages == [f"Submission conflict for owner_id={_OWNER_A} key={key}: reservation lost"]


def test_jobs_submission_persistence_failure_leaves_reservation_to_expire() -> None:
    """Persistence failure raises, publishes nothing, and keeps the key blocked until TTL.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when the failure path has side effects.
    """

    repository = _InMemoryJobRepository()
    repository.fail_inserts = True
    orchestrator, store, _, publisher = _build_orchestrator(repository=repository)
    key = str(uuid4())

    with pytest.raises(JobPersistenceError) as error_info:
        orchestrator.job_submit(_OWNER_A, key, "sleep", None)
    assert error_info.value.error_code == "JOB_PERSISTENCE_ERROR"
    assert publisher.events == []
    assert orchestrator.job_submit(_OWNER_A, key, "sleep", None).kind == SUBMISSION_CONFLICT

    repository.fail_inserts = False
    store.now_seconds = 31.0
    assert orchestrator.job_submit(_OWNER_A, key, "sleep", None).kind == SUBMISSION_CREATED


def test_jobs_submission_publish_failure_is_surfaced_and_not_finalized() -> None:
    """Publish failure raises a distinct error and never caches a false success.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when the failure is converted into success.
    """

    orchestrator, store, repository, _ = _build_orchestrator(publisher=_RecordingPublisher(fail=True))
    key = str(uuid4())

    with pytest.raises(JobPublishError) as error_info:
        orchestrator.job_submit(_OWNER_A, key, "sleep", None)

    assert len(repository.jobs) == 1
    assert error_info.value.job_id == repository.jobs[0].job_id
    assert error_info.value.error_code == "JOB_PUBLISH_ERROR"
    assert store.store_expiry_for(key) == 30
    assert orchestrator.job_submit(_OWNER_A, key, "sleep", None).kind == SUBMISSION_CONFLICT


def test_jobs_submission_finalize_failure_keeps_created_job() -> None:
    """Finalize failure raises after the job was created and announced once.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when the job is rolled back or republished.
    """

    orchestrator, store, repository, publisher = _build_orchestrator()
    store.fail_writes = True

    with pytest.raises(JobFinalizeError) as error_info:
        orchestrator.job_submit(_OWNER_A, str(uuid4()), "sleep", None)

    assert len(repository.jobs) == 1
    assert len(publisher.events) == 1
    assert error_info.value.job_id == repository.jobs[0].job_id


def test_jobs_submission_undecodable_cached_response_raises_replay_error() -> None:
    """A corrupt cached snapshot is surfaced, not silently ignored.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when replay silently recreates the job.
    """

    orchestrator, store, repository, _ = _build_orchestrator()
    key = str(uuid4())
    store.store_put_raw(f"idempotency:{_OWNER_A}:{key}", '{"version": 99}', 60)

    with pytest.raises(JobReplayError):
        orchestrator.job_submit(_OWNER_A, key, "sleep", None)
    assert repository.jobs == []


def test_jobs_submission_reads_are_owner_scoped_and_newest_first() -> None:
    """Get and list only expose the caller's own jobs.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when another owner's job is visible.
    """

    orchestrator, _, _, _ = _build_orchestrator()
    older = orchestrator.job_submit(_OWNER_B, str(uuid4()), "sleep", None).job
    newer = orchestrator.job_submit(_OWNER_B, str(uuid4()), "resize", None).job
    assert older is not None and newer is not None

    assert orchestrator.job_get(_OWNER_B, older.job_id) == older
    assert orchestrator.job_get(_OWNER_A, older.job_id) is None
    assert orchestrator.job_list(_OWNER_B, limit=10, offset=0) == [newer, older]
    assert orchestrator.job_list(_OWNER_A, limit=10, offset=0) == []


def test_jobs_submission_rejects_missing_dependencies() -> None:
    """Constructor validates its collaborators.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when None dependencies are accepted.
    """

    with pytest.raises(ValueError, match="event_publisher must not be None"):
        JobSubmissionOrchestrator(
            coordinator=IdempotencyCoordinator(store=_InMemoryCoordinationStore()),
            job_repository=_InMemoryJobRepository(),
            event_publisher=None,
        )
