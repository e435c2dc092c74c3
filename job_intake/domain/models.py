"""Typed domain models shared across runtime layers.

This module provides simple data contracts for cross-layer communication
between the db, adapter, job, and API layers.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Final
from uuid import UUID

JOB_STATUS_PENDING: Final[str] = "PENDING"
JOB_STATUS_RUNNING: Final[str] = "RUNNING"
JOB_STATUS_COMPLETED: Final[str] = "COMPLETED"
JOB_STATUS_FAILED: Final[str] = "FAILED"
JOB_STATUS_VALUES: Final[tuple[str, ...]] = (
    JOB_STATUS_PENDING,
    JOB_STATUS_RUNNING,
    JOB_STATUS_COMPLETED,
    JOB_STATUS_FAILED,
)


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for service health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str


@dataclass(frozen=True)
class JobRecord:
    """Persisted job row as seen by the intake core.

    `job_type`, `payload`, and `owner_id` never change after creation.
    `status` is advanced only by downstream processing.

    Attributes:
        job_id: Generated unique job identifier.
        owner_id: Authenticated owner the job is scoped to.
        job_type: Caller-supplied job type label.
        payload: Serialized JSON payload text, or None.
        status: One of `JOB_STATUS_VALUES`.
        created_at_utc: Row creation timestamp in UTC.
        updated_at_utc: Row last-update timestamp in UTC.
    """

    job_id: UUID
    owner_id: str
    job_type: str
    payload: str | None
    status: str
    created_at_utc: datetime
    updated_at_utc: datetime
