"""Domain models used across application layer boundaries."""

from .job_snapshot import JOB_SNAPSHOT_VERSION, domain_job_snapshot_decode, domain_job_snapshot_encode
from .models import (
    JOB_STATUS_COMPLETED,
    JOB_STATUS_FAILED,
    JOB_STATUS_PENDING,
    JOB_STATUS_RUNNING,
    JOB_STATUS_VALUES,
    HealthStatus,
    JobRecord,
)

__all__ = [
    "HealthStatus",
    "JobRecord",
    "JOB_STATUS_PENDING",
    "JOB_STATUS_RUNNING",
    "JOB_STATUS_COMPLETED",
    "JOB_STATUS_FAILED",
    "JOB_STATUS_VALUES",
    "JOB_SNAPSHOT_VERSION",
    "domain_job_snapshot_encode",
    "domain_job_snapshot_decode",
]
