"""Versioned JSON snapshot codec for cached job responses."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Final
from uuid import UUID

from .models import JOB_STATUS_VALUES, JobRecord

JOB_SNAPSHOT_VERSION: Final[int] = 1


def domain_job_snapshot_encode(job: JobRecord) -> str:
    """Serialize one job record into a versioned snapshot string.

    Args:
        job: Job record to serialize.

    Returns:
        str: Compact JSON snapshot text.

    Raises:
        ValueError: Raised when job is None.
    """

    if job is None:
        raise ValueError("job must not be None")

    snapshot_payload = {
        "version": JOB_SNAPSHOT_VERSION,
        "job": {
            "id": str(job.job_id),
            "owner_id": job.owner_id,
            "type": job.job_type,
            "payload": job.payload,
            "status": job.status,
            "created_at": job.created_at_utc.isoformat(),
            "updated_at": job.updated_at_utc.isoformat(),
        },
    }
    return json.dumps(snapshot_payload, separators=(",", ":"), sort_keys=True)


def domain_job_snapshot_decode(snapshot_text: str) -> JobRecord:
    """Restore one job record from a versioned snapshot string.

    Args:
        snapshot_text: Snapshot text produced by `domain_job_snapshot_encode`.

    Returns:
        JobRecord: Restored job record.

    Raises:
        ValueError: Raised when the snapshot is malformed or has an unknown version.
    """

    try:
        snapshot_payload = json.loads(snapshot_text)
    except (TypeError, json.JSONDecodeError) as error:
        raise ValueError("job snapshot is not valid JSON") from error

    if not isinstance(snapshot_payload, dict):
        raise ValueError("job snapshot must be a JSON object")
    version = snapshot_payload.get("version")
    if version != JOB_SNAPSHOT_VERSION:
        raise ValueError(f"unsupported job snapshot version={version}")

    job_payload = snapshot_payload.get("job")
    if not isinstance(job_payload, dict):
        raise ValueError("job snapshot is missing the job object")

    payload_value = job_payload.get("payload")
    if payload_value is not None and not isinstance(payload_value, str):
        raise ValueError("job snapshot payload must be a string or null")

    status_value = _domain_snapshot_require_text(job_payload, "status")
    if status_value not in JOB_STATUS_VALUES:
        raise ValueError(f"job snapshot has unknown status={status_value}")

    try:
        return JobRecord(
            job_id=UUID(_domain_snapshot_require_text(job_payload, "id")),
            owner_id=_domain_snapshot_require_text(job_payload, "owner_id"),
            job_type=_domain_snapshot_require_text(job_payload, "type"),
            payload=payload_value,
            status=status_value,
            created_at_utc=datetime.fromisoformat(_domain_snapshot_require_text(job_payload, "created_at")),
            updated_at_utc=datetime.fromisoformat(_domain_snapshot_require_text(job_payload, "updated_at")),
        )
    except ValueError as error:
        raise ValueError(f"job snapshot has invalid field value: {error}") from error


def _domain_snapshot_require_text(job_payload: dict[str, Any], field_name: str) -> str:
    """Return one required string field from the snapshot job object.

    Args:
        job_payload: Decoded job object.
        field_name: Required field name.

    Returns:
        str: Field value.

    Raises:
        ValueError: Raised when the field is missing or not a string.
    """

    value = job_payload.get(field_name)
    if not isinstance(value, str):
        raise ValueError(f"job snapshot field {field_name} must be a string")
    return value
