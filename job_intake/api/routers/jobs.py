"""Job API router composition for idempotent submission and owner-scoped reads."""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Header, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from job_intake.config import AppSettings
from job_intake.db import CoordinationStoreError
from job_intake.domain import JobRecord
from job_intake.jobs import (
    SUBMISSION_CACHED,
    SUBMISSION_CONFLICT,
    SUBMISSION_CREATED,
    JobPublishError,
    JobSubmissionError,
    JobSubmissionPort,
)

from ..errors import api_error_response

logger = logging.getLogger(__name__)


class JobCreateRequest(BaseModel):
    """Request body for job submission.

    Attributes:
        type: Job type label.
        payload: Arbitrary JSON payload or null.
    """

    type: str = Field(max_length=255)
    payload: Any = None


def api_create_jobs_router(settings: AppSettings, job_service: JobSubmissionPort) -> APIRouter:
    """Create job router with submit, detail, and list endpoints.

    Args:
        settings: Runtime settings used for pagination defaults.
        job_service: Job-layer submission orchestrator.

    Returns:
        APIRouter: Router exposing `/jobs` APIs.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")
    if job_service is None:
        raise ValueError("job_service must not be None")

    router = APIRouter(prefix="/jobs", tags=["jobs"])

    @router.post("")
    def api_job_submit(
        request: JobCreateRequest,
        owner_id: str | None = Header(default=None, alias="X-Owner-Id"),
        idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    ) -> JSONResponse:
        """Submit one job at most once per idempotency key.

        Returns:
            JSONResponse: Created or replayed job, or an error payload.
        """

        normalized_owner_id = (owner_id or "").strip()
        if not normalized_owner_id:
            return api_error_response(status.HTTP_401_UNAUTHORIZED, "OWNER_REQUIRED", "owner identity is required")

        try:
            outcome = job_service.job_submit(
                owner_id=normalized_owner_id,
                idempotency_key=idempotency_key,
                job_type=request.type,
                payload=request.payload,
            )
        except CoordinationStoreError:
            logger.exception("Idempotency store unavailable for owner_id=%s", normalized_owner_id)
            return api_error_response(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                "IDEMPOTENCY_STORE_UNAVAILABLE",
                "idempotency store unavailable, retry later",
            )
        except JobSubmissionError as error:
            status_code = (
                status.HTTP_502_BAD_GATEWAY
                if isinstance(error, JobPublishError)
                else status.HTTP_500_INTERNAL_SERVER_ERROR
            )
            return api_error_response(status_code, error.error_code, str(error))

        if outcome.kind in (SUBMISSION_CREATED, SUBMISSION_CACHED) and outcome.job is not None:
            return JSONResponse(content=api_serialize_job_record(outcome.job), status_code=status.HTTP_201_CREATED)
        if outcome.kind == SUBMISSION_CONFLICT:
            return api_error_response(status.HTTP_409_CONFLICT, "JOB_IN_PROGRESS", outcome.reason or "conflict")
        return api_error_response(
            status.HTTP_400_BAD_REQUEST,
            "SUBMISSION_REJECTED",
            outcome.reason or "invalid request",
        )

    @router.get("/{job_id}")
    def api_job_detail(
        job_id: UUID,
        owner_id: str | None = Header(default=None, alias="X-Owner-Id"),
    ) -> JSONResponse:
        """Return one job owned by the caller.

        Args:
            job_id: Job identifier.

        Returns:
            JSONResponse: Job payload or 404 when absent.
        """

        normalized_owner_id = (owner_id or "").strip()
        if not normalized_owner_id:
            return api_error_response(status.HTTP_401_UNAUTHORIZED, "OWNER_REQUIRED", "owner identity is required")

        job = job_service.job_get(owner_id=normalized_owner_id, job_id=job_id)
        if job is None:
            return api_error_response(status.HTTP_404_NOT_FOUND, "JOB_NOT_FOUND", "job not found")
        return JSONResponse(content=api_serialize_job_record(job), status_code=status.HTTP_200_OK)

    @router.get("")
    def api_job_list(
        owner_id: str | None = Header(default=None, alias="X-Owner-Id"),
        limit: int = Query(default=settings.api_default_limit, ge=1),
        offset: int = Query(default=0, ge=0),
    ) -> JSONResponse:
        """Return jobs owned by the caller, newest first.

        Args:
            limit: Max rows to return.
            offset: Rows to skip.

        Returns:
            JSONResponse: Jobs list payload.
        """

        normalized_owner_id = (owner_id or "").strip()
        if not normalized_owner_id:
            return api_error_response(status.HTTP_401_UNAUTHORIZED, "OWNER_REQUIRED", "owner identity is required")

        applied_limit = min(limit, settings.api_max_limit)
        jobs = job_service.job_list(owner_id=normalized_owner_id, limit=applied_limit, offset=offset)
        payload = {
            "items": [api_serialize_job_record(job) for job in jobs],
            "page": {
                "limit": limit,
                "applied_limit": applied_limit,
                "offset": offset,
                "returned": len(jobs),
            },
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router


def api_serialize_job_record(job: JobRecord) -> dict[str, object]:
    """Serialize typed job record to JSON response payload.

    Args:
        job: Typed job record.

    Returns:
        dict[str, object]: JSON-serializable job payload.
    """

    return {
        "id": str(job.job_id),
        "type": job.job_type,
        "payload": job.payload,
        "status": job.status,
        "created_at": job.created_at_utc.isoformat(),
        "updated_at": job.updated_at_utc.isoformat(),
    }
