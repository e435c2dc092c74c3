"""Health endpoint router composition for app, database, and event target checks."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from job_intake.adapters import JobEventPublisherPort
from job_intake.db import DatabaseHealthPort


def api_create_health_router(
    db_health_service: DatabaseHealthPort,
    event_publisher: JobEventPublisherPort | None = None,
) -> APIRouter:
    """Create health-check router reporting database state and event target.

    Args:
        db_health_service: DB-layer health service interface.
        event_publisher: Optional publisher whose target is reported for diagnostics.

    Returns:
        APIRouter: Router exposing `/health` endpoint.

    Raises:
        ValueError: Raised when db_health_service is invalid.
    """

    if db_health_service is None:
        raise ValueError("db_health_service must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return application and database health state.

        Returns:
            JSONResponse: 200 when the database is usable, 503 otherwise.
        """

        payload: dict[str, object] = {
            "app": "up",
            "target": db_health_service.db_connection_label(),
            "event_target": event_publisher.publisher_target_name() if event_publisher is not None else None,
        }
        try:
            db_health = db_health_service.db_check_health()
        except ConnectionError as error:
            payload.update({"status": "degraded", "database": "down", "detail": str(error)})
            return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

        payload.update({"status": "ok", "database": db_health.status, "detail": db_health.detail})
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router
