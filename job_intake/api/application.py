"""FastAPI application factory for the job intake service."""

from fastapi import FastAPI

from job_intake.adapters import JobEventPublisherPort
from job_intake.config import AppSettings
from job_intake.db import DatabaseHealthPort
from job_intake.jobs import JobSubmissionPort

from .errors import api_register_exception_handlers
from .routers import api_create_health_router, api_create_jobs_router


def create_api_application(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort,
    job_service: JobSubmissionPort,
    event_publisher: JobEventPublisherPort | None = None,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        db_health_service: Database health service used by health endpoints.
        job_service: Job-layer orchestrator behind the `/jobs` endpoints.
        event_publisher: Optional publisher reported by the health endpoint.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        ValueError: Raised when routers reject their dependencies.
    """

    application = FastAPI(title="Job Intake")
    api_register_exception_handlers(application)

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return a minimal service banner.

        Returns:
            dict[str, str]: Service name, status, and environment.
        """

        return {
            "service": "job-intake",
            "status": "ready",
            "environment": settings.environment_name,
        }

    application.include_router(
        api_create_health_router(db_health_service=db_health_service, event_publisher=event_publisher)
    )
    application.include_router(api_create_jobs_router(settings=settings, job_service=job_service))

    return application
