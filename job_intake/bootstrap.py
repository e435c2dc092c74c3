"""Application bootstrap wiring for startup validation and dependency assembly."""

from fastapi import FastAPI

from job_intake.adapters import HttpJobEventPublisher
from job_intake.api import create_api_application
from job_intake.config import AppSettings, config_load_settings
from job_intake.db import (
    SQLAlchemyCoordinationStoreService,
    SQLAlchemyDatabaseHealthService,
    SQLAlchemyJobRepositoryService,
    db_create_engine,
)
from job_intake.idempotency import IdempotencyCoordinator, IdempotencyCoordinatorConfig
from job_intake.jobs import JobSubmissionOrchestrator


def bootstrap_create_application(settings: AppSettings | None = None) -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Args:
        settings: Optional pre-loaded settings; loaded from environment when omitted.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    engine = db_create_engine(database_url=resolved_settings.database_url)
    event_publisher = HttpJobEventPublisher(
        webhook_url=resolved_settings.job_event_webhook_url,
        timeout_seconds=resolved_settings.job_event_timeout_seconds,
    )
    job_service = JobSubmissionOrchestrator(
        coordinator=IdempotencyCoordinator(
            store=SQLAlchemyCoordinationStoreService(engine=engine),
            config=IdempotencyCoordinatorConfig(
                reservation_ttl_seconds=resolved_settings.idempotency_reservation_ttl_seconds,
                retention_ttl_seconds=resolved_settings.idempotency_retention_ttl_seconds,
                key_prefix=resolved_settings.idempotency_key_prefix,
            ),
        ),
        job_repository=SQLAlchemyJobRepositoryService(engine=engine),
        event_publisher=event_publisher,
    )
    return create_api_application(
        settings=resolved_settings,
        db_health_service=SQLAlchemyDatabaseHealthService(engine=engine),
        job_service=job_service,
        event_publisher=event_publisher,
    )


def bootstrap_create_coordination_store() -> SQLAlchemyCoordinationStoreService:
    """Build coordination store for non-HTTP maintenance surfaces.

    Returns:
        SQLAlchemyCoordinationStoreService: Store bound to the configured database.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    settings = config_load_settings()
    return SQLAlchemyCoordinationStoreService(engine=db_create_engine(database_url=settings.database_url))
