"""Database layer package for all SQL and persistence boundaries."""

from .coordination_store import SQLAlchemyCoordinationStoreService
from .health import SQLAlchemyDatabaseHealthService
from .interfaces import (
    CoordinationStoreError,
    CoordinationStorePort,
    DatabaseHealthPort,
    JobRepositoryPort,
)
from .job_repository import SQLAlchemyJobRepositoryService
from .session import db_create_engine

__all__ = [
    "CoordinationStoreError",
    "CoordinationStorePort",
    "DatabaseHealthPort",
    "JobRepositoryPort",
    "SQLAlchemyCoordinationStoreService",
    "SQLAlchemyDatabaseHealthService",
    "SQLAlchemyJobRepositoryService",
    "db_create_engine",
]
