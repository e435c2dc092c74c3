"""Database health service implementations for connectivity checks."""

from typing import Final

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from job_intake.domain import HealthStatus

from .interfaces import DatabaseHealthPort


class SQLAlchemyDatabaseHealthService(DatabaseHealthPort):
    """Database health service that checks connectivity and required tables."""

    _REQUIRED_TABLES: Final[tuple[str, ...]] = ("job", "idempotency_record")

    def __init__(self, engine: Engine):
        """Initialize database health service.

        Args:
            engine: SQLAlchemy engine used for connectivity checks.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_connection_label(self) -> str:
        """Return the target database URL for diagnostics.

        Returns:
            str: Rendered engine URL string without password.
        """

        return self._engine.url.render_as_string(hide_password=True)

    def db_check_health(self) -> HealthStatus:
        """Verify connectivity and that migrated tables are present.

        Returns:
            HealthStatus: Health payload with status and diagnostic detail.

        Raises:
            ConnectionError: Raised when connectivity check fails or tables are missing.
        """

        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                missing_tables = [
                    table_name
                    for table_name in self._REQUIRED_TABLES
                    if connection.execute(
                        text("SELECT to_regclass(:table_name) IS NOT NULL AS table_present"),
                        {"table_name": table_name},
                    ).scalar_one()
                    is not True
                ]
        except SQLAlchemyError as error:
            raise ConnectionError("database connectivity check failed") from error

        if missing_tables:
            raise ConnectionError(f"database schema is missing tables: {', '.join(missing_tables)}")
        return HealthStatus(status="ok", detail="database connectivity and schema verified")
