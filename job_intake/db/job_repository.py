"""Database service for owner-scoped job persistence."""

from __future__ import annotations

from typing import Any, Final
from uuid import UUID

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from job_intake.domain import JOB_STATUS_PENDING, JobRecord

from .interfaces import JobRepositoryPort


class SQLAlchemyJobRepositoryService(JobRepositoryPort):
    """SQLAlchemy-backed job repository.

    Reads are always scoped by owner so a job id alone never exposes another
    owner's row.
    """

    _JOB_COLUMNS: Final[str] = "job_id, owner_id, job_type, payload, status, created_at_utc, updated_at_utc"

    def __init__(self, engine: Engine):
        """Initialize job persistence service.

        Args:
            engine: SQLAlchemy engine used for all persistence operations.

        Returns:
            None: This initializer does not return a value.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_job_insert(self, owner_id: str, job_type: str, payload: str | None) -> JobRecord:
        """Insert one pending job and return the stored row.

        Args:
            owner_id: Owner identifier.
            job_type: Job type label.
            payload: Serialized payload text or None.

        Returns:
            JobRecord: Stored row with generated id and timestamps.

        Raises:
            ValueError: Raised when owner_id or job_type are blank.
            RuntimeError: Raised when persistence fails.
        """

        normalized_owner_id = self._validate_non_empty_text(owner_id, "owner_id")
        normalized_job_type = self._validate_non_empty_text(job_type, "job_type")

        try:
            with self._engine.begin() as connection:
                row = connection.execute(
                    text(
                        "INSERT INTO job (owner_id, job_type, payload, status, created_at_utc, updated_at_utc) "
                        "VALUES (:owner_id, :job_type, :payload, :status, now(), now()) "
                        f"RETURNING {self._JOB_COLUMNS}"
                    ),
                    {
                        "owner_id": normalized_owner_id,
                        "job_type": normalized_job_type,
                        "payload": payload,
                        "status": JOB_STATUS_PENDING,
                    },
                ).mappings().one()
                return self._map_job_record(row)
        except SQLAlchemyError as error:
            raise RuntimeError("failed to insert job") from error

    def db_job_get_by_id(self, job_id: UUID, owner_id: str) -> JobRecord | None:
        """Fetch one job owned by the given owner.

        Args:
            job_id: Job identifier.
            owner_id: Owner identifier.

        Returns:
            JobRecord | None: Matching row or None.

        Raises:
            ValueError: Raised when owner_id is blank.
            RuntimeError: Raised when database read fails.
        """

        normalized_owner_id = self._validate_non_empty_text(owner_id, "owner_id")

        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text(
                        f"SELECT {self._JOB_COLUMNS} FROM job "
                        "WHERE job_id = :job_id AND owner_id = :owner_id"
                    ),
                    {"job_id": job_id, "owner_id": normalized_owner_id},
                ).mappings().first()
                if row is None:
                    return None
                return self._map_job_record(row)
        except SQLAlchemyError as error:
            raise RuntimeError("failed to fetch job by id") from error

    def db_job_list_by_owner(self, owner_id: str, limit: int, offset: int) -> list[JobRecord]:
        """List jobs owned by the given owner, newest first.

        Args:
            owner_id: Owner identifier.
            limit: Maximum number of rows.
            offset: Number of rows to skip.

        Returns:
            list[JobRecord]: Rows ordered by creation time descending.

        Raises:
            ValueError: Raised when owner_id is blank or limit/offset are invalid.
            RuntimeError: Raised when database read fails.
        """

        normalized_owner_id = self._validate_non_empty_text(owner_id, "owner_id")
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if offset < 0:
            raise ValueError("offset must be >= 0")

        try:
            with self._engine.connect() as connection:
                rows = connection.execute(
                    text(
                        f"SELECT {self._JOB_COLUMNS} FROM job "
                        "WHERE owner_id = :owner_id "
                        "ORDER BY created_at_utc DESC, job_id DESC "
                        "LIMIT :limit OFFSET :offset"
                    ),
                    {"owner_id": normalized_owner_id, "limit": limit, "offset": offset},
                ).mappings().all()
                return [self._map_job_record(row) for row in rows]
        except SQLAlchemyError as error:
            raise RuntimeError("failed to list jobs by owner") from error

    def _map_job_record(self, row: Any) -> JobRecord:
        """Map SQLAlchemy row mapping to typed job record.

        Args:
            row: SQLAlchemy mapping row.

        Returns:
            JobRecord: Typed job record.

        Raises:
            KeyError: Raised when row structure is incompatible.
        """

        return JobRecord(
            job_id=row["job_id"],
            owner_id=row["owner_id"],
            job_type=row["job_type"],
            payload=row["payload"],
            status=row["status"],
            created_at_utc=row["created_at_utc"],
            updated_at_utc=row["updated_at_utc"],
        )

    def _validate_non_empty_text(self, value: str, field_name: str) -> str:
        """Validate required text input and return stripped value.

        Args:
            value: Candidate string value.
            field_name: Field name for error reporting.

        Returns:
            str: Stripped non-empty value.

        Raises:
            ValueError: Raised when value is blank.
        """

        stripped_value = (value or "").strip()
        if not stripped_value:
            raise ValueError(f"{field_name} must not be blank")
        return stripped_value
