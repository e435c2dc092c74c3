"""Typed interfaces for database-layer services.

All SQL access must remain in the db package and its submodules.
"""

from typing import Protocol
from uuid import UUID

from job_intake.domain import HealthStatus, JobRecord


class DatabaseHealthPort(Protocol):
    """Port definition for database connectivity verification."""

    def db_connection_label(self) -> str:
        """Return a stable label for the active database connection target.

        Returns:
            str: Database target label for diagnostics.

        Raises:
            RuntimeError: Raised when connection metadata is unavailable.
        """

    def db_check_health(self) -> HealthStatus:
        """Check database connectivity and return deterministic health payload.

        Returns:
            HealthStatus: Database health status payload.

        Raises:
            ConnectionError: Raised when database cannot be reached.
        """


class CoordinationStoreError(RuntimeError):
    """Raised when the shared coordination store cannot serve a request."""


class CoordinationStorePort(Protocol):
    """Port definition for the shared expiring key-value coordination store.

    Every mutation is either an atomic conditional insert or an unconditional
    overwrite; callers never read-modify-write an entry.
    """

    def store_set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Store value only when the key is absent or expired.

        Args:
            key: Namespaced store key.
            value: Value to store.
            ttl_seconds: Lifetime of the stored value.

        Returns:
            bool: True when this call stored the value.

        Raises:
            CoordinationStoreError: Raised when the store is unavailable.
        """

    def store_get(self, key: str) -> str | None:
        """Return the live value for a key.

        Args:
            key: Namespaced store key.

        Returns:
            str | None: Stored value, or None when absent or expired.

        Raises:
            CoordinationStoreError: Raised when the store is unavailable.
        """

    def store_set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Overwrite value and lifetime for a key regardless of current state.

        Args:
            key: Namespaced store key.
            value: Value to store.
            ttl_seconds: Lifetime of the stored value.

        Returns:
            None: Value is stored as side effect.

        Raises:
            CoordinationStoreError: Raised when the store is unavailable.
        """


class JobRepositoryPort(Protocol):
    """Port definition for durable owner-scoped job storage."""

    def db_job_insert(self, owner_id: str, job_type: str, payload: str | None) -> JobRecord:
        """Insert one pending job and return the stored row.

        Args:
            owner_id: Owner identifier.
            job_type: Job type label.
            payload: Serialized payload text or None.

        Returns:
            JobRecord: Stored row with generated id and timestamps.

        Raises:
            ValueError: Raised when inputs are blank.
            RuntimeError: Raised when persistence fails.
        """

    def db_job_get_by_id(self, job_id: UUID, owner_id: str) -> JobRecord | None:
        """Fetch one job owned by the given owner.

        Args:
            job_id: Job identifier.
            owner_id: Owner identifier.

        Returns:
            JobRecord | None: Matching row or None.

        Raises:
            RuntimeError: Raised when database read fails.
        """

    def db_job_list_by_owner(self, owner_id: str, limit: int, offset: int) -> list[JobRecord]:
        """List jobs owned by the given owner, newest first.

        Args:
            owner_id: Owner identifier.
            limit: Maximum number of rows.
            offset: Number of rows to skip.

        Returns:
            list[JobRecord]: Ordered rows.

        Raises:
            ValueError: Raised when limit or offset are invalid.
            RuntimeError: Raised when database read fails.
        """
