"""PostgreSQL-backed expiring key-value store for idempotency coordination."""

from __future__ import annotations

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from .interfaces import CoordinationStoreError, CoordinationStorePort


class SQLAlchemyCoordinationStoreService(CoordinationStorePort):
    """Coordination store on the `idempotency_record` table.

    An expired row is treated exactly like a missing row. The conditional
    upsert in `store_set_if_absent` is the single linearization point for
    concurrent writers of one key.
    """

    def __init__(self, engine: Engine):
        """Initialize coordination store service.

        Args:
            engine: SQLAlchemy engine used for all store operations.

        Returns:
            None: This initializer does not return a value.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def store_set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Atomically store value when the key is absent or expired.

        Args:
            key: Namespaced store key.
            value: Value to store.
            ttl_seconds: Lifetime of the stored value.

        Returns:
            bool: True when this call stored the value.

        Raises:
            ValueError: Raised when inputs are invalid.
            CoordinationStoreError: Raised when the statement fails.
        """

        normalized_key = self._store_validate_inputs(key=key, value=value, ttl_seconds=ttl_seconds)

        try:
            with self._engine.begin() as connection:
                stored_row = connection.execute(
                    text(
                        "INSERT INTO idempotency_record (record_key, record_value, expires_at_utc) "
                        "VALUES (:record_key, :record_value, "
                        "now() + make_interval(secs => CAST(:ttl_seconds AS double precision))) "
                        "ON CONFLICT (record_key) DO UPDATE SET "
                        "record_value = EXCLUDED.record_value, "
                        "expires_at_utc = EXCLUDED.expires_at_utc, "
                        "created_at_utc = now(), "
                        "updated_at_utc = now() "
                        "WHERE idempotency_record.expires_at_utc <= now() "
                        "RETURNING record_key"
                    ),
                    {"record_key": normalized_key, "record_value": value, "ttl_seconds": ttl_seconds},
                ).first()
                return stored_row is not None
        except SQLAlchemyError as error:
            raise CoordinationStoreError("failed to reserve coordination key") from error

    def store_get(self, key: str) -> str | None:
        """Return the live value for a key.

        Args:
            key: Namespaced store key.

        Returns:
            str | None: Stored value, or None when absent or expired.

        Raises:
            ValueError: Raised when key is blank.
            CoordinationStoreError: Raised when the read fails.
        """

        normalized_key = key.strip()
        if not normalized_key:
            raise ValueError("key must not be blank")

        try:
            with self._engine.connect() as connection:
                return connection.execute(
                    text(
                        "SELECT record_value FROM idempotency_record "
                        "WHERE record_key = :record_key AND expires_at_utc > now()"
                    ),
                    {"record_key": normalized_key},
                ).scalar_one_or_none()
        except SQLAlchemyError as error:
            raise CoordinationStoreError("failed to read coordination key") from error

    def store_set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Overwrite value and lifetime for a key regardless of current state.

        Args:
            key: Namespaced store key.
            value: Value to store.
            ttl_seconds: Lifetime of the stored value.

        Returns:
            None: Value is stored as side effect.

        Raises:
            ValueError: Raised when inputs are invalid.
            CoordinationStoreError: Raised when the statement fails.
        """

        normalized_key = self._store_validate_inputs(key=key, value=value, ttl_seconds=ttl_seconds)

        try:
            with self._engine.begin() as connection:
                connection.execute(
                    text(
                        "INSERT INTO idempotency_record (record_key, record_value, expires_at_utc) "
                        "VALUES (:record_key, :record_value, "
                        "now() + make_interval(secs => CAST(:ttl_seconds AS double precision))) "
                        "ON CONFLICT (record_key) DO UPDATE SET "
                        "record_value = EXCLUDED.record_value, "
                        "expires_at_utc = EXCLUDED.expires_at_utc, "
                        "updated_at_utc = now()"
                    ),
                    {"record_key": normalized_key, "record_value": value, "ttl_seconds": ttl_seconds},
                )
        except SQLAlchemyError as error:
            raise CoordinationStoreError("failed to write coordination key") from error

    def store_purge_expired(self) -> int:
        """Delete expired rows left behind by abandoned or aged-out entries.

        Returns:
            int: Number of deleted rows.

        Raises:
            CoordinationStoreError: Raised when the delete fails.
        """

        try:
            with self._engine.begin() as connection:
                result = connection.execute(
                    text("DELETE FROM idempotency_record WHERE expires_at_utc <= now()")
                )
                return int(result.rowcount or 0)
        except SQLAlchemyError as error:
            raise CoordinationStoreError("failed to purge expired coordination keys") from error

    def _store_validate_inputs(self, key: str, value: str, ttl_seconds: int) -> str:
        """Validate write inputs and return the stripped key.

        Args:
            key: Candidate store key.
            value: Candidate value.
            ttl_seconds: Candidate lifetime.

        Returns:
            str: Stripped non-empty key.

        Raises:
            ValueError: Raised when any input is invalid.
        """

        normalized_key = key.strip()
        if not normalized_key:
            raise ValueError("key must not be blank")
        if value is None:
            raise ValueError("value must not be None")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        return normalized_key
