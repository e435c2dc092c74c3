"""Idempotency coordinator implementing the reserve/observe/finalize protocol."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from job_intake.db import CoordinationStorePort

IDEMPOTENCY_STATE_ABSENT: Final[str] = "absent"
IDEMPOTENCY_STATE_IN_FLIGHT: Final[str] = "in_flight"
IDEMPOTENCY_STATE_FINALIZED: Final[str] = "finalized"


@dataclass(frozen=True)
class IdempotencyClassification:
    """Observed state of one idempotency record.

    Attributes:
        state: One of `absent`, `in_flight`, `finalized`.
        cached_response: Serialized response when finalized, otherwise None.
    """

    state: str
    cached_response: str | None = None

    def classification_is_absent(self) -> bool:
        """Return whether no live entry exists.

        Returns:
            bool: True when absent.
        """

        return self.state == IDEMPOTENCY_STATE_ABSENT

    def classification_is_in_flight(self) -> bool:
        """Return whether another caller holds the reservation.

        Returns:
            bool: True when in flight.
        """

        return self.state == IDEMPOTENCY_STATE_IN_FLIGHT

    def classification_is_finalized(self) -> bool:
        """Return whether a cached response is present.

        Returns:
            bool: True when finalized.
        """

        return self.state == IDEMPOTENCY_STATE_FINALIZED


@dataclass(frozen=True)
class IdempotencyCoordinatorConfig:
    """Timing and namespacing values for idempotency coordination.

    Attributes:
        reservation_ttl_seconds: Lifetime of an unfinalized reservation.
        retention_ttl_seconds: Lifetime of a finalized response.
        key_prefix: Namespace prefix for store keys.
    """

    reservation_ttl_seconds: int = 30
    retention_ttl_seconds: int = 86400
    key_prefix: str = "idempotency"


class IdempotencyCoordinator:
    """Coordinator over a shared expiring key-value store.

    All state lives in the store. The coordinator holds no per-request state
    and may be shared freely across threads and processes.
    """

    IN_PROGRESS_SENTINEL: Final[str] = "PROCESSING"

    def __init__(self, store: CoordinationStorePort, config: IdempotencyCoordinatorConfig | None = None):
        """Initialize coordinator dependencies.

        Args:
            store: Shared coordination store.
            config: Optional timing and namespacing config.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies or config values are invalid.
        """

        resolved_config = config or IdempotencyCoordinatorConfig()
        if store is None:
            raise ValueError("store must not be None")
        if resolved_config.reservation_ttl_seconds <= 0:
            raise ValueError("config.reservation_ttl_seconds must be > 0")
        if resolved_config.retention_ttl_seconds < resolved_config.reservation_ttl_seconds:
            raise ValueError("config.retention_ttl_seconds must be >= config.reservation_ttl_seconds")
        if not resolved_config.key_prefix.strip():
            raise ValueError("config.key_prefix must not be blank")

        self._store = store
        self._config = resolved_config

    def idempotency_classify(self, owner_id: str, key: str) -> IdempotencyClassification:
        """Read the current state of one idempotency record without side effects.

        Args:
            owner_id: Owner identifier.
            key: Validated idempotency key.

        Returns:
            IdempotencyClassification: Observed record state.

        Raises:
            ValueError: Raised when owner_id or key are blank.
            CoordinationStoreError: Raised when the store is unavailable.
        """

        stored_value = self._store.store_get(self._idempotency_store_key(owner_id=owner_id, key=key))
        if stored_value is None:
            return IdempotencyClassification(state=IDEMPOTENCY_STATE_ABSENT)
        if stored_value == self.IN_PROGRESS_SENTINEL:
            return IdempotencyClassification(state=IDEMPOTENCY_STATE_IN_FLIGHT)
        return IdempotencyClassification(state=IDEMPOTENCY_STATE_FINALIZED, cached_response=stored_value)

    def idempotency_reserve(self, owner_id: str, key: str) -> bool:
        """Try to win the reservation for one idempotency record.

        Args:
            owner_id: Owner identifier.
            key: Validated idempotency key.

        Returns:
            bool: True when this caller must perform the work.

        Raises:
            ValueError: Raised when owner_id or key are blank.
            CoordinationStoreError: Raised when the store is unavailable.
        """

        return self._store.store_set_if_absent(
            self._idempotency_store_key(owner_id=owner_id, key=key),
            self.IN_PROGRESS_SENTINEL,
            self._config.reservation_ttl_seconds,
        )

    def idempotency_finalize(self, owner_id: str, key: str, response: str) -> None:
        """Cache the final response and extend the record to the retention window.

        Args:
            owner_id: Owner identifier.
            key: Validated idempotency key.
            response: Serialized response snapshot.

        Returns:
            None: Record is overwritten as side effect.

        Raises:
            ValueError: Raised when inputs are blank or response equals the sentinel.
            CoordinationStoreError: Raised when the store is unavailable.
        """

        if not response:
            raise ValueError("response must not be blank")
        if response == self.IN_PROGRESS_SENTINEL:
            raise ValueError("response must differ from the in-progress sentinel")

        self._store.store_set(
            self._idempotency_store_key(owner_id=owner_id, key=key),
            response,
            self._config.retention_ttl_seconds,
        )

    def _idempotency_store_key(self, owner_id: str, key: str) -> str:
        """Build the owner-scoped store key.

        Args:
            owner_id: Owner identifier.
            key: Idempotency key.

        Returns:
            str: Namespaced store key.

        Raises:
            ValueError: Raised when owner_id or key are blank.
        """

        normalized_owner_id = (owner_id or "").strip()
        normalized_key = (key or "").strip()
        if not normalized_owner_id:
            raise ValueError("owner_id must not be blank")
        if not normalized_key:
            raise ValueError("key must not be blank")
        return f"{self._config.key_prefix.strip()}:{normalized_owner_id}:{normalized_key}"
