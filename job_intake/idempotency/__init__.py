"""Idempotency package for key validation and request deduplication."""

from .coordinator import (
    IDEMPOTENCY_STATE_ABSENT,
    IDEMPOTENCY_STATE_FINALIZED,
    IDEMPOTENCY_STATE_IN_FLIGHT,
    IdempotencyClassification,
    IdempotencyCoordinator,
    IdempotencyCoordinatorConfig,
)
from .keys import InvalidIdempotencyKeyError, idempotency_validate_key

__all__ = [
    "IDEMPOTENCY_STATE_ABSENT",
    "IDEMPOTENCY_STATE_IN_FLIGHT",
    "IDEMPOTENCY_STATE_FINALIZED",
    "IdempotencyClassification",
    "IdempotencyCoordinator",
    "IdempotencyCoordinatorConfig",
    "InvalidIdempotencyKeyError",
    "idempotency_validate_key",
]
