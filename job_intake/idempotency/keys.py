"""Idempotency key validation."""

from __future__ import annotations

from uuid import UUID


class InvalidIdempotencyKeyError(ValueError):
    """Raised when an idempotency key is missing or not a canonical UUID string."""


def idempotency_validate_key(raw_key: str | None) -> str:
    """Validate one caller-supplied idempotency key.

    Only the hyphenated 8-4-4-4-12 form is accepted. Braced, URN, and
    unhyphenated spellings are rejected so one logical key has one spelling.

    Args:
        raw_key: Key as received from the caller.

    Returns:
        str: Lowercase canonical key.

    Raises:
        InvalidIdempotencyKeyError: Raised when the key is missing or malformed.
    """

    if raw_key is None:
        raise InvalidIdempotencyKeyError("idempotency key is missing")

    stripped_key = raw_key.strip()
    if not stripped_key:
        raise InvalidIdempotencyKeyError("idempotency key is missing")

    try:
        parsed_key = UUID(stripped_key)
    except ValueError as error:
        raise InvalidIdempotencyKeyError("idempotency key must be a UUID string") from error

    canonical_key = str(parsed_key)
    if canonical_key != stripped_key.lower():
        raise InvalidIdempotencyKeyError("idempotency key must use the hyphenated UUID form")
    return canonical_key
