"""Database engine utilities.

This module centralizes database connectivity primitives to enforce the db-layer
boundary for all SQLAlchemy usage.
"""

from sqlalchemy import Engine, create_engine


def db_create_engine(database_url: str, pool_size: int = 10, pool_timeout_seconds: float = 30.0) -> Engine:
    """Create the SQLAlchemy engine shared by the job and coordination stores.

    Args:
        database_url: SQLAlchemy database URL.
        pool_size: Number of pooled connections kept open.
        pool_timeout_seconds: Wait limit for a free pooled connection.

    Returns:
        Engine: Configured SQLAlchemy engine.

    Raises:
        ValueError: Raised when the database URL is blank or pool bounds are invalid.
    """

    if not database_url.strip():
        raise ValueError("database_url must not be blank")
    if pool_size < 1:
        raise ValueError("pool_size must be >= 1")
    if pool_timeout_seconds <= 0:
        raise ValueError("pool_timeout_seconds must be > 0")

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=pool_size,
        pool_timeout=pool_timeout_seconds,
    )
