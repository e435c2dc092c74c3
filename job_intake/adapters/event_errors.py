"""Project-native typed exceptions for job event delivery failures."""

from __future__ import annotations


class JobEventPublishError(ConnectionError):
    """Base exception for failures delivering a job-created event."""


class JobEventPublishTimeoutError(JobEventPublishError, TimeoutError):
    """Delivery did not complete within the configured timeout."""


class JobEventPublishRejectedError(JobEventPublishError):
    """Downstream endpoint answered with a non-success status.

    Attributes:
        status_code: HTTP status returned by the endpoint.
    """

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code
