"""Adapter layer package for downstream event delivery boundaries."""

from .event_errors import JobEventPublishError, JobEventPublishRejectedError, JobEventPublishTimeoutError
from .http_event_publisher import HttpJobEventPublisher
from .interfaces import JobCreatedEvent, JobEventPublisherPort

__all__ = [
    "JobCreatedEvent",
    "JobEventPublisherPort",
    "HttpJobEventPublisher",
    "JobEventPublishError",
    "JobEventPublishTimeoutError",
    "JobEventPublishRejectedError",
]
