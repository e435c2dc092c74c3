"""HTTP webhook publisher for job-created events."""

from __future__ import annotations

import logging
from typing import Final

import httpx

from .event_errors import JobEventPublishError, JobEventPublishRejectedError, JobEventPublishTimeoutError
from .interfaces import JobCreatedEvent, JobEventPublisherPort

logger = logging.getLogger(__name__)


class HttpJobEventPublisher(JobEventPublisherPort):
    """Publisher that POSTs each event as JSON to one webhook endpoint.

    Delivery is attempted once per call. Retrying is left to the caller.
    """

    _USER_AGENT: Final[str] = "job-intake/1.0 (Python/httpx)"
    _EVENT_NAME: Final[str] = "job.created"

    def __init__(self, webhook_url: str, timeout_seconds: float = 10.0, transport: httpx.BaseTransport | None = None):
        """Initialize webhook publisher.

        Args:
            webhook_url: Endpoint receiving job-created events.
            timeout_seconds: HTTP timeout for one delivery.
            transport: Optional httpx transport override.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when config values are invalid.
        """

        normalized_webhook_url = webhook_url.strip()
        if not normalized_webhook_url:
            raise ValueError("webhook_url must not be blank")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

        self._webhook_url = normalized_webhook_url
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    def publisher_target_name(self) -> str:
        """Return the configured webhook URL.

        Returns:
            str: Webhook URL.
        """

        return self._webhook_url

    def publisher_publish_job_created(self, event: JobCreatedEvent) -> None:
        """POST one job-created event to the webhook endpoint.

        Args:
            event: Event to deliver.

        Returns:
            None: Event is delivered as side effect.

        Raises:
            JobEventPublishTimeoutError: Raised when the request times out.
            JobEventPublishRejectedError: Raised for non-2xx responses.
            JobEventPublishError: Raised for other transport failures.
        """

        headers = {
            "User-Agent": self._USER_AGENT,
            "X-Job-Id": str(event.job_id),
            "X-Job-Event": self._EVENT_NAME,
        }
        try:
            with httpx.Client(timeout=self._timeout_seconds, transport=self._transport) as client:
                response = client.post(self._webhook_url, json=event.event_as_payload(), headers=headers)
        except httpx.TimeoutException as error:
            raise JobEventPublishTimeoutError(
                f"job event delivery timed out after {self._timeout_seconds}s for job_id={event.job_id}"
            ) from error
        except httpx.HTTPError as error:
            raise JobEventPublishError(f"job event delivery failed for job_id={event.job_id}: {error}") from error

        if not response.is_success:
            raise JobEventPublishRejectedError(
                f"job event rejected with status={response.status_code} for job_id={event.job_id}",
                status_code=response.status_code,
            )
        logger.debug("Published %s for job_id=%s to %s", self._EVENT_NAME, event.job_id, self._webhook_url)
