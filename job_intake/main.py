"""Main module entrypoint for local runtime execution.

This module validates startup configuration and launches the FastAPI service
or runs one maintenance command.
"""

import argparse
import logging

import uvicorn

from job_intake.bootstrap import bootstrap_create_application, bootstrap_create_coordination_store
from job_intake.config import config_configure_logging, config_load_settings

logger = logging.getLogger(__name__)


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
    """

    argument_parser = argparse.ArgumentParser(description="Job intake runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "purge-idempotency"),
        help="Runtime command: `api` starts server, `purge-idempotency` deletes expired idempotency records",
        type=str,
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    config_configure_logging(settings.log_level)

    if parsed_arguments.command == "purge-idempotency":
        purged_count = bootstrap_create_coordination_store().store_purge_expired()
        logger.info("Purged %d expired idempotency records", purged_count)
        return

    application = bootstrap_create_application(settings=settings)
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
