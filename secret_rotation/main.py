#!/usr/bin/env python3
"""
Entra ID Secret Rotation

Composition root and application entry point.
Wires together all layers following hexagonal architecture principles.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from croniter import croniter

from .application.exceptions import ApplicationError
from .application.resource import SecretRotationResource
from .application.use_cases import RotatorRegistry, SecretRotationHandler
from .infrastructure.adapters import EntraIdCredentialDirectory
from .infrastructure.config import Settings, load_settings

if TYPE_CHECKING:
    from .application.ports import CredentialDirectory

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

# Application version
__version__ = "1.0.0"


class ApplicationContainer:
    """
    Dependency injection container.

    Responsible for creating and wiring all application components. Owns the
    per-tenant rotator registry for the lifetime of the process.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize container with settings."""
        self._settings = settings
        self._registry = RotatorRegistry(self.create_credential_directory)
        self._handler = SecretRotationHandler(self._registry)

    @property
    def registry(self) -> RotatorRegistry:
        """Per-tenant rotator registry."""
        return self._registry

    @property
    def handler(self) -> SecretRotationHandler:
        """Handler for preview and create-or-update requests."""
        return self._handler

    def create_credential_directory(self, tenant_id: str) -> CredentialDirectory:
        """Create the credential directory adapter for a tenant."""
        return EntraIdCredentialDirectory(self._settings.graph_config(tenant_id))


class Application:
    """
    Main application orchestrator.

    Handles run modes (single execution, scheduled, or API) and lifecycle.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize application with settings."""
        self._settings = settings
        self._container = ApplicationContainer(settings)

    def load_request(self) -> SecretRotationResource:
        """Load the rotation resource from the configured request file."""
        content = Path(self._settings.request_file).read_text(encoding="utf-8")
        return SecretRotationResource.model_validate_json(content)

    async def run_once(self) -> SecretRotationResource:
        """Execute the configured operation a single time."""
        resource = self.load_request()
        handler = self._container.handler

        if self._settings.operation.lower() == "create_or_update":
            result = await handler.create_or_update(resource)
        else:
            result = await handler.preview(resource)

        rows = result.apps_with_expiring_secrets or []
        logger.info(
            "%s finished: %d secrets reported, %d renewed",
            self._settings.operation,
            len(rows),
            sum(1 for row in rows if row.is_renewed),
        )
        return result

    async def run_scheduled(self) -> None:
        """Run in scheduled mode with cron expression."""
        logger.info("Starting scheduled mode with cron: %s", self._settings.cron_schedule)

        # Run immediately on startup
        logger.info("Running initial rotation on startup...")
        await self._run_scheduled_once()

        cron = croniter(self._settings.cron_schedule, datetime.now(UTC))

        while True:
            next_run = cron.get_next(datetime)
            now = datetime.now(UTC)

            # Handle timezone-naive datetime from croniter
            if next_run.tzinfo is None:
                next_run = next_run.replace(tzinfo=UTC)

            sleep_seconds = (next_run - now).total_seconds()

            if sleep_seconds > 0:
                logger.info("Next rotation scheduled for %s", next_run.isoformat())
                await asyncio.sleep(sleep_seconds)

            logger.info("Running scheduled rotation...")
            await self._run_scheduled_once()

    async def _run_scheduled_once(self) -> None:
        """Run once, keeping the schedule alive on directory failures."""
        try:
            await self.run_once()
        except ApplicationError:
            logger.exception("Scheduled run failed, retrying at next schedule")

    def run_api(self) -> None:
        """Run in API server mode."""
        import uvicorn

        from .infrastructure.adapters.api import create_app

        logger.info(
            "Starting API server on %s:%d",
            self._settings.api_host,
            self._settings.api_port,
        )

        app = create_app(
            handler=self._container.handler,
            registry=self._container.registry,
            version=__version__,
        )

        # Run uvicorn server
        uvicorn.run(
            app,
            host=self._settings.api_host,
            port=self._settings.api_port,
            log_level=self._settings.log_level.lower(),
        )

    async def run(self) -> int:
        """
        Run the application based on configured mode.

        Returns:
            Exit code (0 for success, 1 for failure).
        """
        match self._settings.run_mode.lower():
            case "once":
                logger.info("Running in single-execution mode")
                result = await self.run_once()
                print(json.dumps(result.model_dump(by_alias=True), indent=2))  # noqa: T201
                return 0

            case "scheduled":
                await self.run_scheduled()
                return 0  # Never reached in scheduled mode

            case _:
                logger.error(
                    "Invalid RUN_MODE: %s (use 'once', 'scheduled', or set API_ENABLED=true)",
                    self._settings.run_mode,
                )
                return 1


async def async_main(settings: Settings) -> int:
    """Async entry point."""
    try:
        return await Application(settings).run()
    except ApplicationError as e:
        logger.error("Rotation failed: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Shutting down...")
        return 0
    except Exception:
        logger.exception("Unexpected error")
        return 1


def main() -> None:
    """Main entry point."""
    logger.info("Entra ID Secret Rotation starting...")

    try:
        settings = load_settings()
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        sys.exit(1)

    logging.getLogger().setLevel(settings.log_level.upper())

    # API mode takes precedence if enabled; uvicorn runs its own event loop
    if settings.api_enabled:
        Application(settings).run_api()
        sys.exit(0)

    sys.exit(asyncio.run(async_main(settings)))


if __name__ == "__main__":
    main()
