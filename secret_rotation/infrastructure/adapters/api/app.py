"""FastAPI application factory."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ....application.exceptions import (
    DirectoryUnavailableError,
    DirectoryWriteError,
    RotationCancelledError,
)
from ....application.resource import SecretRotationResource
from .models import ErrorResponse, HealthResponse

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from ....application.use_cases import RotatorRegistry, SecretRotationHandler

logger = logging.getLogger(__name__)


def _error(status_code: int, error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=str(exc)).model_dump(),
    )


@asynccontextmanager
async def cancel_on_disconnect(request: Request, poll_interval: float = 0.5) -> AsyncGenerator[asyncio.Event, None]:
    """
    Yield a cancellation event that is set once the client disconnects.

    The rotator checks the event before every directory call, so a dropped
    connection stops the remaining writes.
    """
    cancel_event = asyncio.Event()

    async def watch() -> None:
        while not await request.is_disconnected():
            await asyncio.sleep(poll_interval)
        logger.warning("Client disconnected, cancelling rotation")
        cancel_event.set()

    watcher = asyncio.create_task(watch())
    try:
        yield cancel_event
    finally:
        watcher.cancel()
        with suppress(asyncio.CancelledError):
            await watcher


def create_app(
    handler: SecretRotationHandler,
    registry: RotatorRegistry,
    version: str = "1.0.0",
) -> FastAPI:
    """
    Create FastAPI application.

    Args:
        handler: Handler serving preview and create-or-update requests.
        registry: Per-tenant rotator registry, reported by the health check.
        version: Application version string.

    Returns:
        Configured FastAPI application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler."""
        logger.info("API server starting...")
        yield
        logger.info("API server shutting down...")

    app = FastAPI(
        title="Entra ID Secret Rotation API",
        description="Preview and rotate Entra ID app registration secrets. "
        "Secret values are only returned by create-or-update, and only for secrets issued by that call.",
        version=version,
        lifespan=lifespan,
        responses={
            500: {"model": ErrorResponse, "description": "Internal server error"},
        },
    )

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["Health"],
        summary="Health check",
        description="Check if the service is healthy and running.",
    )
    async def health_check() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            version=version,
            timestamp=datetime.now(UTC),
            tenants=len(registry),
        )

    @app.post(
        "/api/v1/preview",
        response_model=SecretRotationResource,
        response_model_by_alias=True,
        tags=["Rotation"],
        summary="Preview secret rotation",
        description="List all app registrations with secrets and their expiry. Never changes anything.",
        responses={
            503: {"model": ErrorResponse, "description": "Directory unavailable"},
        },
    )
    async def preview(resource: SecretRotationResource, request: Request) -> SecretRotationResource:
        logger.info("API: Preview for tenant %s", resource.id)
        async with cancel_on_disconnect(request) as cancel_event:
            return await handler.preview(resource, cancel_event=cancel_event)

    @app.post(
        "/api/v1/create-or-update",
        response_model=SecretRotationResource,
        response_model_by_alias=True,
        tags=["Rotation"],
        summary="Rotate or create secrets",
        description="Rotate declared secrets expiring within the threshold and create missing ones.",
        responses={
            502: {"model": ErrorResponse, "description": "Directory write failed"},
            503: {"model": ErrorResponse, "description": "Directory unavailable"},
        },
    )
    async def create_or_update(resource: SecretRotationResource, request: Request) -> SecretRotationResource:
        logger.info(
            "API: Create or update for tenant %s (%d secrets declared)",
            resource.id,
            len(resource.secrets_to_rotate),
        )
        async with cancel_on_disconnect(request) as cancel_event:
            return await handler.create_or_update(resource, cancel_event=cancel_event)

    @app.exception_handler(DirectoryUnavailableError)
    async def directory_unavailable_handler(request: Request, exc: DirectoryUnavailableError) -> JSONResponse:  # noqa: ARG001
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "Directory unavailable", exc)

    @app.exception_handler(DirectoryWriteError)
    async def directory_write_handler(request: Request, exc: DirectoryWriteError) -> JSONResponse:  # noqa: ARG001
        return _error(status.HTTP_502_BAD_GATEWAY, "Directory write failed", exc)

    @app.exception_handler(RotationCancelledError)
    async def cancelled_handler(request: Request, exc: RotationCancelledError) -> JSONResponse:  # noqa: ARG001
        return _error(status.HTTP_409_CONFLICT, "Rotation cancelled", exc)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # noqa: ARG001
        """Handle uncaught exceptions."""
        logger.exception("Unhandled exception in API")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", exc)

    return app
