"""Use case handling preview and create-or-update of rotation resources."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...domain.services import project

if TYPE_CHECKING:
    import asyncio

    from ..resource import SecretRotationResource
    from .rotator_registry import RotatorRegistry

logger = logging.getLogger(__name__)


class SecretRotationHandler:
    """
    Secret rotation for Entra ID.

    Entry point for the host: translates the declarative resource into
    rotator calls and attaches the resulting report to the response.
    """

    def __init__(self, registry: RotatorRegistry) -> None:
        """Initialize handler with the per-tenant rotator registry."""
        self._registry = registry

    async def preview(
        self,
        resource: SecretRotationResource,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> SecretRotationResource:
        """
        List the app registrations with secrets without changing anything.

        Returns:
            Copy of ``resource`` reporting every secret found, or without a
            report when no app registration holds secrets.
        """
        rotator = self._registry.get_or_create(
            resource.id,
            resource.rotate_secrets_expiring_within_days,
        )

        state = await rotator.fetch_normalized_state(cancel_event=cancel_event)
        if not state:
            logger.info("Preview for %s found no app registrations with secrets", resource.id)
            # The report is output only, never echo what the caller sent
            return resource.model_copy(update={"apps_with_expiring_secrets": None})

        return resource.with_report(project(state))

    async def create_or_update(
        self,
        resource: SecretRotationResource,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> SecretRotationResource:
        """
        Rotate expiring declared secrets and create missing ones.

        If ``delete_after_renew`` is set the superseded secret is deleted
        after its renewal.

        Returns:
            Copy of ``resource`` reporting the resulting secrets.
        """
        rotator = self._registry.get_or_create(
            resource.id,
            resource.rotate_secrets_expiring_within_days,
        )

        state = await rotator.rotate(
            resource.rotation_requests(),
            expires_in_days=resource.expires_in_days,
            delete_after_renew=resource.delete_after_renew,
            cancel_event=cancel_event,
        )

        return resource.with_report(project(state))

    @staticmethod
    def get_identifiers(resource: SecretRotationResource) -> dict[str, str]:
        """Extract the properties identifying the resource."""
        return {"id": resource.id}
