"""Use case reconciling declared secrets with the credential directory."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from ...domain.services import CredentialNormalizer, RotationPlanner
from ..exceptions import RotationCancelledError

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Callable, Iterable

    from ...domain.entities import ApplicationCredentialSet, RotationPlan
    from ...domain.value_objects import RotationRequest, RotationThreshold
    from ..ports import CredentialDirectory

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class CredentialRotator:
    """
    Reconciliation engine for one tenant.

    Holds no state besides the directory and the rotation threshold, so a
    single instance serves concurrent requests. Directory calls of one run
    are issued strictly one after another.
    """

    def __init__(
        self,
        directory: CredentialDirectory,
        threshold: RotationThreshold,
        *,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """
        Initialize the rotator.

        Args:
            directory: Adapter for the tenant's credential directory.
            threshold: Days before expiry at which secrets are rotated.
            clock: Source of the current time.
        """
        self._directory = directory
        self._threshold = threshold
        self._clock = clock
        self._normalizer = CredentialNormalizer(threshold)
        self._planner = RotationPlanner()

    @property
    def threshold(self) -> RotationThreshold:
        """Rotation threshold bound to this rotator."""
        return self._threshold

    async def fetch_normalized_state(
        self,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> list[ApplicationCredentialSet]:
        """
        List the directory and normalize it.

        Returns:
            Applications with credentials, one classified credential per name.

        Raises:
            DirectoryUnavailableError: If listing fails.
            RotationCancelledError: If ``cancel_event`` was set.
        """
        _check_cancelled(cancel_event)
        applications = await self._directory.list_applications_with_credentials()
        state = self._normalizer.normalize(applications, self._clock())
        logger.info("Found %d app registrations with secrets", len(state))
        return state

    def plan_rotation_or_creation(
        self,
        state: Iterable[ApplicationCredentialSet],
        requests: Iterable[RotationRequest],
    ) -> RotationPlan:
        """Compute which declared secrets must be rotated or created."""
        plan = self._planner.plan(state, requests, self._clock())
        logger.info(
            "Planned %d rotations and %d creations (%d unknown applications)",
            plan.rotation_count,
            plan.creation_count,
            len(plan.unknown),
        )
        return plan

    async def execute(
        self,
        plan: RotationPlan,
        *,
        expires_in_days: int,
        delete_after_renew: bool = False,
        cancel_event: asyncio.Event | None = None,
    ) -> list[ApplicationCredentialSet]:
        """
        Perform the planned writes in plan order.

        Directory errors are not caught: the first failure aborts the run and
        writes already issued are kept.

        Args:
            plan: Plan from ``plan_rotation_or_creation``.
            expires_in_days: Validity of every issued secret.
            delete_after_renew: Delete the superseded credential after rotation.
            cancel_event: When set, no further directory call is issued.

        Returns:
            The normalized state with renewed credentials merged in.

        Raises:
            DirectoryWriteError: If a create or delete call fails.
            RotationCancelledError: If ``cancel_event`` was set.
        """
        renewed: dict[str, ApplicationCredentialSet] = {}

        for app in plan.pending:
            logger.info("Rotating secrets for %s", app.display_name)
            updated = []

            for credential in app.credentials:
                _check_cancelled(cancel_event)
                issued = await self._directory.create_or_rotate_credential(
                    app.id,
                    credential.display_name,
                    expires_in_days,
                )
                updated.append(credential.renewed(issued))

                event = "secret_created" if credential.is_new else "secret_rotated"
                logger.info(
                    "%s secret %s of %s",
                    "Created" if credential.is_new else "Rotated",
                    credential.display_name,
                    app.display_name,
                    extra={
                        "rotation_event": {
                            "event": event,
                            "application": app.display_name,
                            "secret": credential.display_name,
                            "expires_on": issued.end_time.isoformat(),
                        }
                    },
                )

                if not delete_after_renew or credential.is_new:
                    continue

                _check_cancelled(cancel_event)
                await self._directory.delete_credential(app.id, credential.key_id)
                logger.info(
                    "Deleted secret %s of %s",
                    credential.display_name,
                    app.display_name,
                    extra={
                        "rotation_event": {
                            "event": "secret_deleted",
                            "application": app.display_name,
                            "secret": credential.display_name,
                            "key_id": str(credential.key_id),
                        }
                    },
                )

            renewed[app.id] = app.with_credentials(updated)

        return [
            app.merged_with(renewed[app.id].credentials) if app.id in renewed else app
            for app in plan.current
        ]

    async def rotate(
        self,
        requests: Iterable[RotationRequest],
        *,
        expires_in_days: int,
        delete_after_renew: bool = False,
        cancel_event: asyncio.Event | None = None,
    ) -> list[ApplicationCredentialSet]:
        """Fetch, plan and execute in one go."""
        logger.info(
            "Starting rotation of secrets expiring within %d days",
            self._threshold.days,
        )
        state = await self.fetch_normalized_state(cancel_event=cancel_event)
        plan = self.plan_rotation_or_creation(state, requests)
        return await self.execute(
            plan,
            expires_in_days=expires_in_days,
            delete_after_renew=delete_after_renew,
            cancel_event=cancel_event,
        )


def _check_cancelled(cancel_event: asyncio.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        msg = "Rotation cancelled before the next directory call"
        raise RotationCancelledError(msg)
