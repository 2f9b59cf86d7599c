"""Domain service deciding which secrets to rotate or create."""

import logging
from collections.abc import Iterable
from datetime import datetime

from ..entities import ApplicationCredentialSet, Credential, RotationPlan
from ..value_objects import RotationRequest

logger = logging.getLogger(__name__)


class RotationPlanner:
    """Diffs declared secrets against the normalized directory state."""

    def plan(
        self,
        state: Iterable[ApplicationCredentialSet],
        requests: Iterable[RotationRequest],
        now: datetime,
    ) -> RotationPlan:
        """
        Build the rotation plan.

        Existing credentials are planned only when requested and expiring
        soon. Requested secrets missing from their application are planned as
        new placeholders. Requests for unknown applications are skipped.

        Args:
            state: Normalized applications.
            requests: Declared secrets, duplicates are ignored.
            now: Start of the provisional validity window of new secrets.

        Returns:
            RotationPlan with the writes to perform.
        """
        current = tuple(state)
        wanted: dict[str, list[str]] = {}
        for request in dict.fromkeys(requests):
            wanted.setdefault(request.application_name, []).append(request.secret_name)

        known = {app.display_name for app in current}
        unknown: list[RotationRequest] = []
        for app_name, secret_names in wanted.items():
            if app_name in known:
                continue
            for secret_name in secret_names:
                logger.warning(
                    "Skipping %s/%s: application not found in directory",
                    app_name,
                    secret_name,
                    extra={
                        "rotation_event": {
                            "event": "application_unknown",
                            "application": app_name,
                            "secret": secret_name,
                        }
                    },
                )
                unknown.append(RotationRequest(app_name, secret_name))

        pending: list[ApplicationCredentialSet] = []
        for app in current:
            if app.display_name not in wanted:
                continue
            planned = self._plan_application(app, wanted[app.display_name], now)
            if planned.credentials:
                pending.append(planned)

        return RotationPlan(current=current, pending=tuple(pending), unknown=tuple(unknown))

    def _plan_application(
        self,
        app: ApplicationCredentialSet,
        secret_names: list[str],
        now: datetime,
    ) -> ApplicationCredentialSet:
        """Select the credentials of one application that need a write."""
        planned: list[Credential] = []

        for credential in app.credentials:
            if credential.display_name not in secret_names:
                continue
            if not credential.is_expiring_soon:
                logger.info(
                    "Skipping %s with secret %s. Not expiring soon",
                    app.display_name,
                    credential.display_name,
                    extra={
                        "rotation_event": {
                            "event": "secret_skipped",
                            "application": app.display_name,
                            "secret": credential.display_name,
                        }
                    },
                )
                continue
            planned.append(credential)

        existing = {c.display_name for c in app.credentials}
        planned.extend(
            Credential.placeholder(name, now) for name in secret_names if name not in existing
        )

        return app.with_credentials(planned)
