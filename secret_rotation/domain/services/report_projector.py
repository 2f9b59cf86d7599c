"""Domain service flattening reconciled state into report rows."""

from collections.abc import Iterable
from datetime import UTC

from ..entities import NO_SECRET_CHANGED, ApplicationCredentialSet, RotationReportRow

EXPIRES_ON_FORMAT = "%Y-%m-%d %H:%M:%S"


def project(applications: Iterable[ApplicationCredentialSet]) -> list[RotationReportRow]:
    """Flatten every application/credential pair into a report row, in input order."""
    return [
        RotationReportRow(
            application_name=app.display_name,
            secret_name=credential.display_name,
            expires_on=credential.end_time.astimezone(UTC).strftime(EXPIRES_ON_FORMAT),
            secret_value=credential.value if credential.value is not None else NO_SECRET_CHANGED,
            is_expiring_soon=credential.is_expiring_soon,
            is_renewed=credential.is_renewed,
        )
        for app in applications
        for credential in app.credentials
    ]
