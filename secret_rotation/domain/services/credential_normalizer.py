"""Domain service normalizing the credential state listed by the directory."""

from collections.abc import Iterable
from datetime import datetime

from ..entities import ApplicationCredentialSet, Credential
from ..value_objects import RotationThreshold


class CredentialNormalizer:
    """
    Deduplicates and classifies listed credentials.

    The directory keeps every generation of a secret as a separate entry with
    the same display name. Only the most recently started one is live.
    """

    def __init__(self, threshold: RotationThreshold) -> None:
        """Initialize normalizer with the rotation threshold."""
        self._threshold = threshold

    def normalize(
        self,
        applications: Iterable[ApplicationCredentialSet],
        now: datetime,
    ) -> list[ApplicationCredentialSet]:
        """
        Normalize the listed applications.

        Args:
            applications: Applications as listed by the directory.
            now: Evaluation time for the expiry classification.

        Returns:
            Applications that hold credentials, each with one classified
            credential per display name.
        """
        return [
            app.with_credentials(
                credential.classified(self._threshold, now)
                for credential in deduplicate(app.credentials)
            )
            for app in applications
            if app.has_credentials
        ]


def deduplicate(credentials: Iterable[Credential]) -> list[Credential]:
    """
    Keep the credential with the latest start time per display name.

    Names keep the position of their first occurrence. On equal start times
    the entry listed first wins.
    """
    latest: dict[str, Credential] = {}
    for credential in credentials:
        kept = latest.get(credential.display_name)
        if kept is None or credential.start_time > kept.start_time:
            latest[credential.display_name] = credential
    return list(latest.values())
