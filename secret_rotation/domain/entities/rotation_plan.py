"""Rotation plan produced by reconciling declared secrets with the directory."""

from dataclasses import dataclass

from ..value_objects import RotationRequest
from .application_credential_set import ApplicationCredentialSet


@dataclass(frozen=True, slots=True)
class RotationPlan:
    """
    Writes needed to bring the directory in line with the declared secrets.

    ``pending`` holds, per application, only the credentials that need a
    directory call. ``current`` is the normalized state everything else is
    reported from.
    """

    current: tuple[ApplicationCredentialSet, ...]
    pending: tuple[ApplicationCredentialSet, ...] = ()
    unknown: tuple[RotationRequest, ...] = ()

    @property
    def is_empty(self) -> bool:
        """Check if the plan requires no directory writes."""
        return not any(app.credentials for app in self.pending)

    @property
    def rotation_count(self) -> int:
        """Number of existing credentials to rotate."""
        return sum(1 for app in self.pending for c in app.credentials if not c.is_new)

    @property
    def creation_count(self) -> int:
        """Number of new credentials to create."""
        return sum(1 for app in self.pending for c in app.credentials if c.is_new)
