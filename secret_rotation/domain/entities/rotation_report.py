"""Rotation report row."""

from dataclasses import dataclass

NO_SECRET_CHANGED = "No Secret Changed"


@dataclass(frozen=True, slots=True)
class RotationReportRow:
    """One application/secret pair in the flattened rotation report."""

    application_name: str
    secret_name: str
    expires_on: str
    secret_value: str
    is_expiring_soon: bool
    is_renewed: bool

    @property
    def is_changed(self) -> bool:
        """Check if this row carries a freshly issued secret."""
        return self.is_renewed and self.secret_value != NO_SECRET_CHANGED
