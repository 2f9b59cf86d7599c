"""Rotation threshold value object."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from ..exceptions import InvalidThresholdError


@dataclass(frozen=True, slots=True)
class RotationThreshold:
    """Number of days before expiry at which a secret counts as expiring soon."""

    days: int = 30

    def __post_init__(self) -> None:
        """Validate the threshold is not negative."""
        if self.days < 0:
            msg = f"Rotation threshold must be >= 0 days, got {self.days}"
            raise InvalidThresholdError(msg)

    def is_expiring(self, end_time: datetime, now: datetime) -> bool:
        """Check whether a credential ending at ``end_time`` is expiring soon."""
        end_aware = end_time if end_time.tzinfo else end_time.replace(tzinfo=UTC)
        return end_aware <= now + timedelta(days=self.days)
