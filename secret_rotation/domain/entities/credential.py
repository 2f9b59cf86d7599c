"""Credential entity representing one password credential of an application."""

from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Self
from uuid import UUID

from ..value_objects import IssuedSecret, RotationThreshold

NIL_KEY_ID = UUID(int=0)


@dataclass(frozen=True, slots=True)
class Credential:
    """
    A single physical password credential.

    Several credentials of one application may share a display name; each is
    one generation of the same logical secret. ``value`` is only set right
    after the secret was issued by this run.
    """

    display_name: str
    key_id: UUID
    start_time: datetime
    end_time: datetime
    is_expiring_soon: bool = False
    is_renewed: bool = False
    is_new: bool = False
    value: str | None = None

    def __repr__(self) -> str:
        return (
            f"Credential(display_name={self.display_name!r}, key_id={self.key_id}, "
            f"end_time={self.end_time.isoformat()}, is_expiring_soon={self.is_expiring_soon}, "
            f"is_renewed={self.is_renewed}, is_new={self.is_new})"
        )

    def classified(self, threshold: RotationThreshold, now: datetime) -> Self:
        """Return a copy with ``is_expiring_soon`` evaluated against ``threshold``."""
        return replace(self, is_expiring_soon=threshold.is_expiring(self.end_time, now))

    def renewed(self, issued: IssuedSecret) -> Self:
        """Return a copy describing the secret the directory just issued."""
        return replace(
            self,
            key_id=issued.key_id or self.key_id,
            end_time=_ensure_utc(issued.end_time),
            is_renewed=True,
            value=issued.value,
        )

    @classmethod
    def placeholder(cls, display_name: str, now: datetime) -> Self:
        """Create a not-yet-existing credential that has to be issued."""
        return cls(
            display_name=display_name,
            key_id=NIL_KEY_ID,
            start_time=now,
            end_time=now,
            is_expiring_soon=True,
            is_new=True,
        )

    @classmethod
    def create(
        cls,
        *,
        key_id: str,
        display_name: str | None,
        start_time: datetime,
        end_time: datetime,
    ) -> Self:
        """Factory method to create a Credential from raw data."""
        return cls(
            display_name=display_name or "",
            key_id=UUID(key_id),
            start_time=_ensure_utc(start_time),
            end_time=_ensure_utc(end_time),
        )


def _ensure_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=UTC)
