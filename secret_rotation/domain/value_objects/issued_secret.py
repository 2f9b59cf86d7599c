"""Issued secret value object."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class IssuedSecret:
    """Result of creating a password credential in the directory.

    ``value`` is only ever visible here; the directory never returns it again.
    """

    value: str
    end_time: datetime
    key_id: UUID | None = None

    def __repr__(self) -> str:
        return f"IssuedSecret(value='***', end_time={self.end_time!r}, key_id={self.key_id!r})"
