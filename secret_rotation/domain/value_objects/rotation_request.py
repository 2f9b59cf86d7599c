"""Rotation request value object."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RotationRequest:
    """One declared secret that should be kept fresh or created."""

    application_name: str
    secret_name: str

    def __str__(self) -> str:
        return f"{self.application_name}/{self.secret_name}"
