"""Application entity representing an Entra ID app registration and its secrets."""

from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Self

from .credential import Credential


@dataclass(frozen=True, slots=True)
class ApplicationCredentialSet:
    """An Entra ID application registration with its password credentials."""

    display_name: str
    id: str
    credentials: tuple[Credential, ...] = ()

    @property
    def has_credentials(self) -> bool:
        """Check if the application holds any credential."""
        return bool(self.credentials)

    def find(self, display_name: str) -> Credential | None:
        """Find the first credential with the given display name."""
        return next((c for c in self.credentials if c.display_name == display_name), None)

    def with_credentials(self, credentials: Iterable[Credential]) -> Self:
        """Return a copy holding ``credentials`` instead of the current ones."""
        return replace(self, credentials=tuple(credentials))

    def merged_with(self, updated: Iterable[Credential]) -> Self:
        """
        Merge updated credentials into this application.

        Credentials sharing a display name with an existing one replace it in
        place; the others are appended in the given order.
        """
        by_name = {c.display_name: c for c in updated}
        merged = [by_name.pop(c.display_name, c) for c in self.credentials]
        merged.extend(by_name.values())
        return self.with_credentials(merged)
