"""Port for the credential directory - driven/secondary port."""

from typing import Protocol
from uuid import UUID

from ...domain.entities import ApplicationCredentialSet
from ...domain.value_objects import IssuedSecret


class CredentialDirectory(Protocol):
    """
    Port for reading and writing application credentials.

    This is a driven (secondary) port that defines how the application
    talks to the identity provider holding the secrets.
    """

    async def list_applications_with_credentials(self) -> list[ApplicationCredentialSet]:
        """
        Retrieve all applications with their password credentials.

        Returns:
            Applications as listed, duplicates and history included.

        Raises:
            DirectoryUnavailableError: If listing fails.
        """
        ...

    async def create_or_rotate_credential(
        self,
        application_id: str,
        credential_name: str,
        expires_in_days: int,
    ) -> IssuedSecret:
        """
        Issue a new password credential on an application.

        Returns:
            The issued secret, the only time its value is visible.

        Raises:
            DirectoryWriteError: If the credential cannot be created.
        """
        ...

    async def delete_credential(self, application_id: str, key_id: UUID) -> None:
        """
        Delete a password credential by key id.

        Raises:
            DirectoryWriteError: If the credential cannot be deleted.
        """
        ...
