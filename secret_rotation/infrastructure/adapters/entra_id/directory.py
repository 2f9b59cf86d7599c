"""Entra ID credential directory implementation."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from ....application.exceptions import DirectoryUnavailableError, DirectoryWriteError
from ....domain.entities import ApplicationCredentialSet, Credential
from ....domain.value_objects import IssuedSecret
from .graph_client import GraphClient, GraphClientConfig

logger = logging.getLogger(__name__)


class EntraIdCredentialDirectory:
    """
    Credential directory implementation using Microsoft Graph API.

    Implements the CredentialDirectory port for the password credentials of
    Entra ID app registrations.
    """

    def __init__(self, config: GraphClientConfig, *, client: GraphClient | None = None) -> None:
        """
        Initialize the directory.

        Args:
            config: Configuration for the Graph API client.
            client: Preconfigured Graph client, created from ``config`` if omitted.
        """
        self._tenant_id = config.tenant_id
        self._client = client or GraphClient(config)

    async def list_applications_with_credentials(self) -> list[ApplicationCredentialSet]:
        """
        Retrieve all app registrations with their password credentials.

        Raises:
            DirectoryUnavailableError: If retrieval fails.
        """
        try:
            applications = await self._client.get_applications()
        except Exception as e:
            msg = f"Failed to list app registrations of tenant {self._tenant_id}: {e}"
            logger.exception(msg)
            raise DirectoryUnavailableError(msg) from e

        return [self._map_application(app) for app in applications]

    async def create_or_rotate_credential(
        self,
        application_id: str,
        credential_name: str,
        expires_in_days: int,
    ) -> IssuedSecret:
        """
        Add a new password credential to an app registration.

        Raises:
            DirectoryWriteError: If the credential cannot be created.
        """
        end_date_time = datetime.now(UTC) + timedelta(days=expires_in_days)
        try:
            created = await self._client.add_password(application_id, credential_name, end_date_time)
            return IssuedSecret(
                value=created["secretText"],
                end_time=self._parse_datetime(created.get("endDateTime")) or end_date_time,
                key_id=UUID(created["keyId"]) if created.get("keyId") else None,
            )
        except Exception as e:
            msg = f"Failed to create secret {credential_name} on application {application_id}: {e}"
            logger.exception(msg)
            raise DirectoryWriteError(msg) from e

    async def delete_credential(self, application_id: str, key_id: UUID) -> None:
        """
        Remove a password credential from an app registration.

        Raises:
            DirectoryWriteError: If the credential cannot be deleted.
        """
        try:
            await self._client.remove_password(application_id, str(key_id))
        except Exception as e:
            msg = f"Failed to delete secret {key_id} on application {application_id}: {e}"
            logger.exception(msg)
            raise DirectoryWriteError(msg) from e

    def _map_application(self, raw: dict[str, Any]) -> ApplicationCredentialSet:
        """Map raw Graph API application data to a domain entity."""
        app_name = raw.get("displayName", "Unknown")
        credentials: list[Credential] = []

        for cred in raw.get("passwordCredentials") or []:
            credential = self._map_credential(cred, app_name)
            if credential:
                credentials.append(credential)

        return ApplicationCredentialSet(
            display_name=app_name,
            id=raw.get("id", ""),
            credentials=tuple(credentials),
        )

    def _map_credential(self, raw: dict[str, Any], app_name: str) -> Credential | None:
        """
        Map raw Graph API password credential data to a domain entity.

        Returns:
            Credential entity or None if mapping fails.
        """
        end_time = self._parse_datetime(raw.get("endDateTime"))
        if not end_time:
            logger.warning(
                "Secret %s of %s has no valid expiry date",
                raw.get("keyId", "unknown"),
                app_name,
            )
            return None

        start_time = self._parse_datetime(raw.get("startDateTime")) or datetime.min.replace(tzinfo=UTC)

        try:
            return Credential.create(
                key_id=raw.get("keyId", ""),
                display_name=raw.get("displayName"),
                start_time=start_time,
                end_time=end_time,
            )
        except ValueError:
            logger.warning("Secret of %s has invalid key id: %s", app_name, raw.get("keyId"))
            return None

    @staticmethod
    def _parse_datetime(dt_string: str | None) -> datetime | None:
        """Parse ISO datetime string to datetime object."""
        if not dt_string:
            return None
        try:
            # Handle various formats from Graph API
            dt_string = dt_string.replace("Z", "+00:00")
            dt = datetime.fromisoformat(dt_string)
            # Ensure timezone-aware
            return dt if dt.tzinfo else dt.replace(tzinfo=UTC)
        except ValueError:
            logger.warning("Failed to parse datetime: %s", dt_string)
            return None
