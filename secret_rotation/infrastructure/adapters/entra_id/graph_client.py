"""Microsoft Graph API client for Entra ID."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, ClassVar

import httpx
import msal

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GraphClientConfig:
    """Configuration for Microsoft Graph API client."""

    tenant_id: str
    client_id: str
    client_secret: str
    timeout: float = 30.0


class GraphClient:
    """
    Async client for Microsoft Graph API.

    Handles authentication, paginated reads and the password credential
    actions of application registrations.
    """

    GRAPH_BASE_URL: ClassVar[str] = "https://graph.microsoft.com/v1.0"
    AUTHORITY_BASE: ClassVar[str] = "https://login.microsoftonline.com"
    SCOPE: ClassVar[list[str]] = ["https://graph.microsoft.com/.default"]
    APPLICATION_FIELDS: ClassVar[str] = "id,appId,displayName,passwordCredentials"

    def __init__(
        self,
        config: GraphClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Graph client."""
        self._config = config
        self._transport = transport
        self._access_token: str | None = None
        self._token_expiry: datetime | None = None
        self._msal_app: msal.ConfidentialClientApplication | None = None

    def _get_msal_app(self) -> msal.ConfidentialClientApplication:
        """Get or create MSAL application instance."""
        if self._msal_app is None:
            authority = f"{self.AUTHORITY_BASE}/{self._config.tenant_id}"
            self._msal_app = msal.ConfidentialClientApplication(
                client_id=self._config.client_id,
                client_credential=self._config.client_secret,
                authority=authority,
            )
        return self._msal_app

    async def _acquire_token(self) -> str:
        """Acquire access token using client credentials flow."""
        # Check if existing token is still valid
        if self._access_token and self._token_expiry and datetime.now(UTC) < self._token_expiry:
            return self._access_token

        app = self._get_msal_app()
        result = app.acquire_token_for_client(scopes=self.SCOPE)

        if "access_token" not in result:
            error = result.get("error_description", result.get("error", "Unknown error"))
            msg = f"Failed to acquire access token: {error}"
            raise RuntimeError(msg)

        self._access_token = result["access_token"]
        expires_in = result.get("expires_in", 3600)
        # Refresh 5 minutes before expiry
        self._token_expiry = datetime.now(UTC) + timedelta(seconds=expires_in - 300)

        return self._access_token

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.GRAPH_BASE_URL,
            timeout=self._config.timeout,
            transport=self._transport,
        )

    async def _headers(self) -> dict[str, str]:
        token = await self._acquire_token()
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    async def get_applications(self) -> list[dict]:
        """
        Retrieve all application registrations with their password credentials.

        Returns:
            List of application dictionaries from Graph API.
        """
        logger.info("Fetching application registrations from Entra ID...")
        applications = await self._get_all_pages(f"/applications?$select={self.APPLICATION_FIELDS}")
        logger.info("Found %d application registrations", len(applications))
        return applications

    async def add_password(
        self,
        application_object_id: str,
        display_name: str,
        end_date_time: datetime,
    ) -> dict[str, Any]:
        """
        Add a password credential to an application.

        Args:
            application_object_id: Object id of the application (not the app id).
            display_name: Display name of the new secret.
            end_date_time: Expiry of the new secret.

        Returns:
            The created passwordCredential, including ``secretText``.
        """
        body = {
            "passwordCredential": {
                "displayName": display_name,
                "endDateTime": end_date_time.astimezone(UTC).isoformat().replace("+00:00", "Z"),
            }
        }
        return await self._post(f"/applications/{application_object_id}/addPassword", body)

    async def remove_password(self, application_object_id: str, key_id: str) -> None:
        """Remove a password credential from an application by key id."""
        await self._post(
            f"/applications/{application_object_id}/removePassword",
            {"keyId": key_id},
        )

    async def _post(self, endpoint: str, body: dict[str, Any]) -> dict[str, Any]:
        """Send an authenticated POST and return the JSON body, if any."""
        async with self._http_client() as client:
            response = await client.post(endpoint, headers=await self._headers(), json=body)
            response.raise_for_status()
            if response.status_code == httpx.codes.NO_CONTENT or not response.content:
                return {}
            return response.json()

    async def _get_all_pages(self, endpoint: str) -> list[dict]:
        """
        Retrieve all pages from a paginated Graph API endpoint.

        Args:
            endpoint: The API endpoint path.

        Returns:
            Combined list of all results across pages.
        """
        results: list[dict] = []
        url: str | None = endpoint

        async with self._http_client() as client:
            while url:
                # nextLink is absolute, httpx keeps absolute URLs as they are
                response = await client.get(url, headers=await self._headers())
                response.raise_for_status()
                data = response.json()

                results.extend(data.get("value", []))
                url = data.get("@odata.nextLink")

        return results
