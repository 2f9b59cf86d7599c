"""Tests for the SecretRotationHandler use case."""

from __future__ import annotations

import pytest

from secret_rotation.application.exceptions import DirectoryUnavailableError, DirectoryWriteError
from secret_rotation.application.resource import SecretRotationResource, SecretToRotate
from secret_rotation.application.use_cases import RotatorRegistry, SecretRotationHandler
from secret_rotation.domain.entities import NO_SECRET_CHANGED


def _resource(*secrets: tuple[str, str], **kwargs) -> SecretRotationResource:
    return SecretRotationResource(
        id="00000000-0000-0000-0000-000000000001",
        secrets_to_rotate=[SecretToRotate(app_registration_name=a, secret_name=s) for a, s in secrets],
        **kwargs,
    )


class TestPreview:
    """Tests for the preview operation."""

    @pytest.mark.asyncio
    async def test_lists_apps_with_secrets(self, handler: SecretRotationHandler) -> None:
        """Preview reports every surviving secret and skips apps without secrets."""
        result = await handler.preview(_resource(("AppRegWithSecret", "ExpiringSecret")))

        rows = result.apps_with_expiring_secrets
        assert rows is not None
        assert {r.app_registration_name for r in rows} == {"AppRegWithSecret", "AnotherAppRegWithSecret"}
        assert all(r.secret_value == NO_SECRET_CHANGED for r in rows)
        assert not any(r.is_renewed for r in rows)

    @pytest.mark.asyncio
    async def test_back_to_back_previews_never_write(self, handler: SecretRotationHandler, directory) -> None:
        """Previews only ever list the directory."""
        resource = _resource(("AppRegWithSecret", "ExpiringSecret"), delete_after_renew=True)

        await handler.preview(resource)
        await handler.preview(resource)

        assert directory.calls == [("list",), ("list",)]

    @pytest.mark.asyncio
    async def test_empty_directory_leaves_report_unset(self, directory_factory) -> None:
        """Without any secrets the report stays unset."""
        empty = directory_factory([])
        handler = SecretRotationHandler(RotatorRegistry(lambda _: empty))

        result = await handler.preview(_resource())

        assert result.apps_with_expiring_secrets is None

    @pytest.mark.asyncio
    async def test_empty_directory_drops_supplied_report(self, directory_factory) -> None:
        """A report sent along with the request is not echoed back."""
        empty = directory_factory([])
        handler = SecretRotationHandler(RotatorRegistry(lambda _: empty))
        resource = SecretRotationResource.model_validate(
            {
                "id": "00000000-0000-0000-0000-000000000001",
                "appsWithExpiringSecrets": [
                    {
                        "appRegistrationName": "Forged",
                        "secretName": "Secret",
                        "secretExpiresOn": "2030-01-01 00:00:00",
                        "secretValue": "injected",
                        "isExpiringSoon": False,
                        "isRenewed": False,
                    },
                ],
            },
        )

        result = await handler.preview(resource)

        assert result.apps_with_expiring_secrets is None
        assert resource.apps_with_expiring_secrets is not None

    @pytest.mark.asyncio
    async def test_listing_failure_propagates(self, handler, directory, unavailable_error) -> None:
        """No partial report is produced when listing fails."""
        directory.list_error = unavailable_error

        with pytest.raises(DirectoryUnavailableError):
            await handler.preview(_resource())

    @pytest.mark.asyncio
    async def test_does_not_modify_request(self, handler: SecretRotationHandler) -> None:
        """The incoming resource is left as it was."""
        resource = _resource()

        await handler.preview(resource)

        assert resource.apps_with_expiring_secrets is None


class TestCreateOrUpdate:
    """Tests for the create-or-update operation."""

    @pytest.mark.asyncio
    async def test_only_rotates_expiring_secrets_set_for_rotation(self, handler, directory) -> None:
        """Only declared secrets that are expiring soon are renewed."""
        result = await handler.create_or_update(
            _resource(("AppRegWithSecret", "ExpiringSecret"), ("AppRegWithSecret", "Secret")),
        )

        renewed = [
            (r.app_registration_name, r.secret_name)
            for r in result.apps_with_expiring_secrets
            if r.is_renewed and r.is_expiring_soon
        ]
        assert renewed == [("AppRegWithSecret", "ExpiringSecret")]
        assert len(directory.created) == 1

    @pytest.mark.asyncio
    async def test_lists_unrequested_expiring_secrets_unchanged(self, handler) -> None:
        """Expiring secrets that were not declared are reported but not renewed."""
        result = await handler.create_or_update(_resource(("AppRegWithSecret", "ExpiringSecret")))

        pending = {
            (r.app_registration_name, r.secret_name)
            for r in result.apps_with_expiring_secrets
            if r.is_expiring_soon and not r.is_renewed
        }
        assert pending == {
            ("AppRegWithSecret", "AnotherExpiringSecret"),
            ("AnotherAppRegWithSecret", "SomeExpiringSecret"),
        }

    @pytest.mark.asyncio
    async def test_takes_last_started_secret(self, handler) -> None:
        """Duplicated secrets are reported once."""
        result = await handler.create_or_update(_resource(("AppRegWithSecret", "ExpiringSecret")))

        matches = [
            r
            for r in result.apps_with_expiring_secrets
            if (r.app_registration_name, r.secret_name) == ("AppRegWithSecret", "ExpiringSecret")
        ]
        assert len(matches) == 1
        assert matches[0].secret_value != NO_SECRET_CHANGED

    @pytest.mark.asyncio
    async def test_creates_missing_secret(self, handler, directory) -> None:
        """A declared secret missing on an existing app is created once."""
        result = await handler.create_or_update(
            _resource(("AppRegWithSecret", "NewSecret"), ("AppRegWithSecret2", "NewSecret2")),
        )

        new_rows = [r for r in result.apps_with_expiring_secrets if r.secret_name == "NewSecret"]
        assert len(new_rows) == 1
        assert new_rows[0].is_renewed is True
        assert not any(r.secret_name == "NewSecret2" for r in result.apps_with_expiring_secrets)
        assert len(directory.created) == 1

    @pytest.mark.asyncio
    async def test_uses_requested_validity(self, handler, directory) -> None:
        """New secrets are issued with the declared validity."""
        await handler.create_or_update(_resource(("AppRegWithSecret", "NewSecret"), expires_in_days=45))

        assert directory.created == [("app-with-secret", "NewSecret", 45)]

    @pytest.mark.asyncio
    async def test_write_failure_propagates(self, handler, directory) -> None:
        """The first directory write error is surfaced."""
        directory.fail_on_create.add("ExpiringSecret")

        with pytest.raises(DirectoryWriteError):
            await handler.create_or_update(_resource(("AppRegWithSecret", "ExpiringSecret")))

    @pytest.mark.asyncio
    async def test_threshold_bound_by_first_request(self, handler, directory) -> None:
        """A later request with a wider threshold still uses the first one."""
        await handler.preview(_resource(rotate_secrets_expiring_within_days=30))

        await handler.create_or_update(
            _resource(("AppRegWithSecret", "Secret"), rotate_secrets_expiring_within_days=365),
        )

        assert directory.created == []

    def test_get_identifiers(self) -> None:
        """The resource is identified by its id."""
        assert SecretRotationHandler.get_identifiers(_resource()) == {"id": "00000000-0000-0000-0000-000000000001"}
