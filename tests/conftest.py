"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from secret_rotation.application.exceptions import DirectoryUnavailableError, DirectoryWriteError
from secret_rotation.application.use_cases import CredentialRotator, RotatorRegistry, SecretRotationHandler
from secret_rotation.domain.entities import ApplicationCredentialSet, Credential
from secret_rotation.domain.value_objects import IssuedSecret, RotationThreshold


def make_credential(
    name: str,
    *,
    end_days: float,
    start_days: float = -90,
    now: datetime | None = None,
    key_id: UUID | None = None,
) -> Credential:
    """Build a credential relative to ``now`` (defaults to the current time)."""
    now = now or datetime.now(UTC)
    return Credential(
        display_name=name,
        key_id=key_id or uuid4(),
        start_time=now + timedelta(days=start_days),
        end_time=now + timedelta(days=end_days),
    )


class FakeCredentialDirectory:
    """In-memory credential directory recording every call."""

    def __init__(self, applications: list[ApplicationCredentialSet]) -> None:
        self.applications = list(applications)
        self.calls: list[tuple] = []
        self.fail_on_create: set[str] = set()
        self.list_error: Exception | None = None
        self._issued = 0

    @property
    def created(self) -> list[tuple[str, str, int]]:
        return [call[1:] for call in self.calls if call[0] == "create"]

    @property
    def deleted(self) -> list[tuple[str, UUID]]:
        return [call[1:] for call in self.calls if call[0] == "delete"]

    @property
    def writes(self) -> list[tuple]:
        return [call for call in self.calls if call[0] != "list"]

    def application(self, display_name: str) -> ApplicationCredentialSet:
        return next(app for app in self.applications if app.display_name == display_name)

    async def list_applications_with_credentials(self) -> list[ApplicationCredentialSet]:
        self.calls.append(("list",))
        if self.list_error is not None:
            raise self.list_error
        return list(self.applications)

    async def create_or_rotate_credential(
        self,
        application_id: str,
        credential_name: str,
        expires_in_days: int,
    ) -> IssuedSecret:
        self.calls.append(("create", application_id, credential_name, expires_in_days))
        if credential_name in self.fail_on_create:
            msg = f"Failed to create secret {credential_name}"
            raise DirectoryWriteError(msg)

        self._issued += 1
        now = datetime.now(UTC)
        issued = IssuedSecret(
            value=f"{credential_name}-value-{self._issued}",
            end_time=now + timedelta(days=expires_in_days),
            key_id=uuid4(),
        )
        new = Credential(
            display_name=credential_name,
            key_id=issued.key_id,
            start_time=now,
            end_time=issued.end_time,
        )
        self._update(application_id, lambda creds: (*creds, new))
        return issued

    async def delete_credential(self, application_id: str, key_id: UUID) -> None:
        self.calls.append(("delete", application_id, key_id))
        self._update(application_id, lambda creds: tuple(c for c in creds if c.key_id != key_id))

    def _update(self, application_id, change) -> None:
        self.applications = [
            replace(app, credentials=change(app.credentials)) if app.id == application_id else app
            for app in self.applications
        ]


@pytest.fixture
def now() -> datetime:
    """Fixed evaluation time."""
    return datetime.now(UTC)


@pytest.fixture
def sample_applications(now: datetime) -> list[ApplicationCredentialSet]:
    """App registrations with duplicated and expiring secrets."""
    return [
        ApplicationCredentialSet("AppRegWithoutSecret", "app-without-secret", ()),
        ApplicationCredentialSet(
            "AppRegWithSecret",
            "app-with-secret",
            (
                make_credential("Secret", start_days=-10, end_days=180, now=now),
                make_credential("Secret", start_days=-1, end_days=190, now=now),
                make_credential("ExpiringSecret", start_days=-170, end_days=10, now=now),
                make_credential("ExpiringSecret", start_days=-169, end_days=10, now=now),
                make_credential("AnotherExpiringSecret", start_days=-170, end_days=10, now=now),
            ),
        ),
        ApplicationCredentialSet(
            "AnotherAppRegWithSecret",
            "another-app-with-secret",
            (
                make_credential("Secret", start_days=-10, end_days=180, now=now),
                make_credential("SomeSecret", start_days=-10, end_days=180, now=now),
                make_credential("SomeSecret", start_days=-9, end_days=180, now=now),
                make_credential("SomeExpiringSecret", start_days=-170, end_days=10, now=now),
            ),
        ),
    ]


@pytest.fixture
def directory(sample_applications: list[ApplicationCredentialSet]) -> FakeCredentialDirectory:
    """Fake directory seeded with the sample applications."""
    return FakeCredentialDirectory(sample_applications)


@pytest.fixture
def default_threshold() -> RotationThreshold:
    """Default rotation threshold of 30 days."""
    return RotationThreshold(30)


@pytest.fixture
def rotator(
    directory: FakeCredentialDirectory,
    default_threshold: RotationThreshold,
    now: datetime,
) -> CredentialRotator:
    """Rotator over the fake directory with a frozen clock."""
    return CredentialRotator(directory, default_threshold, clock=lambda: now)


@pytest.fixture
def registry(directory: FakeCredentialDirectory) -> RotatorRegistry:
    """Registry handing out rotators over the fake directory."""
    return RotatorRegistry(lambda _tenant_id: directory)


@pytest.fixture
def handler(registry: RotatorRegistry) -> SecretRotationHandler:
    """Handler backed by the fake registry."""
    return SecretRotationHandler(registry)


@pytest.fixture
def unavailable_error() -> DirectoryUnavailableError:
    """Error raised by a failing listing call."""
    return DirectoryUnavailableError("Directory unreachable")


@pytest.fixture
def credential_factory():
    """Factory building credentials relative to a point in time."""
    return make_credential


@pytest.fixture
def directory_factory():
    """Factory building fake directories from applications."""
    return FakeCredentialDirectory
