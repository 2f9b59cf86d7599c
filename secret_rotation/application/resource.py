"""Declarative secret rotation resource exchanged with the host."""

from typing import Self

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..domain.entities import RotationReportRow
from ..domain.value_objects import RotationRequest


class _ResourceModel(BaseModel):
    """Base model using camelCase names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SecretToRotate(_ResourceModel):
    """App registration and secret name considered for rotation."""

    app_registration_name: str = Field(min_length=1)
    secret_name: str = Field(min_length=1)

    def to_request(self) -> RotationRequest:
        """Convert to the domain rotation request."""
        return RotationRequest(self.app_registration_name, self.secret_name)


class AppRegistrationWithSecret(_ResourceModel):
    """Reported state of one app registration secret."""

    app_registration_name: str
    secret_name: str
    secret_expires_on: str
    secret_value: str
    is_expiring_soon: bool = False
    is_renewed: bool = False

    @classmethod
    def from_row(cls, row: RotationReportRow) -> Self:
        """Create from a domain report row."""
        return cls(
            app_registration_name=row.application_name,
            secret_name=row.secret_name,
            secret_expires_on=row.expires_on,
            secret_value=row.secret_value,
            is_expiring_soon=row.is_expiring_soon,
            is_renewed=row.is_renewed,
        )


class SecretRotationResource(_ResourceModel):
    """Secret rotation resource for an Entra ID tenant."""

    id: str = Field(min_length=1, description="Tenant id, identifies the resource.")
    rotate_secrets_expiring_within_days: int = Field(
        default=30,
        ge=0,
        description="Rotate secrets expiring within this many days.",
    )
    expires_in_days: int = Field(
        default=180,
        gt=0,
        description="Number of days until a newly issued secret expires.",
    )
    secrets_to_rotate: list[SecretToRotate] = Field(
        default_factory=list,
        description="App registration with secret name which should be considered for rotation.",
    )
    delete_after_renew: bool = Field(
        default=False,
        description="If true, deletes the old secret after renewal.",
    )

    # Output
    apps_with_expiring_secrets: list[AppRegistrationWithSecret] | None = Field(
        default=None,
        description="Reported secrets of all app registrations with credentials.",
    )

    def rotation_requests(self) -> list[RotationRequest]:
        """Declared secrets as domain rotation requests."""
        return [secret.to_request() for secret in self.secrets_to_rotate]

    def with_report(self, rows: list[RotationReportRow]) -> Self:
        """Return a copy carrying the given report."""
        return self.model_copy(
            update={"apps_with_expiring_secrets": [AppRegistrationWithSecret.from_row(r) for r in rows]},
        )
