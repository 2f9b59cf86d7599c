"""Domain entities - Objects with identity and lifecycle."""

from .application_credential_set import ApplicationCredentialSet
from .credential import NIL_KEY_ID, Credential
from .rotation_plan import RotationPlan
from .rotation_report import NO_SECRET_CHANGED, RotationReportRow

__all__ = [
    "NIL_KEY_ID",
    "NO_SECRET_CHANGED",
    "ApplicationCredentialSet",
    "Credential",
    "RotationPlan",
    "RotationReportRow",
]
