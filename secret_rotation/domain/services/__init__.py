"""Domain services - Stateless operations on domain objects."""

from .credential_normalizer import CredentialNormalizer, deduplicate
from .report_projector import project
from .rotation_planner import RotationPlanner

__all__ = [
    "CredentialNormalizer",
    "RotationPlanner",
    "deduplicate",
    "project",
]
