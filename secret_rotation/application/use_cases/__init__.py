"""Application use cases."""

from .rotate_credentials import CredentialRotator
from .rotator_registry import RotatorRegistry
from .secret_rotation_handler import SecretRotationHandler

__all__ = [
    "CredentialRotator",
    "RotatorRegistry",
    "SecretRotationHandler",
]
