"""Domain value objects - Immutable objects defined by their attributes."""

from .issued_secret import IssuedSecret
from .rotation_request import RotationRequest
from .rotation_threshold import RotationThreshold

__all__ = [
    "IssuedSecret",
    "RotationRequest",
    "RotationThreshold",
]
