"""Infrastructure adapters - Implementations of application ports."""

from .entra_id import EntraIdCredentialDirectory

__all__ = ["EntraIdCredentialDirectory"]
