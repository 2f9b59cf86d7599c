"""Application ports - Interfaces for external adapters."""

from .credential_directory import CredentialDirectory

__all__ = ["CredentialDirectory"]
