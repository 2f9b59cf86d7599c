"""Entra ID adapter - Credential directory backed by Microsoft Graph."""

from .directory import EntraIdCredentialDirectory
from .graph_client import GraphClient, GraphClientConfig

__all__ = [
    "EntraIdCredentialDirectory",
    "GraphClient",
    "GraphClientConfig",
]
