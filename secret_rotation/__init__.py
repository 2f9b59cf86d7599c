"""Entra ID secret rotation - reconciles declared app registration secrets with Entra ID."""
