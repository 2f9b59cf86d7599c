"""Application settings loaded from environment variables."""

import os
from dataclasses import dataclass, field

from ..adapters.entra_id.graph_client import GraphClientConfig

RUN_MODES = ("once", "scheduled")
OPERATIONS = ("preview", "create_or_update")


def _env_bool(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    return os.environ.get(key, str(default)).lower() in ("true", "1", "yes")


def _env_int(key: str, default: int) -> int:
    """Get integer from environment variable."""
    return int(os.environ.get(key, str(default)))


def _env_float(key: str, default: float) -> float:
    """Get float from environment variable."""
    return float(os.environ.get(key, str(default)))


def _env_str(key: str, default: str = "") -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default)


@dataclass
class Settings:
    """Application settings container."""

    # Azure/Entra ID, the tenant comes from each request
    azure_client_id: str = field(default_factory=lambda: _env_str("AZURE_CLIENT_ID"))
    azure_client_secret: str = field(default_factory=lambda: _env_str("AZURE_CLIENT_SECRET"))
    graph_timeout_seconds: float = field(default_factory=lambda: _env_float("GRAPH_TIMEOUT_SECONDS", 30.0))

    # Run configuration
    run_mode: str = field(default_factory=lambda: _env_str("RUN_MODE", "once"))
    operation: str = field(default_factory=lambda: _env_str("OPERATION", "preview"))
    request_file: str = field(default_factory=lambda: _env_str("REQUEST_FILE"))
    cron_schedule: str = field(default_factory=lambda: _env_str("CRON_SCHEDULE", "0 3 * * *"))
    log_level: str = field(default_factory=lambda: _env_str("LOG_LEVEL", "INFO"))

    # API settings
    api_enabled: bool = field(default_factory=lambda: _env_bool("API_ENABLED"))
    api_host: str = field(default_factory=lambda: _env_str("API_HOST", "0.0.0.0"))  # noqa: S104
    api_port: int = field(default_factory=lambda: _env_int("API_PORT", 8080))

    def validate(self) -> None:
        """Validate required settings."""
        missing: list[str] = []

        if not self.azure_client_id:
            missing.append("AZURE_CLIENT_ID")
        if not self.azure_client_secret:
            missing.append("AZURE_CLIENT_SECRET")
        if not self.api_enabled and not self.request_file:
            missing.append("REQUEST_FILE")

        if missing:
            msg = f"Missing required environment variables: {', '.join(missing)}"
            raise ValueError(msg)

        if self.operation.lower() not in OPERATIONS:
            msg = f"Invalid OPERATION: {self.operation} (use {' or '.join(OPERATIONS)})"
            raise ValueError(msg)

        if self.run_mode.lower() == "scheduled" and self.operation.lower() != "create_or_update":
            msg = "RUN_MODE=scheduled requires OPERATION=create_or_update"
            raise ValueError(msg)

    def graph_config(self, tenant_id: str) -> GraphClientConfig:
        """Get Graph API client configuration for a tenant."""
        return GraphClientConfig(
            tenant_id=tenant_id,
            client_id=self.azure_client_id,
            client_secret=self.azure_client_secret,
            timeout=self.graph_timeout_seconds,
        )


def load_settings() -> Settings:
    """Load and validate settings from environment."""
    settings = Settings()
    settings.validate()
    return settings
