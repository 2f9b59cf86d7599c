"""API response models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "unhealthy"]
    version: str
    timestamp: datetime
    tenants: int = 0


class ErrorResponse(BaseModel):
    """Error response."""

    error: str
    detail: str | None = None
