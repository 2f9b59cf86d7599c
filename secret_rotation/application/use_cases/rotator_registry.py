"""Per-tenant registry of credential rotators."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from ...domain.value_objects import RotationThreshold
from .rotate_credentials import CredentialRotator

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..ports import CredentialDirectory

logger = logging.getLogger(__name__)


class RotatorRegistry:
    """
    Get-or-create cache holding one CredentialRotator per tenant.

    The first caller for a tenant binds the rotation threshold. Later calls
    with another threshold get the cached rotator unchanged.
    """

    def __init__(self, directory_factory: Callable[[str], CredentialDirectory]) -> None:
        """
        Initialize the registry.

        Args:
            directory_factory: Creates the directory adapter for a tenant id.
        """
        self._directory_factory = directory_factory
        self._rotators: dict[str, CredentialRotator] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._rotators)

    def get_or_create(self, tenant_id: str, rotate_within_days: int) -> CredentialRotator:
        """Return the rotator of ``tenant_id``, creating it on first access."""
        with self._lock:
            rotator = self._rotators.get(tenant_id)
            if rotator is None:
                rotator = CredentialRotator(
                    self._directory_factory(tenant_id),
                    RotationThreshold(rotate_within_days),
                )
                self._rotators[tenant_id] = rotator
                logger.info(
                    "Created rotator for tenant %s (threshold %d days)",
                    tenant_id,
                    rotate_within_days,
                )
            elif rotator.threshold.days != rotate_within_days:
                logger.debug(
                    "Ignoring threshold %d for tenant %s, rotator is bound to %d days",
                    rotate_within_days,
                    tenant_id,
                    rotator.threshold.days,
                )
            return rotator
