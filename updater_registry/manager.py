"""Registration manager — the four operations callers use.

Every operation first checks the host preconditions (elevated privileges,
supported platform) and then delegates to the validator or the store.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from updater_registry.config import Settings
from updater_registry.errors import ErrorKind, RegistrationError
from updater_registry.registry.host import HostEnvironment, SystemHost, default_name_registry
from updater_registry.registry.local_registry import RegistrationStore
from updater_registry.registry.models import RegistrationSummary
from updater_registry.spec.schema_validator import ValidationResult, validate_file

logger = logging.getLogger(__name__)


class RegistrationManager:
    def __init__(self, store: RegistrationStore, host: HostEnvironment):
        self.store = store
        self.host = host

    @classmethod
    def from_settings(cls, settings: Settings) -> RegistrationManager:
        registry = default_name_registry(settings.registry_key, settings.reserved_names)
        store = RegistrationStore(settings.store_root, registry)
        return cls(store, SystemHost(settings.restricted_editions))

    def validate(self, path: str | Path) -> ValidationResult:
        self._check_host()
        result = validate_file(path)
        logger.debug("Validated %s: %s", path, result.summary())
        return result

    def create(self, path: str | Path) -> RegistrationSummary:
        """Validate the descriptor at ``path`` and register it."""
        result = self.validate(path)
        return self.store.create(path, result.descriptor)

    def read(
        self, oem_name: Optional[str] = None, updater_name: Optional[str] = None
    ) -> RegistrationSummary | list[RegistrationSummary]:
        self._check_host()
        return self.store.get(oem_name, updater_name)

    def delete(self, oem_name: str, updater_name: str) -> None:
        self._check_host()
        self.store.remove(oem_name, updater_name)

    def _check_host(self) -> None:
        if not self.host.is_elevated():
            raise RegistrationError(
                ErrorKind.PERMISSION_DENIED,
                "This operation requires administrator privileges",
            )
        if not self.host.is_supported_platform():
            raise RegistrationError(
                ErrorKind.UNSUPPORTED_PLATFORM,
                "Updater registration is not supported on this edition",
            )
