"""Local directory-backed registration store.

Each registration lives in its own subdirectory of the store root, named
by its case-folded store key::

    <root>/<oem>_<updater>/updater_<UpdaterName>.json

The store owns nothing in memory between calls; every operation reads the
directory tree afresh. There is no cross-process locking, so two creates
of the same key can race between the existence check and ``mkdir``.
"""

from __future__ import annotations

import json
import logging
import re
import shutil
from pathlib import Path
from typing import Optional

from updater_registry.errors import ErrorKind, RegistrationError
from updater_registry.registry.host import NameRegistry, StaticNameRegistry
from updater_registry.registry.models import (
    DESCRIPTOR_PREFIX,
    DESCRIPTOR_SUFFIX,
    RegistrationSummary,
    descriptor_file_name,
    store_key,
)
from updater_registry.spec.descriptor import Descriptor
from updater_registry.spec.schema import NAME_PATTERN

logger = logging.getLogger(__name__)


class RegistrationStore:
    """File-based store of updater registrations."""

    def __init__(self, store_root: str | Path, name_registry: Optional[NameRegistry] = None):
        self.store_root = Path(store_root)
        self.name_registry = name_registry or StaticNameRegistry()

    def create(self, source_path: str | Path, descriptor: Descriptor) -> RegistrationSummary:
        """Register a validated descriptor.

        Copies the source file into a new ``<key>`` directory and renames it
        to ``updater_<UpdaterName>.json``. Not transactional: if the copy or
        rename fails after the directory was made, the directory is left
        behind and the error propagates.
        """
        self._require_root()
        key = store_key(descriptor.OEMName, descriptor.UpdaterName)
        registration_dir = self.store_root / key

        if registration_dir.exists():
            raise RegistrationError(
                ErrorKind.ALREADY_EXISTS,
                f"Registration '{key}' already exists in {self.store_root}",
            )
        if self._registry_has(key):
            logger.warning("Name '%s' collides with an external registry entry", key)
            raise RegistrationError(
                ErrorKind.ALREADY_EXISTS,
                f"Registration '{key}' already exists in the system registry",
            )

        source = Path(source_path)
        registration_dir.mkdir()
        copied = Path(shutil.copy(source, registration_dir / source.name))
        target = copied.replace(registration_dir / descriptor_file_name(descriptor.UpdaterName))
        logger.info("Registered %s at %s", key, target)

        return RegistrationSummary.from_document(descriptor.to_document())

    def get(
        self, oem_name: Optional[str] = None, updater_name: Optional[str] = None
    ) -> RegistrationSummary | list[RegistrationSummary]:
        """Read one registration, or every registration when no names are given."""
        if (oem_name is None) != (updater_name is None):
            raise RegistrationError(
                ErrorKind.INVALID_ARGUMENTS,
                "OEM name and updater name must be given together",
            )
        if oem_name is not None:
            _check_names(oem_name, updater_name)
        self._require_root()

        if oem_name is None:
            return self.list_all()

        path = self._descriptor_path(oem_name, updater_name)
        if path is None:
            raise RegistrationError(
                ErrorKind.NOT_FOUND,
                f"No registration for OEM '{oem_name}' and updater '{updater_name}'",
            )
        try:
            return _read_summary(path)
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise RegistrationError(
                ErrorKind.SUMMARY_RETRIEVAL_FAILED,
                f"Failed to read registration {path}: {e}",
            ) from e

    def list_all(self) -> list[RegistrationSummary]:
        """Summaries of every registration; fails whole if any entry is unreadable."""
        self._require_root()
        summaries = []
        try:
            for path in sorted(self.store_root.glob(f"*/{DESCRIPTOR_PREFIX}*{DESCRIPTOR_SUFFIX}")):
                logger.debug("Reading %s", path)
                summaries.append(_read_summary(path))
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise RegistrationError(
                ErrorKind.SUMMARY_RETRIEVAL_FAILED,
                f"Failed to read registrations under {self.store_root}: {e}",
            ) from e
        return summaries

    def remove(self, oem_name: str, updater_name: str) -> None:
        """Delete a registration directory and everything in it."""
        _check_names(oem_name, updater_name)
        self._require_root()

        key = store_key(oem_name, updater_name)
        registration_dir = self.store_root / key
        if not registration_dir.is_dir():
            raise RegistrationError(ErrorKind.NOT_FOUND, f"No registration '{key}' to remove")

        try:
            shutil.rmtree(registration_dir)
        except OSError as e:
            raise RegistrationError(
                ErrorKind.DELETION_FAILED,
                f"Failed to remove registration '{key}': {e}",
            ) from e
        logger.info("Removed registration %s", key)

    def exists(self, oem_name: str, updater_name: str) -> bool:
        if not (_is_name(oem_name) and _is_name(updater_name)):
            return False
        return (self.store_root / store_key(oem_name, updater_name)).is_dir()

    def _require_root(self) -> None:
        if not self.store_root.is_dir():
            raise RegistrationError(
                ErrorKind.STORE_NOT_INITIALIZED,
                f"Store root {self.store_root} does not exist",
            )

    def _registry_has(self, key: str) -> bool:
        for name in self.name_registry.child_names():
            last_segment = re.split(r"[\\/]", name.rstrip("\\/"))[-1]
            if last_segment.lower() == key:
                return True
        return False

    def _descriptor_path(self, oem_name: str, updater_name: str) -> Optional[Path]:
        registration_dir = self.store_root / store_key(oem_name, updater_name)
        if not registration_dir.is_dir():
            return None
        expected = descriptor_file_name(updater_name).lower()
        for path in registration_dir.iterdir():
            if path.is_file() and path.name.lower() == expected:
                return path
        return None


def _read_summary(path: Path) -> RegistrationSummary:
    document = json.loads(path.read_text(encoding="utf-8-sig"))
    return RegistrationSummary.from_document(document)


def _is_name(value: Optional[str]) -> bool:
    return bool(value) and re.fullmatch(NAME_PATTERN, value) is not None


def _check_names(oem_name: Optional[str], updater_name: Optional[str]) -> None:
    # Names become a directory under the store root; anything outside the
    # descriptor name pattern could point elsewhere.
    for label, value in (("OEM name", oem_name), ("Updater name", updater_name)):
        if not _is_name(value):
            raise RegistrationError(
                ErrorKind.INVALID_ARGUMENTS,
                f"{label} {value!r} must be non-empty and match '{NAME_PATTERN}'",
            )
