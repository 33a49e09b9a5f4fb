"""Host collaborators — the external name registry and host preconditions.

The registration store never talks to the operating system directly for
these concerns. It is handed a ``NameRegistry`` to look for colliding
names, and the manager is handed a ``HostEnvironment`` to check privilege
and platform support. In-memory versions are provided for tests and for
hosts without a system registry.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Iterable, Optional, Protocol

logger = logging.getLogger(__name__)

EDITION_KEY = r"SOFTWARE\Microsoft\Windows NT\CurrentVersion"


class NameRegistry(Protocol):
    """Read-only view of an external namespace of registered names."""

    def child_names(self) -> list[str]:
        ...


class HostEnvironment(Protocol):
    """Preconditions every operation checks before touching the store."""

    def is_elevated(self) -> bool:
        ...

    def is_supported_platform(self) -> bool:
        ...


class StaticNameRegistry:
    """Name registry backed by a fixed list of entry names."""

    def __init__(self, names: Optional[Iterable[str]] = None) -> None:
        self._names = list(names or [])

    def child_names(self) -> list[str]:
        return list(self._names)


class WindowsNameRegistry:
    """Name registry backed by the subkeys of an HKEY_LOCAL_MACHINE key."""

    def __init__(self, key_path: str) -> None:
        self.key_path = key_path

    def child_names(self) -> list[str]:
        import winreg

        try:
            key = winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, self.key_path)
        except FileNotFoundError:
            logger.debug("Registry key %s does not exist", self.key_path)
            return []

        names = []
        with key:
            count = winreg.QueryInfoKey(key)[0]
            for i in range(count):
                names.append(f"{self.key_path}\\{winreg.EnumKey(key, i)}")
        return names


class StaticHost:
    """Host environment with fixed answers."""

    def __init__(self, elevated: bool = True, supported: bool = True) -> None:
        self.elevated = elevated
        self.supported = supported

    def is_elevated(self) -> bool:
        return self.elevated

    def is_supported_platform(self) -> bool:
        return self.supported


class SystemHost:
    """Host environment answered by the running operating system.

    Elevation is an administrator token on Windows and an effective uid of
    0 elsewhere. The platform is unsupported when the Windows ``EditionID``
    is one of ``restricted_editions``; non-Windows hosts have no edition.
    """

    def __init__(self, restricted_editions: Optional[Iterable[str]] = None) -> None:
        self.restricted_editions = {e.lower() for e in restricted_editions or []}

    def is_elevated(self) -> bool:
        if sys.platform == "win32":
            import ctypes

            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        return os.geteuid() == 0

    def is_supported_platform(self) -> bool:
        edition = self.edition()
        if edition is None:
            return True
        return edition.lower() not in self.restricted_editions

    def edition(self) -> Optional[str]:
        if sys.platform != "win32":
            return None

        import winreg

        with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, EDITION_KEY) as key:
            value, _ = winreg.QueryValueEx(key, "EditionID")
        return str(value)


def default_name_registry(
    key_path: str, reserved_names: Optional[Iterable[str]] = None
) -> NameRegistry:
    """Pick the system registry on Windows and a static list elsewhere."""
    if sys.platform == "win32" and key_path:
        return WindowsNameRegistry(key_path)
    return StaticNameRegistry(reserved_names)
