"""Typed errors raised along the resolve/install/run pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class CargoxError(Exception):
    """Base class for all cargox errors."""


class InvalidSpecError(CargoxError):
    """The crate spec string could not be parsed."""


class RegistryError(CargoxError):
    """Base class for registry-stage failures."""


class RegistryUnavailableError(RegistryError):
    """The registry could not be reached or returned an unusable response."""


class NoVersionsFoundError(RegistryError):
    """The registry lists no usable (non-yanked, parsable) versions."""

    def __init__(self, name: str) -> None:
        super().__init__(f"no published versions found for {name}")
        self.name = name


class NoMatchingVersionError(RegistryError):
    """No published version satisfies the requested range."""

    def __init__(self, name: str, requirement: str) -> None:
        super().__init__(
            f"no published versions of {name} satisfy requirement {requirement}"
        )
        self.name = name
        self.requirement = requirement


class NoInstallDirectoryError(CargoxError):
    """The private install root could not be determined or created."""


class ExternalToolFailedError(CargoxError):
    """An installer backend failed to start or exited unsuccessfully."""

    def __init__(self, tool: str, status: Optional[Union[int, str]] = None,
                 message: Optional[str] = None) -> None:
        if message is None:
            message = f"{tool} exited with status code {status}"
        super().__init__(message)
        self.tool = tool
        self.status = status

    @classmethod
    def from_returncode(cls, tool: str, returncode: int) -> "ExternalToolFailedError":
        """Build the error from a subprocess return code (negative means signal)."""
        status: Union[int, str] = returncode if returncode >= 0 else "signal"
        return cls(tool, status)


class InstallationIncompleteError(CargoxError):
    """An installer reported success but the expected binary is missing."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"expected installer to create {path}, but it was not found")
        self.path = path


class BinaryNotFoundError(CargoxError):
    """The requested binary could not be located."""


class SpawnFailedError(CargoxError):
    """The resolved binary could not be executed."""
