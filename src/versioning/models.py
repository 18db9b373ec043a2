"""Data models for crate specs and resolution targets."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import semantic_version

from .requirement import VersionRequirement


class ResolutionMode(Enum):
    """Resolution strategy derived from the spec."""
    UNSPECIFIED = "unspecified"
    LATEST = "latest"
    CONSTRAINT = "constraint"


@dataclass(frozen=True)
class VersionRequest:
    """What the user asked for after the ``@`` separator.

    ``requirement`` is set exactly when ``mode`` is CONSTRAINT.
    """
    mode: ResolutionMode
    requirement: Optional[VersionRequirement] = None

    def __post_init__(self):
        if (self.mode == ResolutionMode.CONSTRAINT) != (self.requirement is not None):
            raise ValueError("requirement must be given for, and only for, CONSTRAINT mode")

    @classmethod
    def unspecified(cls) -> "VersionRequest":
        return cls(ResolutionMode.UNSPECIFIED)

    @classmethod
    def latest(cls) -> "VersionRequest":
        return cls(ResolutionMode.LATEST)

    @classmethod
    def constraint(cls, requirement: VersionRequirement) -> "VersionRequest":
        return cls(ResolutionMode.CONSTRAINT, requirement)


@dataclass(frozen=True)
class PackageSpec:
    """Parsed ``name[@version]`` input."""
    name: str
    version_request: VersionRequest


@dataclass(frozen=True)
class ResolvedTarget:
    """Crate, concrete version and binary that will be installed and run.

    ``resolved_version`` is None only for an unversioned install into
    ``<root>/bin``.
    """
    name: str
    resolved_version: Optional[semantic_version.Version]
    binary_name: str

    @property
    def install_spec(self) -> str:
        if self.resolved_version is None:
            return self.name
        return f"{self.name}@{self.resolved_version}"

    @property
    def descriptor(self) -> str:
        if self.binary_name == self.name:
            return self.install_spec
        return f"{self.install_spec} ({self.binary_name})"
