"""Installer backend base class and options."""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from errors import ExternalToolFailedError
from versioning.models import ResolvedTarget

from .sandbox import build_sandboxed_env

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallOptions:
    """User-controlled install behavior."""
    quiet: bool = False
    force: bool = False
    build_from_source: bool = False
    bin_name: Optional[str] = None

    @classmethod
    def from_args(cls, args: Any) -> "InstallOptions":
        return cls(
            quiet=bool(getattr(args, "QUIET", False)),
            force=bool(getattr(args, "FORCE", False)),
            build_from_source=bool(getattr(args, "BUILD_FROM_SOURCE", False)),
            bin_name=getattr(args, "BIN", None),
        )


class InstallBackend(ABC):
    """One way of installing a crate into the sandboxed install root.

    Subclasses only describe the command line and any extra environment;
    sandboxing and exit-status handling live here.
    """

    #: Label used in logs and errors, e.g. "cargo-binstall".
    label: str = ""

    @abstractmethod
    def build_command(self, target: ResolvedTarget, options: InstallOptions,
                      install_root: Path) -> List[str]:
        """Return the full argv for the external tool."""

    @contextmanager
    def extra_env(self) -> Iterator[Dict[str, str]]:
        """Yield backend-specific variables valid for one invocation."""
        yield {}

    def install(self, target: ResolvedTarget, options: InstallOptions, install_root: Path) -> None:
        """Run the external tool; raises ExternalToolFailedError unless it succeeds."""
        command = self.build_command(target, options, install_root)
        with self.extra_env() as extra:
            env = build_sandboxed_env(install_root)
            env.update(extra)

            logger.info(
                "Installing %s with %s%s to %s",
                target.install_spec,
                self.label,
                " (quiet)" if options.quiet else "",
                install_root,
            )
            logger.debug("Running: %s", " ".join(command))

            try:
                result = subprocess.run(command, env=env, check=False)  # noqa: S603
            except OSError as exc:
                raise ExternalToolFailedError(
                    self.label, message=f"failed to invoke {self.label}"
                ) from exc

        if result.returncode != 0:
            raise ExternalToolFailedError.from_returncode(self.label, result.returncode)
