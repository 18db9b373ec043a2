"""cargo-binstall backend: pre-built artifacts when available."""

from __future__ import annotations

from pathlib import Path
from typing import List

from constants import Constants
from versioning.models import ResolvedTarget

from .base import InstallBackend, InstallOptions


class CargoBinstallBackend(InstallBackend):
    """``cargo binstall [--quiet] --no-confirm [--force] [--bin B] name[@v]``.

    The install location comes from ``CARGO_INSTALL_ROOT`` in the sandboxed
    environment.
    """

    label = Constants.BINSTALL_BIN

    def build_command(self, target: ResolvedTarget, options: InstallOptions,
                      install_root: Path) -> List[str]:
        command = [Constants.CARGO_BIN, "binstall"]
        if options.quiet:
            command.append("--quiet")
        command.append("--no-confirm")
        if options.force:
            command.append("--force")
        if options.bin_name:
            command.extend(["--bin", options.bin_name])
        command.append(target.install_spec)
        return command
