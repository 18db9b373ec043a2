"""cargo install backend: builds the crate from source."""

from __future__ import annotations

import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List

from constants import Constants
from versioning.models import ResolvedTarget

from .base import InstallBackend, InstallOptions

SCRATCH_PREFIX = "cargox-build-"


class CargoInstallBackend(InstallBackend):
    """``cargo install [--quiet] [--force] --root ROOT name [--version v] [--bin B]``.

    Build artifacts go to a scratch ``CARGO_TARGET_DIR`` that only exists
    while the command runs.
    """

    label = "cargo install"

    def build_command(self, target: ResolvedTarget, options: InstallOptions,
                      install_root: Path) -> List[str]:
        command = [Constants.CARGO_BIN, "install"]
        if options.quiet:
            command.append("--quiet")
        if options.force:
            command.append("--force")
        command.extend(["--root", str(install_root), target.name])
        if target.resolved_version is not None:
            command.extend(["--version", str(target.resolved_version)])
        if options.bin_name:
            command.extend(["--bin", options.bin_name])
        return command

    @contextmanager
    def extra_env(self) -> Iterator[Dict[str, str]]:
        with tempfile.TemporaryDirectory(prefix=SCRATCH_PREFIX) as scratch:
            yield {Constants.ENV_TARGET_DIR: scratch}
