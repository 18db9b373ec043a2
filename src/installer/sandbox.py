"""Sandboxed environment for installer child processes.

Cargo and cargo-binstall read several variables that can redirect where they
install or which toolchain they use. Those are stripped and replaced by a
single install-root variable pointing at the cargox install directory.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from constants import Constants

SCRUBBED_VARIABLES = (
    "CARGO_INSTALL_ROOT",
    "CARGO_HOME",
    "CARGO_BUILD_TARGET_DIR",
    "CARGO_TARGET_DIR",
    "BINSTALL_INSTALL_PATH",
    "RUSTUP_HOME",
    "RUSTUP_TOOLCHAIN",
)


def build_sandboxed_env(
    install_root: Path,
    base_env: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Return a fresh environment for an installer invocation.

    Args:
        install_root: The cargox install directory.
        base_env: Environment to derive from; defaults to ``os.environ``.

    Returns:
        dict: ``base_env`` minus SCRUBBED_VARIABLES, plus ``CARGO_INSTALL_ROOT``.
    """
    env = dict(os.environ if base_env is None else base_env)
    for var in SCRUBBED_VARIABLES:
        env.pop(var, None)
    env[Constants.ENV_INSTALL_ROOT] = str(install_root)
    return env
