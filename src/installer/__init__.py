"""Installer backends and orchestration."""

from .base import InstallBackend, InstallOptions
from .binstall import CargoBinstallBackend
from .cargo_install import CargoInstallBackend
from .orchestrator import ensure_installed, finalize_installation, select_backend
from .sandbox import SCRUBBED_VARIABLES, build_sandboxed_env

__all__ = [
    "InstallBackend",
    "InstallOptions",
    "CargoBinstallBackend",
    "CargoInstallBackend",
    "ensure_installed",
    "finalize_installation",
    "select_backend",
    "SCRUBBED_VARIABLES",
    "build_sandboxed_env",
]
