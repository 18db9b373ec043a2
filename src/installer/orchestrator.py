"""Backend selection, installation and finalization into versioned storage."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

import semantic_version

from constants import Constants
from errors import CargoxError, InstallationIncompleteError, NoInstallDirectoryError
from paths import IS_WINDOWS, EXE_SUFFIX, get_install_dir, versioned_binary_path
from versioning.models import ResolvedTarget

from .base import InstallBackend, InstallOptions
from .binstall import CargoBinstallBackend
from .cargo_install import CargoInstallBackend

logger = logging.getLogger(__name__)


def select_backend(options: InstallOptions) -> InstallBackend:
    """Prefer cargo-binstall unless a source build was requested or it is missing."""
    if options.build_from_source:
        logger.info("Building from source with cargo install (requested)")
        return CargoInstallBackend()
    if shutil.which(Constants.BINSTALL_BIN) is None:
        logger.info("%s not found; falling back to cargo install", Constants.BINSTALL_BIN)
        return CargoInstallBackend()
    return CargoBinstallBackend()


def ensure_bin_dir(install_dir: Path) -> Path:
    bin_dir = install_dir / "bin"
    try:
        bin_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise NoInstallDirectoryError(f"failed to create {bin_dir}") from exc
    return bin_dir


def _installed_binary(bin_dir: Path, binary: str) -> Path:
    candidate = bin_dir / binary
    if candidate.is_file():
        return candidate
    if IS_WINDOWS:
        exe_candidate = bin_dir / (binary + EXE_SUFFIX)
        if exe_candidate.is_file():
            return exe_candidate
    raise InstallationIncompleteError(candidate)


def finalize_installation(install_dir: Path, binary: str,
                          version: semantic_version.Version) -> Path:
    """Move ``<root>/bin/<binary>`` to its versioned path, replacing any previous copy."""
    installed_path = _installed_binary(install_dir / "bin", binary)
    target_path = versioned_binary_path(binary, version, root=install_dir)

    if target_path.exists():
        try:
            target_path.unlink()
        except OSError as exc:
            raise CargoxError(f"failed to replace existing installation {target_path}") from exc

    try:
        os.replace(installed_path, target_path)
    except OSError as exc:
        raise CargoxError(
            f"failed to move installed binary from {installed_path} to {target_path}"
        ) from exc
    logger.debug("Moved %s to %s", installed_path, target_path)
    return target_path


def ensure_installed(target: ResolvedTarget, options: InstallOptions) -> None:
    """Install ``target`` unless that exact version is already present.

    A forced reinstall always runs the backend. Versioned targets are moved
    to their versioned path. Unversioned targets are left in ``<root>/bin``;
    the CLI always resolves a version first, so only library callers install
    without one.
    """
    install_dir = get_install_dir()
    if target.resolved_version is not None and not options.force:
        existing = versioned_binary_path(target.binary_name, target.resolved_version,
                                         root=install_dir)
        if existing.is_file():
            logger.info("Using cached %s at %s", target.descriptor, existing)
            return

    bin_dir = ensure_bin_dir(install_dir)

    backend = select_backend(options)
    backend.install(target, options, install_dir)

    if target.resolved_version is None:
        _installed_binary(bin_dir, target.binary_name)
        return
    finalize_installation(install_dir, target.binary_name, target.resolved_version)
