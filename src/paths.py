"""Install-root discovery and binary lookup.

The install root is private to cargox: only the explicit
``CARGOX_INSTALL_DIR`` override is honored, never generic tooling variables
such as ``CARGO_HOME`` or ``CARGO_INSTALL_ROOT``.
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import semantic_version
from platformdirs import user_data_dir

from constants import Constants
from errors import BinaryNotFoundError, NoInstallDirectoryError

logger = logging.getLogger(__name__)

IS_WINDOWS = sys.platform == "win32"
EXE_SUFFIX = ".exe"


def home_dir() -> Optional[Path]:
    home = os.environ.get("HOME") or os.environ.get("USERPROFILE")
    return Path(home) if home else None


def get_install_dir() -> Path:
    """Return the private install root.

    Order: ``CARGOX_INSTALL_DIR``, the platform data directory, then
    ``~/.local/share/cargox``. The directory is not created here.

    Raises:
        NoInstallDirectoryError: If no candidate can be determined.
    """
    override = os.environ.get(Constants.ENV_INSTALL_DIR)
    if override:
        return Path(override)

    data_dir = Path(user_data_dir(Constants.APP_NAME, appauthor=False))
    if data_dir.is_absolute():
        return data_dir

    home = home_dir()
    if home is not None:
        return home / ".local" / "share" / Constants.APP_NAME

    raise NoInstallDirectoryError("unable to determine install directory")


def executable_name(binary: str) -> str:
    """Platform file name for ``binary``."""
    if IS_WINDOWS and not binary.lower().endswith(EXE_SUFFIX):
        return binary + EXE_SUFFIX
    return binary


def _probe(directory: Path, name: str) -> Optional[Path]:
    candidate = directory / name
    if candidate.is_file():
        return candidate
    if IS_WINDOWS:
        exe_candidate = directory / (name + EXE_SUFFIX)
        if exe_candidate.is_file():
            return exe_candidate
    return None


def candidate_bin_dirs() -> List[Path]:
    """Directories searched after PATH: ``<root>/bin`` then ``<root>``."""
    try:
        install_dir = get_install_dir()
    except NoInstallDirectoryError:
        return []
    return [install_dir / "bin", install_dir]


def resolve_binary_path(name: str) -> Path:
    """Locate an unversioned binary: PATH first, then the install root.

    Raises:
        BinaryNotFoundError: If the binary is in none of the locations.
    """
    found = shutil.which(name)
    if found:
        return Path(found)

    for directory in candidate_bin_dirs():
        candidate = _probe(directory, name)
        if candidate is not None:
            return candidate

    raise BinaryNotFoundError(f"cannot find binary path for {name}")


def find_binary(name: str) -> Optional[Path]:
    try:
        return resolve_binary_path(name)
    except BinaryNotFoundError:
        return None


def versioned_binary_path(binary: str, version: semantic_version.Version,
                          root: Optional[Path] = None) -> Path:
    """Deterministic storage path of ``binary`` at ``version`` under ``root``.

    ``root`` defaults to the install directory.
    """
    if root is None:
        root = get_install_dir()
    return root / executable_name(f"{binary}-{version}")


def resolve_versioned_binary_path(binary: str, version: semantic_version.Version) -> Path:
    path = versioned_binary_path(binary, version)
    if not path.is_file():
        raise BinaryNotFoundError(
            f"{binary} {version} is not installed in the cargox install directory ({path})"
        )
    return path


def find_cached_versions(binary: str) -> List[Tuple[semantic_version.Version, Path]]:
    """Versioned installs of ``binary`` in the install root, highest first."""
    try:
        root = get_install_dir()
    except NoInstallDirectoryError:
        return []
    if not root.is_dir():
        return []

    prefix = f"{binary}-"
    found = []
    for entry in root.iterdir():
        stem = entry.name
        if IS_WINDOWS and stem.lower().endswith(EXE_SUFFIX):
            stem = stem[: -len(EXE_SUFFIX)]
        if not stem.startswith(prefix) or not entry.is_file():
            continue
        try:
            version = semantic_version.Version(stem[len(prefix):])
        except ValueError:
            continue
        found.append((version, entry))
    found.sort(key=lambda item: item[0], reverse=True)
    return found


def find_existing_binary(binary: str) -> Optional[Path]:
    """Any usable install of ``binary``: unversioned search, then newest cached version."""
    path = find_binary(binary)
    if path is not None:
        return path
    cached = find_cached_versions(binary)
    if cached:
        version, path = cached[0]
        logger.debug("Using cached %s %s at %s", binary, version, path)
        return path
    return None
