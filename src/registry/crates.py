"""crates.io registry client: list published versions and pick the best match."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import quote

import semantic_version

from constants import Constants
from common.http_client import get_json
from common.logging_utils import extra_context, is_debug_enabled
from errors import NoMatchingVersionError, NoVersionsFoundError, RegistryUnavailableError
from versioning.requirement import VersionRequirement

logger = logging.getLogger(__name__)

CONTEXT = "crates.io"


@dataclass
class CrateVersion:
    """One entry of the registry's ``versions`` list."""
    num: str
    yanked: bool


def fetch_versions(name: str, url: str = Constants.REGISTRY_URL_CRATES) -> List[CrateVersion]:
    """Fetch every published version of ``name`` from the registry.

    Args:
        name: Crate name.
        url: Registry API base ending in ``/crates/``.

    Returns:
        list: CrateVersion entries in registry order.

    Raises:
        RegistryUnavailableError: Transport failure or unexpected payload.
    """
    payload = get_json(url + quote(name, safe=""), context=CONTEXT)
    try:
        entries = payload["versions"]
        versions = [CrateVersion(num=str(e["num"]), yanked=bool(e["yanked"])) for e in entries]
    except (KeyError, TypeError) as exc:
        raise RegistryUnavailableError(f"failed to parse {CONTEXT} response") from exc

    if is_debug_enabled(logger):
        logger.debug(
            "Fetched crate versions",
            extra=extra_context(
                event="registry_versions",
                component="crates",
                crate=name,
                count=len(versions),
            ),
        )
    return versions


def _usable_versions(entries: List[CrateVersion]) -> List[semantic_version.Version]:
    """Drop yanked and unparsable entries; result sorted ascending."""
    parsed = []
    for entry in entries:
        if entry.yanked:
            continue
        try:
            parsed.append(semantic_version.Version(entry.num))
        except ValueError:
            continue  # Skip invalid versions
    parsed.sort()
    return parsed


def fetch_highest_matching_version(
    name: str,
    requirement: Optional[VersionRequirement] = None,
    url: str = Constants.REGISTRY_URL_CRATES,
) -> semantic_version.Version:
    """Return the highest non-yanked version of ``name`` satisfying ``requirement``.

    With no requirement the overall highest version (by SemVer precedence) wins.
    """
    versions = _usable_versions(fetch_versions(name, url=url))
    if not versions:
        raise NoVersionsFoundError(name)

    if requirement is None:
        return versions[-1]

    for version in reversed(versions):
        if requirement.matches(version):
            return version
    raise NoMatchingVersionError(name, str(requirement))


def fetch_latest_version(name: str, url: str = Constants.REGISTRY_URL_CRATES) -> semantic_version.Version:
    """Return the newest published, non-yanked version of ``name``."""
    return fetch_highest_matching_version(name, None, url=url)
