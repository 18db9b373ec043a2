"""Parsing of ``name[@version]`` crate specs."""

from errors import InvalidSpecError

from .models import PackageSpec, VersionRequest
from .requirement import VersionRequirement

SEPARATOR = "@"
LATEST_TOKEN = "latest"


def parse_version_token(token: str) -> VersionRequest:
    """Map the text after ``@`` to a VersionRequest."""
    if token.lower() == LATEST_TOKEN:
        return VersionRequest.latest()
    try:
        requirement = VersionRequirement.parse(token)
    except ValueError as exc:
        raise InvalidSpecError(f"invalid version requirement `{token}`") from exc
    return VersionRequest.constraint(requirement)


def parse_spec(spec: str) -> PackageSpec:
    """Parse a crate spec into a PackageSpec.

    ``ripgrep`` -> unspecified, ``ripgrep@latest`` -> latest,
    ``ripgrep@13`` -> constraint ``^13``.

    Raises:
        InvalidSpecError: empty input or name, empty version, more than one
            ``@``, or a malformed version requirement.
    """
    if not spec or not spec.strip():
        raise InvalidSpecError("crate spec cannot be empty")

    parts = spec.split(SEPARATOR)
    name = parts[0].strip()
    if not name:
        raise InvalidSpecError("crate name cannot be empty")

    if len(parts) == 1:
        return PackageSpec(name, VersionRequest.unspecified())

    if len(parts) > 2:
        raise InvalidSpecError(
            f"invalid crate spec `{spec}`: expected at most one `@version` suffix"
        )

    token = parts[1].strip()
    if not token:
        raise InvalidSpecError(
            f"invalid crate spec `{spec}`: version cannot be empty after `@`"
        )

    return PackageSpec(name, parse_version_token(token))
