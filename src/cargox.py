"""cargox - run a crates.io binary at a requested version, installing on demand."""
import logging
import sys
from pathlib import Path
from typing import NoReturn, Optional

import semantic_version

from args import parse_args
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import ExitCodes
from errors import BinaryNotFoundError, CargoxError
from executor import execute_binary
from installer import InstallOptions, ensure_installed
from paths import find_existing_binary, resolve_binary_path, resolve_versioned_binary_path
from registry.crates import fetch_highest_matching_version, fetch_latest_version
from versioning.models import PackageSpec, ResolutionMode, ResolvedTarget
from versioning.parser import parse_spec

logger = logging.getLogger(__name__)


def resolve_version(spec: PackageSpec) -> semantic_version.Version:
    """Ask the registry for the concrete version ``spec`` refers to."""
    request = spec.version_request
    if request.mode in (ResolutionMode.UNSPECIFIED, ResolutionMode.LATEST):
        return fetch_latest_version(spec.name)
    if request.mode == ResolutionMode.CONSTRAINT:
        return fetch_highest_matching_version(spec.name, request.requirement)
    raise ValueError(f"Unsupported resolution mode: {request.mode}")


def should_use_existing_binary(spec: PackageSpec, options: InstallOptions) -> bool:
    """Only an unpinned, non-forced request may reuse whatever is already installed."""
    if options.force:
        return False
    mode = spec.version_request.mode
    if mode == ResolutionMode.UNSPECIFIED:
        return True
    if mode in (ResolutionMode.LATEST, ResolutionMode.CONSTRAINT):
        return False
    raise ValueError(f"Unsupported resolution mode: {mode}")


def locate_installed_binary(target: ResolvedTarget) -> Path:
    if target.resolved_version is not None:
        try:
            return resolve_versioned_binary_path(target.binary_name, target.resolved_version)
        except BinaryNotFoundError as exc:
            raise BinaryNotFoundError(
                f"{target.binary_name} should be available in cargox's install directory "
                "after installation"
            ) from exc
    try:
        return resolve_binary_path(target.binary_name)
    except BinaryNotFoundError as exc:
        raise BinaryNotFoundError(
            f"{target.binary_name} should be on PATH after installation"
        ) from exc


def run_application(args) -> int:
    """Parse, resolve, install if needed, and run. Returns the child's return code."""
    spec = parse_spec(args.CRATE_SPEC)
    options = InstallOptions.from_args(args)
    binary = options.bin_name or spec.name

    if is_debug_enabled(logger):
        logger.debug(
            "Parsed crate spec",
            extra=extra_context(
                event="parse",
                component="cli",
                crate=spec.name,
                mode=spec.version_request.mode.value,
                requirement=str(spec.version_request.requirement)
                if spec.version_request.requirement else None,
            ),
        )

    if should_use_existing_binary(spec, options):
        existing: Optional[Path] = find_existing_binary(binary)
        if existing is not None:
            logger.debug("Running existing %s at %s", binary, existing)
            return execute_binary(existing, args.ARGS)

    version = resolve_version(spec)
    target = ResolvedTarget(name=spec.name, resolved_version=version, binary_name=binary)
    ensure_installed(target, options)
    return execute_binary(locate_installed_binary(target), args.ARGS)


def exit_with_status(returncode: int) -> NoReturn:
    if returncode >= 0:
        sys.exit(returncode)
    logger.error("process terminated by signal")
    sys.exit(ExitCodes.FAILURE.value)


def _next_cause(err: BaseException) -> Optional[BaseException]:
    if err.__cause__ is not None:
        return err.__cause__
    if err.__suppress_context__:
        return None
    return err.__context__


def format_error_chain(err: BaseException) -> str:
    """``error: ...`` followed by one ``caused by:`` line per chained cause."""
    lines = [f"error: {err}"]
    seen = {id(err)}
    cause = _next_cause(err)
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        lines.append(f"  caused by: {cause}")
        cause = _next_cause(cause)
    return "\n".join(lines)


def exit_with_error(err: CargoxError) -> NoReturn:
    sys.stderr.write(format_error_chain(err) + "\n")
    sys.exit(ExitCodes.FAILURE.value)


def main(argv=None) -> NoReturn:
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL)

    try:
        returncode = run_application(args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(ExitCodes.INTERRUPTED.value)
    except CargoxError as err:
        exit_with_error(err)
    exit_with_status(returncode)


if __name__ == "__main__":
    main()
