"""Argument parsing functionality for cargox."""

import argparse

from constants import Constants


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog=Constants.APP_NAME,
        description=(
            "Run a binary from a crates.io crate, installing the requested "
            "version into a private directory on first use"
        ),
        add_help=True,
    )

    parser.add_argument("CRATE_SPEC",
                        help="Crate to run, optionally with a version: name[@version|@latest]",
                        type=str)
    parser.add_argument("ARGS",
                        help="Arguments forwarded to the binary",
                        nargs=argparse.REMAINDER)

    parser.add_argument("--bin",
                        dest="BIN",
                        help="Binary to run when the crate provides several (default: crate name)",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--force",
                        dest="FORCE",
                        help="Reinstall even if the binary is already available.",
                        action="store_true")
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Pass --quiet to the installer.",
                        action="store_true")
    parser.add_argument("-s", "--build-from-source",
                        dest="BUILD_FROM_SOURCE",
                        help="Build with cargo install instead of using cargo-binstall.",
                        action="store_true")
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=Constants.LOG_LEVELS,
                        default="INFO")
    parser.add_argument("--version",
                        action="version",
                        version=f"%(prog)s {Constants.APP_VERSION}")

    args = parser.parse_args(argv)
    # Strip leading '--' separator if present
    if args.ARGS and args.ARGS[0] == "--":
        args.ARGS = args.ARGS[1:]
    return args
