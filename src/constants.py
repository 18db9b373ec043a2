"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FAILURE = 1
    INTERRUPTED = 130


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    APP_NAME = "cargox"
    APP_VERSION = "0.1.0"
    USER_AGENT = f"{APP_NAME}/{APP_VERSION}"

    REGISTRY_URL_CRATES = "https://crates.io/api/v1/crates/"
    REQUEST_TIMEOUT = 10  # Timeout in seconds for registry requests

    CARGO_BIN = "cargo"
    BINSTALL_BIN = "cargo-binstall"

    ENV_INSTALL_DIR = "CARGOX_INSTALL_DIR"
    ENV_INSTALL_ROOT = "CARGO_INSTALL_ROOT"
    ENV_TARGET_DIR = "CARGO_TARGET_DIR"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
