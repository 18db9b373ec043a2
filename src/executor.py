"""Run the resolved binary with inherited standard streams."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence

from errors import SpawnFailedError

logger = logging.getLogger(__name__)


def execute_binary(binary_path: Path, args: Sequence[str]) -> int:
    """Run ``binary_path`` with ``args`` and wait for it.

    Returns:
        int: The child's return code; negative when it was killed by a signal.

    Raises:
        SpawnFailedError: If the binary cannot be executed.
    """
    command = [str(binary_path), *args]
    logger.debug("Running: %s", " ".join(command))
    try:
        result = subprocess.run(command, check=False)  # noqa: S603
    except OSError as exc:
        raise SpawnFailedError(f"failed to execute {binary_path}") from exc
    return result.returncode
