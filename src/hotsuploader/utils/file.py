"""File utility functions."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Final

logger: Final = logging.getLogger(__name__)


def ensure_directory_exists(directory: Path) -> None:
    """Create directory if it doesn't exist.

    Args:
        directory: Path to create
    """
    if not directory.exists():
        directory.mkdir(parents=True, exist_ok=True)
        logger.debug("Created directory: %s", directory)


def copy_file(source: Path, destination: Path) -> None:
    """Copy a file byte for byte, overwriting the destination.

    Args:
        source: File to copy
        destination: Target file path
    """
    shutil.copyfile(source, destination)
    logger.debug("Copied %s -> %s", source, destination)
