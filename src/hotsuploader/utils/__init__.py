"""Common utility functions and helpers for the hotsuploader package."""

from hotsuploader.utils.file import copy_file, ensure_directory_exists

__all__ = [
    "copy_file",
    "ensure_directory_exists",
]
