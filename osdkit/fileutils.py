"""Small file system helpers."""

from __future__ import annotations

import logging
import os

_log = logging.getLogger(__name__)


class ArgumentError(ValueError):
    """A function's argument was passed incorrectly."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"Argument error: {self.message}"


class MissingFileError(FileNotFoundError):
    """A file that was expected to exist is missing."""

    def __init__(self, file_path: str) -> None:
        super().__init__(file_path)
        self.file_path = file_path

    def __str__(self) -> str:
        return f"file {self.file_path} not found"


def _exists(path: str, is_dir: bool) -> bool:
    if not path:
        _log.debug("Path is empty")
        return False
    try:
        return os.path.isdir(path) == is_dir if os.stat(path) else False
    except OSError:
        return False


def folder_exists(path: str) -> bool:
    """Report whether the directory exists."""
    return _exists(path, True)


def file_exists(path: str) -> bool:
    """Report whether the path exists and is not a directory."""
    return _exists(path, False)


def create_file(path: str) -> None:
    """Create an empty file, along with any missing parent directories.

    Raises FileExistsError if the file already exists and OSError if it
    cannot be created.
    """
    path = os.path.normpath(path)
    if file_exists(path):
        raise FileExistsError(f"file {path} already exists")

    directory = os.path.dirname(path) or "."
    if not folder_exists(directory):
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as err:
            raise OSError(f"failed to create directory {directory}") from err

    try:
        with open(path, "x"):
            pass
    except OSError as err:
        raise OSError(f"failed to create file {path}: {err}") from err