"""
Lists the fact files found under an input directory.
"""

import os
from pathlib import Path

import structlog

from .errors import DirectoryError

logger = structlog.get_logger(__name__)


def list_files(directory: str | Path) -> list[Path]:
    """Return every regular file under `directory`, recursively

    Args:
        directory: Root of the fact file tree

    Returns:
        Sorted list of file paths

    Raises:
        DirectoryError: If the directory is missing, is not a directory, or any
            part of the tree cannot be read. No partial list is returned.
    """
    root = Path(directory)

    if not root.exists():
        raise DirectoryError(root, "directory does not exist")
    if not root.is_dir():
        raise DirectoryError(root, "path is not a directory")

    def _raise(error: OSError):
        raise DirectoryError(error.filename or root, error.strerror or str(error)) from error

    files = []
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise):
        for name in filenames:
            path = Path(dirpath) / name
            if path.is_file():
                files.append(path)

    files.sort()
    logger.debug("Enumerated fact files", directory=str(root), files=len(files))
    return files
