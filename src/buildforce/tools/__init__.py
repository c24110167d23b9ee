"""File system primitives used by analysis and documentation generation."""

from buildforce.tools.files import (
    DirectoryNotFoundError,
    FileOperationError,
    FileReader,
    FileReadError,
    FileTools,
    FileWriteError,
    MissingFileError,
)

__all__ = [
    "DirectoryNotFoundError",
    "FileOperationError",
    "FileReadError",
    "FileReader",
    "FileTools",
    "FileWriteError",
    "MissingFileError",
]
