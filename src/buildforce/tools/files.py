"""File access rooted at a project directory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class FileOperationError(Exception):
    """Raised when a file system operation fails."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class MissingFileError(FileOperationError):
    """Raised when a file does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"File not found: {path}")
        self.path = path


class DirectoryNotFoundError(FileOperationError):
    """Raised when a directory does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Directory not found: {path}")
        self.path = path


class FileReadError(FileOperationError):
    """Raised when an existing file cannot be read."""

    def __init__(self, path: str, cause: BaseException | None = None) -> None:
        super().__init__(f"Failed to read file: {path}", cause)
        self.path = path


class FileWriteError(FileOperationError):
    """Raised when a file cannot be written."""

    def __init__(self, path: str, cause: BaseException | None = None) -> None:
        super().__init__(f"Failed to write file: {path}", cause)
        self.path = path


# ---------------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------------


class FileReader(Protocol):
    """The subset of file access the analysis pipeline consumes."""

    def read_file(self, path: str) -> str: ...

    def exists(self, path: str) -> bool: ...

    def is_file(self, path: str) -> bool: ...

    def search_files(self, pattern: str) -> list[str]: ...


# ---------------------------------------------------------------------------
# Implementation
# ---------------------------------------------------------------------------


class FileTools:
    """Read, write and search files relative to *root_dir*.

    Relative paths resolve against the root; absolute paths are used as-is.
    """

    def __init__(self, root_dir: Path | str) -> None:
        self.root_dir = Path(root_dir)

    def _resolve(self, path: str) -> Path:
        candidate = Path(path)
        return candidate if candidate.is_absolute() else self.root_dir / candidate

    def read_file(self, path: str) -> str:
        full_path = self._resolve(path)
        try:
            return full_path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise MissingFileError(path) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise FileReadError(path, exc) from exc

    def write_file(self, path: str, content: str) -> None:
        full_path = self._resolve(path)
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise FileWriteError(path, exc) from exc
        logger.debug("Wrote %s", full_path)

    def exists(self, path: str) -> bool:
        try:
            return self._resolve(path).exists()
        except (OSError, ValueError):
            return False

    def is_file(self, path: str) -> bool:
        try:
            return self._resolve(path).is_file()
        except (OSError, ValueError):
            return False

    def mkdir(self, path: str) -> None:
        try:
            self._resolve(path).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            msg = f"Failed to create directory: {path}"
            raise FileOperationError(msg, exc) from exc

    def search_files(self, pattern: str) -> list[str]:
        """Return project-relative POSIX paths matching a glob *pattern*, sorted."""
        try:
            matches = [
                p.relative_to(self.root_dir).as_posix() for p in self.root_dir.glob(pattern)
            ]
        except (OSError, ValueError, NotImplementedError) as exc:
            msg = f"Failed to search files: {pattern}"
            raise FileOperationError(msg, exc) from exc
        return sorted(matches)

    def list_directory(self, path: str) -> list[str]:
        full_path = self._resolve(path)
        if not full_path.is_dir():
            raise DirectoryNotFoundError(path)
        try:
            return sorted(item.name for item in full_path.iterdir())
        except OSError as exc:
            msg = f"Failed to list directory: {path}"
            raise FileOperationError(msg, exc) from exc
