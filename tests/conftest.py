"""Shared test fixtures for Buildforce."""

from __future__ import annotations

import json
import posixpath
from fnmatch import fnmatch
from typing import TYPE_CHECKING

import pytest

from buildforce.tools.files import FileReadError, MissingFileError

if TYPE_CHECKING:
    from pathlib import Path


class FakeFileTools:
    """In-memory file tree keyed by project-relative POSIX path."""

    def __init__(
        self,
        files: dict[str, str] | None = None,
        *,
        unreadable: set[str] | None = None,
    ) -> None:
        self.files: dict[str, str] = dict(files or {})
        self.unreadable = set(unreadable or ())
        self.reads: list[str] = []

    def read_file(self, path: str) -> str:
        self.reads.append(path)
        if path in self.unreadable:
            raise FileReadError(path, PermissionError(path))
        if path not in self.files:
            raise MissingFileError(path)
        return self.files[path]

    def write_file(self, path: str, content: str) -> None:
        self.files[path] = content

    def exists(self, path: str) -> bool:
        return path in self.files or path in self.unreadable

    def is_file(self, path: str) -> bool:
        return self.exists(path)

    def mkdir(self, path: str) -> None:
        pass

    def search_files(self, pattern: str) -> list[str]:
        if pattern == "**/*":
            return sorted(set(self.files) | self.unreadable)
        return sorted(p for p in self.files if fnmatch(posixpath.basename(p), pattern))


SAMPLE_PACKAGE_JSON = json.dumps(
    {
        "name": "sample",
        "dependencies": {"typescript": "^5.0.0", "node": "^20.0.0"},
        "devDependencies": {"jest": "^29.0.0", "vite": "^5.0.0"},
    }
)

SAMPLE_README = """\
# Sample

## Goals
- Build a CLI tool
- Keep memory of the project

## Requirements
- Node 20

## Project Structure

```
src/
  index.ts
```
"""

SAMPLE_INDEX_TS = """\
import { Bar } from './bar';
import { Baz } from '../shared/baz';

export class Foo extends Bar implements Baz {
  private value = 1;

  async load(): Promise<void> {}
}
"""


@pytest.fixture()
def sample_files() -> dict[str, str]:
    return {
        "package.json": SAMPLE_PACKAGE_JSON,
        "README.md": SAMPLE_README,
        "src/index.ts": SAMPLE_INDEX_TS,
    }


@pytest.fixture()
def fake_tools(sample_files: dict[str, str]) -> FakeFileTools:
    return FakeFileTools(sample_files)


@pytest.fixture()
def sample_project(tmp_path: Path, sample_files: dict[str, str]) -> Path:
    """Write the sample project to disk."""
    project = tmp_path / "sample"
    for rel_path, content in sample_files.items():
        target = project / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return project


@pytest.fixture()
def make_tools() -> type[FakeFileTools]:
    """The in-memory file tools class, for tests that build their own tree."""
    return FakeFileTools
