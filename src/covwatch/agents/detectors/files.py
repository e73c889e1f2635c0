"""Source file enumeration for the analyzed project."""

from __future__ import annotations

import fnmatch
import logging
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from covwatch.models.coverage import InputFile

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from pathlib import Path

logger = logging.getLogger(__name__)

EXTENSION_TO_LANGUAGE: dict[str, str] = {
    ".py": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".hxx": "cpp",
    ".hh": "cpp",
    ".java": "java",
    ".go": "go",
    ".rs": "rust",
    ".cs": "csharp",
}

# Default directories to skip during scanning.
DEFAULT_SKIP_DIRS: frozenset[str] = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        "__pycache__",
        "node_modules",
        ".venv",
        "venv",
        ".tox",
        ".nox",
        ".mypy_cache",
        ".ruff_cache",
        ".pytest_cache",
        "dist",
        "build",
        ".next",
        "target",
        "vendor",
        "coverage",
        "htmlcov",
    }
)


def language_for_path(path: str) -> str:
    """Return the language of a file from its extension, or ``""`` if unknown."""
    return EXTENSION_TO_LANGUAGE.get(PurePosixPath(path).suffix.lower(), "")


class FileSystem:
    """Enumerates the source files of a project in a stable order."""

    def __init__(
        self,
        root: Path,
        *,
        skip_dirs: frozenset[str] = DEFAULT_SKIP_DIRS,
        exclude: Sequence[str] = (),
    ) -> None:
        """Initialize the file system view.

        Args:
            root: Project root directory.
            skip_dirs: Directory names never descended into.
            exclude: Glob patterns (matched against relative paths) of files to ignore.
        """
        self._root = root
        self._skip_dirs = skip_dirs
        self._exclude = tuple(exclude)

    @property
    def root(self) -> Path:
        return self._root

    def input_files(self) -> Iterator[InputFile]:
        """Yield every recognized source file under the root, sorted by path."""
        yield from self._walk(self._root)

    def _walk(self, directory: Path) -> Iterator[InputFile]:
        for child in sorted(directory.iterdir()):
            if child.is_dir():
                if child.name in self._skip_dirs:
                    continue
                yield from self._walk(child)
                continue
            if not child.is_file():
                continue
            relative = child.relative_to(self._root).as_posix()
            language = language_for_path(relative)
            if not language:
                continue
            if any(fnmatch.fnmatch(relative, pattern) for pattern in self._exclude):
                logger.debug("Excluding %s", relative)
                continue
            yield InputFile(relative_path=relative, language=language, absolute_path=child)
