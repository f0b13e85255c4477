from __future__ import annotations

import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List


class CheckpointFileSystem(ABC):
    """
    Abstraction over where checkpoint files live.

    Paths are plain ``Path`` objects; implementations decide how they map to
    physical storage.
    """

    @abstractmethod
    def list_names(self, directory: Path) -> List[str]:
        """
        Names of the regular files directly under ``directory``.

        A missing directory yields an empty list.
        """

    @abstractmethod
    def read_text(self, path: Path) -> str:
        """Read a whole file as UTF-8 text."""

    @abstractmethod
    def write_text_atomic(self, path: Path, content: str) -> None:
        """
        Replace ``path`` with ``content``.

        Readers must observe either the previous file or the complete new one,
        never a partial write.
        """

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """Whether a file exists at ``path``."""


class LocalFileSystem(CheckpointFileSystem):
    """Local disk, with write-then-rename replacement."""

    def list_names(self, directory: Path) -> List[str]:
        directory = Path(directory)
        if not directory.is_dir():
            return []
        return [p.name for p in directory.iterdir() if p.is_file()]

    def read_text(self, path: Path) -> str:
        return Path(path).read_text(encoding="utf-8")

    def write_text_atomic(self, path: Path, content: str) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        # Leading dot keeps the temp file out of prefix-based discovery
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            tmp_path.write_text(content, encoding="utf-8")
            os.replace(tmp_path, path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()

    def exists(self, path: Path) -> bool:
        return Path(path).is_file()


class InMemoryFileSystem(CheckpointFileSystem):
    """Dictionary-backed file system for dry runs and tests."""

    def __init__(self, files: Dict[str, str] | None = None) -> None:
        self._lock = threading.Lock()
        self.files: Dict[Path, str] = {
            Path(path): content for path, content in (files or {}).items()
        }

    def list_names(self, directory: Path) -> List[str]:
        directory = Path(directory)
        with self._lock:
            return [path.name for path in self.files if path.parent == directory]

    def read_text(self, path: Path) -> str:
        with self._lock:
            try:
                return self.files[Path(path)]
            except KeyError:
                raise FileNotFoundError(str(path)) from None

    def write_text_atomic(self, path: Path, content: str) -> None:
        with self._lock:
            self.files[Path(path)] = content

    def exists(self, path: Path) -> bool:
        with self._lock:
            return Path(path) in self.files


__all__ = ["CheckpointFileSystem", "LocalFileSystem", "InMemoryFileSystem"]
