"""Abstract base inspector."""

from __future__ import annotations

import abc
from pathlib import Path
from typing import Iterator

from linkage_audit.models import FileKind, LinkedLibrary, LoadKind


class InspectionError(RuntimeError):
    """A binary could not be read or decoded."""

    def __init__(self, path: Path, cause: BaseException | str):
        super().__init__(f"Cannot inspect {path}: {cause}")
        self.path = path
        self.cause = cause


class BaseInspector(abc.ABC):
    """Base class for binary-format inspectors."""

    @abc.abstractmethod
    def file_kind(self, path: Path) -> FileKind:
        """Classify a regular file as dylib, executable, bundle or none."""

    @abc.abstractmethod
    def load_commands(self, path: Path) -> list[LinkedLibrary]:
        """Return every dynamic-library reference of a binary, in load order."""

    def linked_libraries(self, path: Path, except_weak: bool = True) -> list[LinkedLibrary]:
        """Dynamically linked libraries, optionally without weak loads.

        Weakly loaded libraries may legitimately be absent on this system.
        """
        libraries = self.load_commands(path)
        if except_weak:
            libraries = [lib for lib in libraries if lib.load_kind is not LoadKind.WEAK]
        return libraries

    def scan_keg(self, keg_path: Path) -> Iterator[tuple[Path, FileKind]]:
        """Yield every linkable regular file under ``keg_path``."""
        for path in sorted(keg_path.rglob("*")):
            if path.is_symlink() or not path.is_file():
                continue
            kind = self.file_kind(path)
            if kind.is_linkable:
                yield path, kind
