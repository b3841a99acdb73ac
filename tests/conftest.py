from __future__ import annotations

import json
from pathlib import Path

import pytest

from linkage_audit.inspector.base import BaseInspector
from linkage_audit.models import FileKind, LinkageConfig, LinkedLibrary, LoadKind


class FakeInspector(BaseInspector):
    """Inspector whose load commands are declared up front, keyed by file path."""

    def __init__(self, links: dict[Path, list[LinkedLibrary]] | None = None):
        self.links: dict[Path, list[LinkedLibrary]] = dict(links or {})
        self.inspected: list[Path] = []
        self.kinds_checked: list[Path] = []

    def add(self, path: Path, *references: str, weak: tuple[str, ...] = ()) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"\x7fELF fake")
        libs = [LinkedLibrary(ref) for ref in references]
        libs += [LinkedLibrary(ref, LoadKind.WEAK) for ref in weak]
        self.links[path] = libs
        return path

    def file_kind(self, path: Path) -> FileKind:
        self.kinds_checked.append(path)
        return FileKind.DYLIB if path in self.links else FileKind.NONE

    def load_commands(self, path: Path) -> list[LinkedLibrary]:
        self.inspected.append(path)
        return list(self.links[path])


class Prefix:
    """A throwaway installation prefix laid out like a Homebrew prefix."""

    def __init__(self, root: Path):
        self.root = root
        self.cellar = root / "Cellar"
        self.opt = root / "opt"
        self.formula_dir = root / "formulae"
        for d in (self.cellar, self.opt, self.formula_dir):
            d.mkdir(parents=True, exist_ok=True)

    def install(
        self,
        name: str,
        version: str = "1.0",
        libs: tuple[str, ...] = (),
        bins: tuple[str, ...] = (),
        tap: str | None = "homebrew/core",
        used_options: tuple[str, ...] = (),
    ) -> Path:
        keg = self.cellar / name / version
        keg.mkdir(parents=True, exist_ok=True)
        for lib in libs:
            (keg / "lib").mkdir(exist_ok=True)
            (keg / "lib" / lib).write_bytes(b"\x7fELF lib")
        for exe in bins:
            (keg / "bin").mkdir(exist_ok=True)
            (keg / "bin" / exe).write_bytes(b"\x7fELF exe")
        receipt = {"used_options": list(used_options), "source": {"tap": tap}}
        (keg / "INSTALL_RECEIPT.json").write_text(json.dumps(receipt))
        opt_link = self.opt / name
        if not opt_link.exists():
            opt_link.symlink_to(keg)
        return keg

    def formula(self, name: str, *dependencies, tap: str | None = None) -> None:
        doc = {"name": name, "tap": tap, "dependencies": list(dependencies)}
        (self.formula_dir / f"{name}.json").write_text(json.dumps(doc))

    def config(self, **kwargs) -> LinkageConfig:
        kwargs.setdefault("formula_dir", self.formula_dir)
        return LinkageConfig(prefix=self.root, **kwargs)


@pytest.fixture
def prefix(tmp_path: Path) -> Prefix:
    return Prefix(tmp_path / "prefix")


@pytest.fixture
def system_dir(tmp_path: Path) -> Path:
    """Directory outside the prefix standing in for /usr/lib."""
    d = tmp_path / "system"
    d.mkdir()
    for name in ("libc.so.6", "libm.so.6", "libSystem.B.dylib", "libX11.so.6"):
        (d / name).write_bytes(b"\x7fELF sys")
    return d


@pytest.fixture
def inspector() -> FakeInspector:
    return FakeInspector()
