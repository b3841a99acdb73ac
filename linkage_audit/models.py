"""Data models for the linkage audit."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path


class FileKind(enum.Enum):
    DYLIB = "dylib"
    EXECUTABLE = "executable"
    BUNDLE = "bundle"
    NONE = "none"

    @property
    def is_linkable(self) -> bool:
        return self is not FileKind.NONE


class LoadKind(enum.Enum):
    NORMAL = "normal"
    WEAK = "weak"


class ReferenceKind(enum.Enum):
    SYSTEM = "system"
    BREWED = "brewed"
    BROKEN = "broken"
    BROKEN_OWNED = "broken_owned"
    VARIABLE = "variable"


@dataclass(frozen=True)
class LinkedLibrary:
    """One dynamic-library reference as recorded in a binary."""
    path: str
    load_kind: LoadKind = LoadKind.NORMAL


@dataclass(frozen=True)
class ReferenceClass:
    """Classification decided for a library reference.

    ``owner`` is the qualified owning formula for BREWED references and the
    inferred dependency name for BROKEN_OWNED ones.
    """
    kind: ReferenceKind
    owner: str | None = None

    def __str__(self) -> str:
        if self.owner:
            return f"{self.kind.value}({self.owner})"
        return self.kind.value


# Expected ABI-stable libraries of a glibc system.
LINUX_SYSTEM_ALLOWLIST = frozenset({
    "ld-linux-x86-64.so.2",
    "libc.so.6",
    "libcrypt.so.1",
    "libdl.so.2",
    "libm.so.6",
    "libnsl.so.1",
    "libpthread.so.0",
    "libresolv.so.2",
    "librt.so.1",
    "libutil.so.1",
    "libgcc_s.so.1",
    "libgomp.so.1",
    "libstdc++.so.6",
})

# libgcc_s_* is referenced by programs built with the Java Service Wrapper
# and is harmless on x86(_64).
HARMLESS_BROKEN_LINKS = frozenset({
    "/usr/lib/libgcc_s_ppc64.1.dylib",
    "/opt/local/lib/libgcc/libgcc_s.1.dylib",
})

LINUX_TOOLCHAIN_DEPS = ("gcc", "glibc")


@dataclass
class LinkageConfig:
    """Configuration for a linkage audit."""
    prefix: Path = field(default_factory=lambda: Path("/usr/local"))
    cellar_name: str = "Cellar"
    formula_dir: Path | None = None
    core_tap: str = "homebrew/core"
    linux: bool = False
    system_allowlist: frozenset[str] = LINUX_SYSTEM_ALLOWLIST
    harmless_broken_links: frozenset[str] = HARMLESS_BROKEN_LINKS
    toolchain_deps: tuple[str, ...] = LINUX_TOOLCHAIN_DEPS
    library_search_dirs: list[Path] = field(default_factory=lambda: [
        Path("/lib64"), Path("/usr/lib64"),
        Path("/lib/x86_64-linux-gnu"), Path("/usr/lib/x86_64-linux-gnu"),
        Path("/lib"), Path("/usr/lib"),
    ])

    @property
    def cellar(self) -> Path:
        return self.prefix / self.cellar_name

    @property
    def opt(self) -> Path:
        return self.prefix / "opt"
