"""System-library baseline for Linux kegs."""

from __future__ import annotations

import posixpath
from typing import Iterable


def unwanted_system_libraries(system_dylibs: Iterable[str], allowlist: frozenset[str]) -> set[str]:
    """Sonames of system libraries outside the expected glibc/gcc runtime."""
    return {posixpath.basename(dylib) for dylib in system_dylibs} - allowlist
