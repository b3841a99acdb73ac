"""ELF and Mach-O inspector backed by LIEF."""

from __future__ import annotations

import logging
from pathlib import Path

import lief

from linkage_audit.inspector.base import BaseInspector, InspectionError
from linkage_audit.models import FileKind, LinkageConfig, LinkedLibrary, LoadKind

logger = logging.getLogger(__name__)

_ELF_MAGIC = b"\x7fELF"
_MACHO_MAGICS = {
    b"\xfe\xed\xfa\xce", b"\xce\xfa\xed\xfe",
    b"\xfe\xed\xfa\xcf", b"\xcf\xfa\xed\xfe",
    b"\xca\xfe\xba\xbe",  # fat
}

_ELF_KINDS = {
    "EXEC": FileKind.EXECUTABLE,
    "EXECUTABLE": FileKind.EXECUTABLE,
    "DYN": FileKind.DYLIB,
    "DYNAMIC": FileKind.DYLIB,
    "REL": FileKind.NONE,
    "RELOCATABLE": FileKind.NONE,
    "CORE": FileKind.NONE,
}
_MACHO_KINDS = {
    "EXECUTE": FileKind.EXECUTABLE,
    "DYLIB": FileKind.DYLIB,
    "BUNDLE": FileKind.BUNDLE,
}

_ORIGIN_TOKENS = ("$ORIGIN", "${ORIGIN}")


def _enum_name(value) -> str:
    # LIEF renamed its enum classes across releases; the member name is stable.
    return str(value).rsplit(".", 1)[-1]


def _read_magic(path: Path) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read(4)
    except OSError as e:
        raise InspectionError(path, e) from e


def _macho_libraries(slices) -> list[LinkedLibrary]:
    # Universal binaries report the union of their slices' load commands.
    libraries: list[LinkedLibrary] = []
    for binary in slices:
        for lib in binary.libraries:
            load_kind = LoadKind.WEAK if _enum_name(lib.command) == "LOAD_WEAK_DYLIB" else LoadKind.NORMAL
            library = LinkedLibrary(path=lib.name, load_kind=load_kind)
            if library not in libraries:
                libraries.append(library)
    return libraries


class LiefInspector(BaseInspector):
    """Read load commands from ELF and Mach-O files."""

    def __init__(self, config: LinkageConfig):
        self.config = config
        self._cached: tuple[Path, object] | None = None

    def file_kind(self, path: Path) -> FileKind:
        magic = _read_magic(path)
        if magic == _ELF_MAGIC:
            binary = self._parse(path, self._parse_elf)
            return _ELF_KINDS[_enum_name(binary.header.file_type)]
        if magic in _MACHO_MAGICS:
            slices = self._parse(path, self._parse_macho)
            if slices is None:
                # Java class files share the fat magic.
                return FileKind.NONE
            return _MACHO_KINDS.get(_enum_name(slices[0].header.file_type), FileKind.NONE)
        return FileKind.NONE

    def load_commands(self, path: Path) -> list[LinkedLibrary]:
        magic = _read_magic(path)
        if magic == _ELF_MAGIC:
            return self._elf_libraries(path, self._parse(path, self._parse_elf))
        if magic in _MACHO_MAGICS:
            slices = self._parse(path, self._parse_macho)
            if slices is None:
                return []
            return _macho_libraries(slices)
        raise InspectionError(path, "not an ELF or Mach-O file")

    def _parse(self, path: Path, parser):
        if self._cached is not None and self._cached[0] == path:
            return self._cached[1]
        try:
            binary = parser(str(path))
        except InspectionError:
            raise
        except Exception as e:
            raise InspectionError(path, e) from e
        self._cached = (path, binary)
        return binary

    @staticmethod
    def _parse_elf(path: str):
        binary = lief.ELF.parse(path)
        if binary is None:
            raise InspectionError(Path(path), "LIEF could not parse the ELF file")
        file_type = _enum_name(binary.header.file_type)
        if file_type not in _ELF_KINDS:
            raise InspectionError(Path(path), f"unknown ELF file type {file_type}")
        if _ELF_KINDS[file_type].is_linkable and not list(binary.segments):
            raise InspectionError(Path(path), "ELF file has no program headers")
        return binary

    @staticmethod
    def _parse_macho(path: str):
        """Return every architecture slice of a Mach-O file, or None."""
        if not lief.is_macho(path):
            return None
        fat = lief.MachO.parse(path)
        if fat is None or fat.size == 0:
            raise InspectionError(Path(path), "LIEF could not parse the Mach-O file")
        return [fat.at(i) for i in range(fat.size)]

    def _elf_libraries(self, path: Path, binary) -> list[LinkedLibrary]:
        search_dirs = self._elf_search_dirs(path, binary)
        return [
            LinkedLibrary(path=self._find_full_lib_path(soname, search_dirs))
            for soname in binary.libraries
        ]

    def _elf_search_dirs(self, path: Path, binary) -> list[Path]:
        origin = str(path.parent)
        dirs: list[Path] = []
        for entry in binary.dynamic_entries:
            if _enum_name(entry.tag) not in ("RPATH", "RUNPATH"):
                continue
            for raw in entry.paths:
                for token in _ORIGIN_TOKENS:
                    raw = raw.replace(token, origin)
                if raw:
                    dirs.append(Path(raw))
        dirs.append(self.config.prefix / "lib")
        dirs.extend(self.config.library_search_dirs)
        return dirs

    @staticmethod
    def _find_full_lib_path(soname: str, search_dirs: list[Path]) -> str:
        if "/" in soname:
            return soname
        for directory in search_dirs:
            candidate = directory / soname
            if candidate.exists():
                return str(candidate)
        logger.debug("Could not locate %s in %d search dirs", soname, len(search_dirs))
        return soname
