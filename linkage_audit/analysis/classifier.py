"""Reference classifier: bucket every library reference of a keg exactly once."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from linkage_audit.analysis.baseline import unwanted_system_libraries
from linkage_audit.analysis.linkage_models import Classification
from linkage_audit.inspector.base import BaseInspector
from linkage_audit.keg import KegResolver, NotFound, NotManaged, OwnedBy
from linkage_audit.models import LinkageConfig, ReferenceClass, ReferenceKind

logger = logging.getLogger(__name__)

# Load-time placeholders (@rpath, @loader_path, @executable_path, $ORIGIN).
_VARIABLE_PREFIXES = ("@", "$")


class ReferenceClassifier:
    """Scan a keg's binaries and classify the libraries they reference."""

    def __init__(self, inspector: BaseInspector, resolver: KegResolver, config: LinkageConfig):
        self.inspector = inspector
        self.resolver = resolver
        self.config = config
        self._dep_re = re.compile(
            re.escape(str(config.prefix).rstrip("/"))
            + r"/(?:opt|" + re.escape(config.cellar_name) + r")/([\w+\-.@]+)/"
        )

    def dylib_to_dep(self, dylib: str) -> str | None:
        """Infer the formula a (possibly missing) library path belongs to."""
        m = self._dep_re.search(dylib)
        return m.group(1) if m else None

    def classify(self, keg_path: Path) -> Classification:
        result = Classification()
        for file_path, _kind in self.inspector.scan_keg(keg_path):
            result.files_scanned += 1
            for library in self.inspector.linked_libraries(file_path, except_weak=True):
                self._record(result, library.path, file_path)

            if self.config.linux:
                result.unwanted_system_dylibs |= unwanted_system_libraries(
                    result.system_dylibs, self.config.system_allowlist,
                )

        logger.info(
            "Scanned %d file(s) in %s: %d distinct reference(s)",
            result.files_scanned, keg_path, len(result.reverse_links),
        )
        return result

    def _record(self, result: Classification, dylib: str, file_path: Path) -> None:
        result.reverse_links.setdefault(dylib, set()).add(file_path)
        if dylib in result.checked:
            return
        result.checked.add(dylib)

        ref_class = self._classify_reference(result, dylib)
        if ref_class is None:
            logger.debug("%s: harmless broken link, ignored", dylib)
            return
        result.classes[dylib] = ref_class
        logger.debug("%s: %s", dylib, ref_class)

    def _classify_reference(self, result: Classification, dylib: str) -> ReferenceClass | None:
        if dylib.startswith(_VARIABLE_PREFIXES):
            result.variable_dylibs.add(dylib)
            return ReferenceClass(ReferenceKind.VARIABLE)

        owner = self.resolver.resolve_owner(dylib)
        if isinstance(owner, NotManaged):
            result.system_dylibs.add(dylib)
            return ReferenceClass(ReferenceKind.SYSTEM)

        if isinstance(owner, NotFound):
            if dylib in self.config.harmless_broken_links:
                return None
            dep = self.dylib_to_dep(dylib)
            if dep is not None:
                result.broken_deps.setdefault(dep, set()).add(dylib)
                return ReferenceClass(ReferenceKind.BROKEN_OWNED, dep)
            result.broken_dylibs.append(dylib)
            return ReferenceClass(ReferenceKind.BROKEN)

        if isinstance(owner, OwnedBy):
            name = self.resolver.qualified_name(owner)
            result.brewed_dylibs.setdefault(name, set()).add(dylib)
            return ReferenceClass(ReferenceKind.BREWED, name)

        raise TypeError(f"Unexpected owner resolution for {dylib}: {owner!r}")
