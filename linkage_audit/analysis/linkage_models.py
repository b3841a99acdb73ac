"""Data models for linkage classification and reconciliation."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from linkage_audit.models import ReferenceClass


@dataclass
class Classification:
    """Accumulators filled by one classifier pass over a keg."""
    classes: dict[str, ReferenceClass] = field(default_factory=dict)
    checked: set[str] = field(default_factory=set)
    reverse_links: dict[str, set[Path]] = field(default_factory=dict)  # reference -> {files}
    system_dylibs: set[str] = field(default_factory=set)
    brewed_dylibs: dict[str, set[str]] = field(default_factory=dict)  # owner -> {references}
    broken_dylibs: list[str] = field(default_factory=list)
    broken_deps: dict[str, set[str]] = field(default_factory=dict)  # dep name -> {references}
    variable_dylibs: set[str] = field(default_factory=set)
    unwanted_system_dylibs: set[str] = field(default_factory=set)
    files_scanned: int = 0


@dataclass
class Reconciliation:
    indirect_deps: list[str] = field(default_factory=list)
    undeclared_deps: list[str] = field(default_factory=list)
    unnecessary_deps: list[str] = field(default_factory=list)


def _freeze_map(mapping: dict[str, set]) -> Mapping[str, frozenset]:
    return MappingProxyType({key: frozenset(values) for key, values in mapping.items()})


@dataclass(frozen=True)
class LinkageReport:
    """Read-only outcome of auditing one keg."""
    keg_path: Path
    formula_name: str | None
    reference_classes: Mapping[str, ReferenceClass]
    reverse_links: Mapping[str, frozenset[Path]]
    system_dylibs: frozenset[str]
    brewed_dylibs: Mapping[str, frozenset[str]]
    broken_dylibs: tuple[str, ...]
    broken_deps: Mapping[str, frozenset[str]]
    variable_dylibs: frozenset[str]
    unwanted_system_dylibs: frozenset[str]
    indirect_deps: tuple[str, ...] = ()
    undeclared_deps: tuple[str, ...] = ()
    unnecessary_deps: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    linux: bool = False

    @classmethod
    def build(
        cls,
        keg_path: Path,
        formula_name: str | None,
        classification: Classification,
        reconciliation: Reconciliation,
        warnings: list[str],
        linux: bool,
    ) -> LinkageReport:
        return cls(
            keg_path=keg_path,
            formula_name=formula_name,
            reference_classes=MappingProxyType(dict(classification.classes)),
            reverse_links=_freeze_map(classification.reverse_links),
            system_dylibs=frozenset(classification.system_dylibs),
            brewed_dylibs=_freeze_map(classification.brewed_dylibs),
            broken_dylibs=tuple(classification.broken_dylibs),
            broken_deps=_freeze_map(classification.broken_deps),
            variable_dylibs=frozenset(classification.variable_dylibs),
            unwanted_system_dylibs=frozenset(classification.unwanted_system_dylibs),
            indirect_deps=tuple(reconciliation.indirect_deps),
            undeclared_deps=tuple(reconciliation.undeclared_deps),
            unnecessary_deps=tuple(reconciliation.unnecessary_deps),
            warnings=tuple(warnings),
            linux=linux,
        )

    @property
    def has_broken_dylibs(self) -> bool:
        return bool(self.broken_dylibs)

    @property
    def has_undeclared_deps(self) -> bool:
        return bool(self.undeclared_deps)

    @property
    def has_unnecessary_deps(self) -> bool:
        return bool(self.unnecessary_deps)

    @property
    def has_unwanted_system_dylibs(self) -> bool:
        return bool(self.unwanted_system_dylibs)
