"""Dependency reconciler: diff observed linkage against the declared graph."""

from __future__ import annotations

from typing import Callable, Collection, Iterable

from linkage_audit.analysis.linkage_models import Reconciliation


def simple_name(full_name: str) -> str:
    return full_name.split("/")[-1]


def sort_by_full_name(names: Iterable[str]) -> list[str]:
    """Core (unqualified) names first, then tap-qualified ones, each alphabetical."""
    return sorted(names, key=lambda name: ("/" in name, name))


class DependencyReconciler:
    """Compute indirect, undeclared and unnecessary dependencies.

    ``provides_executables`` answers whether an installed dependency ships
    command-line tools; such a dependency is never unnecessary.
    """

    def __init__(
        self,
        formula_name: str,
        declared_deps: Iterable[str],
        recursive_deps: Collection[str],
        provides_executables: Callable[[str], bool],
    ):
        self.formula_name = formula_name
        self.declared_deps = list(declared_deps)
        self.recursive_deps = set(recursive_deps)
        self.provides_executables = provides_executables

    @property
    def declared_dep_names(self) -> list[str]:
        return [simple_name(dep) for dep in self.declared_deps]

    def reconcile(
        self,
        brewed_dylibs: Collection[str],
        broken_deps: Collection[str] = (),
        excluded_undeclared: Collection[str] = (),
    ) -> Reconciliation:
        declared_names = set(self.declared_dep_names)
        indirect: list[str] = []
        undeclared: list[str] = []

        for full_name in brewed_dylibs:
            name = simple_name(full_name)
            if name == self.formula_name:
                continue
            if name in self.recursive_deps:
                if name not in declared_names:
                    indirect.append(full_name)
            else:
                undeclared.append(full_name)

        undeclared = [dep for dep in undeclared if dep not in excluded_undeclared]

        linked_names = {simple_name(full_name) for full_name in brewed_dylibs}
        unnecessary = [
            name for name in self.declared_dep_names
            if name != self.formula_name
            and not self.provides_executables(name)
            and name not in linked_names
        ]
        missing = set(broken_deps)
        unnecessary = [name for name in unnecessary if name not in missing]

        return Reconciliation(
            indirect_deps=sort_by_full_name(indirect),
            undeclared_deps=sort_by_full_name(undeclared),
            unnecessary_deps=unnecessary,
        )
