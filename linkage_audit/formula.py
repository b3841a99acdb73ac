"""Formula definitions: the declared dependency graph of a package.

Formulae are read from ``<formula_dir>/<name>.json``::

    {
      "name": "foo",
      "tap": "homebrew/core",
      "dependencies": [
        "zlib",
        {"name": "pkg-config", "tags": ["build"]},
        {"name": "readline", "tags": ["recommended"]}
      ]
    }
"""

from __future__ import annotations

import logging
from collections import deque
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, field_validator

from linkage_audit.receipt import InstallReceipt

if TYPE_CHECKING:
    from linkage_audit.keg import KegResolver

logger = logging.getLogger(__name__)


class FormulaUnavailableError(LookupError):
    """Raised when no definition exists for a formula."""

    def __init__(self, name: str):
        super().__init__(f"No available formula with the name \"{name}\"")
        self.name = name


class DependencySpec(BaseModel):
    name: str
    tags: list[str] = Field(default_factory=list)

    @property
    def simple_name(self) -> str:
        return self.name.split("/")[-1]

    @property
    def build(self) -> bool:
        return "build" in self.tags

    @property
    def test(self) -> bool:
        return "test" in self.tags

    @property
    def optional(self) -> bool:
        return "optional" in self.tags

    @property
    def recommended(self) -> bool:
        return "recommended" in self.tags


class Formula(BaseModel):
    name: str
    tap: str | None = None
    dependencies: list[DependencySpec] = Field(default_factory=list)

    @field_validator("dependencies", mode="before")
    @classmethod
    def _expand_shorthand(cls, value):
        if not isinstance(value, list):
            return value
        return [{"name": dep} if isinstance(dep, str) else dep for dep in value]

    def declared_dependencies(self, receipt: InstallReceipt) -> list[DependencySpec]:
        """Dependencies declared for the installed build.

        Build-only dependencies are dropped; optional and recommended ones
        survive only if the receipt says the build included them.
        """
        deps: list[DependencySpec] = []
        for dep in self.dependencies:
            if dep.build:
                continue
            if (dep.optional or dep.recommended) and not receipt.was_included(
                dep.name, optional=dep.optional, recommended=dep.recommended,
            ):
                continue
            deps.append(dep)
        return deps

    def runtime_dependencies(self, receipt: InstallReceipt) -> list[DependencySpec]:
        """Declared dependencies without the test-only ones."""
        return [dep for dep in self.declared_dependencies(receipt) if not dep.test]


def declared_dependency_names(formula: Formula, receipt: InstallReceipt) -> list[str]:
    """Names of the dependencies a formula declares for its installed build."""
    return [dep.name for dep in formula.declared_dependencies(receipt)]


class FormulaRepository:
    """Load formula definitions from a directory of JSON documents."""

    def __init__(self, formula_dir: Path | None):
        self.formula_dir = formula_dir
        self._cache: dict[str, Formula] = {}

    def get(self, name: str) -> Formula:
        simple = name.split("/")[-1]
        if simple in self._cache:
            return self._cache[simple]
        if self.formula_dir is None:
            raise FormulaUnavailableError(name)
        path = self.formula_dir / f"{simple}.json"
        if not path.is_file():
            raise FormulaUnavailableError(name)
        formula = Formula.model_validate_json(path.read_text(encoding="utf-8"))
        self._cache[simple] = formula
        return formula

    def runtime_dependency_names(
        self,
        formula: Formula,
        receipt: InstallReceipt,
        resolver: KegResolver | None = None,
    ) -> set[str]:
        """Transitive runtime closure of ``formula``, computed from definitions.

        Each dependency's own build options come from its installed receipt
        when the resolver can find it. A dependency without a definition is
        kept in the closure but not expanded.
        """
        names: set[str] = set()
        queue = deque(formula.runtime_dependencies(receipt))
        while queue:
            dep = queue.popleft()
            if dep.simple_name in names or dep.simple_name == formula.name:
                continue
            names.add(dep.simple_name)
            try:
                dep_formula = self.get(dep.name)
            except FormulaUnavailableError:
                logger.warning("Cannot expand dependencies of %s: formula unavailable", dep.name)
                continue
            dep_receipt = InstallReceipt()
            if resolver is not None:
                keg = resolver.keg_for_name(dep.simple_name)
                if keg is not None:
                    dep_receipt = resolver.receipt_for(keg)
            queue.extend(dep_formula.runtime_dependencies(dep_receipt))
        return names
