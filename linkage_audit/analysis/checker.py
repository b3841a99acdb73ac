"""Linkage checker: scan a keg and reconcile it against its formula."""

from __future__ import annotations

import logging

from linkage_audit.analysis.classifier import ReferenceClassifier
from linkage_audit.analysis.linkage_models import LinkageReport, Reconciliation
from linkage_audit.analysis.reconciler import DependencyReconciler
from linkage_audit.formula import (
    Formula,
    FormulaRepository,
    FormulaUnavailableError,
    declared_dependency_names,
)
from linkage_audit.inspector import BaseInspector, default_inspector
from linkage_audit.keg import Keg, KegResolver
from linkage_audit.models import LinkageConfig

logger = logging.getLogger(__name__)


class LinkageChecker:
    """Audit one keg.

    The whole scan and reconciliation run inside the constructor; the
    resulting :class:`LinkageReport` is read-only.
    """

    def __init__(
        self,
        keg: Keg,
        formula: Formula | None = None,
        *,
        config: LinkageConfig,
        inspector: BaseInspector | None = None,
        resolver: KegResolver | None = None,
        formulae: FormulaRepository | None = None,
    ):
        self.keg = keg
        self.config = config
        self.inspector = inspector or default_inspector(config)
        self.resolver = resolver or KegResolver(config)
        self.formulae = formulae or FormulaRepository(config.formula_dir)

        warnings: list[str] = []
        self.formula = formula or self._resolve_formula(warnings)

        classifier = ReferenceClassifier(self.inspector, self.resolver, config)
        classification = classifier.classify(keg.path)

        reconciliation = Reconciliation()
        if self.formula is not None:
            reconciliation = self._reconcile(
                classification.brewed_dylibs.keys(),
                classification.broken_deps.keys(),
            )

        self.report = LinkageReport.build(
            keg_path=keg.path,
            formula_name=self.formula.name if self.formula else None,
            classification=classification,
            reconciliation=reconciliation,
            warnings=warnings,
            linux=config.linux,
        )

    def _resolve_formula(self, warnings: list[str]) -> Formula | None:
        try:
            return self.formulae.get(self.keg.name)
        except FormulaUnavailableError:
            logger.warning("Formula unavailable: %s", self.keg.name)
            warnings.append(f"Formula unavailable: {self.keg.name}")
            return None

    def _reconcile(self, brewed, broken) -> Reconciliation:
        receipt = self.resolver.receipt_for(self.keg)
        reconciler = DependencyReconciler(
            formula_name=self.formula.name,
            declared_deps=declared_dependency_names(self.formula, receipt),
            recursive_deps=self.formulae.runtime_dependency_names(
                self.formula, receipt, self.resolver,
            ),
            provides_executables=self.resolver.provides_executables,
        )
        excluded = self.config.toolchain_deps if self.config.linux else ()
        return reconciler.reconcile(brewed, broken, excluded_undeclared=excluded)

    @property
    def has_broken_dylibs(self) -> bool:
        return self.report.has_broken_dylibs

    @property
    def has_undeclared_deps(self) -> bool:
        return self.report.has_undeclared_deps

    @property
    def has_unnecessary_deps(self) -> bool:
        return self.report.has_unnecessary_deps

    @property
    def has_unwanted_system_dylibs(self) -> bool:
        return self.report.has_unwanted_system_dylibs
