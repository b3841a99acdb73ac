"""Analysis layer."""

from linkage_audit.analysis.checker import LinkageChecker
from linkage_audit.analysis.classifier import ReferenceClassifier
from linkage_audit.analysis.linkage_models import LinkageReport
from linkage_audit.analysis.reconciler import DependencyReconciler

__all__ = ["DependencyReconciler", "LinkageChecker", "LinkageReport", "ReferenceClassifier"]
