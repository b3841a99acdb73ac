"""Binary inspectors."""

from __future__ import annotations

from linkage_audit.inspector.base import BaseInspector, InspectionError
from linkage_audit.models import LinkageConfig


def default_inspector(config: LinkageConfig) -> BaseInspector:
    """Return the LIEF-backed inspector."""
    from linkage_audit.inspector.lief_inspector import LiefInspector

    return LiefInspector(config)


__all__ = [
    "BaseInspector",
    "InspectionError",
    "default_inspector",
]
