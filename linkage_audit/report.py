"""Render linkage reports as text or as a JSON-ready dict."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Mapping

from linkage_audit.analysis.linkage_models import LinkageReport


def _items(label: str, things: Iterable[str] | Mapping[str, Iterable[str]]) -> list[str]:
    """A labelled section; mappings print ``item (label)`` sorted by label."""
    if not things:
        return []
    lines = [f"{label}:"]
    if isinstance(things, Mapping):
        for list_label in sorted(things):
            for item in sorted(things[list_label]):
                lines.append(f"  {item} ({list_label})")
    else:
        for item in sorted(things):
            lines.append(f"  {item}")
    return lines


def normal_lines(report: LinkageReport) -> list[str]:
    return [
        *_items("System libraries", report.system_dylibs),
        *_items("Homebrew libraries", report.brewed_dylibs),
        *_items("Indirect dependencies with linkage", report.indirect_deps),
        *_items("Variable-referenced libraries", report.variable_dylibs),
        *_items("Missing libraries", report.broken_dylibs),
        *_items("Broken dependencies", report.broken_deps),
        *_items("Undeclared dependencies with linkage", report.undeclared_deps),
        *_items("Dependencies with no linkage", report.unnecessary_deps),
    ]


def reverse_lines(report: LinkageReport) -> list[str]:
    """Each library followed by the keg files that reference it."""
    lines: list[str] = []
    for index, dylib in enumerate(sorted(report.reverse_links)):
        if index:
            lines.append("")
        lines.append(dylib)
        for file_path in sorted(report.reverse_links[dylib]):
            try:
                shown = file_path.relative_to(report.keg_path)
            except ValueError:
                shown = file_path
            lines.append(f"  {shown}")
    return lines


def check_lines(report: LinkageReport) -> list[str]:
    lines: list[str] = []
    if report.linux:
        lines += _items("System libraries", report.system_dylibs)
    lines += _items("Missing libraries", report.broken_dylibs)
    lines += _items("Broken dependencies", report.broken_deps)
    lines += _items("Dependencies with no linkage", report.unnecessary_deps)
    if not report.broken_dylibs:
        lines.append("No broken dylib links")
    if report.linux:
        lines += _items("Unwanted system libraries", report.unwanted_system_dylibs)
        if not report.unwanted_system_dylibs:
            lines.append("No unwanted system libraries")
    return lines


def report_dict(report: LinkageReport) -> dict:
    """JSON-serialisable summary of a report."""
    def sorted_map(mapping):
        return {key: sorted(str(v) for v in mapping[key]) for key in sorted(mapping)}

    return {
        "keg": str(report.keg_path),
        "formula": report.formula_name,
        "generated": datetime.now().isoformat(),
        "system_libraries": sorted(report.system_dylibs),
        "homebrew_libraries": sorted_map(report.brewed_dylibs),
        "indirect_dependencies": list(report.indirect_deps),
        "variable_libraries": sorted(report.variable_dylibs),
        "missing_libraries": sorted(report.broken_dylibs),
        "broken_dependencies": sorted_map(report.broken_deps),
        "undeclared_dependencies": list(report.undeclared_deps),
        "unnecessary_dependencies": list(report.unnecessary_deps),
        "unwanted_system_libraries": sorted(report.unwanted_system_dylibs),
        "reverse_links": sorted_map(report.reverse_links),
        "warnings": list(report.warnings),
    }
