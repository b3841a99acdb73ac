"""Tests for dependency reconciliation."""

from linkage_audit.analysis.reconciler import DependencyReconciler, sort_by_full_name


def _reconciler(name="app", declared=(), recursive=(), executables=()):
    return DependencyReconciler(
        formula_name=name,
        declared_deps=declared,
        recursive_deps=recursive,
        provides_executables=lambda dep: dep in executables,
    )


class TestIndirectAndUndeclared:
    def test_transitive_dependency_is_indirect(self):
        reconciler = _reconciler(declared=["bar"], recursive={"bar", "baz"})
        result = reconciler.reconcile(["bar", "baz"])
        assert result.indirect_deps == ["baz"]
        assert result.undeclared_deps == []

    def test_declared_dependency_is_neither(self):
        reconciler = _reconciler(declared=["zlib"], recursive={"zlib"})
        result = reconciler.reconcile(["zlib"])
        assert result.indirect_deps == []
        assert result.undeclared_deps == []

    def test_unreachable_dependency_is_undeclared(self):
        reconciler = _reconciler(declared=["zlib"], recursive={"zlib"})
        result = reconciler.reconcile(["zlib", "openssl"])
        assert result.undeclared_deps == ["openssl"]

    def test_qualified_names_compare_by_simple_name(self):
        reconciler = _reconciler(declared=["someone/extra/qux"], recursive={"qux", "quux"})
        result = reconciler.reconcile(["someone/extra/qux", "other/tap/quux"])
        assert result.indirect_deps == ["other/tap/quux"]
        assert result.undeclared_deps == []

    def test_never_reports_itself(self):
        reconciler = _reconciler(name="app", declared=["app"], recursive={"app"})
        result = reconciler.reconcile(["app", "someone/tap/app"])
        assert "app" not in result.indirect_deps + result.undeclared_deps + result.unnecessary_deps
        assert "someone/tap/app" not in result.undeclared_deps

    def test_toolchain_exclusion(self):
        reconciler = _reconciler()
        result = reconciler.reconcile(["gcc", "glibc", "zlib"], excluded_undeclared=("gcc", "glibc"))
        assert result.undeclared_deps == ["zlib"]

    def test_results_are_sorted_unqualified_first(self):
        reconciler = _reconciler(recursive={"b", "a", "c"})
        result = reconciler.reconcile(["z/tap/c", "b", "y/tap/a", "a"])
        assert result.indirect_deps == ["a", "b", "y/tap/a", "z/tap/c"]


class TestUnnecessary:
    def test_unlinked_declared_dependency_is_unnecessary(self):
        reconciler = _reconciler(declared=["bar", "zlib"], recursive={"bar", "zlib"})
        result = reconciler.reconcile(["zlib"])
        assert result.unnecessary_deps == ["bar"]

    def test_dependency_with_executables_is_necessary(self):
        reconciler = _reconciler(declared=["pkg-tool"], recursive={"pkg-tool"}, executables={"pkg-tool"})
        result = reconciler.reconcile([])
        assert result.unnecessary_deps == []

    def test_broken_dependency_is_not_unnecessary(self):
        reconciler = _reconciler(declared=["bar"], recursive={"bar"})
        result = reconciler.reconcile([], broken_deps=["bar"])
        assert result.unnecessary_deps == []

    def test_unnecessary_keeps_declared_order(self):
        reconciler = _reconciler(declared=["zeta", "alpha", "tap/x/mid"])
        result = reconciler.reconcile([])
        assert result.unnecessary_deps == ["zeta", "alpha", "mid"]

    def test_linked_through_other_tap_counts(self):
        reconciler = _reconciler(declared=["qux"], recursive={"qux"})
        result = reconciler.reconcile(["someone/extra/qux"])
        assert result.unnecessary_deps == []


def test_sort_by_full_name():
    names = ["b/t/z", "zlib", "a/t/a", "bar", "Aardvark"]
    assert sort_by_full_name(names) == ["Aardvark", "bar", "zlib", "a/t/a", "b/t/z"]
