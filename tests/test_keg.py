"""Tests for keg lookup and owner resolution."""

import json

import pytest

from linkage_audit.keg import KegResolver, NotAKegError, NotFound, NotManaged, OwnedBy


def test_owned_path_resolves_to_keg(prefix):
    keg_path = prefix.install("zlib", "1.3", libs=("libz.so.1",))
    resolver = KegResolver(prefix.config())

    owner = resolver.resolve_owner(str(prefix.opt / "zlib" / "lib" / "libz.so.1"))

    assert isinstance(owner, OwnedBy)
    assert owner.keg.path == keg_path.resolve()
    assert owner.keg.name == "zlib"
    assert owner.keg.version == "1.3"
    assert resolver.qualified_name(owner) == "zlib"


def test_non_core_tap_is_qualified(prefix):
    prefix.install("qux", libs=("libqux.so",), tap="someone/extra")
    resolver = KegResolver(prefix.config())

    owner = resolver.resolve_owner(str(prefix.opt / "qux" / "lib" / "libqux.so"))

    assert resolver.qualified_name(owner) == "someone/extra/qux"


def test_missing_receipt_means_core(prefix):
    keg_path = prefix.install("plain", libs=("libplain.so",))
    (keg_path / "INSTALL_RECEIPT.json").unlink()
    resolver = KegResolver(prefix.config())

    owner = resolver.resolve_owner(str(keg_path / "lib" / "libplain.so"))

    assert owner.tap is None
    assert resolver.qualified_name(owner) == "plain"


def test_path_outside_cellar_is_not_managed(prefix, system_dir):
    resolver = KegResolver(prefix.config())
    ref = str(system_dir / "libc.so.6")
    assert resolver.resolve_owner(ref) == NotManaged(ref)


def test_missing_path_is_not_found(prefix, tmp_path):
    resolver = KegResolver(prefix.config())
    ref = str(tmp_path / "missing.so")
    assert resolver.resolve_owner(ref) == NotFound(ref)


def test_bare_soname_is_not_found(prefix):
    resolver = KegResolver(prefix.config())
    assert resolver.resolve_owner("libfoo.so.1") == NotFound("libfoo.so.1")


def test_keg_for_name_and_installed_kegs(prefix):
    prefix.install("zlib", "1.3")
    prefix.install("bar", "2.0")
    resolver = KegResolver(prefix.config())

    assert resolver.keg_for_name("zlib").version == "1.3"
    assert resolver.keg_for_name("homebrew/core/zlib").name == "zlib"
    assert resolver.keg_for_name("nope") is None
    assert [k.name for k in resolver.installed_kegs()] == ["bar", "zlib"]


def test_keg_for_unlinked_rack_picks_latest_version(prefix):
    (prefix.cellar / "old" / "1.0").mkdir(parents=True)
    (prefix.cellar / "old" / "1.1").mkdir(parents=True)
    resolver = KegResolver(prefix.config())

    assert resolver.keg_for_name("old").version == "1.1"


def test_keg_for_path_outside_cellar(prefix, system_dir):
    resolver = KegResolver(prefix.config())
    with pytest.raises(NotAKegError):
        resolver.keg_for_path(system_dir)


def test_provides_executables(prefix):
    prefix.install("tool", bins=("tool",))
    prefix.install("lib-only", libs=("libx.so",))
    keg = prefix.install("empty-bin")
    (keg / "bin").mkdir()
    resolver = KegResolver(prefix.config())

    assert resolver.provides_executables("tool")
    assert not resolver.provides_executables("lib-only")
    assert not resolver.provides_executables("empty-bin")
    assert not resolver.provides_executables("not-installed")


def test_receipt_is_read(prefix):
    keg_path = prefix.install("app", used_options=("--with-foo",))
    (keg_path / "INSTALL_RECEIPT.json").write_text(json.dumps({
        "used_options": ["--with-foo"],
        "source": {"tap": "someone/extra", "path": "/x/app.rb"},
    }))
    resolver = KegResolver(prefix.config())

    receipt = resolver.receipt_for(resolver.keg_for_name("app"))

    assert receipt.tap == "someone/extra"
    assert receipt.was_included("foo", optional=True)
