"""Installed kegs and resolution of library paths to their owning keg."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from linkage_audit.models import LinkageConfig
from linkage_audit.receipt import InstallReceipt, load_receipt


class NotAKegError(ValueError):
    """Raised when a path or name does not identify an installed keg."""


@dataclass(frozen=True)
class Keg:
    """An installed package: ``<cellar>/<name>/<version>``."""
    path: Path

    @property
    def name(self) -> str:
        return self.path.parent.name

    @property
    def version(self) -> str:
        return self.path.name

    def receipt(self) -> InstallReceipt:
        return load_receipt(self.path)

    def __str__(self) -> str:
        return str(self.path)


@dataclass(frozen=True)
class OwnedBy:
    keg: Keg
    tap: str | None = None


@dataclass(frozen=True)
class NotManaged:
    path: str


@dataclass(frozen=True)
class NotFound:
    path: str


OwnerResolution = Union[OwnedBy, NotManaged, NotFound]


class KegResolver:
    """Map paths under a prefix to the kegs that own them."""

    def __init__(self, config: LinkageConfig):
        self.config = config
        self.prefix = config.prefix
        self.cellar = config.cellar
        self.opt = config.opt

    def resolve_owner(self, reference: str) -> OwnerResolution:
        """Resolve a library reference to its owning keg.

        A reference that does not exist on disk is ``NotFound``; one that
        exists outside the cellar is ``NotManaged``. Bare sonames that the
        inspector could not place are treated as not found.
        """
        path = Path(reference)
        if not path.is_absolute():
            return NotFound(reference)
        try:
            real = path.resolve(strict=True)
        except FileNotFoundError:
            return NotFound(reference)

        keg = self._keg_containing(real)
        if keg is None:
            return NotManaged(reference)
        return OwnedBy(keg=keg, tap=self.receipt_for(keg).tap)

    def qualified_name(self, owner: OwnedBy) -> str:
        if owner.tap is None or owner.tap == self.config.core_tap:
            return owner.keg.name
        return f"{owner.tap}/{owner.keg.name}"

    def receipt_for(self, keg: Keg) -> InstallReceipt:
        return keg.receipt()

    def keg_for_path(self, path: Path) -> Keg:
        real = path.resolve(strict=True)
        keg = self._keg_containing(real)
        if keg is None:
            raise NotAKegError(f"{path} is not inside a keg")
        return keg

    def keg_for_name(self, name: str) -> Keg | None:
        """Return the linked keg for a formula name, if installed."""
        opt_link = self.opt / name.split("/")[-1]
        if opt_link.exists():
            return self.keg_for_path(opt_link)
        rack = self._real_cellar() / name.split("/")[-1]
        if not rack.is_dir():
            return None
        versions = sorted(p for p in rack.iterdir() if p.is_dir())
        if not versions:
            return None
        return Keg(versions[-1])

    def installed_kegs(self) -> list[Keg]:
        kegs: list[Keg] = []
        cellar = self._real_cellar()
        if not cellar.is_dir():
            return kegs
        for rack in sorted(cellar.iterdir()):
            if not rack.is_dir():
                continue
            keg = self.keg_for_name(rack.name)
            if keg is not None:
                kegs.append(keg)
        return kegs

    def provides_executables(self, name: str) -> bool:
        """Whether the installed formula ships anything in its bin directory."""
        bin_dir = self.opt / name.split("/")[-1] / "bin"
        if not bin_dir.is_dir():
            return False
        with os.scandir(bin_dir) as entries:
            return any(True for _ in entries)

    def _real_cellar(self) -> Path:
        return self.cellar.resolve() if self.cellar.exists() else self.cellar

    def _keg_containing(self, real: Path) -> Keg | None:
        cellar = self._real_cellar()
        for candidate in (real, *real.parents):
            if candidate.parent.parent == cellar:
                return Keg(candidate)
        return None
