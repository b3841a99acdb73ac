"""Install receipts: the INSTALL_RECEIPT.json written into every keg."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

RECEIPT_FILENAME = "INSTALL_RECEIPT.json"


class ReceiptSource(BaseModel):
    tap: str | None = None
    path: str | None = None


class InstallReceipt(BaseModel):
    """Build configuration recorded when a keg was poured or built."""
    used_options: list[str] = Field(default_factory=list)
    source: ReceiptSource = Field(default_factory=ReceiptSource)

    @property
    def tap(self) -> str | None:
        return self.source.tap

    def with_option(self, option: str) -> bool:
        return f"--{option}" in self.used_options or option in self.used_options

    def was_included(self, name: str, *, optional: bool = False, recommended: bool = False) -> bool:
        """Whether an optional or recommended dependency was part of the build.

        Optional dependencies are opted into with ``--with-<name>``,
        recommended ones are opted out of with ``--without-<name>``.
        """
        name = name.split("/")[-1]
        if optional:
            return self.with_option(f"with-{name}")
        if recommended:
            return not self.with_option(f"without-{name}")
        return True


def load_receipt(keg_path: Path) -> InstallReceipt:
    """Read a keg's receipt; a keg without one gets the empty receipt."""
    receipt_path = keg_path / RECEIPT_FILENAME
    if not receipt_path.is_file():
        return InstallReceipt()
    return InstallReceipt.model_validate_json(receipt_path.read_text(encoding="utf-8"))
