"""Click CLI for auditing keg linkage."""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from linkage_audit import __version__
from linkage_audit.analysis.checker import LinkageChecker
from linkage_audit.formula import FormulaRepository
from linkage_audit.inspector import InspectionError, default_inspector
from linkage_audit.keg import Keg, KegResolver, NotAKegError
from linkage_audit.models import LinkageConfig
from linkage_audit.report import check_lines, normal_lines, report_dict, reverse_lines


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", count=True, help="Increase log verbosity (-v info, -vv debug)")
def cli(verbose: int):
    """linkage-audit: check the dynamic-library linkage of installed kegs."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _resolve_kegs(resolver: KegResolver, targets: tuple[str, ...]) -> list[Keg]:
    if not targets:
        return resolver.installed_kegs()
    kegs: list[Keg] = []
    for target in targets:
        if os.sep in target and Path(target).is_dir():
            kegs.append(resolver.keg_for_path(Path(target)))
            continue
        keg = resolver.keg_for_name(target)
        if keg is None:
            raise NotAKegError(f"No such keg: {target}")
        kegs.append(keg)
    return kegs


@cli.command()
@click.argument("targets", nargs=-1)
@click.option("--prefix", type=click.Path(file_okay=False, path_type=Path), envvar="LINKAGE_AUDIT_PREFIX",
              default="/usr/local", show_default=True, help="Installation prefix")
@click.option("--cellar", "cellar_name", default="Cellar", show_default=True,
              help="Name of the keg store directory under the prefix")
@click.option("--formula-dir", type=click.Path(exists=True, file_okay=False, path_type=Path),
              envvar="LINKAGE_AUDIT_FORMULA_DIR", help="Directory of formula JSON definitions")
@click.option("--linux/--no-linux", default=sys.platform.startswith("linux"),
              help="Apply the Linux system-library baseline")
@click.option("--test", "test_mode", is_flag=True, help="Only show breakages and exit non-zero on them")
@click.option("--strict", is_flag=True, help="Also fail on undeclared/unnecessary deps and unwanted system libraries")
@click.option("--reverse", is_flag=True, help="Show the files that reference each library")
@click.option("--json", "as_json", is_flag=True, help="Emit a JSON document")
def check(
    targets: tuple[str, ...],
    prefix: Path,
    cellar_name: str,
    formula_dir: Path | None,
    linux: bool,
    test_mode: bool,
    strict: bool,
    reverse: bool,
    as_json: bool,
):
    """Check linkage of installed kegs (names or keg directories)."""
    config = LinkageConfig(prefix=prefix, cellar_name=cellar_name, formula_dir=formula_dir, linux=linux)
    resolver = KegResolver(config)
    inspector = default_inspector(config)
    formulae = FormulaRepository(formula_dir)

    try:
        kegs = _resolve_kegs(resolver, targets)
    except (NotAKegError, FileNotFoundError) as e:
        raise click.UsageError(str(e))

    failed = False
    documents = []
    for keg in kegs:
        try:
            checker = LinkageChecker(
                keg, config=config, inspector=inspector, resolver=resolver, formulae=formulae,
            )
        except (InspectionError, ValidationError) as e:
            raise click.ClickException(f"{keg}: {e}")
        report = checker.report

        if test_mode:
            failed |= report.has_broken_dylibs or bool(report.broken_deps)
        if strict:
            failed |= (
                report.has_undeclared_deps
                or report.has_unnecessary_deps
                or report.has_unwanted_system_dylibs
            )

        if as_json:
            documents.append(report_dict(report))
            continue

        if len(kegs) > 1:
            click.echo(click.style(f"Checking {keg.name}", fg="cyan"))
        for warning in report.warnings:
            click.echo(click.style(f"Warning: {warning}", fg="yellow"), err=True)
        if reverse:
            lines = reverse_lines(report)
        elif test_mode:
            lines = check_lines(report)
        else:
            lines = normal_lines(report)
        for line in lines:
            click.echo(line)

    if as_json:
        click.echo(json.dumps(documents, indent=2))

    if failed:
        sys.exit(1)


if __name__ == "__main__":
    cli()
