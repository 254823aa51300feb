"""CLI interface for Reclaim."""

from __future__ import annotations

import json
import logging
import sys
import time
from pathlib import Path
from typing import Any

import click

from reclaim.core.catalog import build_catalog
from reclaim.core.engine import ReclaimEngine
from reclaim.core.locator import DEFAULT_MAX_DEPTH, DiscoveryError
from reclaim.models.clean_result import DeletionOutcome
from reclaim.models.scan_result import ScanReport
from reclaim.settings import Settings
from reclaim.utils import bytes_to_human, format_elapsed

log = logging.getLogger(__name__)


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _build_engine(settings: Settings) -> ReclaimEngine:
    catalog = build_catalog(settings)
    workers = settings.get_int("scan.workers", 0) or None
    return ReclaimEngine(catalog, workers=workers)


def _display(path: Path, base: Path) -> str:
    """Show *path* relative to *base*, or by name when it is the base itself."""
    try:
        rel = path.relative_to(base)
    except ValueError:
        return str(path)
    return str(rel) if rel != Path(".") else path.name


def _resolve_depth(settings: Settings, depth: int | None) -> int:
    if depth is not None:
        return depth
    return settings.get_int("scan.max_depth", DEFAULT_MAX_DEPTH)


depth_option = click.option(
    "-L", "--depth",
    type=click.IntRange(min=0),
    default=None,
    help=f"Max directory depth to search for repositories (default {DEFAULT_MAX_DEPTH})",
)
json_option = click.option("--json", "as_json", is_flag=True, help="Output as JSON")


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (default: $XDG_CONFIG_HOME/reclaim/settings.json)",
)
@click.pass_context
def main(ctx: click.Context, verbose: int, config_path: Path | None) -> None:
    """Reclaim: delete git-ignored build artifacts and dependency caches."""
    _setup_logging(verbose)
    ctx.obj = Settings(config_path)


# ── scanning helpers ─────────────────────────────────────────────────────

def _run_scan(engine: ReclaimEngine, path: Path, depth: int, as_json: bool) -> ScanReport:
    """Discover repositories under *path* and scan them, exiting on input errors."""
    try:
        roots, warnings = engine.discover(path, depth)
    except DiscoveryError as exc:
        if as_json:
            click.echo(json.dumps({"status": "error", "error": str(exc)}))
        else:
            click.echo(f"reclaim: {exc}", err=True)
        sys.exit(1)

    if not as_json:
        click.echo(f"\n{click.style('🔍', bold=True)} Scanning {len(roots)} repositories...\n")

    start = time.monotonic()
    report = engine.scan(roots, path.expanduser().resolve(), warnings)
    log.info("Scanned %d repositories in %s", len(roots), format_elapsed(time.monotonic() - start))
    return report


def _report_to_dict(report: ScanReport) -> dict[str, Any]:
    return {
        "base": str(report.base),
        "total_bytes": report.total_bytes,
        "candidate_count": len(report.candidates),
        "repositories": [
            {
                "path": str(repo.root.path),
                "total_bytes": repo.total_bytes,
                "skipped": repo.skipped or None,
                "candidates": [
                    {
                        "path": str(c.path),
                        "size_bytes": c.size_bytes,
                        "file_count": c.file_count,
                        "label": c.label,
                        "rule": c.verdict.rule,
                    }
                    for c in repo.candidates
                ],
            }
            for repo in report.repositories
        ],
        "warnings": report.all_warnings,
    }


def _print_warnings(report: ScanReport) -> None:
    warnings = report.all_warnings
    if not warnings:
        return
    click.echo(click.style(f"{len(warnings)} warning(s):", fg="yellow", bold=True), err=True)
    for line in warnings:
        click.echo(f"  {click.style('!', fg='yellow')} {line}", err=True)
    click.echo(err=True)


def _print_report(report: ScanReport) -> None:
    for repo in report.repositories:
        if not repo.candidates:
            continue
        click.echo(click.style(_display(repo.root.path, report.base), bold=True))
        for c in repo.candidates:
            click.echo(
                f"  {click.style(str(c.relative_path), fg='red')}  "
                f"{bytes_to_human(c.size_bytes)}  "
                f"{click.style(c.label, fg='bright_black')}"
            )

    click.echo(
        f"\n{len(report.candidates)} dirs, "
        f"{click.style(bytes_to_human(report.total_bytes), fg='green', bold=True)} reclaimable\n"
    )


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@click.argument("path", type=click.Path(path_type=Path))
@depth_option
@json_option
@click.pass_obj
def scan(settings: Settings, path: Path, depth: int | None, as_json: bool) -> None:
    """Report ignored cache directories (preview only, never deletes)."""
    engine = _build_engine(settings)
    report = _run_scan(engine, path, _resolve_depth(settings, depth), as_json)

    if as_json:
        click.echo(json.dumps(_report_to_dict(report), indent=2))
        return

    _print_warnings(report)
    if not report.repositories:
        click.echo(f"No git repositories found in {report.base}.")
    elif not report.candidates:
        click.echo("Nothing to clean.")
    else:
        _print_report(report)


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@click.argument("path", type=click.Path(path_type=Path))
@depth_option
@click.option("-n", "--dry-run", is_flag=True, help="Show what would be deleted without deleting")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@json_option
@click.pass_obj
def clean(settings: Settings, path: Path, depth: int | None, dry_run: bool, yes: bool, as_json: bool) -> None:
    """Scan, confirm and delete ignored cache directories."""
    if as_json and not (yes or dry_run):
        raise click.UsageError("--json requires --yes or --dry-run")

    engine = _build_engine(settings)
    report = _run_scan(engine, path, _resolve_depth(settings, depth), as_json)
    candidates = report.candidates

    if not candidates:
        if as_json:
            click.echo(json.dumps({"status": "nothing_to_clean", "report": _report_to_dict(report)}, indent=2))
        else:
            _print_warnings(report)
            click.echo("Nothing to clean.")
        return

    if not as_json:
        _print_warnings(report)
        _print_report(report)

    if dry_run:
        if as_json:
            click.echo(json.dumps({"status": "dry_run", "report": _report_to_dict(report)}, indent=2))
        else:
            click.echo("(dry run: nothing was deleted)")
        return

    if not yes:
        choice = click.prompt("Delete all? [y/N]", default="n", show_default=False)
        if choice.strip().lower() not in ("y", "yes"):
            click.echo("Aborted.")
            return

    if not as_json:
        click.echo(f"\n{click.style('🧹', bold=True)} Deleting...\n")

    def on_result(outcome: DeletionOutcome) -> None:
        if as_json:
            return
        shown = _display(outcome.path, report.base)
        if outcome.success:
            click.echo(f"  {click.style('✓', fg='green')} {shown}")
        else:
            click.echo(f"  {click.style('✗', fg='red')} {shown}: {outcome.error}", err=True)

    outcomes = engine.delete(candidates, on_result=on_result)
    freed = sum(o.freed_bytes for o in outcomes)
    failures = [o for o in outcomes if not o.success]

    if as_json:
        data = {
            "status": "cleaned",
            "freed_bytes": freed,
            "results": [
                {
                    "path": str(o.path),
                    "success": o.success,
                    "freed_bytes": o.freed_bytes,
                    "error": o.error or None,
                }
                for o in outcomes
            ],
        }
        click.echo(json.dumps(data, indent=2))
    else:
        click.echo(f"\nFreed {click.style(bytes_to_human(freed), fg='green', bold=True)}\n")
        if failures:
            click.echo(f"reclaim: {len(failures)} dirs failed to delete", err=True)

    if failures:
        sys.exit(1)


# ── patterns ─────────────────────────────────────────────────────────────

@main.command("patterns")
@json_option
@click.pass_obj
def patterns_cmd(settings: Settings, as_json: bool) -> None:
    """List the directory names treated as caches."""
    catalog = build_catalog(settings)

    if as_json:
        click.echo(json.dumps([{"name": e.name, "label": e.label} for e in catalog], indent=2))
        return

    for label, entries in catalog.by_label().items():
        click.echo(f"\n  {click.style(label, fg='blue', bold=True)}")
        for entry in entries:
            click.echo(f"    {click.style(entry.name, fg='cyan')}")
    click.echo()
