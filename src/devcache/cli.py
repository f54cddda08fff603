"""CLI interface for devcache."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable

import click

from devcache import __version__
from devcache.config import (
    Config,
    ConfigError,
    build_registry,
    build_scan_config,
    default_config_path,
    load_config,
    write_starter_config,
)
from devcache.core.aggregator import aggregate, totals
from devcache.core.engine import DevCacheEngine
from devcache.models.language import ScanConfig
from devcache.models.report import ScanReport
from devcache.utils import bytes_to_human

_TABLE_HEADERS = ("Project Path", "Cache Types", "Language", "Total Size", "Total Items")


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _config_option(func: Callable) -> Callable:
    return click.option(
        "--config",
        "config_path",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Path to YAML config (default: ~/.config/dev-cache/config.yaml)",
    )(func)


def _scan_options(func: Callable) -> Callable:
    """Options shared by the commands that scan."""
    func = click.option("--languages", "-l", default=None, help="Comma-separated list of languages to scan")(func)
    func = click.option(
        "--depth", "-d", type=click.IntRange(min=0), default=None, help="Max scan depth (overrides config)"
    )(func)
    func = click.option("--scan", "scan_path", default=None, help="Directory to scan (overrides config)")(func)
    return _config_option(func)


def _parse_languages(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [part.strip().lower() for part in raw.split(",") if part.strip()]


def _load_config(config_path: Path | None) -> Config:
    path = config_path or default_config_path()
    try:
        return load_config(path)
    except ConfigError as exc:
        click.echo(f"config error: {exc}", err=True)
        click.echo("Tip: run 'dev-cache init' to create a starter config", err=True)
        sys.exit(1)


def _build_scan_config(
    config_path: Path | None,
    scan_path: str | None,
    depth: int | None,
    languages: str | None,
) -> ScanConfig:
    config = _load_config(config_path)
    scan_config = build_scan_config(
        config,
        scan_path=scan_path,
        max_depth=depth,
        languages=_parse_languages(languages),
    )
    if not scan_config.rules:
        click.echo("No languages selected.")
        sys.exit(0)
    if not scan_config.root.is_dir():
        click.echo(f"scan path is not a directory: {scan_config.root}", err=True)
        sys.exit(1)
    return scan_config


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
@click.version_option(__version__, prog_name="dev-cache")
def main(verbose: int) -> None:
    """dev-cache: find and remove build caches in your projects."""
    _setup_logging(verbose)


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@_scan_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def scan(
    config_path: Path | None,
    scan_path: str | None,
    depth: int | None,
    languages: str | None,
    as_json: bool,
) -> None:
    """Scan for cache directories (preview only, never deletes)."""
    scan_config = _build_scan_config(config_path, scan_path, depth, languages)
    engine = DevCacheEngine(scan_config)

    if not as_json:
        _print_scan_banner(scan_config)

    report = engine.scan()

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    if not report.findings:
        click.echo("No cache directories found.")
    else:
        _print_table(report)
    _print_warnings(report.warnings)


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@_scan_options
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would be deleted without doing it")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def clean(
    config_path: Path | None,
    scan_path: str | None,
    depth: int | None,
    languages: str | None,
    yes: bool,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Scan and delete the cache directories that were found."""
    scan_config = _build_scan_config(config_path, scan_path, depth, languages)
    engine = DevCacheEngine(scan_config)

    if not as_json:
        _print_scan_banner(scan_config)

    report = engine.scan(dry_run=dry_run)
    targets = report.cache_findings

    if not targets:
        if as_json:
            click.echo(json.dumps({"status": "nothing_to_clean", "report": report.to_dict()}, indent=2))
        else:
            click.echo("No cache directories found to delete.")
            _print_warnings(report.warnings)
        return

    if not as_json:
        _print_table(report)

    if dry_run:
        if as_json:
            click.echo(json.dumps({"status": "dry_run", "report": report.to_dict()}, indent=2))
        else:
            click.echo("\n(dry run, no directories were deleted)")
            _print_warnings(report.warnings)
        return

    if not yes:
        if as_json:
            click.echo(json.dumps({"status": "confirmation_required", "report": report.to_dict()}, indent=2))
            sys.exit(1)
        click.echo(f"\nWARNING: This will delete {len(targets)} cache directories:")
        for finding in sorted(targets, key=lambda f: f.size_bytes, reverse=True):
            click.echo(f"  - {finding.path} ({bytes_to_human(finding.size_bytes)})")
        click.echo()
        if not click.confirm("Continue?", default=False):
            click.echo("Cancelled.")
            return

    def on_progress(path: Path, status: str) -> None:
        if as_json:
            return
        if status == "error":
            click.echo(f"  {click.style('✗', fg='red')} {path}")
        elif status == "done":
            click.echo(f"  {click.style('✓', fg='green')} {path}")

    if not as_json:
        click.echo(f"\n{click.style('Deleting cache directories...', bold=True)}\n")

    result = engine.clean(targets, on_progress=on_progress)

    if as_json:
        data: dict[str, Any] = {
            "status": "cleaned",
            "requested": result.requested,
            "deleted": result.deleted,
            "freed_bytes": result.freed_bytes,
            "errors": result.errors,
        }
        click.echo(json.dumps(data, indent=2))
    else:
        freed = ""
        if result.freed_bytes > 0:
            freed = f", freed {click.style(bytes_to_human(result.freed_bytes), fg='green', bold=True)}"
        click.echo(f"\nDeleted {result.deleted} directories{freed}")
        if result.errors:
            click.echo("\nErrors:")
            for error in result.errors:
                click.echo(f"  - {error}")
        _print_warnings(report.warnings)

    if result.errors:
        sys.exit(1)


# ── init ─────────────────────────────────────────────────────────────────

@main.command()
@_config_option
@click.option("--force", is_flag=True, help="Overwrite an existing config (a backup is kept)")
def init(config_path: Path | None, force: bool) -> None:
    """Write a starter config file."""
    path = config_path or default_config_path()
    try:
        backup = write_starter_config(path, force=force)
    except ConfigError as exc:
        click.echo(f"init error: {exc}", err=True)
        sys.exit(1)
    if backup is not None:
        click.echo(f"Existing config backed up to: {backup}")
    click.echo(f"Starter config written to: {path}")


# ── languages ────────────────────────────────────────────────────────────

@main.command()
@_config_option
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def languages(config_path: Path | None, as_json: bool) -> None:
    """List configured languages in detection order."""
    registry = build_registry(_load_config(config_path))
    ordered = registry.detection_order()
    ordered += [r for r in registry if r not in ordered]

    if as_json:
        data = [
            {
                "name": r.name,
                "enabled": r.enabled,
                "priority": r.priority,
                "patterns": r.pattern_texts,
                "signatures": r.marker_texts,
            }
            for r in ordered
        ]
        click.echo(json.dumps(data, indent=2))
        return

    if not ordered:
        click.echo("No languages configured.")
        return

    for rule in ordered:
        status = click.style("enabled", fg="green") if rule.enabled else click.style("disabled", fg="bright_black")
        click.echo(f"  {click.style(rule.name, fg='cyan', bold=True):25s} priority {rule.priority:<3d} {status}")
        click.echo(f"    patterns:   {', '.join(rule.pattern_texts) or '-'}")
        click.echo(f"    signatures: {', '.join(rule.marker_texts) or '-'}")


# ── presentation ─────────────────────────────────────────────────────────

def _print_scan_banner(scan_config: ScanConfig) -> None:
    click.echo(f"Scanning {scan_config.root} (max depth: {scan_config.max_depth})...")
    if scan_config.detect_language:
        click.echo("Language detection enabled - scanning with language-specific patterns")
    click.echo()


def _print_table(report: ScanReport) -> None:
    """Print one row per project with its cache types and totals."""
    projects = aggregate(report.findings)
    rows = [
        (
            str(p.path),
            "; ".join(p.labels),
            p.language,
            bytes_to_human(p.total_bytes),
            f"{p.total_items:,}",
        )
        for p in projects
    ]
    total_size, total_items = totals(projects)
    footer = ("TOTAL", "", "", bytes_to_human(total_size), f"{total_items:,}")

    widths = [max(len(row[i]) for row in (_TABLE_HEADERS, *rows, footer)) for i in range(len(_TABLE_HEADERS))]

    def _line(cells: tuple[str, ...]) -> str:
        return "  ".join(cell.ljust(width) for cell, width in zip(cells, widths)).rstrip()

    rule = "  ".join("-" * width for width in widths)
    click.echo(click.style(_line(_TABLE_HEADERS), bold=True))
    click.echo(rule)
    for row in rows:
        click.echo(_line(row))
    click.echo(rule)
    click.echo(click.style(_line(footer), bold=True))


def _print_warnings(warnings: list[str]) -> None:
    if not warnings:
        return
    click.echo("\nWarnings:")
    for warning in warnings:
        click.echo(f"  - {click.style(warning, fg='yellow')}")
