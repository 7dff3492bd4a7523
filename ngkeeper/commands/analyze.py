"""Analyze command implementation for ngkeeper.

Reads a ``package.json``, recommends an upgrade for every dependency
against a target Angular major, and optionally writes the rewritten
manifest.

The command wires three pieces together:

1. **load_manifest** -- validates the manifest before anything else runs.
2. **NpmRegistry** -- fetches each package's metadata once, concurrently.
3. **DependencyAnalyzer** -- resolves, classifies and rewrites.

Typical usage::

    # Show recommendations for Angular 17
    $ ngkeeper analyze package.json --target 17

    # Only packages with an update, as JSON
    $ ngkeeper analyze -t 18 --outdated-only --format json

    # Save the rewritten manifest next to the original
    $ ngkeeper analyze -t 18 --output package-updated.json

    # Update package.json in place, keeping a backup
    $ ngkeeper analyze -t 18 --write --backup -y
"""

from __future__ import annotations

import sys
import json
import click
import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional

from ngkeeper.constants import (
    DEFAULT_MANIFEST_FILE,
    DEFAULT_OUTPUT_FILE,
    FRAMEWORK_NAME,
)
from ngkeeper.context import pass_context, NgKeeperContext
from ngkeeper.core import (
    DependencyAnalyzer,
    NpmRegistry,
    render_annotated_manifest,
    render_manifest,
)
from ngkeeper.exceptions import NgKeeperError
from ngkeeper.models import (
    AnalysisEntry,
    AnalysisResult,
    RiskLevel,
    detect_framework_major,
    load_manifest,
)
from ngkeeper.utils import (
    HTTPClient,
    colorize_risk,
    colorize_update_type,
    confirm,
    get_logger,
    get_raw_console,
    get_update_type,
    print_error,
    print_info,
    print_success,
    print_table,
    print_warning,
    safe_read_file,
    safe_write_file,
)

logger = get_logger("commands.analyze")


@click.command()
@click.argument(
    "file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=DEFAULT_MANIFEST_FILE,
)
@click.option(
    "--target",
    "-t",
    type=int,
    default=None,
    help="Target Angular major version (default: from config, else 17).",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "simple", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.option(
    "--outdated-only",
    is_flag=True,
    help="Show only packages with available updates.",
)
@click.option(
    "--risk",
    type=click.Choice([r.value for r in RiskLevel], case_sensitive=False),
    default=None,
    help="Show only packages with this risk level.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Write the updated manifest to this file (e.g. {DEFAULT_OUTPUT_FILE}).",
)
@click.option(
    "--annotate",
    is_flag=True,
    help="Print the updated manifest with a comment on every upgraded line.",
)
@click.option(
    "--write",
    is_flag=True,
    help="Rewrite FILE in place with the recommended versions.",
)
@click.option(
    "--backup",
    is_flag=True,
    help="With --write, keep a timestamped copy of FILE.",
)
@click.option(
    "--yes",
    "-y",
    is_flag=True,
    help="With --write, skip the confirmation prompt.",
)
@pass_context
def analyze(
    ctx: NgKeeperContext,
    file: Path,
    target: Optional[int],
    format: str,
    outdated_only: bool,
    risk: Optional[str],
    output: Optional[Path],
    annotate: bool,
    write: bool,
    backup: bool,
    yes: bool,
) -> None:
    """Recommend safe upgrades for the dependencies of FILE.

    Every dependency in ``dependencies`` and ``devDependencies`` is looked
    up on the npm registry. ``@angular/*`` packages are moved to the
    newest release of the target major; other packages are moved to the
    newest release whose ``@angular/core`` peer dependency accepts the
    target. Versions are never downgraded and pre-releases are only
    suggested when you already use one.

    Exits:
        0 if nothing needs updating (or the file was rewritten), 1 if
        updates are available or an error occurred.
    """
    target_major = target if target is not None else ctx.config.target_major

    try:
        has_updates = asyncio.run(
            _analyze_async(
                ctx,
                file,
                target_major,
                format=format.lower(),
                outdated_only=outdated_only,
                risk=RiskLevel(risk.lower()) if risk else None,
                output=output,
                annotate=annotate,
                write=write,
                backup=backup,
                skip_confirm=yes,
            )
        )
        sys.exit(1 if has_updates else 0)

    except NgKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        logger.exception("Error in analyze command")
        sys.exit(1)


# ---------------------------------------------------------------------------
# Async orchestration
# ---------------------------------------------------------------------------


async def _analyze_async(
    ctx: NgKeeperContext,
    file: Path,
    target: int,
    *,
    format: str,
    outdated_only: bool,
    risk: Optional[RiskLevel],
    output: Optional[Path],
    annotate: bool,
    write: bool,
    backup: bool,
    skip_confirm: bool,
) -> bool:
    """Run the analysis and handle display and output files.

    Returns:
        ``True`` if updates are available and were not written back.

    Raises:
        NgKeeperError: The manifest is invalid or a file cannot be written.
    """
    show_progress = format != "json"
    config = ctx.config

    logger.info("Analysing %s for %s %s", file, FRAMEWORK_NAME, target)

    # ── Step 1: Load and validate the manifest ────────────────────────
    manifest = load_manifest(safe_read_file(file), file_path=str(file))

    current_major = detect_framework_major(manifest)
    if current_major is not None and current_major > target:
        print_info(
            f"Your project is using {FRAMEWORK_NAME} {current_major}, which is "
            f"newer than the selected target ({FRAMEWORK_NAME} {target}). "
            "No downgrade needed - your dependencies are already up to date!"
        )
        return False

    # ── Step 2: Resolve every dependency ──────────────────────────────
    async with HTTPClient(
        timeout=config.timeout,
        max_concurrency=config.concurrent_limit,
    ) as http:
        registry = NpmRegistry(
            http,
            registry_url=config.registry_url,
            concurrent_limit=config.concurrent_limit,
        )
        result = await DependencyAnalyzer(registry).analyze(manifest, target)

    if not result.analysis:
        if show_progress:
            print_warning("No dependencies found in manifest")
        _write_output(output, result, show_progress=show_progress)
        return False

    # ── Step 3: Display ───────────────────────────────────────────────
    entries = _filter_entries(result, outdated_only=outdated_only, risk=risk)

    if format == "json":
        _display_json(result, entries, target)
    elif not entries:
        print_success("Nothing to show for the selected filters")
    elif format == "simple":
        _display_simple(entries)
    else:
        _display_table(entries, target)

    if annotate:
        get_raw_console().print(
            render_annotated_manifest(result),
            markup=False,
            highlight=False,
            soft_wrap=True,
        )

    # ── Step 4: Write output files ────────────────────────────────────
    _write_output(output, result, show_progress=show_progress)

    written = False
    if write:
        written = _write_in_place(file, result, backup=backup, skip_confirm=skip_confirm)

    # ── Final summary ─────────────────────────────────────────────────
    summary = result.summary
    if show_progress:
        if summary.needs_update > 0:
            print_warning(
                f"\n{summary.needs_update} of {summary.total} package(s) can be "
                f"updated ({summary.medium_risk} need verification)"
            )
        else:
            print_success(f"\nAll {summary.total} packages are up to date!")

    return summary.needs_update > 0 and not written


def _filter_entries(
    result: AnalysisResult,
    *,
    outdated_only: bool,
    risk: Optional[RiskLevel],
) -> List[AnalysisEntry]:
    entries = (
        result.entries_by_update_status(True) if outdated_only else list(result.analysis)
    )
    if risk is not None:
        entries = [e for e in entries if e.risk is risk]
    return entries


def _write_output(
    output: Optional[Path], result: AnalysisResult, *, show_progress: bool
) -> None:
    """Save the updated manifest to *output*, if one was requested."""
    if output is None:
        return
    safe_write_file(output, render_manifest(result))
    if show_progress:
        print_success(f"Updated manifest written to {output}")


def _write_in_place(
    file: Path,
    result: AnalysisResult,
    *,
    backup: bool,
    skip_confirm: bool,
) -> bool:
    """Rewrite *file* with the updated manifest; return True if written."""
    count = result.summary.needs_update
    if count == 0:
        logger.info("Nothing to write; %s is already up to date", file)
        return False

    plural = "package" if count == 1 else "packages"
    if not skip_confirm and not confirm(f"\nUpdate {count} {plural} in {file}?"):
        logger.info("Write cancelled by user")
        return False

    backup_path = safe_write_file(file, render_manifest(result), create_backup=backup)
    if backup_path is not None:
        logger.info("Created backup: %s", backup_path)
    print_success(f"Updated {count} {plural} in {file}")
    return True


# ---------------------------------------------------------------------------
# Display renderers
# ---------------------------------------------------------------------------


def _display_table(entries: List[AnalysisEntry], target: int) -> None:
    """Render entries as a Rich table."""
    data = [_create_table_row(entry) for entry in entries]

    column_styles: Dict[str, Dict[str, Any]] = {
        "Status": {"justify": "center", "no_wrap": True, "width": 12},
        "Package": {"style": "bold cyan", "no_wrap": True},
        "Current": {"justify": "center", "style": "dim"},
        "Recommended": {"justify": "center", "style": "bold green"},
        "Update Type": {"justify": "center"},
        "Risk": {"justify": "center"},
        "Notes": {"justify": "left", "no_wrap": False},
    }

    print_table(
        data,
        title=f"Dependency Upgrades for {FRAMEWORK_NAME} {target}",
        column_styles=column_styles,
    )


def _create_table_row(entry: AnalysisEntry) -> Dict[str, str]:
    if entry.needs_update:
        status = "[yellow]⬆ OUTDATED[/yellow]"
        update_type = colorize_update_type(
            get_update_type(entry.current_version, entry.recommended_version)
        )
    else:
        status = "[green]✓ OK[/green]"
        update_type = "[dim]-[/dim]"

    return {
        "Status": status,
        "Package": entry.name,
        "Current": entry.current_version or "[dim]-[/dim]",
        "Recommended": entry.recommended_version,
        "Update Type": update_type,
        "Risk": colorize_risk(entry.risk.value),
        "Notes": entry.notes,
    }


def _display_simple(entries: List[AnalysisEntry]) -> None:
    """One line per entry, suitable for piping."""
    console = get_raw_console()

    for entry in entries:
        status = "OUTDATED" if entry.needs_update else "OK"
        console.print(
            f"[{status}] {entry.name:30} {entry.current_version:12} → "
            f"{entry.recommended_version:12} ({entry.risk.value}) {entry.notes}",
            markup=False,
            highlight=False,
            soft_wrap=True,
        )


def _display_json(
    result: AnalysisResult,
    entries: List[AnalysisEntry],
    target: int,
) -> None:
    """Machine-readable report with the rewritten manifest."""
    data = {
        "target": target,
        "analysis": [e.to_json() for e in entries],
        "summary": result.summary.to_json(),
        "updated": result.updated,
    }
    print(json.dumps(data, indent=2, ensure_ascii=False))
