"""
Rendering functions for pubstatus output.

This module handles all pretty-printing and table formatting.
Services return ProjectRecords, this module makes them human-readable.
"""

from typing import List, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.style import Style
from rich.table import Table
from rich.text import Text

from .domain import ProjectRecord

console = Console()


def _format_branches(record: ProjectRecord, show_stale: bool) -> str:
    lines = []
    for branch in record.visible_branches(show_stale):
        label = escape(branch.name)
        if branch.is_default:
            label = f"[bold]{label}[/bold]"
        age = f"{branch.days_since_commit}d"
        if branch.is_stale:
            lines.append(f"[dim]{label} ({age}, stale)[/dim]")
        else:
            lines.append(f"{label} ({age})")

    hidden = len(record.branches) - len(record.visible_branches(show_stale))
    if hidden:
        lines.append(f"[dim]+{hidden} stale[/dim]")
    return "\n".join(lines)


def _format_versions(record: ProjectRecord, show_unpublished: bool) -> str:
    lines = []
    for version in record.visible_versions(show_unpublished):
        label = escape(version.version)
        if version.is_published and version.has_tag:
            lines.append(f"[green]✓ {label}[/green]")
        elif version.is_published:
            lines.append(f"[yellow]✓ {label} (no tag)[/yellow]")
        elif not version.has_tag:
            lines.append(f"[red]✗ {label} (no tag)[/red]")
        else:
            lines.append(f"[red]✗ {label}[/red]")
    return "\n".join(lines)


def _link(label: str, url: str) -> Text:
    """Text hyperlinked to url; the URL never goes through markup parsing."""
    text = Text(label)
    if url:
        text.stylize(Style(link=url))
    return text


def _format_published(record: ProjectRecord) -> Text:
    linked = [v for v in record.versions if v.is_published]
    if not linked:
        return Text("No releases", style="dim")
    return Text("\n").join(_link(v.version, v.published_url) for v in linked)


def _format_default_branch(record: ProjectRecord) -> Text:
    last_commit = (
        record.last_default_commit_at.strftime('%Y-%m-%d %H:%M')
        if record.last_default_commit_at else ""
    )
    if record.default_branch_stale:
        text = Text(record.default_branch, style="bold yellow")
        text.append(" (stale)", style="yellow")
    else:
        text = Text(record.default_branch)
    if last_commit:
        text.append(f"\n{last_commit}", style="dim")
    return text


def render_fleet_table(
    records: Sequence[ProjectRecord],
    show_stale_branches: bool = False,
    show_unpublished_tags: bool = True
) -> None:
    """
    Render project records as a pretty table, in the given order.

    Args:
        records: Records from FleetService.aggregate()
        show_stale_branches: Include branches older than the freshness threshold
        show_unpublished_tags: Include tagged versions missing from the manifest
    """
    if not records:
        console.print("[yellow]No projects found.[/yellow]")
        return

    table = Table(
        title="Publication Status",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta",
        show_lines=True,
    )

    table.add_column("Project", style="cyan")
    table.add_column("Default branch")
    table.add_column("Branches")
    table.add_column("Versions")
    table.add_column("Published")
    table.add_column("CI build", style="blue")

    for record in records:
        if record.is_degraded:
            table.add_row(
                Text.assemble(record.name, "\n", (record.repo, "dim")),
                "[red]unavailable[/red]",
                "",
                "",
                "",
                "",
            )
            continue

        table.add_row(
            Text.assemble(record.name, "\n", _link(record.repo, record.url)),
            _format_default_branch(record),
            _format_branches(record, show_stale_branches),
            _format_versions(record, show_unpublished_tags),
            _format_published(record),
            _link("build", record.ci_build_url) if record.ci_build_url else "",
        )

    console.print(table)


def summarize_fleet(records: Sequence[ProjectRecord]) -> dict:
    """Fleet-wide totals used by render_summary."""
    healthy: List[ProjectRecord] = [r for r in records if not r.is_degraded]
    return {
        'projects': len(records),
        'unavailable': len(records) - len(healthy),
        'stale_branches': sum(len(r.stale_branches) for r in healthy),
        'unpublished_versions': sum(len(r.unpublished_versions) for r in healthy),
        'untagged_versions': sum(len(r.untagged_versions) for r in healthy),
    }


def render_summary(records: Sequence[ProjectRecord]) -> None:
    """Print fleet-wide totals below the table."""
    summary = summarize_fleet(records)
    parts = [f"[bold]{summary['projects']}[/bold] projects"]
    if summary['unavailable']:
        parts.append(f"[red]{summary['unavailable']} unavailable[/red]")
    parts.append(f"{summary['stale_branches']} stale branches")
    parts.append(f"{summary['unpublished_versions']} unpublished versions")
    parts.append(f"{summary['untagged_versions']} untagged versions")
    console.print(" · ".join(parts))
