"""Terminal output for CLI commands (rich) and their ``--json`` payloads."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .builder import BuildResult
from .library import ValidationReport
from .models import ComponentDescriptor
from .validators import ValidationIssue, group_issues


def print_json(console: Console, payload: Any) -> None:
    """Write plain JSON so output can be piped into other tools."""
    console.file.write(json.dumps(payload, indent=2, ensure_ascii=False) + "\n")
    console.file.flush()


def print_issues(console: Console, issues: Sequence[ValidationIssue]) -> None:
    for component, grouped in group_issues(issues).items():
        console.print(f"[red]✗ {escape(component)}[/]")
        for issue in grouped:
            console.print(f"  [red]-[/] {escape(issue.message)} [dim]({issue.kind})[/]")


def print_build_result(console: Console, result: BuildResult, output_dir: Path) -> None:
    if not result.ok:
        console.print(f"[bold red]Build failed:[/] {len(result.issues)} validation issue(s)")
        print_issues(console, result.issues)
        return
    if result.registry is None:
        console.print("[yellow]No components found.[/] Add components with: forge add <component-name>")
        return

    console.print(f"[bold green]Built {len(result.components)} component(s)[/] into {escape(str(output_dir))}")
    if result.excluded:
        console.print(f"[yellow]Excluded {len(result.excluded)} invalid component(s):[/]")
        print_issues(console, result.issues)

    table = Table(title="Build Summary")
    table.add_column("Artifact")
    table.add_column("Count", justify="right")
    table.add_row("Components", str(len(result.components)))
    table.add_row("Categories", str(len(result.registry.categories)))
    table.add_row("Tags", str(len(result.registry.tags)))
    table.add_row("Files written", str(len(result.written)))
    console.print(table)


def print_validation_report(console: Console, report: ValidationReport) -> None:
    for fix in report.fixes:
        for change in fix.changes:
            console.print(f"[cyan]fixed[/] {escape(fix.path.parent.name)}: {escape(change)}")
    for name in report.components:
        console.print(f"[green]✓ {escape(name)}[/]")
    if report.issues:
        print_issues(console, report.issues)
        console.print(f"\n[bold red]{len(report.issues)} issue(s) found[/]")
    else:
        console.print(f"\n[bold green]All {len(report.components)} component(s) are valid[/]")


def print_components(console: Console, components: Sequence[ComponentDescriptor]) -> None:
    if not components:
        console.print("[yellow]No components found[/]")
        return
    console.print(f"[blue]Found {len(components)} components:[/]\n")
    by_category: Dict[str, List[ComponentDescriptor]] = {}
    for component in components:
        by_category.setdefault(component.category, []).append(component)
    for category, members in by_category.items():
        console.print(f"[cyan]{escape(category)} ({len(members)}):[/]")
        for component in members:
            _print_component(console, component, indent="  ")
        console.print()
    tags = sorted({tag for component in components for tag in component.tags})
    console.print(f"[dim]Total components: {len(components)}[/]")
    if tags:
        console.print(f"[dim]Tags: {escape(', '.join(tags))}[/]")


def print_search_results(
    console: Console,
    query: str,
    results: Sequence[ComponentDescriptor],
    *,
    category: str | None = None,
) -> None:
    if not results:
        console.print(f"[yellow]No components found matching \"{escape(query)}\"[/]")
        if category:
            console.print(f"[dim]Tip: Try searching without --category={escape(category)}[/]")
        return
    console.print(f"[blue]Found {len(results)} components matching \"{escape(query)}\":[/]\n")
    for component in results:
        _print_component(console, component, indent="")
        console.print()
    console.print("[dim]Tip: Use `forge add <component-name>` to add a component to your project[/]")


def _print_component(console: Console, component: ComponentDescriptor, *, indent: str) -> None:
    console.print(f"{indent}[green]{escape(component.display_name)}[/] ({escape(component.name)})")
    console.print(f"{indent}  [dim]Category: {escape(component.category)}[/]")
    console.print(f"{indent}  [dim]Description: {escape(component.description)}[/]")
    if component.tags:
        console.print(f"{indent}  [dim]Tags: {escape(', '.join(component.tags))}[/]")
    if component.deprecated:
        console.print(f"{indent}  [yellow]⚠ Deprecated[/]")
    if component.experimental:
        console.print(f"{indent}  [yellow]Experimental[/]")


__all__ = [
    "print_build_result",
    "print_components",
    "print_issues",
    "print_json",
    "print_search_results",
    "print_validation_report",
]
