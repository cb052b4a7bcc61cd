"""Rich console utilities for the specwright command line."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from specwright.domain.workflows import CompositeWorkflow

if TYPE_CHECKING:
    from collections.abc import Mapping

    from specwright.domain.models import (
        DriftReport,
        Progress,
        ProjectStatus,
        ValidationResult,
    )
    from specwright.domain.workflows import Workflow

# Shared console instances
console = Console()
error_console = Console(stderr=True)

_STATUS_STYLES = {
    "not-started": "dim",
    "ai-working": "cyan",
    "awaiting-user": "yellow",
    "user-reviewing": "yellow",
    "complete": "green",
}


def print_error(message: str, hint: str | None = None) -> None:
    """Print formatted error message to stderr."""
    content = Text(f"ERROR: {message}", style="bold red")
    if hint:
        content.append(f"\n\nHint: {hint}", style="yellow")
    error_console.print(Panel(content, title="Error", border_style="red"))


def print_success(message: str) -> None:
    console.print(f"[green]✓[/green] {escape(message)}")


def print_status(status: ProjectStatus, progress: Progress, human: bool) -> None:
    """Print the current position and a per-phase table."""
    console.print(f"[bold]Project:[/bold] {escape(status.project_id)}")
    current_agent = status.current_agent.value if status.current_agent else "complete"
    console.print(f"[bold]Current agent:[/bold] {current_agent}")
    console.print(f"[bold]Current phase:[/bold] {status.current_phase}")
    console.print(
        f"[bold]Progress:[/bold] {progress.completed}/{progress.total} "
        f"({progress.percent}%)"
    )
    if human:
        console.print("[yellow]Waiting for user input[/yellow]")

    table = Table(show_header=True, box=None)
    table.add_column("Agent", style="cyan")
    table.add_column("Phase")
    table.add_column("Status")
    table.add_column("Completed", style="dim")
    for agent in status.agents:
        for phase in agent.phases:
            style = _STATUS_STYLES[phase.status.value]
            table.add_row(
                agent.role.value,
                phase.name,
                f"[{style}]{phase.status.value}[/{style}]",
                phase.completed_at or "",
            )
    console.print(table)


def print_validation(result: ValidationResult) -> None:
    if result.is_valid:
        print_success(f"{result.claimed_phase} is backed by the project files")
        return
    console.print(f"[red]✗[/red] {escape(result.reason or result.claimed_phase)}")
    for path in result.missing_files:
        console.print(f"  missing: {escape(path)}")
    console.print(f"Suggested phase: {result.suggested_phase}")


def print_drift(reports: tuple[DriftReport, ...]) -> None:
    if not reports:
        print_success("No drift: every completed phase has its output")
        return
    for report in reports:
        console.print(f"[yellow]{report.phase}[/yellow] is complete but missing:")
        for path in report.missing_files:
            console.print(f"  {escape(path)}")


def print_workflows(workflows: Mapping[str, Workflow]) -> None:
    table = Table(show_header=True, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Name")
    table.add_column("Phases / Outputs", style="dim")
    for key, workflow in workflows.items():
        if isinstance(workflow, CompositeWorkflow):
            detail = workflow.phases
        else:
            detail = workflow.outputs
        table.add_row(key, workflow.name, ", ".join(detail))
    console.print(table)
