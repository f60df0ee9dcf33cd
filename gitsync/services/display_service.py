"""Console output for the non-interactive CLI"""
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from typing import List, Optional, Sequence

from gitsync.config import Config
from gitsync.constants import STATUS_COLORS, SYMBOL_DONE, SYMBOL_FAILED
from gitsync.formatters import (
    build_command_preview,
    format_ahead_behind,
    format_next_steps,
    format_result_headline,
    format_status,
)
from gitsync.logging_config import get_logger
from gitsync.models.branch import Branch
from gitsync.models.workflow import BranchOutcome, SyncResult, WorkflowMode

logger = get_logger(__name__)


class DisplayService:
    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def display_branch_table(
            self,
            branches: List[Branch],
            config: Config,
            current_branch: Optional[str] = None,
            skipped: Sequence[str] = ()
        ) -> None:
        """Display a table of branch information."""
        self.console.print(
            f"Base: [bold]{config.base_branch}[/bold]  "
            f"[dim](upstream: {config.upstream_base_ref}, origin: {config.origin_remote})[/dim]"
        )

        if not branches:
            self.console.print("[dim]No branches to sync.[/dim]")
        else:
            table = Table()
            table.add_column("")
            table.add_column("Branch")
            table.add_column("Status")
            table.add_column("Behind/Ahead")
            table.add_column("Last Commit")
            table.add_column("Tag")

            for branch in branches:
                name = f"* {branch.name}" if branch.name == current_branch else branch.name
                table.add_row(
                    format_status(branch.status),
                    name,
                    branch.status.value,
                    format_ahead_behind(branch),
                    branch.last_commit_relative,
                    branch.description,
                    style=None if branch.status.value == "ok" else STATUS_COLORS.get(branch.status.value),
                )
            self.console.print(table)

        if skipped:
            self.console.print(
                f"[yellow]Skipped {len(skipped)} branch(es) whose info could not be read: "
                f"{', '.join(skipped)}[/yellow]"
            )

    def display_command_preview(self, config: Config, branch_names: Sequence[str], mode: WorkflowMode) -> None:
        self.console.print("[bold]Commands:[/bold]")
        for line in build_command_preview(config, branch_names, mode):
            self.console.print(f"  [dim]{line}[/dim]")

    def display_outcome(self, outcome: BranchOutcome, position: int, total: int) -> None:
        """Print one progress line as a branch finishes."""
        if outcome.success:
            self.console.print(f"[{position}/{total}] [green]{SYMBOL_DONE}[/green] {outcome.branch}")
        else:
            self.console.print(f"[{position}/{total}] [red]{SYMBOL_FAILED}[/red] {escape(outcome.branch)}: {escape(outcome.reason or '')}")

    def display_summary(self, result: SyncResult, config: Config) -> None:
        """Print the aggregated result with remediation steps."""
        style = "green" if not result.failures else "yellow"
        self.console.print(f"\n[bold {style}]{format_result_headline(result)}[/bold {style}]")

        if result.fatal_error:
            self.console.print(f"[red]Error: {escape(result.fatal_error)}[/red]")
        if result.unprocessed:
            self.console.print(f"[yellow]Not attempted: {', '.join(result.unprocessed)}[/yellow]")

        failures = result.format_failures()
        if failures:
            self.console.print("\n[bold red]Failed:[/bold red]")
            for line in failures:
                self.console.print(f"  {escape(line)}")
            self.console.print("\n[bold]Next steps:[/bold]")
            for step in format_next_steps(result, config):
                self.console.print(f"  {step}")

        for warning in result.warnings:
            self.console.print(f"[yellow]{escape(warning)}[/yellow]")
        if result.stash_restored:
            self.console.print("[cyan]Restored your stashed changes.[/cyan]")
