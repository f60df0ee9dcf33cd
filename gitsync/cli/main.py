"""Command-line interface for gitsync"""

import os
import sys
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm

from gitsync.cli.args import parse_args
from gitsync.config import default_config_path, save_config
from gitsync.core.sync_keeper import SyncKeeper
from gitsync.exceptions import GitSyncError
from gitsync.logging_config import get_log_file, setup_logging
from gitsync.models.workflow import WorkflowMode
from gitsync.services.display_service import DisplayService

console = Console()


def run_interactive(keeper: SyncKeeper, manual: bool) -> int:
    """Run the Textual app and report anything the user must act on after it closes."""
    from gitsync.core.session import Session
    from gitsync.tui import GitSyncApp

    session = Session(keeper, manual_mode=manual)
    app = GitSyncApp(session)
    app.run()

    if session.startup_failed:
        console.print(f"[red]Error: {escape(session.error)}[/red]", highlight=False)
        console.print(f"[dim]Log: {get_log_file()}[/dim]")
    if session.exit_message:
        console.print(f"[yellow]{escape(session.exit_message)}[/yellow]", highlight=False)
    return app.return_code or 0


def run_headless(keeper: SyncKeeper, names, mode: WorkflowMode, stash: bool, manual: bool) -> int:
    """Run one workflow through the same driver the TUI uses, printing progress."""
    display = DisplayService(console)
    config = keeper.ensure_config()
    queue = list(dict.fromkeys(names))

    if manual:
        display.display_command_preview(config, queue, mode)
        verb = "update" if mode is WorkflowMode.UPDATE else "delete"
        if not Confirm.ask(f"Ready to {verb} {len(queue)} branch(es). Continue?", console=console):
            console.print("[yellow]Cancelled[/yellow]")
            return 0

    position = 0

    def on_outcome(outcome):
        nonlocal position
        position += 1
        display.display_outcome(outcome, position, len(queue))

    result = keeper.run_workflow(queue, mode, stash=stash, on_outcome=on_outcome)
    display.display_summary(result, config)
    return 1 if result.failures or result.aborted else 0


def main(argv=None):
    """Main entry point for the application."""
    parsed_args = None
    try:
        parsed_args = parse_args(argv)

        headless = bool(parsed_args.update or parsed_args.delete or parsed_args.write_config)
        # Default to interactive when running in a TTY, unless explicitly disabled
        use_interactive = not headless and not parsed_args.no_interactive and sys.stdin.isatty()

        # The TUI owns the terminal, so logs go to the log file only
        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug, tui_mode=use_interactive)

        if parsed_args.debug:
            console.print("[yellow]Debug mode enabled[/yellow]")
            console.print(f"[dim]Log file: {get_log_file()}[/dim]")

        keeper = SyncKeeper(os.getcwd(), config_path=parsed_args.config)

        if parsed_args.write_config:
            config = keeper.ensure_config()
            path = save_config(config, parsed_args.config or default_config_path(keeper.repo_path))
            console.print(f"[green]Wrote configuration to {path}[/green]")
            for key, value in config.to_dict().items():
                console.print(f"  {key}: {value}")
            return 0

        if parsed_args.update:
            return run_headless(keeper, parsed_args.update, WorkflowMode.UPDATE,
                                parsed_args.stash, parsed_args.manual)
        if parsed_args.delete:
            return run_headless(keeper, parsed_args.delete, WorkflowMode.DELETE,
                                parsed_args.stash, parsed_args.manual)

        if use_interactive:
            return run_interactive(keeper, parsed_args.manual)

        loaded = keeper.load()
        DisplayService(console).display_branch_table(
            loaded.branches, loaded.config, loaded.current_branch, loaded.skipped
        )
        return 0
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except GitSyncError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]", highlight=False)
        return 1
    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]", highlight=False)
        if parsed_args is not None and parsed_args.debug:
            console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
