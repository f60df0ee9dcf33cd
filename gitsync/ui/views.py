"""Render functions for each session state.

Every function takes the session and returns a Rich renderable; nothing here
mutates state.
"""

from rich.text import Text

from gitsync.constants import (
    HELP_TEXT,
    SYMBOL_CURSOR,
    SYMBOL_DONE,
    SYMBOL_FAILED,
    SYMBOL_PENDING,
)
from gitsync.core.session import Session, SessionState
from gitsync.formatters import (
    format_ahead_behind,
    format_checkbox,
    format_next_steps,
    format_result_headline,
    format_status,
    highlight_match,
)
from gitsync.models.branch import Branch
from gitsync.models.workflow import WorkflowMode


def render_body(session: Session) -> Text:
    """Main area for the current state."""
    state = session.state
    if state is SessionState.LOADING:
        return render_loading(session)
    if state is SessionState.HELP:
        return Text.from_markup(HELP_TEXT)
    if state in (SessionState.CONFIRMING_UPDATE, SessionState.CONFIRMING_DELETE):
        return render_confirm(session)
    if state in (SessionState.UPDATING, SessionState.DELETING):
        return render_progress(session)
    if state is SessionState.DONE:
        return render_done(session)
    if state is SessionState.ERROR:
        return render_error(session)
    return render_branch_list(session)


def render_loading(session: Session) -> Text:
    text = Text()
    text.append(f"{session.message}{session.loading_dots}", style="bold cyan")
    return text


def _render_branch_row(session: Session, branch: Branch, is_cursor: bool) -> Text:
    row = Text()
    row.append(SYMBOL_CURSOR if is_cursor else " " * len(SYMBOL_CURSOR), style="bold magenta")
    row.append_text(format_checkbox(branch.selected))
    row.append(" ")
    row.append_text(format_status(branch.status))
    row.append(" ")

    name = highlight_match(branch.name, session.search_query)
    if session.delete_mode and branch.selected:
        name.stylize("bold red")
    elif is_cursor:
        name.stylize("bold")
    row.append_text(name)

    counts = format_ahead_behind(branch)
    if counts:
        row.append(f"  {counts}", style="dim")
    if branch.last_commit_relative:
        row.append(f"  {branch.last_commit_relative}", style="dim")
    if branch.description:
        row.append(f"  {branch.description}", style="italic cyan")
    return row


def render_branch_list(session: Session) -> Text:
    """Branch list with cursor, selection, search and tag prompts."""
    text = Text()
    config = session.config
    if config is not None:
        text.append("Base: ", style="dim")
        text.append(config.base_branch, style="bold")
        text.append(f"  (upstream: {config.upstream_base_ref})", style="dim")
        if session.current_branch:
            text.append("  On: ", style="dim")
            text.append(session.current_branch, style="bold")
        text.append("\n\n")

    if session.delete_mode:
        text.append("DELETE MODE\n\n", style="bold red")

    branches = session.filtered_branches
    if not session.branches:
        text.append("No branches to sync.\n", style="dim")
    elif not branches:
        text.append(f"No branches match '{session.search_query}'.\n", style="dim")

    for i, branch in enumerate(branches):
        text.append_text(_render_branch_row(session, branch, i == session.cursor))
        text.append("\n")

    if session.state is SessionState.SEARCHING:
        text.append("\nSearch: ", style="bold yellow")
        text.append(session.search_query)
        text.append("█", style="blink")
    elif session.search_query:
        text.append(f"\nFilter: {session.search_query}  (esc to clear)", style="dim")

    if session.state is SessionState.TAGGING:
        text.append(f"\nTag for {session.tag_target}: ", style="bold cyan")
        text.append(session.tag_input)
        text.append("█", style="blink")
        text.append("\nenter to save (empty removes the tag), esc to cancel", style="dim")

    if session.state is SessionState.CONFIRMING_STASH:
        text.append(f"\n{session.message}", style="bold yellow")

    return text


def _render_commands(session: Session) -> Text:
    text = Text()
    if not session.command_preview:
        return text
    text.append("\nCommands:\n", style="bold")
    for line in session.command_preview:
        text.append(f"  {line}\n", style="dim")
    return text


def render_confirm(session: Session) -> Text:
    delete = session.state is SessionState.CONFIRMING_DELETE
    text = Text()
    text.append(
        "Branches to delete:\n" if delete else "Branches to update:\n",
        style="bold red" if delete else "bold",
    )
    for branch in session.selected_branches:
        text.append(f"  {branch.name}\n")
    text.append_text(_render_commands(session))
    text.append(f"\n{session.message}", style="bold yellow")
    return text


def render_progress(session: Session) -> Text:
    """Per-branch progress of the running workflow."""
    workflow = session.workflow
    result = session.result
    counts = workflow.status_counts()
    verb = "Updating" if session.active_mode is WorkflowMode.UPDATE else "Deleting"

    text = Text()
    text.append(f"{verb} branches ({counts['done']}/{counts['total']})\n\n", style="bold cyan")

    failed = {name for name, _ in result.failures} if result else set()
    succeeded = set(result.succeeded) if result else set()
    current = workflow.current_branch

    for branch in workflow.queue:
        if branch.name in succeeded:
            text.append(f"  {SYMBOL_DONE} ", style="green")
        elif branch.name in failed:
            text.append(f"  {SYMBOL_FAILED} ", style="red")
        elif current is not None and branch.name == current.name:
            text.append(f"  {SYMBOL_CURSOR}", style="bold yellow")
        else:
            text.append(f"  {SYMBOL_PENDING} ", style="dim")
        text.append(f"{branch.name}\n")

    text.append_text(_render_commands(session))
    text.append("\nq quits after the current branch; finished branches are not rolled back.", style="dim")
    return text


def render_done(session: Session) -> Text:
    """Summary of a finished workflow with remediation steps."""
    result = session.result
    text = Text()
    if result is None:
        text.append("Done.\n", style="bold green")
        return text

    text.append(format_result_headline(result) + "\n\n", style="bold green" if not result.failures else "bold yellow")

    for name in result.succeeded:
        text.append(f"  {SYMBOL_DONE} {name}\n", style="green")
    failures = result.format_failures()
    if failures:
        text.append("\nFailed:\n", style="bold red")
        for line in failures:
            text.append(f"  {SYMBOL_FAILED} {line}\n", style="red")
        steps = format_next_steps(result, session.config)
        if steps:
            text.append("\nNext steps:\n", style="bold")
            for step in steps:
                text.append(f"  {step}\n")

    for warning in result.warnings:
        text.append(f"\n{warning}", style="yellow")
    if session.stash_restored:
        text.append("\nRestored your stashed changes.", style="cyan")

    text.append("\n\nPress any key to continue, q to quit.", style="dim")
    return text


def render_error(session: Session) -> Text:
    text = Text()
    text.append("Error\n\n", style="bold red")
    text.append(session.error, style="red")

    result = session.result
    if result is not None:
        if result.unprocessed:
            text.append(f"\n\nNot attempted: {', '.join(result.unprocessed)}", style="yellow")
        for line in result.format_failures():
            text.append(f"\n  {SYMBOL_FAILED} {line}", style="red")
    if session.stash_restored:
        text.append("\n\nRestored your stashed changes.", style="cyan")

    text.append("\n\nPress any key to continue, q to quit.", style="dim")
    return text


def render_status_bar(session: Session) -> Text:
    """Mode flags, counters and the last message."""
    text = Text()
    if session.manual_mode:
        text.append("[manual] ", style="bold yellow")
    if session.delete_mode:
        text.append("[delete] ", style="bold red")

    if session.loaded:
        selected = len(session.selected_branches)
        text.append(f"{len(session.branches)} branches")
        if selected:
            text.append(f", {selected} selected", style="bold")
        if session.skipped_count:
            text.append(f", {session.skipped_count} skipped (see log)", style="yellow")

    if session.message and session.state not in (SessionState.LOADING, SessionState.CONFIRMING_STASH,
                                                 SessionState.CONFIRMING_UPDATE, SessionState.CONFIRMING_DELETE):
        text.append(f"  {session.message}", style="cyan")

    if session.state is SessionState.BROWSING:
        text.append("  h for help", style="dim")
    return text
