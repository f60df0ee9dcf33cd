"""Workflow summary and command preview formatting."""

from typing import List, Sequence

from gitsync.config import Config
from gitsync.models.workflow import SyncResult, WorkflowMode


def build_command_preview(config: Config, branch_names: Sequence[str], mode: WorkflowMode) -> List[str]:
    """
    List the git commands a workflow will run, in order.

    Args:
        config: Run configuration
        branch_names: Queued branch names
        mode: Update or delete

    Returns:
        One command line per entry
    """
    origin = config.origin_remote
    if mode is WorkflowMode.DELETE:
        commands = []
        for name in branch_names:
            commands.append(f"git branch -d {name}")
            commands.append(f"git push {origin} --delete {name}")
        return commands

    base = config.base_branch
    commands = [
        f"git fetch {config.upstream_remote} {base}",
        f"git checkout {base}",
        f"git reset --hard {config.upstream_base_ref}",
        f"git push {origin} {base} --force-with-lease",
    ]
    for name in branch_names:
        commands.append(f"git checkout {name}")
        commands.append(f"git rebase {base}")
        commands.append(f"git push {origin} {name} --force-with-lease")
    return commands


def format_next_steps(result: SyncResult, config: Config) -> List[str]:
    """
    Manual remediation steps for failed branches.

    Args:
        result: Finished workflow result
        config: Run configuration

    Returns:
        Numbered steps, empty when nothing failed
    """
    if not result.failures:
        return []
    if result.mode is WorkflowMode.DELETE:
        return ["1. Manually delete the failed branches if desired."]
    return [
        "1. Checkout the failed branch",
        "2. Resolve conflicts manually",
        f"3. Run: git rebase {config.base_branch}",
        f"4. Push: git push {config.origin_remote} <branch> --force-with-lease",
    ]


def format_result_headline(result: SyncResult) -> str:
    """One-line summary of a finished run."""
    verb = "updated" if result.mode is WorkflowMode.UPDATE else "deleted"
    headline = f"{result.success_count} {verb}, {len(result.failures)} failed"
    if result.unprocessed:
        headline += f", {len(result.unprocessed)} not attempted"
    return headline
