"""Shared constants for gitsync."""

from typing import Dict, Tuple

CONFIG_FILE_NAME = ".gitsync.yaml"

# Tried in order when the upstream remote does not advertise a HEAD branch
BASE_BRANCH_CANDIDATES: Tuple[str, ...] = ("main", "master", "dev-integration", "develop")

PREFERRED_UPSTREAM_REMOTE = "upstream"
DEFAULT_ORIGIN_REMOTE = "origin"

STASH_MESSAGE = "gitsync-autostash"

# Reason recorded when a push is rejected
PUSH_FAILED_REASON = "push failed"


# Symbol constants
SYMBOL_STATUS = "●"
SYMBOL_SELECTED = "[✓]"
SYMBOL_UNSELECTED = "[ ]"
SYMBOL_CURSOR = "❯ "
SYMBOL_DONE = "✓"
SYMBOL_FAILED = "✗"
SYMBOL_PENDING = "○"
SYMBOL_BEHIND = "↓"
SYMBOL_AHEAD = "↑"


# Status colors (Rich color names), keyed by BranchStatus value
STATUS_COLORS: Dict[str, str] = {
    "ok": "green",
    "behind": "yellow",
    "conflict": "red",
    "updated": "green",
    "deleted": "bright_black",
}


# Key names as delivered by the presentation layer
KEY_UP = ("up", "k")
KEY_DOWN = ("down", "j")
KEY_TOGGLE = " "
KEY_SELECT_ALL = "a"
KEY_SELECT_NONE = "n"
KEY_DELETE_MODE = "d"
KEY_MANUAL_MODE = "m"
KEY_HELP = "h"
KEY_TAG = "t"
KEY_SEARCH = "/"
KEY_REFRESH = "r"
KEY_ENTER = "enter"
KEY_ESCAPE = "escape"
KEY_BACKSPACE = "backspace"
KEY_YES = ("y", "Y")
KEY_NO = ("n", "N")
KEY_QUIT = ("q", "ctrl+c")


HELP_TEXT = """[bold cyan]What is gitsync?[/bold cyan]
[dim]gitsync keeps several feature branches up to date with a shared base branch
(like 'main' or 'develop'). Select branches in the list and it rebases and pushes them for you.[/dim]

[bold cyan]Workflow:[/bold cyan]
[dim]1. On load, gitsync fetches the base branch from your upstream remote.
2. It lists your local branches with their ahead/behind counts relative to the base.
3. Select one or more branches and press enter.
4. The local base branch is hard-reset to the upstream version (never if it has local-only commits).
5. Each selected branch is rebased onto the base, one at a time, and pushed to your origin remote.[/dim]

[bold cyan]A note on safety:[/bold cyan]
[dim]Pushes use 'git push --force-with-lease', which refuses to overwrite a remote branch that
someone else has pushed to in the meantime. Rebase conflicts are aborted and reported, never resolved.[/dim]

[bold cyan]Commands:[/bold cyan]
  [bold magenta]↑/k[/bold magenta]: navigate up
  [bold magenta]↓/j[/bold magenta]: navigate down
  [bold magenta]space[/bold magenta]: select/deselect branch
  [bold magenta]a[/bold magenta]: select all visible branches
  [bold magenta]n[/bold magenta]: deselect all visible branches
  [bold magenta]t[/bold magenta]: add/edit a description for the branch under the cursor
  [bold magenta]/[/bold magenta]: search/filter branches by name or description
  [bold magenta]enter[/bold magenta]: update the selected branches
  [bold magenta]d[/bold magenta]: delete mode (press d again to delete the selection)
  [bold magenta]m[/bold magenta]: toggle manual mode (confirm before running)
  [bold magenta]r[/bold magenta]: refresh branch information
  [bold magenta]h[/bold magenta]: show this help
  [bold magenta]q/ctrl+c[/bold magenta]: quit

[bold cyan]Status indicators:[/bold cyan]
  [green]●[/green]: branch is up to date with the base branch
  [yellow]●[/yellow]: branch is behind the base branch
  [dim]Branches whose rebase hit a conflict keep their status and are listed in the run summary[/dim]

[bold cyan]Ahead/behind:[/bold cyan]
  [dim]↓<num>[/dim]: commits on the base branch missing from the branch
  [dim]↑<num>[/dim]: commits on the branch missing from the base branch"""
