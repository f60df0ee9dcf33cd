"""Branch line formatting utilities."""

from rich.text import Text

from gitsync.models.branch import Branch, BranchStatus
from gitsync.constants import (
    STATUS_COLORS,
    SYMBOL_AHEAD,
    SYMBOL_BEHIND,
    SYMBOL_SELECTED,
    SYMBOL_STATUS,
    SYMBOL_UNSELECTED,
)


def format_status(status: BranchStatus) -> Text:
    """
    Format branch status as a coloured status dot.

    Args:
        status: Branch status enum value

    Returns:
        Rich Text with the status symbol
    """
    return Text(SYMBOL_STATUS, style=STATUS_COLORS.get(status.value, "green"))


def format_checkbox(selected: bool) -> Text:
    """Selection checkbox for a branch row."""
    if selected:
        return Text(SYMBOL_SELECTED, style="bold green")
    return Text(SYMBOL_UNSELECTED, style="dim")


def format_ahead_behind(branch: Branch) -> str:
    """
    Format ahead/behind counts.

    Args:
        branch: Branch with counts

    Returns:
        "↓<behind> ↑<ahead>", or an empty string when both are zero
    """
    if branch.behind == 0 and branch.ahead == 0:
        return ""
    return f"{SYMBOL_BEHIND}{branch.behind} {SYMBOL_AHEAD}{branch.ahead}"


def highlight_match(name: str, query: str, style: str = "bold yellow") -> Text:
    """
    Highlight the first case-insensitive occurrence of query in name.

    Args:
        name: Branch name
        query: Search query (may be empty)
        style: Style applied to the matched part

    Returns:
        Rich Text of the name
    """
    text = Text(name)
    if not query:
        return text
    idx = name.lower().find(query.lower())
    if idx >= 0:
        text.stylize(style, idx, idx + len(query))
    return text
