"""Formatting utilities for gitsync.

- branch: status dots, checkboxes, ahead/behind counts, search highlighting
- summary: command preview, result headline and remediation steps
"""

from .branch import (
    format_ahead_behind,
    format_checkbox,
    format_status,
    highlight_match,
)
from .summary import (
    build_command_preview,
    format_next_steps,
    format_result_headline,
)

__all__ = [
    # Branch
    "format_ahead_behind",
    "format_checkbox",
    "format_status",
    "highlight_match",
    # Summary
    "build_command_preview",
    "format_next_steps",
    "format_result_headline",
]
