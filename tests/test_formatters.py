"""Tests for formatting utilities"""
from gitsync.config import Config
from gitsync.constants import HELP_TEXT, STATUS_COLORS, SYMBOL_STATUS
from gitsync.formatters import (
    build_command_preview,
    format_ahead_behind,
    format_next_steps,
    format_result_headline,
    highlight_match,
)
from gitsync.models.branch import Branch
from gitsync.models.workflow import SyncResult, WorkflowMode


CONFIG = Config(base_branch="main", upstream_remote="upstream", origin_remote="fork")


class TestCommandPreview:
    """Test the git command preview."""

    def test_update_preview(self):
        """Test the base preparation comes first, then each branch in order."""
        assert build_command_preview(CONFIG, ["feature-a", "feature-b"], WorkflowMode.UPDATE) == [
            "git fetch upstream main",
            "git checkout main",
            "git reset --hard upstream/main",
            "git push fork main --force-with-lease",
            "git checkout feature-a",
            "git rebase main",
            "git push fork feature-a --force-with-lease",
            "git checkout feature-b",
            "git rebase main",
            "git push fork feature-b --force-with-lease",
        ]

    def test_delete_preview(self):
        """Test delete lists local then remote deletion per branch."""
        assert build_command_preview(CONFIG, ["old"], WorkflowMode.DELETE) == [
            "git branch -d old",
            "git push fork --delete old",
        ]


class TestSummary:
    """Test result summaries and remediation steps."""

    def test_headline(self):
        """Test the headline counts successes, failures and skipped branches."""
        result = SyncResult(mode=WorkflowMode.UPDATE, queue=("a", "b", "c"))
        result.success_count = 1
        result.failures = [("b", "rebase conflict with main")]
        assert format_result_headline(result) == "1 updated, 1 failed, 1 not attempted"

    def test_no_steps_without_failures(self):
        """Test nothing to remediate after a clean run."""
        assert format_next_steps(SyncResult(mode=WorkflowMode.UPDATE), CONFIG) == []

    def test_update_steps_name_base_and_origin(self):
        """Test update remediation mentions the base branch and origin remote."""
        result = SyncResult(mode=WorkflowMode.UPDATE, failures=[("b", "push failed")])
        steps = format_next_steps(result, CONFIG)
        assert "3. Run: git rebase main" in steps
        assert any("git push fork" in step for step in steps)

    def test_delete_steps(self):
        """Test delete remediation is a manual delete."""
        result = SyncResult(mode=WorkflowMode.DELETE, failures=[("b", "not fully merged")])
        assert format_next_steps(result, CONFIG) == ["1. Manually delete the failed branches if desired."]


class TestBranchFormatting:
    """Test branch row helpers."""

    def test_ahead_behind(self):
        """Test behind comes first and zero counts are hidden."""
        assert format_ahead_behind(Branch("x", ahead=1, behind=3)) == "↓3 ↑1"
        assert format_ahead_behind(Branch("x")) == ""

    def test_highlight_match(self):
        """Test the matched substring is styled case-insensitively."""
        text = highlight_match("feature-Login", "login")
        assert text.plain == "feature-Login"
        assert [(span.start, span.end) for span in text.spans] == [(8, 13)]

    def test_highlight_without_query(self):
        """Test no styling without a query."""
        assert highlight_match("feature", "").spans == []


class TestHelpText:
    """Test the help legend."""

    def test_legend_has_no_conflict_dot(self):
        """Test conflicts are described as summary entries, not as a status colour."""
        assert f"[{STATUS_COLORS['conflict']}]{SYMBOL_STATUS}" not in HELP_TEXT
        assert "listed in the run summary" in HELP_TEXT
