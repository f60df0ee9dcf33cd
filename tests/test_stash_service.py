"""Tests for the stash guard"""
import pytest

from gitsync.constants import STASH_MESSAGE
from gitsync.exceptions import StashError
from gitsync.services.stash_service import StashGuard


class TestStashGuard:
    """Test at-most-once stash and restore."""

    def test_needs_stash(self, mock_operations):
        """Test the predicate follows has_uncommitted_changes."""
        guard = StashGuard(mock_operations)
        assert guard.needs_stash() is False
        mock_operations.has_uncommitted_changes.return_value = True
        assert guard.needs_stash() is True

    def test_stash_then_restore(self, mock_operations, operation_log):
        """Test a stash is popped exactly once."""
        guard = StashGuard(mock_operations)

        guard.stash()
        assert guard.stash_owed is True
        assert guard.restore() is True
        assert guard.restore() is False

        assert operation_log == [("stash_changes", STASH_MESSAGE), ("stash_pop",)]

    def test_double_stash_is_ignored(self, mock_operations, operation_log):
        """Test a second stash while one is owed does nothing."""
        guard = StashGuard(mock_operations)
        guard.stash()
        guard.stash()
        assert operation_log == [("stash_changes", STASH_MESSAGE)]

    def test_restore_without_stash(self, mock_operations, operation_log):
        """Test nothing is popped when nothing was stashed."""
        assert StashGuard(mock_operations).restore() is False
        assert operation_log == []

    def test_failed_stash_owes_nothing(self, mock_operations):
        """Test a failed stash does not record a restore."""
        mock_operations.stash_changes.side_effect = StashError("stash", "cannot stash")
        guard = StashGuard(mock_operations)

        with pytest.raises(StashError):
            guard.stash()
        assert guard.stash_owed is False

    def test_failed_pop_not_retried(self, mock_operations):
        """Test a failed pop raises once and is never attempted again."""
        mock_operations.stash_pop.side_effect = StashError("stash_pop", "conflict")
        guard = StashGuard(mock_operations)
        guard.stash()

        with pytest.raises(StashError):
            guard.restore()
        assert guard.restore() is False
        assert mock_operations.stash_pop.call_count == 1
