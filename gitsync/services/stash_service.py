"""Service guarding uncommitted changes around destructive workflows"""

from typing import TYPE_CHECKING

from gitsync.constants import STASH_MESSAGE
from gitsync.exceptions import StashError
from gitsync.logging_config import get_logger

if TYPE_CHECKING:
    from gitsync.services.git.operations import GitOperations

logger = get_logger(__name__)


class StashGuard:
    """Tracks the single stash a session may owe back to the working tree."""

    def __init__(self, operations: "GitOperations"):
        self.operations = operations
        self.stash_owed = False

    def needs_stash(self) -> bool:
        """Check for working-tree or index changes a checkout could clobber."""
        return self.operations.has_uncommitted_changes()

    def stash(self) -> None:
        """Stash changes and remember that a restore is owed.

        Raises:
            StashError: If the stash cannot be created
        """
        if self.stash_owed:
            logger.debug("Stash already owed, not stashing again")
            return
        self.operations.stash_changes(STASH_MESSAGE)
        self.stash_owed = True
        logger.info("Stashed uncommitted changes")

    def restore(self) -> bool:
        """Pop the owed stash, at most once.

        Returns:
            True if a stash was popped, False if nothing was owed

        Raises:
            StashError: If the pop fails; the stash is left in place and no longer owed
        """
        if not self.stash_owed:
            return False
        # Cleared first so a failed pop is never retried
        self.stash_owed = False
        try:
            self.operations.stash_pop()
        except StashError:
            logger.warning("Your changes are still in the stash. Run 'git stash pop' manually.")
            raise
        logger.info("Restored stashed changes")
        return True
