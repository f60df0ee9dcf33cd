"""Branch description store backed by git config."""

from gitsync.logging_config import get_logger
from gitsync.services.git.operations import GitOperations

logger = get_logger(__name__)


class TagStore:
    """Free-text description per branch, kept in branch.<name>.description."""

    def __init__(self, operations: GitOperations):
        self.operations = operations

    def get(self, branch_name: str) -> str:
        return self.operations.get_branch_description(branch_name)

    def set(self, branch_name: str, description: str) -> str:
        """Store a description; an empty or blank one removes the tag.

        Returns:
            The description now stored ("" when removed)
        """
        description = description.strip()
        if description:
            self.operations.set_branch_description(branch_name, description)
            logger.info(f"Tagged {branch_name}: {description}")
        else:
            self.operations.unset_branch_description(branch_name)
            logger.info(f"Removed tag from {branch_name}")
        return description

    def remove(self, branch_name: str) -> None:
        self.set(branch_name, "")
