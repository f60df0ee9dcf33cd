"""Service for collecting branch information relative to the base branch"""

from typing import List, Sequence, TYPE_CHECKING

from gitsync.exceptions import GitOperationError
from gitsync.logging_config import get_logger
from gitsync.models.branch import Branch

if TYPE_CHECKING:
    from gitsync.services.git.operations import GitOperations
    from gitsync.services.git.tags import TagStore

logger = get_logger(__name__)


def is_excluded(branch_name: str, exclude_patterns: Sequence[str]) -> bool:
    """Check if a branch name contains any exclude pattern as a substring."""
    return any(pattern in branch_name for pattern in exclude_patterns)


class BranchInfoCollector:
    """Enumerates local branches and computes their state against the base."""

    def __init__(self, operations: "GitOperations", tag_store: "TagStore"):
        self.operations = operations
        self.tag_store = tag_store
        self.skipped: List[str] = []  # Branches dropped by the last collect()

    def collect(self, base: str, exclude_patterns: Sequence[str] = ()) -> List[Branch]:
        """Return every local branch except the base and excluded ones.

        Branches whose info query fails are left out of the result and
        recorded in self.skipped.

        Raises:
            GitOperationError: If the local branches cannot be listed at all
        """
        self.skipped = []
        branches: List[Branch] = []

        for name in self.operations.list_local_branches():
            if name == base:
                continue
            if is_excluded(name, exclude_patterns):
                logger.debug(f"Excluding {name} (matches exclude pattern)")
                continue

            try:
                branches.append(self._branch_info(name, base))
            except GitOperationError as e:
                logger.debug(f"Skipping {name}: {e}")
                self.skipped.append(name)

        if self.skipped:
            logger.warning(
                f"Skipped {len(self.skipped)} branch(es) whose info could not be read: "
                f"{', '.join(self.skipped)}"
            )
        logger.info(f"Collected {len(branches)} branch(es) against {base}")
        return branches

    def _branch_info(self, name: str, base: str) -> Branch:
        ahead, behind = self.operations.get_ahead_behind(base, name)
        return Branch.from_counts(
            name,
            ahead=ahead,
            behind=behind,
            last_commit_relative=self.operations.get_last_commit_relative(name),
            description=self.tag_store.get(name),
        )
