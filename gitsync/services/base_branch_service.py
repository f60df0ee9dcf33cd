"""Service that brings the local base branch in line with upstream"""

from typing import TYPE_CHECKING

from gitsync.exceptions import BranchDivergedError, GitOperationError
from gitsync.logging_config import get_logger

if TYPE_CHECKING:
    from gitsync.config import Config
    from gitsync.services.git.operations import GitOperations

logger = get_logger(__name__)


class BaseBranchGuard:
    """Fetches upstream and resets the base branch, refusing to drop local-only commits."""

    def __init__(self, operations: "GitOperations", config: "Config"):
        self.operations = operations
        self.config = config

    def fetch(self) -> None:
        """Fetch the base branch from the upstream remote.

        Raises:
            GitOperationError: If the fetch fails
        """
        self.operations.fetch(self.config.upstream_remote, self.config.base_branch)

    def check_divergence(self) -> None:
        """Fail if the local base has commits missing from its upstream counterpart.

        Raises:
            BranchDivergedError: If local-only commits exist
        """
        base = self.config.base_branch
        upstream_ref = self.config.upstream_base_ref
        try:
            local_only = self.operations.count_local_only_commits(base, upstream_ref)
        except GitOperationError as e:
            raise GitOperationError(
                "check_divergence", base, f"could not check for branch divergence: {e.message}"
            ) from e
        if local_only:
            logger.error(f"{base} has {local_only} commit(s) not in {upstream_ref}")
            raise BranchDivergedError(base, upstream_ref)

    def prepare_base(self) -> None:
        """Fetch, verify, then hard-reset the base to upstream and push it to origin.

        No step runs after a failing one; a divergence leaves the base untouched.

        Raises:
            GitOperationError: Any failure, all of them fatal for the workflow
        """
        base = self.config.base_branch
        upstream_ref = self.config.upstream_base_ref

        logger.info(f"Preparing base branch {base} from {upstream_ref}")
        self.fetch()
        self.check_divergence()
        self.operations.checkout(base)
        self.operations.reset_hard(upstream_ref)
        self.operations.push_with_lease(self.config.origin_remote, base)
        logger.info(f"Base branch {base} reset to {upstream_ref} and pushed to {self.config.origin_remote}")
