"""Custom exceptions for gitsync"""

from typing import Optional


class GitSyncError(Exception):
    """Base exception for all gitsync errors."""
    pass


class NotAGitRepositoryError(GitSyncError):
    """Exception raised when the working directory is not inside a git repository."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Not a git repository: {path}")


class ConfigError(GitSyncError):
    """Exception raised for invalid or unreadable configuration."""
    pass


class WorkflowInProgressError(GitSyncError):
    """Exception raised when a second workflow is started while one is running."""

    def __init__(self):
        super().__init__("A workflow is already in progress")


class GitOperationError(GitSyncError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, branch: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.branch = branch
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if branch:
            error_msg += f" for branch '{branch}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class RebaseConflictError(GitOperationError):
    """Exception raised when a rebase stops on conflicts and has been aborted."""

    def __init__(self, branch: str, onto: str, message: Optional[str] = None):
        self.onto = onto
        super().__init__("rebase", branch, message or f"rebase conflict onto '{onto}'")


class BranchDivergedError(GitOperationError):
    """Exception raised when the local base branch has commits missing upstream."""

    def __init__(self, branch: str, upstream_ref: str):
        self.upstream_ref = upstream_ref
        super().__init__(
            "update_base",
            branch,
            f"local base branch '{branch}' has diverged from '{upstream_ref}'. "
            "Please resolve manually",
        )


class StashError(GitOperationError):
    """Exception raised when stashing or restoring working-tree changes fails."""

    def __init__(self, operation: str, message: Optional[str] = None):
        super().__init__(operation, message=message)
