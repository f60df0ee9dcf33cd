"""Git operations service"""

import git
from contextlib import contextmanager
from threading import Lock
from typing import List, Optional, Tuple

from gitsync.exceptions import (
    GitOperationError,
    NotAGitRepositoryError,
    RebaseConflictError,
    StashError,
)
from gitsync.logging_config import get_logger

logger = get_logger(__name__)


def find_repository_root(path: str) -> str:
    """Return the working tree root containing path.

    Raises:
        NotAGitRepositoryError: If path is not inside a git working tree
    """
    try:
        repo = git.Repo(path, search_parent_directories=True)
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
        raise NotAGitRepositoryError(path) from e
    try:
        if repo.working_tree_dir is None:
            raise NotAGitRepositoryError(path)
        return str(repo.working_tree_dir)
    finally:
        repo.close()


def is_git_repository(path: str) -> bool:
    """Check if path is inside a git working tree."""
    try:
        find_repository_root(path)
        return True
    except NotAGitRepositoryError:
        return False


def describe_git_error(error: git.exc.GitCommandError) -> str:
    """Build the diagnostic text for a failed git command."""
    stderr = (error.stderr or "").strip()
    stdout = (error.stdout or "").strip()
    # GitPython keeps the "stderr: '...'" wrapping on the attribute
    if stderr.startswith("stderr: "):
        stderr = stderr[len("stderr: "):].strip("'").strip()
    if stdout.startswith("stdout: "):
        stdout = stdout[len("stdout: "):].strip("'").strip()
    text = stderr or stdout
    if text:
        return text
    return f"exit code {error.status}"


class GitOperations:
    """Runs single git commands against one working directory.

    Every mutating call raises GitOperationError (or a subclass) carrying the
    raw diagnostic output; queries that have a natural "nothing" answer return it.
    """

    def __init__(self, repo_path: str):
        """Initialize the service.

        Args:
            repo_path: Path inside the git working tree
        """
        self.repo_path = find_repository_root(repo_path)
        self.in_git_operation = False  # Track if a checkout-mutating operation is running
        self._checkout_lock = Lock()  # One checkout-mutating operation at a time

        logger.info(f"Git operations initialized for {self.repo_path}")

    def _get_repo(self) -> git.Repo:
        """Get a thread-safe git.Repo instance.

        Creates a new repo instance for each call; workflow steps run on a
        worker thread while the UI thread keeps querying.
        """
        repo = git.Repo(self.repo_path)
        # Never block on a credential prompt
        repo.git.update_environment(GIT_TERMINAL_PROMPT="0")
        return repo

    @contextmanager
    def _exclusive(self):
        """Serialize operations that mutate the shared checkout."""
        with self._checkout_lock:
            self.in_git_operation = True
            try:
                yield
            finally:
                self.in_git_operation = False

    def _git(self, command: str, *args: str, operation: Optional[str] = None,
             branch: Optional[str] = None) -> str:
        """Run one git command and return its stdout.

        Raises:
            GitOperationError: If the command exits non-zero
        """
        operation = operation or command
        logger.debug(f"git {command} {' '.join(args)}")
        repo = self._get_repo()
        try:
            return getattr(repo.git, command.replace("-", "_"))(*args)
        except git.exc.GitCommandError as e:
            message = describe_git_error(e)
            logger.debug(f"git {command} failed: {message}")
            raise GitOperationError(operation, branch, message) from e
        finally:
            repo.close()

    # Queries

    def get_current_branch(self) -> Optional[str]:
        """Return the checked-out branch name, or None on a detached HEAD."""
        name = self._git("branch", "--show-current", operation="current_branch").strip()
        return name or None

    def list_local_branches(self) -> List[str]:
        """Return all local branch names, sorted by ref name."""
        output = self._git("branch", "--format=%(refname:short)", operation="list_branches")
        return [line.strip() for line in output.splitlines() if line.strip()]

    def list_remotes(self) -> List[str]:
        """Return the configured remote names."""
        output = self._git("remote", operation="list_remotes")
        return [line.strip() for line in output.splitlines() if line.strip()]

    def get_remote_head_branch(self, remote: str) -> Optional[str]:
        """Return the default branch a remote advertises, if it can be determined."""
        try:
            ref = self._git(
                "symbolic-ref", "--short", f"refs/remotes/{remote}/HEAD", operation="remote_head"
            ).strip()
            prefix = f"{remote}/"
            if ref.startswith(prefix):
                return ref[len(prefix):]
        except GitOperationError:
            logger.debug(f"No local HEAD ref for {remote}, asking the remote")

        try:
            output = self._git("remote", "show", remote, operation="remote_head")
        except GitOperationError as e:
            logger.debug(f"Could not describe remote {remote}: {e}")
            return None

        for line in output.splitlines():
            line = line.strip()
            if line.startswith("HEAD branch:"):
                branch = line.split(":", 1)[1].strip()
                if branch and branch != "(unknown)":
                    return branch
        return None

    def get_last_commit_relative(self, branch_name: str) -> str:
        """Return the human-relative age of a branch's last commit."""
        return self._git(
            "log", "-1", "--format=%ar", branch_name, "--", operation="last_commit", branch=branch_name
        ).strip()

    def get_ahead_behind(self, base: str, branch_name: str) -> Tuple[int, int]:
        """Count commits only on branch (ahead) and only on base (behind).

        Returns:
            Tuple of (ahead, behind)
        """
        output = self._git(
            "rev-list", "--left-right", "--count", f"{base}...{branch_name}", "--",
            operation="ahead_behind", branch=branch_name,
        )
        parts = output.split()
        if len(parts) != 2:
            raise GitOperationError("ahead_behind", branch_name, f"unexpected output: {output!r}")
        try:
            behind, ahead = int(parts[0]), int(parts[1])
        except ValueError as e:
            raise GitOperationError("ahead_behind", branch_name, f"unexpected output: {output!r}") from e
        return ahead, behind

    def count_local_only_commits(self, branch_name: str, other_ref: str) -> int:
        """Count commits reachable from branch_name but not from other_ref."""
        output = self._git(
            "rev-list", "--count", branch_name, f"^{other_ref}", "--",
            operation="check_divergence", branch=branch_name,
        )
        try:
            return int(output.strip())
        except ValueError as e:
            raise GitOperationError("check_divergence", branch_name, f"unexpected output: {output!r}") from e

    def has_uncommitted_changes(self) -> bool:
        """Check for staged or unstaged changes to tracked files (untracked files are ignored)."""
        status = self._git("status", "--porcelain", "--untracked-files=no", operation="status")
        return bool(status.strip())

    # Remote operations

    def fetch(self, remote: str, branch_name: str) -> None:
        """Fetch one branch from a remote into its remote-tracking ref."""
        self._git("fetch", remote, branch_name, operation="fetch", branch=f"{remote}/{branch_name}")
        logger.debug(f"Fetched {remote}/{branch_name}")

    def push_with_lease(self, remote: str, branch_name: str) -> None:
        """Force-push a branch, refusing if the remote ref moved since last fetched."""
        self._git("push", remote, branch_name, "--force-with-lease", operation="push", branch=branch_name)
        logger.debug(f"Pushed {branch_name} to {remote}")

    def delete_remote_branch(self, remote: str, branch_name: str) -> None:
        """Delete a branch on a remote."""
        self._git("push", remote, "--delete", branch_name, operation="delete_remote", branch=branch_name)
        logger.debug(f"Deleted {remote}/{branch_name}")

    # Checkout-mutating operations

    def checkout(self, branch_name: str) -> None:
        """Check out a local branch."""
        with self._exclusive():
            self._git("checkout", branch_name, operation="checkout", branch=branch_name)

    def reset_hard(self, ref: str) -> None:
        """Hard-reset the checked-out branch to ref."""
        with self._exclusive():
            self._git("reset", "--hard", ref, operation="reset", branch=ref)

    def rebase(self, onto: str, branch_name: Optional[str] = None) -> None:
        """Rebase the checked-out branch onto another branch.

        A failed rebase is aborted before raising, leaving the branch as it was.

        Raises:
            RebaseConflictError: If the rebase could not complete
        """
        with self._exclusive():
            try:
                self._git("rebase", onto, operation="rebase", branch=branch_name)
            except GitOperationError as e:
                try:
                    self._git("rebase", "--abort", operation="rebase_abort", branch=branch_name)
                except GitOperationError as abort_error:
                    logger.error(f"Could not abort rebase of {branch_name}: {abort_error}")
                raise RebaseConflictError(branch_name or "HEAD", onto, e.message) from e

    def delete_local_branch(self, branch_name: str) -> None:
        """Delete a local branch; refuses branches with unmerged commits."""
        with self._exclusive():
            self._git("branch", "-d", branch_name, operation="delete_local", branch=branch_name)
        logger.debug(f"Deleted local branch {branch_name}")

    def stash_changes(self, message: str) -> None:
        """Stash uncommitted changes to tracked files."""
        with self._exclusive():
            try:
                self._git("stash", "push", "-m", message, operation="stash")
            except GitOperationError as e:
                raise StashError("stash", e.message) from e
        logger.debug("Stashed uncommitted changes")

    def stash_pop(self) -> None:
        """Restore the most recent stash."""
        with self._exclusive():
            try:
                self._git("stash", "pop", operation="stash_pop")
            except GitOperationError as e:
                raise StashError("stash_pop", e.message) from e
        logger.debug("Restored stashed changes")

    # Branch descriptions

    def get_branch_description(self, branch_name: str) -> str:
        """Return branch.<name>.description, or an empty string when unset."""
        try:
            return self._git(
                "config", "--get", f"branch.{branch_name}.description",
                operation="get_description", branch=branch_name,
            ).strip()
        except GitOperationError:
            # git config exits 1 for a missing key
            return ""

    def set_branch_description(self, branch_name: str, description: str) -> None:
        """Store branch.<name>.description."""
        self._git(
            "config", f"branch.{branch_name}.description", description,
            operation="set_description", branch=branch_name,
        )

    def unset_branch_description(self, branch_name: str) -> None:
        """Remove branch.<name>.description if present."""
        if not self.get_branch_description(branch_name):
            return
        self._git(
            "config", "--unset", f"branch.{branch_name}.description",
            operation="unset_description", branch=branch_name,
        )
