"""Core functionality for gitsync"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Union
from pathlib import Path

from gitsync.config import Config, load_config
from gitsync.exceptions import GitOperationError, GitSyncError, StashError
from gitsync.logging_config import get_logger
from gitsync.models.branch import Branch
from gitsync.models.workflow import BranchOutcome, SyncResult, WorkflowMode
from gitsync.services.base_branch_service import BaseBranchGuard
from gitsync.services.branch_info_service import BranchInfoCollector
from gitsync.services.git.operations import GitOperations
from gitsync.services.git.tags import TagStore
from gitsync.services.stash_service import StashGuard
from gitsync.core.workflow import SyncWorkflow

logger = get_logger(__name__)


@dataclass
class LoadedRepository:
    """Everything the session needs after a successful load."""

    config: Config
    branches: List[Branch]
    current_branch: Optional[str]
    skipped: List[str] = field(default_factory=list)


class SyncKeeper:
    """Wires the repository services together for one working directory."""

    def __init__(
        self,
        repo_path: str,
        config: Optional[Config] = None,
        config_path: Optional[Union[str, Path]] = None,
        operations: Optional[GitOperations] = None,
    ):
        """Initialize SyncKeeper.

        Args:
            repo_path: Path inside the git working tree
            config: Ready configuration; loaded lazily from config_path when None
            config_path: YAML file overriding auto-detected values
            operations: Repository operations provider (injected in tests)

        Raises:
            NotAGitRepositoryError: If repo_path is not inside a git repository
        """
        self.operations = operations or GitOperations(repo_path)
        self.repo_path = self.operations.repo_path
        self.config_path = config_path
        self.tag_store = TagStore(self.operations)
        self.collector = BranchInfoCollector(self.operations, self.tag_store)
        self.stash_guard = StashGuard(self.operations)
        self.config: Optional[Config] = None
        self.base_guard: Optional[BaseBranchGuard] = None
        self.workflow: Optional[SyncWorkflow] = None
        if config is not None:
            self._configure(config)

    def _configure(self, config: Config) -> None:
        self.config = config
        self.base_guard = BaseBranchGuard(self.operations, config)
        self.workflow = SyncWorkflow(self.operations, config, self.base_guard)

    def ensure_config(self) -> Config:
        """Load the configuration once per run."""
        if self.config is None:
            self._configure(load_config(self.operations, self.config_path))
        return self.config

    def load(self) -> LoadedRepository:
        """Load configuration, fetch upstream, and collect branch information.

        Raises:
            GitSyncError: Any failure; all of them are fatal for loading
        """
        config = self.ensure_config()

        try:
            self.base_guard.fetch()
        except GitOperationError as e:
            raise GitOperationError(
                "fetch",
                message=f"failed to fetch upstream '{config.upstream_base_ref}': {e.message}",
            ) from e

        current = self.operations.get_current_branch()
        branches = self.collect()
        return LoadedRepository(
            config=config,
            branches=branches,
            current_branch=current,
            skipped=list(self.collector.skipped),
        )

    def collect(self) -> List[Branch]:
        """Collect branch information without fetching."""
        config = self.ensure_config()
        return self.collector.collect(config.base_branch, config.exclude_patterns)

    def return_to_branch(self, branch_name: Optional[str], result: Optional[SyncResult] = None) -> Optional[str]:
        """Check out branch_name again after an update run moved HEAD.

        Returns:
            A warning message if the checkout could not be restored, else None
        """
        if not branch_name:
            return None
        try:
            if self.operations.get_current_branch() == branch_name:
                return None
            if branch_name not in self.operations.list_local_branches():
                return None
            self.operations.checkout(branch_name)
            logger.info(f"Returned to {branch_name}")
            return None
        except GitOperationError as e:
            warning = f"Could not return to {branch_name}: {e.message}"
            logger.warning(warning)
            if result is not None:
                result.warnings.append(warning)
            return warning

    def finish_run(self, original_branch: Optional[str], result: Optional[SyncResult]) -> bool:
        """Put the working tree back the way the run found it.

        Returns to the original branch after an update run, then pops any owed stash.

        Returns:
            True if a stash was restored

        Raises:
            StashError: If the owed stash could not be popped
        """
        if result is not None and result.mode is WorkflowMode.UPDATE:
            self.return_to_branch(original_branch, result)
        return self.stash_guard.restore()

    def run_workflow(
        self,
        branch_names: Sequence[str],
        mode: WorkflowMode,
        stash: bool = False,
        on_outcome: Optional[Callable[[BranchOutcome], None]] = None,
    ) -> SyncResult:
        """Run a whole workflow synchronously over the named branches.

        Raises:
            GitSyncError: Unknown branch names, uncommitted changes without stash,
                or a stash failure
        """
        branches = {branch.name: branch for branch in self.collect()}
        unknown = [name for name in branch_names if name not in branches]
        if unknown:
            raise GitSyncError(f"Unknown or excluded branch(es): {', '.join(unknown)}")

        queue = [branches[name] for name in dict.fromkeys(branch_names)]
        for branch in queue:
            branch.selected = True

        if self.stash_guard.needs_stash():
            if not stash:
                raise GitSyncError("You have uncommitted changes. Commit them or pass --stash")
            self.stash_guard.stash()

        original_branch = self.operations.get_current_branch()
        result = None
        try:
            self.workflow.start(queue, mode, stash_created=self.stash_guard.stash_owed)
            result = self.workflow.run(on_outcome)
        finally:
            if self.workflow.is_running:
                self.workflow.abort("run interrupted")
            try:
                restored = self.finish_run(original_branch, result or self.workflow.result)
                if result is not None:
                    result.stash_restored = restored
            except StashError as e:
                if result is None:
                    raise
                result.warnings.append(str(e))
            self.workflow.reset()
        return result
