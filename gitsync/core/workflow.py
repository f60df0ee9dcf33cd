"""Sequential update/delete pipeline over a queue of branches"""

from threading import Lock
from typing import Callable, Dict, Optional, Sequence, TYPE_CHECKING

from gitsync.constants import PUSH_FAILED_REASON
from gitsync.exceptions import GitOperationError, GitSyncError, RebaseConflictError, WorkflowInProgressError
from gitsync.logging_config import get_logger
from gitsync.models.branch import Branch, BranchStatus
from gitsync.models.workflow import BranchOutcome, SyncResult, WorkflowMode, WorkflowState

if TYPE_CHECKING:
    from gitsync.config import Config
    from gitsync.services.base_branch_service import BaseBranchGuard
    from gitsync.services.git.operations import GitOperations

logger = get_logger(__name__)


class SyncWorkflow:
    """Processes queued branches one at a time, in queue order.

    The driver never loops on its own in interactive use: the caller runs
    run_next() (typically on a worker thread) and feeds the resulting
    BranchOutcome back through complete(). Only one step may be in flight,
    because every step mutates the single shared checkout.
    """

    def __init__(self, operations: "GitOperations", config: "Config", base_guard: "BaseBranchGuard"):
        self.operations = operations
        self.config = config
        self.base_guard = base_guard
        self.state = WorkflowState.IDLE
        self.mode: Optional[WorkflowMode] = None
        self.queue: Sequence[Branch] = ()
        self.index = 0
        self.result: Optional[SyncResult] = None
        self._step_in_flight = False
        self._lock = Lock()

    @property
    def is_running(self) -> bool:
        return self.state is WorkflowState.RUNNING

    @property
    def current_branch(self) -> Optional[Branch]:
        """Branch the next step will act on, None when not running."""
        if not self.is_running or self.index >= len(self.queue):
            return None
        return self.queue[self.index]

    def start(self, queue: Sequence[Branch], mode: WorkflowMode, stash_created: bool = False) -> SyncResult:
        """Begin a run over a fixed snapshot of the queue.

        Raises:
            WorkflowInProgressError: If a run is already in progress
            ValueError: If the queue is empty
        """
        with self._lock:
            if self.is_running:
                raise WorkflowInProgressError()
            if not queue:
                raise ValueError("Cannot start a workflow with an empty queue")

            self.queue = tuple(queue)
            self.mode = mode
            self.index = 0
            self.result = SyncResult(
                mode=mode,
                queue=tuple(branch.name for branch in self.queue),
                stash_created=stash_created,
            )
            self.state = WorkflowState.RUNNING

        logger.info(f"Starting {mode.value} of {len(self.queue)} branch(es): {', '.join(self.result.queue)}")
        return self.result

    def run_next(self) -> BranchOutcome:
        """Run the operation for the branch at the current queue position.

        Never raises for per-branch failures; they come back as outcomes.

        Raises:
            WorkflowInProgressError: If the previous step has not been completed yet
            RuntimeError: If no workflow is running
        """
        with self._lock:
            if not self.is_running:
                raise RuntimeError("No workflow is running")
            if self._step_in_flight:
                raise WorkflowInProgressError()
            self._step_in_flight = True
            branch = self.queue[self.index]
            first = self.index == 0

        logger.debug(f"[{self.index + 1}/{len(self.queue)}] {self.mode.value} {branch.name}")
        if self.mode is WorkflowMode.UPDATE:
            return self._update_branch(branch.name, first)
        return self._delete_branch(branch.name)

    def complete(self, outcome: BranchOutcome) -> bool:
        """Record the outcome of the in-flight step and advance.

        Returns:
            True once the workflow has reached Done
        """
        with self._lock:
            if not self.is_running:
                raise RuntimeError("No workflow is running")
            branch = self.queue[self.index]
            if outcome.branch != branch.name:
                raise ValueError(f"Outcome for {outcome.branch} does not match queued branch {branch.name}")

            self._step_in_flight = False
            self.result.record(outcome)
            self._apply_status(branch, outcome)
            self.index += 1

            if outcome.fatal:
                logger.error(
                    f"Aborting {self.mode.value}: base branch preparation failed, "
                    f"{len(self.result.unprocessed)} branch(es) not attempted"
                )
                self.state = WorkflowState.DONE
            elif self.index >= len(self.queue):
                self.state = WorkflowState.DONE

            if self.state is WorkflowState.DONE:
                logger.info(
                    f"Finished {self.mode.value}: {self.result.success_count} succeeded, "
                    f"{len(self.result.failures)} failed"
                )
            return self.state is WorkflowState.DONE

    def abort(self, reason: str) -> Optional[SyncResult]:
        """Stop a running workflow after an unexpected error; the in-flight step is abandoned."""
        with self._lock:
            if not self.is_running:
                return self.result
            self._step_in_flight = False
            self.result.fatal_error = reason
            self.state = WorkflowState.DONE
        logger.error(f"Workflow aborted: {reason}")
        return self.result

    def run(self, on_outcome: Optional[Callable[[BranchOutcome], None]] = None) -> SyncResult:
        """Drive the whole queue synchronously (headless use)."""
        while self.is_running:
            outcome = self.run_next()
            if on_outcome:
                on_outcome(outcome)
            self.complete(outcome)
        return self.result

    def reset(self) -> None:
        """Return to Idle, discarding the finished run."""
        with self._lock:
            if self.is_running:
                raise WorkflowInProgressError()
            self.state = WorkflowState.IDLE
            self.mode = None
            self.queue = ()
            self.index = 0
            self.result = None

    def _apply_status(self, branch: Branch, outcome: BranchOutcome) -> None:
        if outcome.success:
            branch.status = BranchStatus.UPDATED if self.mode is WorkflowMode.UPDATE else BranchStatus.DELETED
            # Without fresh counts both stay as loaded until the next refresh
            if outcome.counts is not None:
                branch.ahead, branch.behind = outcome.counts
            logger.info(f"{branch.name}: {branch.status.value}")
        else:
            # Failed branches keep their load-time status
            logger.warning(f"{branch.name}: {outcome.reason}")

    def _update_branch(self, name: str, first: bool) -> BranchOutcome:
        base = self.config.base_branch

        if first:
            try:
                self.base_guard.prepare_base()
            except GitSyncError as e:
                return BranchOutcome(name, success=False, reason=str(e), fatal=True)

        try:
            self.operations.checkout(name)
        except GitOperationError as e:
            return BranchOutcome(name, success=False, reason=f"checkout failed: {e.message}")

        try:
            self.operations.rebase(base, name)
        except RebaseConflictError:
            return BranchOutcome(name, success=False, reason=f"rebase conflict with {base}", conflict=True)

        try:
            self.operations.push_with_lease(self.config.origin_remote, name)
        except GitOperationError as e:
            logger.debug(f"Push of {name} rejected: {e.message}")
            return BranchOutcome(name, success=False, reason=PUSH_FAILED_REASON)

        try:
            counts = self.operations.get_ahead_behind(base, name)
        except GitOperationError as e:
            logger.debug(f"Could not recount {name} after update: {e.message}")
            counts = None
        return BranchOutcome(name, success=True, counts=counts)

    def _delete_branch(self, name: str) -> BranchOutcome:
        try:
            self.operations.delete_local_branch(name)
        except GitOperationError as e:
            return BranchOutcome(name, success=False, reason=e.message or str(e))

        try:
            self.operations.delete_remote_branch(self.config.origin_remote, name)
        except GitOperationError as e:
            return BranchOutcome(name, success=False, reason=f"remote delete failed: {e.message}")

        return BranchOutcome(name, success=True)

    def status_counts(self) -> Dict[str, int]:
        """Counts for progress display."""
        total = len(self.queue)
        return {"done": min(self.index, total), "total": total}
