"""Workflow models: modes, driver states and run results"""
from enum import Enum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


class WorkflowMode(Enum):
    """What a workflow does to each queued branch."""
    UPDATE = "update"
    DELETE = "delete"


class WorkflowState(Enum):
    """State of the sync workflow driver."""
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"


@dataclass(frozen=True)
class BranchOutcome:
    """Completion event for one queued branch."""
    branch: str
    success: bool
    reason: Optional[str] = None
    conflict: bool = False
    fatal: bool = False  # Base-branch preparation failed; the rest of the queue is abandoned
    counts: Optional[Tuple[int, int]] = None  # (ahead, behind) after a successful update


@dataclass
class SyncResult:
    """Outcome of one workflow run, accumulated branch by branch."""
    mode: WorkflowMode
    queue: Tuple[str, ...] = ()
    success_count: int = 0
    succeeded: List[str] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)
    fatal_error: Optional[str] = None
    stash_created: bool = False
    stash_restored: bool = False
    warnings: List[str] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return self.success_count + len(self.failures)

    @property
    def unprocessed(self) -> List[str]:
        """Queued branches never attempted because the run was aborted."""
        return list(self.queue[self.attempted:])

    @property
    def aborted(self) -> bool:
        return self.fatal_error is not None

    def record(self, outcome: BranchOutcome) -> None:
        if outcome.success:
            self.success_count += 1
            self.succeeded.append(outcome.branch)
        else:
            self.failures.append((outcome.branch, outcome.reason or "unknown error"))
            if outcome.fatal:
                self.fatal_error = outcome.reason

    def format_failures(self) -> List[str]:
        return [f"{branch} ({reason})" for branch, reason in self.failures]
