"""Branch model and related enums"""
from enum import Enum
from dataclasses import dataclass


class BranchStatus(Enum):
    """Status of a branch relative to the base branch."""
    OK = "ok"
    BEHIND = "behind"
    CONFLICT = "conflict"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass
class Branch:
    """A local branch under management."""
    name: str
    ahead: int = 0
    behind: int = 0
    last_commit_relative: str = ""  # Display only, e.g. "2 days ago"
    description: str = ""  # Empty means untagged
    selected: bool = False
    status: BranchStatus = BranchStatus.OK

    def __post_init__(self):
        if self.ahead < 0 or self.behind < 0:
            raise ValueError(f"ahead/behind must be non-negative for {self.name}")

    @classmethod
    def from_counts(
        cls, name: str, ahead: int, behind: int, last_commit_relative: str = "", description: str = ""
    ) -> "Branch":
        """Create a branch with its load-time status derived from the behind count."""
        return cls(
            name=name,
            ahead=ahead,
            behind=behind,
            last_commit_relative=last_commit_relative,
            description=description,
            status=BranchStatus.BEHIND if behind > 0 else BranchStatus.OK,
        )

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match against name or description."""
        if not query:
            return True
        query = query.lower()
        return query in self.name.lower() or query in self.description.lower()
