"""Git-related services for gitsync."""

from .operations import GitOperations, find_repository_root, is_git_repository
from .tags import TagStore

__all__ = [
    "GitOperations",
    "TagStore",
    "find_repository_root",
    "is_git_repository",
]
