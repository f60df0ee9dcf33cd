"""Pytest fixtures for gitsync tests"""
import tempfile
from pathlib import Path
from unittest.mock import Mock
import pytest
import git

from gitsync.config import Config
from gitsync.core.sync_keeper import SyncKeeper
from gitsync.services.git.operations import GitOperations

# Operations that change the checkout or a remote; recorded in call order
RECORDED_OPERATIONS = (
    "fetch",
    "checkout",
    "reset_hard",
    "rebase",
    "push_with_lease",
    "delete_local_branch",
    "delete_remote_branch",
    "stash_changes",
    "stash_pop",
)


def configure_identity(repo: git.Repo) -> None:
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")
        writer.set_value("commit", "gpgsign", "false")


def commit_file(repo: git.Repo, filename: str, content: str, message: str) -> str:
    """Write a file, commit it and return the new commit sha."""
    path = Path(repo.working_dir) / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.index.add([filename])
    return repo.index.commit(message).hexsha


@pytest.fixture
def make_commit():
    """Commit helper: make_commit(repo, filename, content, message) -> sha."""
    return commit_file


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository with one commit on main."""
    repo_path = temp_dir / "work"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)
    configure_identity(repo)
    commit_file(repo, "README.md", "# Test Repository\n", "Initial commit")
    repo.git.branch("-M", "main")

    yield repo

    repo.close()


@pytest.fixture
def git_repo_with_remotes(git_repo, temp_dir):
    """Working repository with bare 'upstream' and 'origin' remotes that both have main."""
    for name in ("upstream", "origin"):
        bare_path = temp_dir / f"{name}.git"
        bare = git.Repo.init(bare_path, bare=True)
        bare.git.symbolic_ref("HEAD", "refs/heads/main")
        bare.close()
        git_repo.create_remote(name, str(bare_path))
        git_repo.git.push(name, "main")
    git_repo.git.fetch("upstream")
    yield git_repo


@pytest.fixture
def upstream_writer(git_repo_with_remotes, temp_dir):
    """A second clone of upstream used to land new commits on upstream/main."""
    clone = git.Repo.clone_from(str(temp_dir / "upstream.git"), temp_dir / "writer", branch="main")
    configure_identity(clone)
    yield clone
    clone.close()


@pytest.fixture
def sync_config():
    """Configuration used by the mock-based tests."""
    return Config(base_branch="main", upstream_remote="upstream", origin_remote="origin")


@pytest.fixture
def operation_log():
    """Ordered record of checkout-mutating and remote calls made on mock_operations."""
    return []


@pytest.fixture
def mock_operations(operation_log):
    """Create a mock GitOperations whose mutating calls append to operation_log."""
    operations = Mock(spec=GitOperations)
    operations.repo_path = "/fake/repo/path"

    def recorder(name):
        def record(*args):
            operation_log.append((name,) + args)
        return record

    for name in RECORDED_OPERATIONS:
        getattr(operations, name).side_effect = recorder(name)

    operations.list_local_branches.return_value = ["feature-a", "feature-b", "main"]
    operations.list_remotes.return_value = ["origin", "upstream"]
    operations.get_current_branch.return_value = "feature-a"
    operations.get_remote_head_branch.return_value = None
    operations.get_ahead_behind.return_value = (1, 2)
    operations.get_last_commit_relative.return_value = "2 days ago"
    operations.count_local_only_commits.return_value = 0
    operations.has_uncommitted_changes.return_value = False
    operations.get_branch_description.return_value = ""

    return operations


@pytest.fixture
def keeper(mock_operations, sync_config):
    """SyncKeeper wired to mock operations and a fixed configuration."""
    return SyncKeeper(mock_operations.repo_path, config=sync_config, operations=mock_operations)
