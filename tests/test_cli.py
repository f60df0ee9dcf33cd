"""Tests for the command-line entry point"""
import pytest
import yaml

from gitsync.cli.args import parse_args
from gitsync.cli.main import main


@pytest.fixture
def in_repo(git_repo_with_remotes, monkeypatch):
    """Run with the working repository as the current directory."""
    repo = git_repo_with_remotes
    repo.git.branch("feature-a")
    monkeypatch.chdir(repo.working_dir)
    return repo


class TestParseArgs:
    """Test argument parsing."""

    def test_defaults(self):
        """Test no flags means interactive, non-manual."""
        args = parse_args([])
        assert args.manual is False
        assert args.update is None
        assert args.delete is None
        assert args.stash is False

    def test_update_names(self):
        """Test --update takes several branch names."""
        args = parse_args(["-m", "--update", "feature-a", "feature-b"])
        assert args.manual is True
        assert args.update == ["feature-a", "feature-b"]

    def test_update_and_delete_exclusive(self):
        """Test update and delete cannot be combined."""
        with pytest.raises(SystemExit):
            parse_args(["--update", "a", "--delete", "b"])

    def test_stash_requires_workflow(self):
        """Test --stash alone is rejected."""
        with pytest.raises(SystemExit):
            parse_args(["--stash"])


class TestMain:
    """Test exit codes of the entry point."""

    def test_not_a_repository(self, temp_dir, monkeypatch):
        """Test running outside a repository exits non-zero."""
        monkeypatch.chdir(temp_dir)
        assert main(["--no-interactive"]) == 1

    def test_branch_table(self, in_repo, capsys):
        """Test the non-interactive table lists branches and exits 0."""
        assert main(["--no-interactive"]) == 0
        assert "feature-a" in capsys.readouterr().out

    def test_write_config(self, in_repo):
        """Test --write-config stores the detected values."""
        assert main(["--write-config"]) == 0
        with open(f"{in_repo.working_dir}/.gitsync.yaml") as f:
            written = yaml.safe_load(f)
        assert written["base_branch"] == "main"
        assert written["upstream_remote"] == "upstream"

    def test_headless_delete(self, in_repo):
        """Test a successful headless delete exits 0."""
        in_repo.git.push("origin", "feature-a")
        assert main(["--delete", "feature-a"]) == 0
        assert "feature-a" not in [head.name for head in in_repo.heads]

    def test_headless_failure_exit_code(self, in_repo):
        """Test a recorded failure makes the headless run exit 1."""
        # feature-a was never pushed, so the remote delete fails
        assert main(["--delete", "feature-a"]) == 1

    def test_headless_unknown_branch(self, in_repo):
        """Test unknown branch names exit 1."""
        assert main(["--update", "nope"]) == 1
