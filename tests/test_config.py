"""Tests for configuration loading and detection"""
import pytest

from gitsync.config import (
    Config,
    detect_base_branch,
    detect_upstream_remote,
    load_config,
    read_config_file,
    save_config,
)
from gitsync.exceptions import ConfigError, GitOperationError


class TestConfigValidation:
    """Test Config construction and validation."""

    def test_defaults(self):
        """Test origin and exclude patterns defaults."""
        config = Config(base_branch="main", upstream_remote="upstream")
        assert config.origin_remote == "origin"
        assert config.exclude_patterns == ()
        assert config.upstream_base_ref == "upstream/main"

    def test_exclude_patterns_become_tuple(self):
        """Test list patterns are stored as an immutable tuple."""
        config = Config(base_branch="main", upstream_remote="upstream", exclude_patterns=["release/", "wip"])
        assert config.exclude_patterns == ("release/", "wip")

    def test_empty_base_branch_rejected(self):
        """Test empty base branch raises ConfigError."""
        with pytest.raises(ConfigError, match="base_branch"):
            Config(base_branch="", upstream_remote="upstream")

    def test_padded_remote_rejected(self):
        """Test remote names with surrounding whitespace are rejected."""
        with pytest.raises(ConfigError, match="whitespace"):
            Config(base_branch="main", upstream_remote=" upstream")

    def test_string_exclude_patterns_rejected(self):
        """Test a bare string is not accepted as a pattern list."""
        with pytest.raises(ConfigError, match="list of strings"):
            Config(base_branch="main", upstream_remote="upstream", exclude_patterns="release/")

    def test_config_is_frozen(self):
        """Test configuration cannot be mutated after loading."""
        config = Config(base_branch="main", upstream_remote="upstream")
        with pytest.raises(AttributeError):
            config.base_branch = "develop"

    def test_from_dict_ignores_unknown_keys(self):
        """Test from_dict drops keys it does not know."""
        config = Config.from_dict({"base_branch": "main", "upstream_remote": "upstream", "colour": "blue"})
        assert config.base_branch == "main"
        assert config.get("colour") is None

    def test_from_dict_missing_required(self):
        """Test from_dict without a base branch raises ConfigError."""
        with pytest.raises(ConfigError, match="Incomplete"):
            Config.from_dict({"upstream_remote": "upstream"})


class TestDetection:
    """Test auto-detection of remotes and the base branch."""

    def test_prefers_upstream_remote(self, mock_operations):
        """Test a remote named upstream wins over origin."""
        assert detect_upstream_remote(mock_operations) == "upstream"

    def test_falls_back_to_origin(self, mock_operations):
        """Test origin is used when there is no upstream remote."""
        mock_operations.list_remotes.return_value = ["origin", "fork"]
        assert detect_upstream_remote(mock_operations) == "origin"

    def test_no_remotes(self, mock_operations):
        """Test a repository without remotes cannot be configured."""
        mock_operations.list_remotes.return_value = []
        with pytest.raises(ConfigError, match="No remotes"):
            detect_upstream_remote(mock_operations)

    def test_base_from_remote_head(self, mock_operations):
        """Test the remote's advertised HEAD branch wins."""
        mock_operations.get_remote_head_branch.return_value = "trunk"
        assert detect_base_branch(mock_operations, "upstream") == "trunk"
        mock_operations.get_remote_head_branch.assert_called_once_with("upstream")

    def test_base_from_candidates_in_priority_order(self, mock_operations):
        """Test master is chosen over develop when no remote HEAD is known."""
        mock_operations.list_local_branches.return_value = ["develop", "feature-x", "master"]
        assert detect_base_branch(mock_operations, "upstream") == "master"

    def test_base_falls_back_to_first_branch(self, mock_operations):
        """Test the sorted first local branch is used without any candidate."""
        mock_operations.list_local_branches.return_value = ["zeta", "alpha"]
        assert detect_base_branch(mock_operations, "upstream") == "alpha"

    def test_base_without_branches(self, mock_operations):
        """Test an empty repository cannot provide a base branch."""
        mock_operations.list_local_branches.return_value = []
        with pytest.raises(ConfigError):
            detect_base_branch(mock_operations, "upstream")


class TestConfigFile:
    """Test reading, loading and writing the YAML file."""

    def test_missing_file_is_empty(self, temp_dir):
        """Test a missing file gives an empty mapping."""
        assert read_config_file(temp_dir / ".gitsync.yaml") == {}

    def test_invalid_yaml(self, temp_dir):
        """Test malformed YAML raises ConfigError."""
        path = temp_dir / ".gitsync.yaml"
        path.write_text("base_branch: [unclosed\n")
        with pytest.raises(ConfigError, match="Failed to parse YAML"):
            read_config_file(path)

    def test_non_mapping_document(self, temp_dir):
        """Test a YAML list is rejected."""
        path = temp_dir / ".gitsync.yaml"
        path.write_text("- main\n- develop\n")
        with pytest.raises(ConfigError, match="mapping"):
            read_config_file(path)

    def test_file_overrides_detection(self, mock_operations, temp_dir):
        """Test file values win and missing fields are still detected."""
        path = temp_dir / ".gitsync.yaml"
        path.write_text("base_branch: develop\nexclude_patterns:\n  - release/\n")
        mock_operations.repo_path = str(temp_dir)

        config = load_config(mock_operations)

        assert config.base_branch == "develop"
        assert config.upstream_remote == "upstream"
        assert config.exclude_patterns == ("release/",)
        mock_operations.get_remote_head_branch.assert_not_called()

    def test_detection_failure_becomes_config_error(self, mock_operations, temp_dir):
        """Test a git failure during detection surfaces as ConfigError."""
        mock_operations.repo_path = str(temp_dir)
        mock_operations.list_remotes.side_effect = GitOperationError("list_remotes", message="boom")
        with pytest.raises(ConfigError, match="Could not detect"):
            load_config(mock_operations)

    def test_save_then_load(self, mock_operations, temp_dir):
        """Test a written configuration is read back unchanged."""
        mock_operations.repo_path = str(temp_dir)
        config = Config(base_branch="develop", upstream_remote="origin", exclude_patterns=("wip",))

        save_config(config, temp_dir / ".gitsync.yaml")

        assert load_config(mock_operations) == config
        mock_operations.list_remotes.assert_not_called()
