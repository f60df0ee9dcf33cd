"""Configuration handling for gitsync"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Tuple, Union

import yaml

from gitsync.constants import (
    BASE_BRANCH_CANDIDATES,
    CONFIG_FILE_NAME,
    DEFAULT_ORIGIN_REMOTE,
    PREFERRED_UPSTREAM_REMOTE,
)
from gitsync.exceptions import ConfigError, GitOperationError
from gitsync.logging_config import get_logger

if TYPE_CHECKING:
    from gitsync.services.git.operations import GitOperations

logger = get_logger(__name__)

KNOWN_FIELDS = ("base_branch", "upstream_remote", "origin_remote", "exclude_patterns")


@dataclass(frozen=True)
class Config:
    """Configuration for one gitsync run. Never mutated once loaded."""

    base_branch: str
    upstream_remote: str
    origin_remote: str = DEFAULT_ORIGIN_REMOTE
    exclude_patterns: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_name("base_branch", self.base_branch)
        self._validate_name("upstream_remote", self.upstream_remote)
        self._validate_name("origin_remote", self.origin_remote)
        self._validate_exclude_patterns()

    @staticmethod
    def _validate_name(key: str, value) -> None:
        """Validate a branch or remote name is a non-empty, unpadded string."""
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"{key} cannot be empty")
        if value != value.strip():
            raise ConfigError(f"{key} must not have surrounding whitespace, got '{value}'")

    def _validate_exclude_patterns(self) -> None:
        """Validate exclude_patterns is a sequence of non-empty strings."""
        if isinstance(self.exclude_patterns, str):
            raise ConfigError("exclude_patterns must be a list of strings")
        patterns = tuple(self.exclude_patterns)
        for pattern in patterns:
            if not isinstance(pattern, str) or not pattern:
                raise ConfigError(f"exclude_patterns entries must be non-empty strings, got {pattern!r}")
        # Lists from YAML become tuples so the value stays hashable and immutable
        object.__setattr__(self, "exclude_patterns", patterns)

    @property
    def upstream_base_ref(self) -> str:
        """Remote-tracking ref of the base branch, e.g. upstream/main."""
        return f"{self.upstream_remote}/{self.base_branch}"

    def to_dict(self) -> dict:
        """Convert config to a plain dictionary (YAML friendly)."""
        return {
            "base_branch": self.base_branch,
            "upstream_remote": self.upstream_remote,
            "origin_remote": self.origin_remote,
            "exclude_patterns": list(self.exclude_patterns),
        }

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary, ignoring unknown keys."""
        filtered = {k: v for k, v in config_dict.items() if k in KNOWN_FIELDS and v is not None}
        try:
            return cls(**filtered)
        except TypeError as e:
            raise ConfigError(f"Incomplete configuration: {e}") from e


def detect_upstream_remote(operations: "GitOperations") -> str:
    """Prefer a remote named 'upstream', else 'origin'.

    Raises:
        ConfigError: If neither remote exists
    """
    remotes = operations.list_remotes()
    for candidate in (PREFERRED_UPSTREAM_REMOTE, DEFAULT_ORIGIN_REMOTE):
        if candidate in remotes:
            return candidate
    raise ConfigError("No remotes found (expected 'upstream' or 'origin')")


def detect_base_branch(operations: "GitOperations", upstream_remote: Optional[str] = None) -> str:
    """Find the base branch.

    Order: the HEAD branch advertised by the upstream remote, then the first of
    BASE_BRANCH_CANDIDATES present locally, then the first local branch.

    Raises:
        ConfigError: If the repository has no branches at all
    """
    if upstream_remote:
        head = operations.get_remote_head_branch(upstream_remote)
        if head:
            logger.debug(f"Base branch from {upstream_remote} HEAD: {head}")
            return head

    branches = operations.list_local_branches()
    for candidate in BASE_BRANCH_CANDIDATES:
        if candidate in branches:
            logger.debug(f"Base branch from candidate list: {candidate}")
            return candidate

    if branches:
        return sorted(branches)[0]

    raise ConfigError("No branches found")


def read_config_file(path: Path) -> dict:
    """Read a YAML config file; a missing file is an empty configuration.

    Raises:
        ConfigError: If the file cannot be read or is not a YAML mapping
    """
    if not path.exists():
        return {}

    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read {path}: {e}") from e

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(document).__name__}")

    unknown = set(document) - set(KNOWN_FIELDS)
    if unknown:
        logger.warning(f"Ignoring unknown config keys in {path}: {', '.join(sorted(unknown))}")
    return document


def default_config_path(repo_path: Union[str, Path]) -> Path:
    return Path(repo_path) / CONFIG_FILE_NAME


def load_config(operations: "GitOperations", path: Optional[Union[str, Path]] = None) -> Config:
    """Load the configuration, auto-detecting every field the file leaves out.

    Args:
        operations: Repository operations used for detection
        path: Config file; defaults to .gitsync.yaml at the repository root

    Raises:
        ConfigError: If the file is invalid or a required value cannot be detected
    """
    config_path = Path(path) if path else default_config_path(operations.repo_path)
    values = read_config_file(config_path)
    if values:
        logger.info(f"Loaded configuration from {config_path}")

    try:
        if not values.get("upstream_remote"):
            values["upstream_remote"] = detect_upstream_remote(operations)
        if not values.get("base_branch"):
            values["base_branch"] = detect_base_branch(operations, values["upstream_remote"])
    except GitOperationError as e:
        raise ConfigError(f"Could not detect configuration: {e}") from e

    config = Config.from_dict(values)
    logger.info(
        f"Using base '{config.base_branch}', upstream '{config.upstream_remote}', "
        f"origin '{config.origin_remote}'"
    )
    return config


def save_config(config: Config, path: Union[str, Path]) -> Path:
    """Write the configuration as YAML."""
    path = Path(path)
    try:
        path.write_text(yaml.safe_dump(config.to_dict(), sort_keys=False), encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Could not write {path}: {e}") from e
    logger.info(f"Saved configuration to {path}")
    return path
