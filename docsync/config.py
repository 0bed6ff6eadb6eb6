"""Configuration management for docsync."""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

from .platform import normalize_path


VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class Config:
    """Configuration class for docsync with validation and defaults."""

    # Layout
    project_root: Path = field(default_factory=Path.cwd)
    docs_dir_name: str = "claude_docs"
    state_dir: Optional[Path] = None  # Defaults to project_root

    # Git
    remote_name: str = "origin"
    branch_candidates: Tuple[str, ...] = ("main", "master")
    fetch_timeout: float = 30.0

    # Post-update hook
    post_update_hook: Optional[Path] = None
    hook_timeout: float = 300.0

    # Decisions and reporting
    remind_interval_hours: float = 24.0
    max_commits: int = 10

    # Logging
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.project_root = normalize_path(self.project_root)
        if self.state_dir is None:
            self.state_dir = self.project_root
        else:
            self.state_dir = normalize_path(self.state_dir)
        if self.post_update_hook is not None:
            self.post_update_hook = normalize_path(self.post_update_hook)

        if isinstance(self.branch_candidates, str):
            self.branch_candidates = tuple(
                name.strip() for name in self.branch_candidates.split(",") if name.strip()
            )
        else:
            self.branch_candidates = tuple(self.branch_candidates)

        self.log_level = self.log_level.upper()
        if self.log_level not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}. Must be one of {VALID_LOG_LEVELS}")

        if not self.docs_dir_name or Path(self.docs_dir_name).is_absolute():
            raise ValueError("docs_dir_name must be a non-empty relative path")

        if not self.remote_name:
            raise ValueError("remote_name must not be empty")

        if not self.branch_candidates:
            raise ValueError("branch_candidates must name at least one branch")

        if self.fetch_timeout <= 0:
            raise ValueError("fetch_timeout must be positive")

        if self.hook_timeout <= 0:
            raise ValueError("hook_timeout must be positive")

        if self.remind_interval_hours <= 0:
            raise ValueError("remind_interval_hours must be positive")

        if self.max_commits <= 0:
            raise ValueError("max_commits must be positive")

    @property
    def docs_path(self) -> Path:
        """Directory holding the documentation tree."""
        return self.project_root / self.docs_dir_name


def load_configuration(project_root: Optional[Path] = None) -> Config:
    """Load configuration from environment variables, reading a project .env file first."""
    root = normalize_path(project_root or Path.cwd())
    env_file = root / ".env"
    if env_file.is_file():
        load_dotenv(env_file)
    else:
        load_dotenv()

    try:
        hook = os.getenv("DOCSYNC_POST_UPDATE_HOOK")
        state_dir = os.getenv("DOCSYNC_STATE_DIR")
        config = Config(
            project_root=root,
            docs_dir_name=os.getenv("DOCSYNC_DOCS_DIR", "claude_docs"),
            state_dir=Path(state_dir) if state_dir else None,
            remote_name=os.getenv("DOCSYNC_REMOTE", "origin"),
            branch_candidates=os.getenv("DOCSYNC_BRANCHES", "main,master"),
            fetch_timeout=float(os.getenv("DOCSYNC_FETCH_TIMEOUT", "30")),
            post_update_hook=Path(hook) if hook else None,
            hook_timeout=float(os.getenv("DOCSYNC_HOOK_TIMEOUT", "300")),
            remind_interval_hours=float(os.getenv("DOCSYNC_REMIND_HOURS", "24")),
            max_commits=int(os.getenv("DOCSYNC_MAX_COMMITS", "10")),
            log_level=os.getenv("DOCSYNC_LOG_LEVEL", "INFO"),
        )
    except (ValueError, TypeError) as e:
        raise ValueError(f"Configuration error: {e}")

    logging.getLogger('docsync.config').debug(f"Loaded configuration: {config}")
    return config
