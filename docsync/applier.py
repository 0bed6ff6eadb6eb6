"""Applying a pending documentation update."""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .git_sync.client import VersionControlClient
from .git_sync.models import DocsSetup, RevisionPointer
from .platform import build_hook_command
from .state import DecisionStateStore


@dataclass
class ApplyResult:
    """Outcome of an update attempt."""
    success: bool
    revision_applied: Optional[str]
    message: str
    hook_exit_code: Optional[int] = None


class UpdateApplier:
    """
    Runs the update for a classified documentation setup.

    Sequence:
    1. Refuse when the checkout has local modifications
    2. Move the checkout to the target revision
    3. Run the post-update hook, if one is configured (best effort)
    4. Record the update as the last applied one

    Errors raised by the client in step 2 propagate unchanged and leave the
    stored decisions untouched.
    """

    def __init__(self, client: VersionControlClient, store: DecisionStateStore,
                 post_update_hook: Optional[Path] = None, hook_timeout: float = 300.0):
        self.client = client
        self.store = store
        self.post_update_hook = post_update_hook
        self.hook_timeout = hook_timeout
        self.logger = logging.getLogger('docsync.applier')

    def apply(self, setup: DocsSetup, target: RevisionPointer, commits_behind: int = 0) -> ApplyResult:
        if setup.repo_path is None:
            return ApplyResult(False, None, f"No Git checkout found for {setup.docs_path}")

        if self.client.is_working_tree_dirty(setup.repo_path):
            message = f"{setup.repo_path} has uncommitted changes; commit or stash them before updating"
            self.logger.warning(message)
            return ApplyResult(False, None, message)

        self.logger.info(f"Updating {setup.classification.value} documentation to {target.short}")
        self.client.update_to(setup.repo_path, setup.classification, target.revision, setup.project_root)

        hook_exit_code = self._run_post_update_hook(setup.project_root)
        self.store.write_last_applied(target.revision, setup.classification, commits_behind)

        return ApplyResult(
            success=True,
            revision_applied=target.revision,
            message=f"Documentation updated to {target.short}",
            hook_exit_code=hook_exit_code,
        )

    def _run_post_update_hook(self, project_root: Path) -> Optional[int]:
        if self.post_update_hook is None:
            return None

        command = build_hook_command(self.post_update_hook, str(project_root))
        self.logger.info(f"Running post-update hook: {self.post_update_hook}")
        try:
            completed = subprocess.run(
                command,
                cwd=str(project_root),
                capture_output=True,
                text=True,
                timeout=self.hook_timeout,
            )
        except subprocess.TimeoutExpired:
            self.logger.error(f"Post-update hook timed out after {self.hook_timeout}s")
            return None
        except OSError as e:
            self.logger.error(f"Post-update hook could not be started: {e}")
            return None

        if completed.returncode == 0:
            self.logger.info("Post-update hook completed successfully")
        else:
            self.logger.warning(
                f"Post-update hook exited with code {completed.returncode}: {completed.stderr.strip()}"
            )
        return completed.returncode
