"""Version control operations needed by the documentation checker."""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence

from git import Repo, GitCommandError, InvalidGitRepositoryError, NoSuchPathError
from git.exc import BadName

from ..errors import (
    DirtyWorkingTree, NoMatchingBranch, NotAVcsCheckout, UpdateFailed,
)
from .error_strategies import translate_fetch_error, translate_update_error
from .models import ChangeKind, ChangeLogEntry, RevisionPointer, SetupClassification


DEFAULT_BRANCH_CANDIDATES = ("main", "master")


class VersionControlClient(ABC):
    """The small set of version control operations the checker relies on."""

    @abstractmethod
    def current_revision(self, path: Path) -> RevisionPointer:
        """Return the checked out revision, raising NotAVcsCheckout."""

    @abstractmethod
    def fetch_remote(self, path: Path) -> None:
        """Refresh remote-tracking refs without touching the working tree."""

    @abstractmethod
    def remote_revision(self, path: Path,
                        branch_candidates: Sequence[str] = DEFAULT_BRANCH_CANDIDATES) -> RevisionPointer:
        """Return the remote tip of the first candidate branch that exists."""

    @abstractmethod
    def commits_between(self, path: Path, from_revision: str, to_revision: str) -> int:
        """Count commits reachable from ``to_revision`` but not ``from_revision``."""

    @abstractmethod
    def commit_summaries(self, path: Path, from_revision: str, to_revision: str,
                         limit: Optional[int] = None) -> List[str]:
        """One-line commit descriptions, most recent first."""

    @abstractmethod
    def changed_files(self, path: Path, from_revision: str, to_revision: str) -> List[ChangeLogEntry]:
        """Paths added, modified or removed between two revisions."""

    @abstractmethod
    def is_working_tree_dirty(self, path: Path) -> bool:
        """True when tracked files carry uncommitted changes."""

    @abstractmethod
    def update_to(self, path: Path, classification: SetupClassification, revision: str,
                  project_root: Optional[Path] = None) -> None:
        """Move the checkout forward to ``revision``."""


class GitVersionControlClient(VersionControlClient):
    """VersionControlClient backed by GitPython."""

    def __init__(self, remote_name: str = "origin", fetch_timeout: float = 30.0):
        self.remote_name = remote_name
        self.fetch_timeout = fetch_timeout
        self.logger = logging.getLogger('docsync.git_sync.client')

    def _open(self, path: Path) -> Repo:
        try:
            return Repo(path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise NotAVcsCheckout(f"{path} is not a Git checkout", details=str(e))

    @staticmethod
    def _pointer(commit, branch: Optional[str]) -> RevisionPointer:
        return RevisionPointer(
            revision=commit.hexsha,
            timestamp=commit.committed_datetime.isoformat(),
            branch=branch,
        )

    def current_revision(self, path: Path) -> RevisionPointer:
        repo = self._open(path)
        try:
            commit = repo.head.commit
        except ValueError as e:
            raise NotAVcsCheckout(f"{path} has no commits", details=str(e))

        branch = None if repo.head.is_detached else repo.active_branch.name
        pointer = self._pointer(commit, branch)
        self.logger.debug(f"Local revision of {path}: {pointer.short} ({branch or 'detached'})")
        return pointer

    def fetch_remote(self, path: Path) -> None:
        repo = self._open(path)
        try:
            remote = repo.remote(self.remote_name)
        except ValueError as e:
            raise NotAVcsCheckout(f"{path} has no remote named '{self.remote_name}'", details=str(e))

        self.logger.info(f"Fetching '{self.remote_name}' for {path} (timeout {self.fetch_timeout}s)")
        # Fail on missing credentials instead of waiting for terminal input
        repo.git.update_environment(GIT_TERMINAL_PROMPT="0")
        try:
            remote.fetch(kill_after_timeout=self.fetch_timeout)
        except GitCommandError as e:
            raise translate_fetch_error(e)

    def remote_revision(self, path: Path,
                        branch_candidates: Sequence[str] = DEFAULT_BRANCH_CANDIDATES) -> RevisionPointer:
        repo = self._open(path)

        for branch in branch_candidates:
            ref = f"refs/remotes/{self.remote_name}/{branch}"
            try:
                commit = repo.commit(ref)
            except (BadName, ValueError):
                self.logger.debug(f"Remote branch {self.remote_name}/{branch} not found, trying next candidate")
                continue
            self.logger.debug(f"Using remote branch {self.remote_name}/{branch} at {commit.hexsha[:8]}")
            return self._pointer(commit, branch)

        raise NoMatchingBranch(
            f"None of the branches {', '.join(branch_candidates)} exist on remote '{self.remote_name}'"
        )

    def commits_between(self, path: Path, from_revision: str, to_revision: str) -> int:
        repo = self._open(path)
        try:
            return int(repo.git.rev_list('--count', f"{from_revision}..{to_revision}"))
        except GitCommandError as e:
            raise NotAVcsCheckout(f"Cannot compare {from_revision[:8]} with {to_revision[:8]}", details=str(e))

    def commit_summaries(self, path: Path, from_revision: str, to_revision: str,
                         limit: Optional[int] = None) -> List[str]:
        repo = self._open(path)
        return [
            f"{commit.hexsha[:8]} {commit.summary}"
            for commit in repo.iter_commits(f"{from_revision}..{to_revision}", max_count=limit)
        ]

    def changed_files(self, path: Path, from_revision: str, to_revision: str) -> List[ChangeLogEntry]:
        repo = self._open(path)
        entries = []

        for diff in repo.commit(from_revision).diff(to_revision):
            change_type = diff.change_type
            if change_type in ("A", "C"):
                entries.append(ChangeLogEntry(diff.b_path, ChangeKind.ADDED, diff.b_path))
            elif change_type == "D":
                entries.append(ChangeLogEntry(diff.a_path, ChangeKind.REMOVED, diff.a_path))
            elif change_type == "R":
                entries.append(ChangeLogEntry(f"{diff.a_path} -> {diff.b_path}", ChangeKind.MODIFIED, diff.b_path))
            else:
                entries.append(ChangeLogEntry(diff.b_path, ChangeKind.MODIFIED, diff.b_path))

        return entries

    def is_working_tree_dirty(self, path: Path) -> bool:
        repo = self._open(path)
        return repo.is_dirty(index=True, working_tree=True, untracked_files=False)

    def update_to(self, path: Path, classification: SetupClassification, revision: str,
                  project_root: Optional[Path] = None) -> None:
        repo = self._open(path)
        if repo.is_dirty(index=True, working_tree=True, untracked_files=False):
            raise DirtyWorkingTree(f"{path} has uncommitted changes; refusing to update")

        if classification is SetupClassification.LINKED_REFERENCE:
            if project_root is None:
                raise UpdateFailed("Updating a linked reference requires the host project root")
            self._update_linked_reference(repo, revision, project_root)
        elif classification in (SetupClassification.EMBEDDED_COPY, SetupClassification.FREESTANDING_CLONE):
            self._fast_forward(repo, revision)
        else:
            raise UpdateFailed(f"Cannot update a documentation setup classified as {classification.value}")

    def _fast_forward(self, repo: Repo, revision: str) -> None:
        if not repo.head.is_detached:
            branch = repo.active_branch
            tracking = branch.tracking_branch()
            if tracking is not None and tracking.remote_name == self.remote_name:
                try:
                    tracked_tip = tracking.commit.hexsha
                except ValueError:
                    tracked_tip = None
                if tracked_tip is not None and tracked_tip != revision:
                    raise UpdateFailed(
                        f"Branch '{branch.name}' tracks {tracking.name}, not the checked upstream revision "
                        f"{revision[:8]}; switch to the documentation branch before updating"
                    )

        self.logger.info(f"Fast-forwarding {repo.working_tree_dir} to {revision[:8]}")
        try:
            repo.git.merge('--ff-only', revision)
        except GitCommandError as e:
            raise translate_update_error(e)

    def _update_linked_reference(self, docs_repo: Repo, revision: str, project_root: Path) -> None:
        if docs_repo.head.is_detached:
            self.logger.info(f"Checking out {revision[:8]} in {docs_repo.working_tree_dir}")
            try:
                docs_repo.git.checkout(revision)
            except GitCommandError as e:
                raise translate_update_error(e)
        else:
            self._fast_forward(docs_repo, revision)

        try:
            host = Repo(project_root, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise UpdateFailed(
                f"{docs_repo.working_tree_dir} was updated but host project {project_root} is not a Git checkout",
                details=str(e),
            )

        docs_rel = Path(os.path.relpath(docs_repo.working_tree_dir, host.working_tree_dir)).as_posix()
        try:
            host.git.add('--', docs_rel)
            if not host.git.status('--porcelain', '--', docs_rel).strip():
                self.logger.info(f"Host project already records {docs_rel} at {revision[:8]}")
                return
            host.git.commit('-m', f"Update {docs_rel} to {revision[:8]}", '--', docs_rel)
        except GitCommandError as e:
            error = translate_update_error(e)
            error.message = f"{docs_rel} was updated but the host project pointer was not committed: {error.message}"
            raise error

        self.logger.info(f"Committed {docs_rel} pointer at {revision[:8]} in host project")
