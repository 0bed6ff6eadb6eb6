"""Value types shared by the Git client, the classifier and the session."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class SetupClassification(Enum):
    """How the documentation tree is attached to its upstream source."""
    EMBEDDED_COPY = "embedded_copy"           # docs dir is its own checkout with a remote
    LINKED_REFERENCE = "linked_reference"     # docs dir is a submodule of the host project
    FREESTANDING_CLONE = "freestanding_clone" # docs dir lives inside a plain clone
    ABSENT = "absent"                         # no docs dir at all


class ChangeKind(Enum):
    """Three-way classification of a changed path."""
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass(frozen=True)
class RevisionPointer:
    """A revision id with its commit time and the branch it was read from."""
    revision: str
    timestamp: str
    branch: Optional[str] = None

    @property
    def short(self) -> str:
        return self.revision[:8]


@dataclass(frozen=True)
class UpdateStatus:
    """Result of comparing the local checkout with the remote tip."""
    is_behind: bool
    commits_behind: int
    local_revision: RevisionPointer
    remote_revision: RevisionPointer


@dataclass(frozen=True)
class ChangeLogEntry:
    """One changed path between two revisions."""
    summary_line: str
    change_kind: ChangeKind
    path: str


@dataclass(frozen=True)
class DocsSetup:
    """Where the docs live and which checkout Git operations run against."""
    classification: SetupClassification
    project_root: Path
    docs_path: Path
    repo_path: Optional[Path] = None
