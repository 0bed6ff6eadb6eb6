"""Git access for the documentation checker."""

from .client import VersionControlClient, GitVersionControlClient, DEFAULT_BRANCH_CANDIDATES
from .models import (
    ChangeKind, ChangeLogEntry, DocsSetup, RevisionPointer, SetupClassification, UpdateStatus,
)

__all__ = [
    'VersionControlClient',
    'GitVersionControlClient',
    'DEFAULT_BRANCH_CANDIDATES',
    'ChangeKind',
    'ChangeLogEntry',
    'DocsSetup',
    'RevisionPointer',
    'SetupClassification',
    'UpdateStatus',
]
