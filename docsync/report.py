"""Rendering of pending documentation changes for the operator."""

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from .git_sync.models import ChangeKind, ChangeLogEntry


DEFAULT_MAX_COMMITS = 10

_GROUP_TITLES = (
    (ChangeKind.ADDED, "Added"),
    (ChangeKind.MODIFIED, "Modified"),
    (ChangeKind.REMOVED, "Removed"),
)


@dataclass(frozen=True)
class FormattedReport:
    """Changelog grouped for display."""
    added: Tuple[str, ...]
    modified: Tuple[str, ...]
    removed: Tuple[str, ...]
    commits: Tuple[str, ...]
    omitted_commits: int = 0

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.modified or self.removed or self.commits)

    @property
    def text(self) -> str:
        lines: List[str] = []

        if self.commits:
            lines.append("Recent changes:")
            lines.extend(f"  {line}" for line in self.commits)
            if self.omitted_commits:
                lines.append(f"  ... and {self.omitted_commits} more")

        for kind, title in _GROUP_TITLES:
            paths = getattr(self, kind.value)
            if not paths:
                continue
            if lines:
                lines.append("")
            lines.append(f"{title} ({len(paths)}):")
            lines.extend(f"  {path}" for path in paths)

        if not lines:
            lines.append("No file changes.")
        return "\n".join(lines)


def render(entries: Iterable[ChangeLogEntry], commit_summaries: Sequence[str],
           max_commits: int = DEFAULT_MAX_COMMITS) -> FormattedReport:
    """
    Group changed files and cap the commit list.

    ``commit_summaries`` is expected most-recent first, the order
    ``git log`` produces. Pure function: no I/O.
    """
    if max_commits < 0:
        raise ValueError("max_commits must not be negative")

    entries = list(entries)
    groups = {
        kind: tuple(sorted(entry.summary_line for entry in entries if entry.change_kind is kind))
        for kind in ChangeKind
    }
    commits = tuple(commit_summaries[:max_commits])

    return FormattedReport(
        added=groups[ChangeKind.ADDED],
        modified=groups[ChangeKind.MODIFIED],
        removed=groups[ChangeKind.REMOVED],
        commits=commits,
        omitted_commits=max(0, len(commit_summaries) - len(commits)),
    )
