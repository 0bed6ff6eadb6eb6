"""Persistence of operator decisions in sidecar files."""

import json
import logging
import os
from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from . import __version__
from .git_sync.models import SetupClassification
from .platform import create_secure_temp_file


class DecisionKind(Enum):
    """Independent kinds of stored decision, one sidecar file each."""
    SKIP = "skip"
    REMINDER = "reminder"
    LAST_APPLIED = "last-applied"


SIDECAR_FILES = {
    DecisionKind.SKIP: ".docsync-skip",
    DecisionKind.REMINDER: ".docsync-remind",
    DecisionKind.LAST_APPLIED: ".docsync-last-update.json",
}


@dataclass(frozen=True)
class LastAppliedRecord:
    """What the most recent successful update applied."""
    timestamp: str
    revision: str
    commits_behind: int
    classification: str
    tool_version: str


class DecisionStateStore:
    """
    Reads and writes the skip, reminder and last-update sidecar files.

    A missing file means no decision of that kind exists. Every write goes
    to a temporary file in the same directory which is then renamed over the
    target, so readers only ever see a complete old or a complete new file.
    """

    def __init__(self, state_dir: Path):
        self.state_dir = Path(state_dir)
        self.logger = logging.getLogger('docsync.state')

    def path_for(self, kind: DecisionKind) -> Path:
        return self.state_dir / SIDECAR_FILES[kind]

    def read_skip(self) -> Optional[str]:
        content = self._read(DecisionKind.SKIP)
        if content is None:
            return None
        revision = content.strip()
        return revision or None

    def write_skip(self, revision: str) -> None:
        if not revision:
            raise ValueError("revision must not be empty")
        self._write_atomic(DecisionKind.SKIP, f"{revision}\n")
        self.logger.info(f"Recorded skip for revision {revision[:8]}")

    def read_reminder(self) -> Optional[datetime]:
        content = self._read(DecisionKind.REMINDER)
        if content is None:
            return None
        try:
            return datetime.fromisoformat(content.strip())
        except ValueError:
            self.logger.warning(f"Ignoring unreadable reminder file {self.path_for(DecisionKind.REMINDER)}")
            return None

    def write_reminder(self, at: datetime) -> None:
        self._write_atomic(DecisionKind.REMINDER, f"{at.isoformat(timespec='seconds')}\n")
        self.logger.info(f"Recorded reminder for {at.isoformat(timespec='seconds')}")

    def read_last_applied(self) -> Optional[LastAppliedRecord]:
        content = self._read(DecisionKind.LAST_APPLIED)
        if content is None:
            return None
        try:
            data = json.loads(content)
            return LastAppliedRecord(
                timestamp=str(data["timestamp"]),
                revision=str(data["revision"]),
                commits_behind=int(data.get("commits_behind", 0)),
                classification=str(data.get("classification", "")),
                tool_version=str(data.get("tool_version", "")),
            )
        except (ValueError, KeyError, TypeError):
            self.logger.warning(f"Ignoring unreadable update record {self.path_for(DecisionKind.LAST_APPLIED)}")
            return None

    def write_last_applied(self, revision: str, classification: SetupClassification,
                           commits_behind: int = 0) -> LastAppliedRecord:
        record = LastAppliedRecord(
            timestamp=datetime.now().isoformat(timespec='seconds'),
            revision=revision,
            commits_behind=commits_behind,
            classification=classification.value,
            tool_version=__version__,
        )
        self._write_atomic(DecisionKind.LAST_APPLIED, json.dumps(asdict(record), indent=2) + "\n")
        self.logger.info(f"Recorded successful update to {revision[:8]}")
        return record

    def clear(self, kind: DecisionKind) -> bool:
        """Remove one decision file. Returns False when there was nothing to remove."""
        path = self.path_for(kind)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        self.logger.info(f"Cleared {kind.value} decision ({path.name})")
        return True

    def _read(self, kind: DecisionKind) -> Optional[str]:
        path = self.path_for(kind)
        try:
            return path.read_text(encoding='utf-8')
        except FileNotFoundError:
            return None

    def _write_atomic(self, kind: DecisionKind, content: str) -> None:
        target = self.path_for(kind)
        fd, temp_file = create_secure_temp_file(self.state_dir, prefix=f"{target.name}.", suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_file, target)
        except BaseException:
            temp_file.unlink(missing_ok=True)
            raise
        self.logger.debug(f"Wrote {target}")
