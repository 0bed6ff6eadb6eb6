#!/usr/bin/env python3
"""Tests for the sidecar decision files."""

import json
import os
import shutil
import sys
import tempfile
import unittest
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).parent))

from docsync import __version__
from docsync.git_sync.models import SetupClassification
from docsync.state import DecisionKind, DecisionStateStore


REVISION = "0123456789abcdef0123456789abcdef01234567"


class TestDecisionStateStore(unittest.TestCase):

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.store = DecisionStateStore(self.temp_dir)

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_absent_files_mean_no_decision(self):
        self.assertIsNone(self.store.read_skip())
        self.assertIsNone(self.store.read_reminder())
        self.assertIsNone(self.store.read_last_applied())
        self.assertEqual(list(self.temp_dir.iterdir()), [])

    def test_skip_round_trip_is_plain_text(self):
        self.store.write_skip(REVISION)

        self.assertEqual(self.store.read_skip(), REVISION)
        self.assertEqual(self.store.path_for(DecisionKind.SKIP).read_text().strip(), REVISION)

    def test_skip_is_overwritten(self):
        self.store.write_skip(REVISION)
        self.store.write_skip("f" * 40)

        self.assertEqual(self.store.read_skip(), "f" * 40)

    def test_reminder_round_trip(self):
        at = datetime(2026, 10, 19, 9, 30)
        self.store.write_reminder(at)

        self.assertEqual(self.store.read_reminder(), at)

    def test_hand_edited_garbage_reminder_is_ignored(self):
        self.store.path_for(DecisionKind.REMINDER).write_text("next tuesday\n")

        self.assertIsNone(self.store.read_reminder())

    def test_last_applied_record_fields(self):
        self.store.write_last_applied(REVISION, SetupClassification.LINKED_REFERENCE, commits_behind=3)

        data = json.loads(self.store.path_for(DecisionKind.LAST_APPLIED).read_text())
        self.assertEqual(data["revision"], REVISION)
        self.assertEqual(data["commits_behind"], 3)
        self.assertEqual(data["classification"], "linked_reference")
        self.assertEqual(data["tool_version"], __version__)
        self.assertIn("timestamp", data)

        record = self.store.read_last_applied()
        self.assertEqual(record.revision, REVISION)
        self.assertEqual(record.commits_behind, 3)

    def test_corrupt_last_applied_is_ignored(self):
        self.store.path_for(DecisionKind.LAST_APPLIED).write_text("{not json")

        self.assertIsNone(self.store.read_last_applied())

    def test_partial_state_is_valid(self):
        self.store.write_skip(REVISION)

        self.assertIsNone(self.store.read_last_applied())
        self.assertIsNone(self.store.read_reminder())

    def test_clear_removes_only_one_kind(self):
        self.store.write_skip(REVISION)
        self.store.write_reminder(datetime(2026, 1, 1))

        self.assertTrue(self.store.clear(DecisionKind.SKIP))
        self.assertFalse(self.store.clear(DecisionKind.SKIP))
        self.assertIsNone(self.store.read_skip())
        self.assertIsNotNone(self.store.read_reminder())

    def test_failed_write_keeps_previous_file(self):
        self.store.write_skip(REVISION)

        with patch("docsync.state.os.replace", side_effect=OSError("disk full")):
            with self.assertRaises(OSError):
                self.store.write_skip("f" * 40)

        self.assertEqual(self.store.read_skip(), REVISION)
        leftovers = [p.name for p in self.temp_dir.iterdir() if p.name.endswith(".tmp")]
        self.assertEqual(leftovers, [])

    def test_write_creates_state_directory(self):
        store = DecisionStateStore(self.temp_dir / "nested" / "state")

        store.write_skip(REVISION)

        self.assertTrue((self.temp_dir / "nested" / "state" / ".docsync-skip").exists())

    def test_empty_skip_revision_rejected(self):
        with self.assertRaises(ValueError):
            self.store.write_skip("")
        self.assertFalse(os.path.exists(self.store.path_for(DecisionKind.SKIP)))


if __name__ == "__main__":
    unittest.main(verbosity=2)
