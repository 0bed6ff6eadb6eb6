#!/usr/bin/env python3
"""Tests for argument parsing, configuration loading and the CLI entry point."""

import io
import os
import shutil
import sys
import tempfile
import unittest
from contextlib import redirect_stdout, redirect_stderr
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).parent))

from docsync.cli import build_parser, main, run_mode_from_args
from docsync.config import Config, load_configuration
from docsync.errors import ExitCode
from docsync.state import DecisionStateStore


def clean_environment():
    """Environment without any DOCSYNC_* variables."""
    return {key: value for key, value in os.environ.items() if not key.startswith("DOCSYNC_")}


class TestArgumentParsing(unittest.TestCase):

    def test_defaults_are_interactive(self):
        mode = run_mode_from_args(build_parser().parse_args([]))

        self.assertTrue(mode.interactive)
        self.assertFalse(mode.applies_automatically)

    def test_powershell_style_flags(self):
        args = build_parser().parse_args(["-CheckOnly", "-ShowLog"])
        mode = run_mode_from_args(args)

        self.assertTrue(mode.check_only)
        self.assertTrue(mode.show_log)
        self.assertFalse(mode.interactive)

    def test_long_flags(self):
        mode = run_mode_from_args(build_parser().parse_args(["--auto-update"]))

        self.assertTrue(mode.applies_automatically)

    def test_scheduled_overrides_other_flags(self):
        mode = run_mode_from_args(build_parser().parse_args(["-Scheduled", "-AutoUpdate"]))

        self.assertTrue(mode.scheduled)
        self.assertFalse(mode.applies_automatically)
        self.assertFalse(mode.interactive)

    def test_clear_choices(self):
        args = build_parser().parse_args(["--clear", "last-applied"])

        self.assertEqual(args.clear, "last-applied")
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                build_parser().parse_args(["--clear", "everything"])


class TestConfiguration(unittest.TestCase):

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_defaults(self):
        with patch.dict(os.environ, clean_environment(), clear=True):
            config = load_configuration(self.temp_dir)

        self.assertEqual(config.docs_dir_name, "claude_docs")
        self.assertEqual(config.branch_candidates, ("main", "master"))
        self.assertEqual(config.fetch_timeout, 30.0)
        self.assertEqual(config.max_commits, 10)
        self.assertEqual(config.state_dir, config.project_root)
        self.assertIsNone(config.post_update_hook)

    def test_environment_overrides(self):
        env = clean_environment()
        env.update({
            "DOCSYNC_DOCS_DIR": "docs",
            "DOCSYNC_BRANCHES": "trunk, main",
            "DOCSYNC_FETCH_TIMEOUT": "5",
            "DOCSYNC_LOG_LEVEL": "debug",
        })
        with patch.dict(os.environ, env, clear=True):
            config = load_configuration(self.temp_dir)

        self.assertEqual(config.docs_dir_name, "docs")
        self.assertEqual(config.branch_candidates, ("trunk", "main"))
        self.assertEqual(config.fetch_timeout, 5.0)
        self.assertEqual(config.log_level, "DEBUG")

    def test_project_env_file_is_read(self):
        (self.temp_dir / ".env").write_text("DOCSYNC_REMIND_HOURS=6\n")

        with patch.dict(os.environ, clean_environment(), clear=True):
            config = load_configuration(self.temp_dir)

        self.assertEqual(config.remind_interval_hours, 6.0)

    def test_invalid_values_rejected(self):
        with self.assertRaises(ValueError):
            Config(project_root=self.temp_dir, fetch_timeout=0)
        with self.assertRaises(ValueError):
            Config(project_root=self.temp_dir, log_level="LOUD")
        with self.assertRaises(ValueError):
            Config(project_root=self.temp_dir, branch_candidates="")

        env = clean_environment()
        env["DOCSYNC_MAX_COMMITS"] = "many"
        with patch.dict(os.environ, env, clear=True):
            with self.assertRaises(ValueError):
                load_configuration(self.temp_dir)


class TestMain(unittest.TestCase):

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.env = patch.dict(os.environ, clean_environment(), clear=True)
        self.env.start()

    def tearDown(self):
        self.env.stop()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _main(self, *argv):
        stdout = io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(io.StringIO()):
            exit_code = main(["--project-root", str(self.temp_dir), *argv])
        return exit_code, stdout.getvalue()

    def test_project_without_docs_exits_zero(self):
        exit_code, out = self._main("--check-only")

        self.assertEqual(exit_code, ExitCode.UP_TO_DATE)
        self.assertIn("No documentation directory", out)

    def test_status_with_no_decisions(self):
        exit_code, out = self._main("--status")

        self.assertEqual(exit_code, 0)
        self.assertIn("Skipped revision: none", out)
        self.assertIn("Last update:      none recorded", out)

    def test_clear_skip(self):
        DecisionStateStore(self.temp_dir).write_skip("c" * 40)

        exit_code, out = self._main("--clear", "skip")

        self.assertEqual(exit_code, 0)
        self.assertIn("Cleared skip decision", out)
        self.assertIsNone(DecisionStateStore(self.temp_dir).read_skip())

    def test_invalid_configuration_exit_code(self):
        os.environ["DOCSYNC_FETCH_TIMEOUT"] = "-1"

        exit_code, _ = self._main()

        self.assertEqual(exit_code, ExitCode.CHECK_FAILED)


if __name__ == "__main__":
    unittest.main(verbosity=2)
