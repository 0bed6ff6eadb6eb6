"""Command line entry point for the documentation update checker."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .applier import UpdateApplier
from .classifier import SetupClassifier
from .config import Config, VALID_LOG_LEVELS, load_configuration
from .errors import ExitCode
from .git_sync.client import GitVersionControlClient
from .session import RunMode, SessionController
from .state import DecisionKind, DecisionStateStore


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str) -> None:
    """Configure the docsync loggers to write to stderr."""
    class StructuredFormatter(logging.Formatter):
        def format(self, record):
            if hasattr(record, 'operation'):
                record.msg = f"[{record.operation}] {record.msg}"
            return super().format(record)

    logger = logging.getLogger('docsync')
    logger.setLevel(getattr(logging, level))

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(StructuredFormatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(handler)
        logger.propagate = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docsync",
        description="Check the local documentation copy against its upstream repository.",
    )
    parser.add_argument("--check-only", "-CheckOnly", dest="check_only", action="store_true",
                        help="report whether updates are available without prompting")
    parser.add_argument("--auto-update", "-AutoUpdate", dest="auto_update", action="store_true",
                        help="apply available updates without prompting")
    parser.add_argument("--show-log", "-ShowLog", dest="show_log", action="store_true",
                        help="include the changelog in the report")
    parser.add_argument("--scheduled", "-Scheduled", dest="scheduled", action="store_true",
                        help="silent mode for timer invocation; exit 0 when up to date, 1 when updates exist")
    parser.add_argument("--project-root", type=Path, default=None,
                        help="host project directory (default: current directory)")
    parser.add_argument("--status", action="store_true",
                        help="print the stored decisions and last update record, then exit")
    parser.add_argument("--clear", choices=[kind.value for kind in DecisionKind],
                        help="remove one stored decision, then exit")
    parser.add_argument("--log-level", choices=VALID_LOG_LEVELS, default=None,
                        help="override DOCSYNC_LOG_LEVEL")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def run_mode_from_args(args: argparse.Namespace) -> RunMode:
    return RunMode(
        check_only=args.check_only,
        auto_update=args.auto_update,
        show_log=args.show_log,
        scheduled=args.scheduled,
    )


def print_status(store: DecisionStateStore) -> None:
    skip = store.read_skip()
    reminder = store.read_reminder()
    record = store.read_last_applied()

    print(f"Skipped revision: {skip or 'none'}")
    print(f"Reminder:         {reminder.isoformat(sep=' ', timespec='minutes') if reminder else 'none'}")
    if record is None:
        print("Last update:      none recorded")
    else:
        print(
            f"Last update:      {record.revision[:8]} at {record.timestamp} "
            f"({record.commits_behind} commit(s), {record.classification}, docsync {record.tool_version})"
        )


def build_controller(config: Config, run_mode: RunMode) -> SessionController:
    client = GitVersionControlClient(remote_name=config.remote_name, fetch_timeout=config.fetch_timeout)
    store = DecisionStateStore(config.state_dir)
    return SessionController(
        config=config,
        run_mode=run_mode,
        client=client,
        classifier=SetupClassifier(config.docs_dir_name, config.remote_name),
        store=store,
        applier=UpdateApplier(client, store, config.post_update_hook, config.hook_timeout),
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, run one check and return the process exit code."""
    args = build_parser().parse_args(argv)
    run_mode = run_mode_from_args(args)

    try:
        config = load_configuration(args.project_root)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return int(ExitCode.CHECK_FAILED)

    level = args.log_level or ("WARNING" if run_mode.scheduled else config.log_level)
    setup_logging(level)

    store = DecisionStateStore(config.state_dir)
    if args.status:
        print_status(store)
        return int(ExitCode.UP_TO_DATE)
    if args.clear:
        kind = DecisionKind(args.clear)
        removed = store.clear(kind)
        print(f"Cleared {kind.value} decision." if removed else f"No {kind.value} decision stored.")
        return int(ExitCode.UP_TO_DATE)

    return int(build_controller(config, run_mode).run())


if __name__ == "__main__":
    sys.exit(main())
