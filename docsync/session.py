"""Top-level orchestration of a documentation update check."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Dict, Optional

from .applier import UpdateApplier
from .classifier import SetupClassifier
from .config import Config
from .errors import ClassificationFailure, ExitCode, InvalidMenuChoice, NotAVcsCheckout, error_handler
from .git_sync.client import VersionControlClient
from .git_sync.models import DocsSetup, SetupClassification, UpdateStatus
from .report import render
from .state import DecisionStateStore


@dataclass(frozen=True)
class RunMode:
    """Invocation flags, fixed for the whole run."""
    check_only: bool = False
    auto_update: bool = False
    show_log: bool = False
    scheduled: bool = False

    @property
    def applies_automatically(self) -> bool:
        return self.auto_update and not (self.scheduled or self.check_only)

    @property
    def interactive(self) -> bool:
        return not (self.scheduled or self.check_only or self.auto_update)


class SessionState(Enum):
    INIT = "init"
    CLASSIFY = "classify"
    CHECK_REMOTE = "check_remote"
    UP_TO_DATE = "up_to_date"
    BEHIND = "behind"
    MENU = "menu"
    TERMINAL = "terminal"


class MenuAction(Enum):
    SHOW_LOG = "show_log"
    APPLY = "apply"
    REMIND = "remind"
    SKIP = "skip"
    QUIT = "quit"


MENU_CHOICES = {
    "1": MenuAction.SHOW_LOG, "l": MenuAction.SHOW_LOG,
    "2": MenuAction.APPLY, "a": MenuAction.APPLY,
    "3": MenuAction.REMIND, "r": MenuAction.REMIND,
    "4": MenuAction.SKIP, "s": MenuAction.SKIP,
    "q": MenuAction.QUIT,
}

MENU_TEXT = """
What would you like to do?
  [1] Show changes
  [2] Apply update now
  [3] Remind me later
  [4] Skip this revision
  [q] Quit"""


def parse_menu_choice(raw: str) -> MenuAction:
    """Translate operator input into a menu action."""
    choice = raw.strip().lower()
    try:
        return MENU_CHOICES[choice]
    except KeyError:
        raise InvalidMenuChoice(f"'{raw.strip()}' is not a valid choice, enter 1-4 or q")


class SessionController:
    """
    Drives one run of the checker as an explicit state machine.

    INIT -> CLASSIFY -> CHECK_REMOTE -> UP_TO_DATE | BEHIND -> [MENU] -> TERMINAL

    Every failure raised by the components is converted to a message and an
    exit code here; nothing below this class terminates the process.
    """

    def __init__(self, config: Config, run_mode: RunMode, client: VersionControlClient,
                 classifier: SetupClassifier, store: DecisionStateStore, applier: UpdateApplier,
                 input_func: Callable[[str], str] = input,
                 output: Callable[[str], None] = print,
                 clock: Callable[[], datetime] = datetime.now):
        self.config = config
        self.run_mode = run_mode
        self.client = client
        self.classifier = classifier
        self.store = store
        self.applier = applier
        self.input_func = input_func
        self.output = output
        self.clock = clock
        self.logger = logging.getLogger('docsync.session')

        self.setup: Optional[DocsSetup] = None
        self.status: Optional[UpdateStatus] = None
        self.exit_code = ExitCode.UP_TO_DATE
        self._operation = SessionState.INIT.value

    def run(self) -> ExitCode:
        handlers: Dict[SessionState, Callable[[], SessionState]] = {
            SessionState.INIT: self._init,
            SessionState.CLASSIFY: self._classify,
            SessionState.CHECK_REMOTE: self._check_remote,
            SessionState.UP_TO_DATE: self._up_to_date,
            SessionState.BEHIND: self._behind,
            SessionState.MENU: self._menu,
        }

        state = SessionState.INIT
        try:
            while state is not SessionState.TERMINAL:
                self._operation = state.value
                self.logger.debug(f"Entering state {state.value}")
                state = handlers[state]()
        except KeyboardInterrupt:
            self._say("Interrupted; no changes were recorded.", essential=True)
            return ExitCode.INTERRUPTED
        except Exception as e:
            response = error_handler.handle(e, self._operation)
            self._say(f"WARNING: {response.render()}", essential=True)
            return response.exit_code

        return self.exit_code

    def _finish(self, exit_code: ExitCode) -> SessionState:
        self.exit_code = exit_code
        return SessionState.TERMINAL

    def _say(self, message: str, essential: bool = False) -> None:
        if self.run_mode.scheduled and not essential:
            return
        self.output(message)

    def _init(self) -> SessionState:
        self.logger.info(
            f"Run mode: check_only={self.run_mode.check_only} auto_update={self.run_mode.auto_update} "
            f"show_log={self.run_mode.show_log} scheduled={self.run_mode.scheduled}"
        )
        return SessionState.CLASSIFY

    def _classify(self) -> SessionState:
        self.setup = self.classifier.describe(self.config.project_root)
        if self.setup.classification is SetupClassification.ABSENT:
            raise ClassificationFailure(f"No documentation directory found at {self.setup.docs_path}; nothing to check.")
        return SessionState.CHECK_REMOTE

    def _check_remote(self) -> SessionState:
        repo_path = self.setup.repo_path
        if repo_path is None:
            raise NotAVcsCheckout(f"{self.setup.docs_path} is not a Git checkout of its own")

        local = self.client.current_revision(repo_path)
        self.client.fetch_remote(repo_path)
        remote = self.client.remote_revision(repo_path, self.config.branch_candidates)

        behind = 0
        if local.revision != remote.revision:
            behind = self.client.commits_between(repo_path, local.revision, remote.revision)

        self.status = UpdateStatus(
            is_behind=behind > 0,
            commits_behind=behind,
            local_revision=local,
            remote_revision=remote,
        )
        self.logger.info(f"Local {local.short}, remote {remote.short} ({remote.branch}), {behind} commit(s) behind")
        return SessionState.BEHIND if self.status.is_behind else SessionState.UP_TO_DATE

    def _up_to_date(self) -> SessionState:
        local = self.status.local_revision
        self._say(f"Documentation is up to date ({local.short} on {local.branch or 'detached HEAD'}).")
        return self._finish(ExitCode.UP_TO_DATE)

    def _behind(self) -> SessionState:
        remote = self.status.remote_revision
        mode = self.run_mode

        skipped = self.store.read_skip()
        if skipped == remote.revision and not mode.show_log and not mode.applies_automatically:
            self._say(f"Update to {remote.short} was skipped by user.")
            return self._finish(ExitCode.UP_TO_DATE)

        if mode.scheduled:
            self._say(f"{self.status.commits_behind} documentation update(s) available.", essential=True)
            return self._finish(ExitCode.UPDATES_AVAILABLE)

        if mode.interactive and not mode.show_log:
            reminder = self.store.read_reminder()
            if reminder is not None and reminder > self.clock():
                self._say(
                    f"{self.status.commits_behind} documentation update(s) available; "
                    f"reminder set for {reminder.isoformat(sep=' ', timespec='minutes')}."
                )
                return self._finish(ExitCode.UP_TO_DATE)

        self._say(self._status_line())

        if mode.check_only:
            if mode.show_log:
                self._show_changes()
            return self._finish(ExitCode.UPDATES_AVAILABLE)

        if mode.applies_automatically:
            if skipped == remote.revision:
                self.logger.info(f"Auto-update overrides the stored skip of {remote.short}")
            return self._apply_update()

        return SessionState.MENU

    def _menu(self) -> SessionState:
        remote = self.status.remote_revision

        if self.client.is_working_tree_dirty(self.setup.repo_path):
            self._say(
                f"WARNING: {self.setup.repo_path} has uncommitted changes. "
                "Applying the update will be refused until they are committed or stashed."
            )

        reminder = self.store.read_reminder()
        if reminder is not None:
            when = reminder.isoformat(sep=' ', timespec='minutes')
            if reminder <= self.clock():
                self._say(f"The reminder set for {when} is due.")
            else:
                self._say(f"A reminder was set for {when}.")

        while True:
            self._say(MENU_TEXT)
            try:
                raw = self.input_func("Choice: ")
            except EOFError:
                self._say("No input available; leaving documentation unchanged.")
                return self._finish(ExitCode.UP_TO_DATE)

            try:
                action = parse_menu_choice(raw)
            except InvalidMenuChoice as e:
                self._say(e.message)
                continue

            if action is MenuAction.SHOW_LOG:
                self._show_changes()
                continue

            if action is MenuAction.APPLY:
                return self._apply_update()

            if action is MenuAction.REMIND:
                at = self.clock() + timedelta(hours=self.config.remind_interval_hours)
                self.store.write_reminder(at)
                self._say(f"OK, you will be reminded after {at.isoformat(sep=' ', timespec='minutes')}.")
                return self._finish(ExitCode.UP_TO_DATE)

            if action is MenuAction.SKIP:
                self.store.write_skip(remote.revision)
                self._say(f"Revision {remote.short} will be skipped until upstream moves on.")
                return self._finish(ExitCode.UP_TO_DATE)

            return self._finish(ExitCode.UP_TO_DATE)

    def _apply_update(self) -> SessionState:
        self._operation = "apply"
        result = self.applier.apply(self.setup, self.status.remote_revision, self.status.commits_behind)
        if not result.success:
            self._say(f"WARNING: {result.message}", essential=True)
            return self._finish(ExitCode.UPDATE_FAILED)

        self._say(result.message)
        if result.hook_exit_code not in (None, 0):
            self._say(f"Post-update hook exited with code {result.hook_exit_code}; see the log for details.")
        return self._finish(ExitCode.UP_TO_DATE)

    def _status_line(self) -> str:
        status = self.status
        return (
            f"Documentation updates available: {status.commits_behind} commit(s) behind "
            f"{self.config.remote_name}/{status.remote_revision.branch} "
            f"(local {status.local_revision.short}, remote {status.remote_revision.short})."
        )

    def _show_changes(self) -> None:
        repo_path = self.setup.repo_path
        local = self.status.local_revision.revision
        remote = self.status.remote_revision.revision
        report = render(
            self.client.changed_files(repo_path, local, remote),
            self.client.commit_summaries(repo_path, local, remote),
            self.config.max_commits,
        )
        self._say(report.text)
