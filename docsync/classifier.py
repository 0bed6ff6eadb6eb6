"""Detection of how the documentation tree is attached to its source."""

import logging
import os
from pathlib import Path
from typing import Optional

from git import Repo, GitConfigParser, InvalidGitRepositoryError, NoSuchPathError

from .git_sync.models import DocsSetup, SetupClassification


class SetupClassifier:
    """
    Classifies the documentation layout of a project.

    Checks run in a fixed order and the first match wins:

    1. no docs directory                               -> ABSENT
    2. host ``.gitmodules`` declares the docs path     -> LINKED_REFERENCE
    3. docs directory is a checkout with a usable remote -> EMBEDDED_COPY
    4. anything else                                   -> FREESTANDING_CLONE

    A free-standing copy only gets a ``repo_path`` when the docs directory is
    the root of its own working tree, never the host project checkout.

    A submodule checkout also carries its own Git metadata, so the
    ``.gitmodules`` check has to come before the embedded-copy check.
    """

    def __init__(self, docs_dir_name: str = "claude_docs", remote_name: str = "origin"):
        self.docs_dir_name = docs_dir_name
        self.remote_name = remote_name
        self.logger = logging.getLogger('docsync.classifier')

    def classify(self, project_root: Path) -> SetupClassification:
        return self.describe(project_root).classification

    def describe(self, project_root: Path) -> DocsSetup:
        """Classify the project and resolve the checkout Git should operate on."""
        project_root = Path(project_root)
        docs_path = project_root / self.docs_dir_name

        if not docs_path.is_dir():
            self.logger.debug(f"No documentation directory at {docs_path}")
            return DocsSetup(SetupClassification.ABSENT, project_root, docs_path)

        if self._declared_as_submodule(project_root, docs_path):
            classification = SetupClassification.LINKED_REFERENCE
            repo_path = docs_path
        elif self._has_usable_remote(docs_path):
            classification = SetupClassification.EMBEDDED_COPY
            repo_path = docs_path
        else:
            classification = SetupClassification.FREESTANDING_CLONE
            repo_path = self._own_checkout(docs_path)

        self.logger.info(f"Documentation setup at {docs_path}: {classification.value}")
        return DocsSetup(classification, project_root, docs_path, repo_path)

    def _declared_as_submodule(self, project_root: Path, docs_path: Path) -> bool:
        gitmodules = project_root / ".gitmodules"
        if not gitmodules.is_file():
            return False

        docs_rel = Path(os.path.relpath(docs_path, project_root)).as_posix()
        parser = GitConfigParser(str(gitmodules), read_only=True)
        try:
            for section in parser.sections():
                if not section.startswith("submodule"):
                    continue
                declared = parser.get_value(section, "path", default="")
                if str(declared).strip().strip("/") == docs_rel:
                    self.logger.debug(f"{docs_rel} is declared in {gitmodules} ({section})")
                    return True
        finally:
            parser.release()
        return False

    def _has_usable_remote(self, docs_path: Path) -> bool:
        if not (docs_path / ".git").exists():
            return False

        try:
            repo = Repo(docs_path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            self.logger.debug(f"{docs_path} has Git metadata but cannot be opened: {e}")
            return False

        try:
            remote = repo.remote(self.remote_name)
        except ValueError:
            return False
        return bool(remote.config_reader.get_value("url", default=""))

    def _own_checkout(self, docs_path: Path) -> Optional[Path]:
        """
        Return ``docs_path`` when it is the root of its own working tree.

        A docs folder that is merely tracked by the host project shares the
        host history, so comparing against the host remote would report
        application commits as documentation updates.
        """
        try:
            repo = Repo(docs_path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError):
            self.logger.debug(f"{docs_path} is not inside any Git checkout")
            return None

        try:
            if not repo.working_tree_dir:
                return None
            root = Path(repo.working_tree_dir).resolve()
        finally:
            repo.close()

        if root != docs_path.resolve():
            self.logger.info(f"{docs_path} is a plain folder inside the {root} checkout; not using its history")
            return None
        return docs_path
