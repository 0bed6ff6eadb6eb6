"""Mapping of Git failures onto the docsync error taxonomy."""

import logging
from typing import Dict

from git import GitCommandError

from ..errors import (
    AuthRequired, DocSyncError, ErrorCategory, MergeConflict,
    NetworkUnavailable, PermissionDenied, UpdateFailed,
)
from .error_types import ErrorResolution, RecoveryAction


def build_error_strategies() -> Dict[ErrorCategory, ErrorResolution]:
    """Build operator guidance for each error category."""
    return {
        ErrorCategory.NETWORK: ErrorResolution(
            category=ErrorCategory.NETWORK,
            action=RecoveryAction.RERUN_LATER,
            user_message="Unable to check for documentation updates",
            resolution_steps=[
                "Check your internet connection",
                "Verify the documentation remote is reachable",
                "Run the check again later"
            ]
        ),

        ErrorCategory.AUTHENTICATION: ErrorResolution(
            category=ErrorCategory.AUTHENTICATION,
            action=RecoveryAction.USER_ACTION_REQUIRED,
            user_message="The documentation remote requires authentication",
            resolution_steps=[
                "Verify your Git credentials are configured correctly",
                "Check that you have read access to the documentation repository",
                "Run 'git fetch' manually inside the documentation checkout to refresh credentials"
            ]
        ),

        ErrorCategory.CLASSIFICATION: ErrorResolution(
            category=ErrorCategory.CLASSIFICATION,
            action=RecoveryAction.NONE,
            user_message="No documentation setup was found",
            resolution_steps=[
                "Clone or add the documentation repository as a submodule to enable update checks"
            ]
        ),

        ErrorCategory.REPOSITORY: ErrorResolution(
            category=ErrorCategory.REPOSITORY,
            action=RecoveryAction.USER_ACTION_REQUIRED,
            user_message="The documentation directory is not a usable Git checkout",
            resolution_steps=[
                "Re-clone the documentation repository or re-add it as a submodule",
                "Run 'git status' inside the documentation directory to inspect it"
            ]
        ),

        ErrorCategory.BRANCH_DETECTION: ErrorResolution(
            category=ErrorCategory.BRANCH_DETECTION,
            action=RecoveryAction.USER_ACTION_REQUIRED,
            user_message="No upstream branch could be found",
            resolution_steps=[
                "Check which branches the remote publishes with 'git branch -r'",
                "Set DOCSYNC_BRANCHES to the upstream branch name"
            ]
        ),

        ErrorCategory.DIRTY_TREE: ErrorResolution(
            category=ErrorCategory.DIRTY_TREE,
            action=RecoveryAction.USER_ACTION_REQUIRED,
            user_message="The documentation has local modifications",
            resolution_steps=[
                "Commit or stash your local documentation edits",
                "Or discard them with 'git checkout -- .' inside the documentation checkout",
                "Then run the update again"
            ]
        ),

        ErrorCategory.MERGE_CONFLICT: ErrorResolution(
            category=ErrorCategory.MERGE_CONFLICT,
            action=RecoveryAction.USER_ACTION_REQUIRED,
            user_message="The update cannot be applied as a fast-forward",
            resolution_steps=[
                "Local commits diverge from upstream",
                "Rebase or reset the documentation checkout onto the upstream branch",
                "Then run the update again"
            ]
        ),

        ErrorCategory.PERMISSION: ErrorResolution(
            category=ErrorCategory.PERMISSION,
            action=RecoveryAction.USER_ACTION_REQUIRED,
            user_message="Permission denied while updating the documentation",
            resolution_steps=[
                "Check file permissions on the documentation directory",
                "Close editors or tools that may hold files open"
            ]
        ),
    }


def build_error_patterns() -> Dict[str, ErrorCategory]:
    """Build mapping of Git stderr patterns to categories. First match wins."""
    return {
        # Authentication errors
        "authentication failed": ErrorCategory.AUTHENTICATION,
        "could not read username": ErrorCategory.AUTHENTICATION,
        "permission denied (publickey": ErrorCategory.AUTHENTICATION,
        "invalid credentials": ErrorCategory.AUTHENTICATION,
        "returned error: 403": ErrorCategory.AUTHENTICATION,
        "returned error: 401": ErrorCategory.AUTHENTICATION,

        # Network errors
        "timeout": ErrorCategory.NETWORK,
        "timed out": ErrorCategory.NETWORK,
        "connection refused": ErrorCategory.NETWORK,
        "network is unreachable": ErrorCategory.NETWORK,
        "no route to host": ErrorCategory.NETWORK,
        "could not resolve host": ErrorCategory.NETWORK,
        "temporary failure in name resolution": ErrorCategory.NETWORK,
        "could not read from remote repository": ErrorCategory.NETWORK,
        "unable to access": ErrorCategory.NETWORK,

        # File system permissions
        "permission denied": ErrorCategory.PERMISSION,
        "unable to create": ErrorCategory.PERMISSION,
        "unable to unlink": ErrorCategory.PERMISSION,
        "read-only file system": ErrorCategory.PERMISSION,

        # Merge conflicts
        "not possible to fast-forward": ErrorCategory.MERGE_CONFLICT,
        "diverging branches": ErrorCategory.MERGE_CONFLICT,
        "automatic merge failed": ErrorCategory.MERGE_CONFLICT,
        "would be overwritten": ErrorCategory.MERGE_CONFLICT,
        "unmerged paths": ErrorCategory.MERGE_CONFLICT,
        "merge conflict": ErrorCategory.MERGE_CONFLICT,
        "conflict (": ErrorCategory.MERGE_CONFLICT,
    }


def categorize_git_error(error_message: str) -> ErrorCategory:
    """Categorize a Git error message using the pattern table."""
    logger = logging.getLogger('docsync.git_sync.error_strategies')

    if not error_message:
        return ErrorCategory.UNKNOWN

    error_lower = error_message.lower()
    for pattern, category in build_error_patterns().items():
        if pattern in error_lower:
            logger.debug(f"Categorized error as {category}: pattern '{pattern}' found")
            return category

    return ErrorCategory.UNKNOWN


def _error_text(error: GitCommandError) -> str:
    """Git's own diagnostics, falling back to the full error when stderr is empty."""
    stderr = error.stderr or ""
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", errors="replace")
    stderr = stderr.strip()
    # GitPython stores stderr as "stderr: '...'"
    if stderr.startswith("stderr: '") and stderr.endswith("'"):
        stderr = stderr[len("stderr: '"):-1].strip()
    return stderr or str(error)


def translate_fetch_error(error: GitCommandError) -> DocSyncError:
    """Every fetch failure is a NetworkUnavailable, refined to AuthRequired when credentials are the cause."""
    text = _error_text(error)
    if categorize_git_error(text) is ErrorCategory.AUTHENTICATION:
        return AuthRequired("Authentication is required to fetch the documentation remote", details=text)
    return NetworkUnavailable("Unable to reach the documentation remote", details=text)


def translate_update_error(error: GitCommandError) -> DocSyncError:
    """Map a failed update command onto MergeConflict, PermissionDenied or UpdateFailed."""
    text = _error_text(error)
    category = categorize_git_error(text)
    if category is ErrorCategory.MERGE_CONFLICT:
        return MergeConflict(f"Update could not be applied as a fast-forward: {text}", details=text)
    if category in (ErrorCategory.PERMISSION, ErrorCategory.AUTHENTICATION):
        return PermissionDenied(f"Permission denied while updating: {text}", details=text)
    return UpdateFailed(f"Update failed: {text}", details=text)
