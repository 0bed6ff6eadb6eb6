"""Error taxonomy and boundary error handling for docsync."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Dict, Any, List, Optional


class ExitCode(IntEnum):
    """Process exit codes produced by a session."""
    UP_TO_DATE = 0
    UPDATES_AVAILABLE = 1
    CHECK_FAILED = 2
    UPDATE_FAILED = 3
    INTERRUPTED = 130


class ErrorCategory(Enum):
    """Categories of errors for structured error handling."""
    CLASSIFICATION = "classification"
    REPOSITORY = "repository"
    NETWORK = "network"
    AUTHENTICATION = "authentication"
    BRANCH_DETECTION = "branch_detection"
    DIRTY_TREE = "dirty_tree"
    MERGE_CONFLICT = "merge_conflict"
    PERMISSION = "permission"
    UPDATE = "update"
    INPUT = "input"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


class DocSyncError(Exception):
    """Base class for all failures raised below the session boundary."""

    category = ErrorCategory.UNKNOWN
    error_code = "DOCSYNC_ERROR"

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ClassificationFailure(DocSyncError):
    category = ErrorCategory.CLASSIFICATION
    error_code = "NO_DOCS_SETUP"


class NotAVcsCheckout(DocSyncError):
    category = ErrorCategory.REPOSITORY
    error_code = "NOT_A_CHECKOUT"


class NetworkUnavailable(DocSyncError):
    """Fetch failed because the remote could not be reached in time."""
    category = ErrorCategory.NETWORK
    error_code = "NETWORK_UNAVAILABLE"


class AuthRequired(NetworkUnavailable):
    """The remote refused the fetch for lack of credentials."""
    category = ErrorCategory.AUTHENTICATION
    error_code = "AUTH_REQUIRED"


class NoMatchingBranch(DocSyncError):
    category = ErrorCategory.BRANCH_DETECTION
    error_code = "NO_MATCHING_BRANCH"


class DirtyWorkingTree(DocSyncError):
    category = ErrorCategory.DIRTY_TREE
    error_code = "DIRTY_WORKING_TREE"


class MergeConflict(DocSyncError):
    category = ErrorCategory.MERGE_CONFLICT
    error_code = "MERGE_CONFLICT"


class PermissionDenied(DocSyncError):
    category = ErrorCategory.PERMISSION
    error_code = "PERMISSION_DENIED"


class UpdateFailed(DocSyncError):
    """An update failed for a reason not covered by a more specific error."""
    category = ErrorCategory.UPDATE
    error_code = "UPDATE_FAILED"


class InvalidMenuChoice(DocSyncError):
    category = ErrorCategory.INPUT
    error_code = "INVALID_MENU_CHOICE"


_EXIT_CODES = {
    ErrorCategory.CLASSIFICATION: ExitCode.UP_TO_DATE,
    ErrorCategory.DIRTY_TREE: ExitCode.UPDATE_FAILED,
    ErrorCategory.MERGE_CONFLICT: ExitCode.UPDATE_FAILED,
    ErrorCategory.PERMISSION: ExitCode.UPDATE_FAILED,
    ErrorCategory.UPDATE: ExitCode.UPDATE_FAILED,
}


@dataclass
class ErrorResponse:
    """Operator facing description of a failure."""
    error_code: str
    message: str
    category: str
    exit_code: ExitCode
    timestamp: str
    resolution_steps: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error response to dictionary format."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "category": self.category,
            "exit_code": int(self.exit_code),
            "timestamp": self.timestamp,
            "resolution_steps": list(self.resolution_steps),
        }

    def render(self) -> str:
        """Format the response for console output."""
        lines = [self.message]
        if self.resolution_steps:
            lines.append("To resolve:")
            lines.extend(f"  - {step}" for step in self.resolution_steps)
        return "\n".join(lines)


class ErrorHandler:
    """Converts exceptions reaching the session boundary into responses."""

    def __init__(self):
        self.logger = logging.getLogger('docsync.error_handler')

    def handle(self, error: Exception, operation: str) -> ErrorResponse:
        """Build an ErrorResponse for ``error`` and log it."""
        from .git_sync.error_strategies import build_error_strategies

        if isinstance(error, DocSyncError):
            category = error.category
            error_code = error.error_code
            message = error.message
        elif isinstance(error, PermissionError):
            category = ErrorCategory.PERMISSION
            error_code = "FILE_PERMISSION_DENIED"
            message = f"Permission denied: {error}"
        elif isinstance(error, OSError):
            category = ErrorCategory.UNKNOWN
            error_code = "FILE_IO_ERROR"
            message = f"File system error: {error}"
        else:
            category = ErrorCategory.UNKNOWN
            error_code = "UNEXPECTED_ERROR"
            message = f"Unexpected error during {operation}: {error}"

        resolution = build_error_strategies().get(category)
        response = ErrorResponse(
            error_code=error_code,
            message=message,
            category=category.value,
            exit_code=_EXIT_CODES.get(category, ExitCode.CHECK_FAILED),
            timestamp=datetime.now().isoformat(),
            resolution_steps=list(resolution.resolution_steps) if resolution else [],
        )

        details = getattr(error, "details", None)
        if category is ErrorCategory.UNKNOWN:
            self.logger.error(f"[{operation}] {message}", exc_info=error)
        else:
            self.logger.warning(f"[{operation}] {error_code}: {message}")
        if details:
            self.logger.debug(f"[{operation}] details: {details}")

        return response


# Initialize global error handler
error_handler = ErrorHandler()
