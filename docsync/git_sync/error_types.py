"""Recovery guidance types for Git operation failures."""

from dataclasses import dataclass
from enum import Enum
from typing import List

from ..errors import ErrorCategory


class RecoveryAction(Enum):
    """What the operator is expected to do about a failure."""
    RERUN_LATER = "rerun_later"
    USER_ACTION_REQUIRED = "user_action_required"
    NONE = "none"


@dataclass
class ErrorResolution:
    """Information about how to resolve a specific error."""
    category: ErrorCategory
    action: RecoveryAction
    user_message: str
    resolution_steps: List[str]
