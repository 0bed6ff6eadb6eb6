"""Cross-platform helpers for docsync."""

import platform
import shutil
import sys
import tempfile
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union


class PlatformType(Enum):
    """Supported platform types."""
    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"
    UNKNOWN = "unknown"


class PlatformInfo:
    """Platform information and utilities."""

    def __init__(self):
        """Initialize platform detection."""
        self._platform_type = self._detect_platform()

    def _detect_platform(self) -> PlatformType:
        """Detect the current platform."""
        system = platform.system().lower()

        if system == "windows":
            return PlatformType.WINDOWS
        elif system == "darwin":
            return PlatformType.MACOS
        elif system == "linux":
            return PlatformType.LINUX
        else:
            return PlatformType.UNKNOWN

    @property
    def platform_type(self) -> PlatformType:
        """Get the detected platform type."""
        return self._platform_type

    @property
    def is_windows(self) -> bool:
        """Check if running on Windows."""
        return self._platform_type == PlatformType.WINDOWS


# Global platform info instance
_platform_info: Optional[PlatformInfo] = None


def get_platform_info() -> PlatformInfo:
    """Get the global platform info instance."""
    global _platform_info
    if _platform_info is None:
        _platform_info = PlatformInfo()
    return _platform_info


def normalize_path(path: Union[str, Path]) -> Path:
    """
    Normalize a path for the current platform.

    Args:
        path: Path to normalize

    Returns:
        Normalized Path object
    """
    if isinstance(path, str):
        path = Path(path)

    # Expand user home directory (~) first, then resolve to absolute path
    return path.expanduser().resolve()


def create_secure_temp_file(directory: Path, prefix: str = '.tmp-', suffix: str = '.tmp') -> tuple[int, Path]:
    """
    Create a secure temporary file in a cross-platform way.

    The file is created in ``directory`` so that a later rename onto its
    final name stays on the same file system.

    Returns:
        Tuple of (file_descriptor, file_path)
    """
    directory.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=str(directory), prefix=prefix, suffix=suffix)
    return fd, Path(temp_path)


def build_hook_command(hook: Path, argument: str) -> List[str]:
    """
    Build the command line that runs a post-update hook.

    Python scripts run under the current interpreter and PowerShell scripts
    under PowerShell; anything else is executed directly.
    """
    suffix = hook.suffix.lower()

    if suffix == ".py":
        return [sys.executable, str(hook), argument]

    if suffix == ".ps1":
        shell = shutil.which("pwsh") or shutil.which("powershell") or "powershell"
        return [shell, "-NoProfile", "-ExecutionPolicy", "Bypass", "-File", str(hook), argument]

    if suffix in (".cmd", ".bat") and get_platform_info().is_windows:
        return ["cmd", "/c", str(hook), argument]

    return [str(hook), argument]
