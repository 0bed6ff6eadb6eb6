"""
Documentation synchronization checker.

Detects how a local documentation copy is attached to its upstream repository,
reports whether upstream has moved on, and applies or defers the update while
remembering the operator's decision across runs.
"""

__version__ = "1.0.0"
__author__ = "docsync Team"
__description__ = "Documentation synchronization checker"

from .cli import main

__all__ = ["main", "__version__"]
