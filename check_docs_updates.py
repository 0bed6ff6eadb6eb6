#!/usr/bin/env python3
"""
Documentation update checker.

Thin launcher so the checker can be invoked from a scheduled task without
installing the package:

    python check_docs_updates.py -Scheduled
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from docsync.cli import main


if __name__ == "__main__":
    sys.exit(main())
