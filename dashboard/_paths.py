"""Make the repository root importable when a page is run as a script."""

from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent


def ensure_repo_root_on_path() -> Path:
    """Insert the repository root at the front of ``sys.path`` once."""

    root = str(REPO_ROOT)
    if root not in sys.path:
        sys.path.insert(0, root)
    return REPO_ROOT


__all__ = ["REPO_ROOT", "ensure_repo_root_on_path"]
