"""Locating kbcheck.toml.

Resolution order: the ``KBCHECK_CONFIG`` environment variable, then the
nearest ``kbcheck.toml`` in the start directory or any parent. The
``--config`` flag bypasses this module entirely.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "kbcheck.toml"
CONFIG_ENV_VAR = "KBCHECK_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file governing *start* (default: cwd), or None.

    A set ``KBCHECK_CONFIG`` names the file directly and disables the
    walk-up, even when that file does not exist.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        return path if path.is_file() else None

    origin = (start or Path.cwd()).resolve()
    for directory in (origin, *origin.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
