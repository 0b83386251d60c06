"""Locating ``deps-order.toml``.

The file lives beside a Cargo workspace. The search starts in the directory
of ``--manifest-path`` when one is given, otherwise in the working
directory, and the nearest file on the way to the filesystem root wins.
``DEPS_ORDER_CONFIG`` names a file directly and skips the search.
"""

from __future__ import annotations

import os
from pathlib import Path

from deps_order.domain.errors import InvalidConfiguration

CONFIG_FILENAME = "deps-order.toml"
CONFIG_ENV_VAR = "DEPS_ORDER_CONFIG"


def search_root(manifest_path: Path | None = None) -> Path:
    """Directory the search starts from."""
    if manifest_path is not None:
        return manifest_path.resolve().parent
    return Path.cwd().resolve()


def find_config(start: Path | None = None) -> Path | None:
    """Nearest deps-order.toml at or above *start*, or None.

    Raises:
        InvalidConfiguration: ``DEPS_ORDER_CONFIG`` names a missing file.
    """
    named = os.environ.get(CONFIG_ENV_VAR)
    if named:
        path = Path(named)
        if not path.is_file():
            msg = f"{CONFIG_ENV_VAR} points to a missing file: {named}"
            raise InvalidConfiguration(msg)
        return path

    here = (start or search_root()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
