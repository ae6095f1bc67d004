"""cotoken.version — package version string.

Lookup order:
  1) COTOKEN_VERSION from the environment, used verbatim
  2) metadata of the installed 'cotoken' distribution
  3) BASE_VERSION with a '+dev' local tag (source checkout, not installed)
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import metadata
from typing import Optional

# Bump on changes to curve constants, error codes or receipt encoding.
BASE_VERSION = "0.1.0"
DIST_NAME = "cotoken"


def installed_version(dist: str = DIST_NAME) -> Optional[str]:
    try:
        found = metadata.version(dist)
    except metadata.PackageNotFoundError:
        return None
    return found or None


@lru_cache(maxsize=1)
def resolve_version() -> str:
    override = (os.getenv("COTOKEN_VERSION") or "").strip()
    if override:
        return override
    return installed_version() or f"{BASE_VERSION}+dev"


__version__ = resolve_version()

__all__ = ["__version__", "BASE_VERSION", "installed_version", "resolve_version"]
