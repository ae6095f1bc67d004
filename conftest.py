"""
Root pytest configuration: deterministic environment for every test run.

- Hash seed and timezone are pinned.
- COTOKEN_* variables from the developer's shell are dropped so that
  cotoken.config always sees its defaults. Tests that need other values set
  them, clear the load_config cache and read them through load_config() or
  pass them to constructors directly.
"""

from __future__ import annotations

import os

os.environ.setdefault("PYTHONHASHSEED", "0")
os.environ["TZ"] = "UTC"
for _k in [k for k in os.environ if k.startswith("COTOKEN_") and k != "COTOKEN_VERSION"]:
    del os.environ[_k]
