"""
cotoken.config — ambient runtime configuration for the ledger.

Values come from COTOKEN_* environment variables; anything unset or unparsable
falls back to the default, and integers are clamped into a sane range.

  - COTOKEN_ADDRESS_LEN          (int)    default: 20     range 1..64
  - COTOKEN_MAX_BALANCE_BITS     (int)    default: 256    range 64..512
  - COTOKEN_MAX_EVENTS_PER_CALL  (int)    default: 64     range 4..4096
  - COTOKEN_LOG_LEVEL            (str)    default: INFO
  - COTOKEN_STRICT               (bool)   default: true   (1/0, yes/no, on/off)

The bonding-curve constants and the supply cap are NOT configuration; they live
in cotoken.curve and are fixed for every ledger instance.

The environment is read once. load_config.cache_clear() makes later load_config()
calls re-read it; modules that bound CFG at import keep the values they saw.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict

_BOOL_TRUE = {"1", "true", "t", "yes", "y", "on"}
_BOOL_FALSE = {"0", "false", "f", "no", "n", "off"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    if val in _BOOL_TRUE:
        return True
    if val in _BOOL_FALSE:
        return False
    return default


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


def _env_log_level(name: str, default: str) -> str:
    raw = (os.getenv(name) or "").strip().upper()
    if raw and isinstance(logging.getLevelName(raw), int):
        return raw
    return default


@dataclass(frozen=True)
class LedgerConfig:
    address_len: int
    max_balance_bits: int
    max_events_per_call: int
    log_level: str
    strict_mode: bool

    @property
    def max_amount(self) -> int:
        return (1 << self.max_balance_bits) - 1

    def as_dict(self) -> Dict[str, Any]:
        return {
            "address_len": self.address_len,
            "max_balance_bits": self.max_balance_bits,
            "max_events_per_call": self.max_events_per_call,
            "log_level": self.log_level,
            "strict_mode": self.strict_mode,
        }


@lru_cache(maxsize=1)
def load_config() -> LedgerConfig:
    """
    Build and cache a LedgerConfig from environment + safe defaults.
    """
    return LedgerConfig(
        address_len=_env_int("COTOKEN_ADDRESS_LEN", 20, min_v=1, max_v=64),
        max_balance_bits=_env_int("COTOKEN_MAX_BALANCE_BITS", 256, min_v=64, max_v=512),
        max_events_per_call=_env_int("COTOKEN_MAX_EVENTS_PER_CALL", 64, min_v=4, max_v=4096),
        log_level=_env_log_level("COTOKEN_LOG_LEVEL", "INFO"),
        strict_mode=_env_bool("COTOKEN_STRICT", True),
    )


# Module-level singleton for convenience; load_config() stays the canonical accessor.
CFG: LedgerConfig = load_config()

__all__ = ["LedgerConfig", "load_config", "CFG"]
