"""
cotoken.status — canonical call status enum.

CallStatus models the *logical* outcome of one ledger invocation:
  - SUCCESS : the call completed and its effects are committed
  - REVERT  : a precondition failed; the call had no effect

String forms:
  - str(CallStatus.SUCCESS) -> "success"   (good for logs)
  - int(CallStatus.SUCCESS.wire) -> 0      (canonical CBOR receipts)
"""

from __future__ import annotations

from enum import Enum


class CallStatus(str, Enum):
    SUCCESS = "success"
    REVERT = "revert"

    @property
    def wire(self) -> int:
        return 0 if self is CallStatus.SUCCESS else 1

    @property
    def is_success(self) -> bool:
        return self is CallStatus.SUCCESS

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.value


__all__ = ["CallStatus"]
