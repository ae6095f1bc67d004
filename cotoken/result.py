"""
cotoken.result — CallResult container for one ledger invocation.

Fields
------
* call     : str         — ABI entrypoint name as invoked
* sender   : bytes       — caller identity
* status   : CallStatus  — SUCCESS / REVERT
* value    : Any         — return value on success (None on revert)
* logs     : tuple[Event, ...] — events the call emitted (empty on revert)
* error    : Optional[dict]    — LedgerError.to_dict() on revert
* receipt  : Optional[bytes]   — canonical CBOR receipt, attached by the executor
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from .events import Event, events_to_dicts
from .status import CallStatus


def _jsonable(v: Any) -> Any:
    if isinstance(v, (bytes, bytearray)):
        return "0x" + bytes(v).hex()
    return v


@dataclass(frozen=True)
class CallResult:
    call: str
    sender: bytes
    status: CallStatus
    value: Any = None
    logs: Tuple[Event, ...] = field(default_factory=tuple)
    error: Optional[Dict[str, Any]] = None
    receipt: Optional[bytes] = None

    @property
    def is_success(self) -> bool:
        return self.status.is_success

    @property
    def error_code(self) -> Optional[str]:
        return None if self.error is None else self.error.get("code")

    def with_receipt(self, receipt: bytes) -> "CallResult":
        """Return a copy with `receipt` attached."""
        return replace(self, receipt=receipt)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "call": self.call,
            "sender": "0x" + self.sender.hex(),
            "status": str(self.status),
            "value": _jsonable(self.value),
            "logs": events_to_dicts(self.logs),
        }
        if self.error is not None:
            out["error"] = self.error
        if self.receipt is not None:
            out["receipt"] = "0x" + self.receipt.hex()
        return out


__all__ = ["CallResult"]
