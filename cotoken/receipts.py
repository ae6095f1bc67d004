"""
cotoken.receipts — deterministic CBOR receipts and logs root for ledger calls.

Receipt schema (canonical CBOR map, keys sorted per RFC 7049bis §4.2.1):

  Receipt = {
    status:   uint,             ; 0=SUCCESS, 1=REVERT (see cotoken/status.py)
    call:     tstr,             ; ABI entrypoint name
    sender:   bytes,
    logs:     [ LogEntry ],     ; ordered list of events
    logsRoot: bytes .size 32,   ; Merkle root over logs (below)
    ? error:  { code: tstr, message: tstr, ? data: any }
  }

  LogEntry = { name: bytes, args: { * tstr => bytes / int / bool } }

Logs root
---------
- Leaf  = H("cotoken:logs:leaf"  || 0x00 || cbor(LogEntry))
- Node  = H("cotoken:logs:node"  || 0x00 || left || right)
- Empty = H("cotoken:logs:empty" || 0x00)
- A level with an odd count duplicates its last hash.
- H is SHA3-256.

Public API
----------
- receipt_to_cbor(result) -> bytes
- receipt_from_cbor(data) -> dict
- compute_logs_root(events) -> bytes
"""

from __future__ import annotations

import hashlib
from typing import Any, Dict, Iterable, List, Mapping, Sequence

try:
    import cbor2  # type: ignore
except ImportError as e:  # pragma: no cover
    raise ImportError(
        "cotoken.receipts requires the 'cbor2' package. Install with: pip install cbor2"
    ) from e

from .events import Event
from .result import CallResult

_D_LEAF = b"cotoken:logs:leaf"
_D_NODE = b"cotoken:logs:node"
_D_EMPTY = b"cotoken:logs:empty"


def _h(domain: bytes, *parts: bytes) -> bytes:
    """Domain-separated hash: H(domain || 0x00 || part0 || part1 || ...)."""
    return hashlib.sha3_256(domain + b"\x00" + b"".join(parts)).digest()


def _log_to_obj(ev: Event) -> Dict[str, Any]:
    if not isinstance(ev, Event):
        raise TypeError(f"Event expected, got {type(ev)!r}")
    return {"name": bytes(ev.name), "args": dict(ev.args)}


def _merkle_root(leaves: Sequence[bytes]) -> bytes:
    if not leaves:
        return _h(_D_EMPTY)
    level = list(leaves)
    while len(level) > 1:
        nxt: List[bytes] = []
        it = iter(level)
        for left in it:
            right = next(it, left)  # duplicate last
            nxt.append(_h(_D_NODE, left, right))
        level = nxt
    return level[0]


def compute_logs_root(events: Iterable[Event]) -> bytes:
    """32-byte SHA3-256 Merkle root over the given events, order-sensitive."""
    leaves = [_h(_D_LEAF, cbor2.dumps(_log_to_obj(ev), canonical=True)) for ev in events]
    return _merkle_root(leaves)


def _result_to_obj(result: CallResult) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "status": result.status.wire,
        "call": result.call,
        "sender": bytes(result.sender),
        "logs": [_log_to_obj(ev) for ev in result.logs],
        "logsRoot": compute_logs_root(result.logs),
    }
    if result.error is not None:
        out["error"] = dict(result.error)
    return out


def receipt_to_cbor(result: CallResult) -> bytes:
    """Serialize a CallResult's receipt view to canonical CBOR bytes."""
    return cbor2.dumps(_result_to_obj(result), canonical=True)


def receipt_from_cbor(data: bytes) -> Dict[str, Any]:
    """Deserialize receipt CBOR into a plain map, validating required fields."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("receipt_from_cbor expects a bytes-like object")
    obj = cbor2.loads(bytes(data))
    if not isinstance(obj, Mapping):
        raise ValueError("Receipt CBOR must decode to a map")
    missing = [k for k in ("status", "call", "sender", "logs", "logsRoot") if k not in obj]
    if missing:
        raise ValueError(f"Receipt missing required fields: {missing}")
    return dict(obj)


__all__ = ["receipt_to_cbor", "receipt_from_cbor", "compute_logs_root"]
