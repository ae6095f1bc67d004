"""
cotoken.context — per-invocation environment passed to the ledger (deterministic)

`CallEnv` carries the two things the host supplies on every invocation: the
identity of the caller and the native value attached to the call. It contains
only pure data (bytes/ints) and performs strict validation.

Design notes
------------
- Addresses are raw bytes of the configured length (COTOKEN_ADDRESS_LEN,
  default 20).
- Hex strings (with or without "0x") are accepted by helpers and normalized to
  bytes.
- Attached value is a non-negative integer in the native unit (wei).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .config import CFG

BytesLike = Union[bytes, bytearray, memoryview, str]


class ContextError(ValueError):
    """Validation or coercion failure for CallEnv / addresses."""


def to_bytes(value: BytesLike) -> bytes:
    """Raw bytes from a bytes-like object or a hex string ("0x" prefix optional)."""
    if isinstance(value, str):
        text = value.strip()
        if text[:2].lower() == "0x":
            text = text[2:]
        if len(text) & 1:
            raise ContextError(f"odd-length hex string ({len(text)} digits): {value!r}")
        try:
            return bytes.fromhex(text)
        except ValueError as e:
            raise ContextError(f"not a hex string: {value!r}") from e
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise ContextError(f"expected bytes or hex str, got {type(value).__name__}")
    return bytes(value)


def to_hex(b: Union[bytes, bytearray, memoryview]) -> str:
    return "0x" + bytes(b).hex()


def to_address(value: BytesLike, *, length: Optional[int] = None) -> bytes:
    """Coerce to bytes and enforce the configured address length."""
    b = to_bytes(value)
    alen = CFG.address_len if length is None else length
    if len(b) != alen:
        raise ContextError(f"address must be exactly {alen} bytes, got {len(b)}")
    return b


def require_non_negative_int(name: str, v: Any) -> int:
    # bool is an int subclass; an attached value of True is a caller bug.
    if isinstance(v, bool) or not isinstance(v, int):
        raise ContextError(f"{name}: expected an int amount, got {type(v).__name__}")
    if v < 0:
        raise ContextError(f"{name} cannot be negative ({v})")
    return v


@dataclass(frozen=True)
class CallEnv:
    """
    Deterministic per-invocation environment.

    Fields
    ------
    sender: Caller address (bytes).
    value:  Native value attached to the call (int, wei).
    """
    sender: bytes
    value: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "sender", to_address(self.sender))
        object.__setattr__(self, "value", require_non_negative_int("value", self.value))

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CallEnv":
        """Inverse of to_dict(); `sender` may be bytes or hex."""
        return cls(sender=d.get("sender", b""), value=d.get("value", 0))

    def to_dict(self) -> Dict[str, Any]:
        return {"sender": to_hex(self.sender), "value": self.value}


__all__ = [
    "ContextError",
    "CallEnv",
    "to_bytes",
    "to_hex",
    "to_address",
    "require_non_negative_int",
]
