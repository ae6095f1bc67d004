"""
cotoken.events — validated, ordered notification log of a ledger.

The ledger emits named events with small argument maps; external monitors read
them back as `Event` objects or as JSON-friendly dicts. Events
emitted by an invocation that later reverts are discarded (see cotoken.journal,
which truncates the log back to its checkpoint mark).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .config import CFG
from .errors import LedgerError

MAX_EVENT_NAME_BYTES = 64
MAX_KEY_LEN = 64
MAX_BYTES_LEN = 4096
MAX_INT_BITS = 256

# Keys must be identifier-like: letters/underscore, then letters/digits/underscore.
_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

EV_MINTED = b"Minted"
EV_BURNED = b"Burned"
EV_LIQUIDATED = b"Liquidated"
EV_TRANSFER = b"Transfer"
EV_APPROVAL = b"Approval"


class EventError(LedgerError):
    def __init__(self, message: str, *, where: str, data: Optional[Dict[str, Any]] = None):
        d = dict(data or {})
        d.setdefault("where", where)
        super().__init__(message=message, code="EVENT_INVALID", data=d)


@dataclass(frozen=True)
class Event:
    """In-memory representation of an emitted event."""

    name: bytes
    args: Dict[str, Any]

    def __getitem__(self, key: str) -> Any:
        return self.args[key]


def _check_name(name: Any) -> bytes:
    if not isinstance(name, (bytes, bytearray)):
        raise EventError("event name must be bytes", where="name_type")
    b = bytes(name)
    if len(b) == 0:
        raise EventError("event name must be non-empty", where="name_empty")
    if len(b) > MAX_EVENT_NAME_BYTES:
        raise EventError("event name too long", where="name_length", data={"len": len(b)})
    return b


def _check_key(key: Any) -> str:
    if not isinstance(key, str) or not key:
        raise EventError("event key must be a non-empty str", where="key_type")
    if len(key) > MAX_KEY_LEN:
        raise EventError("event key too long", where="key_length", data={"len": len(key)})
    if not _KEY_RE.match(key):
        raise EventError("event key has invalid characters", where="key_grammar", data={"key": key})
    return key


def _check_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        b = bytes(value)
        if len(b) > MAX_BYTES_LEN:
            raise EventError("event bytes arg too long", where="value_bytes_length", data={"len": len(b)})
        return b
    if isinstance(value, bool):
        # bool is a subclass of int, so check it before int.
        return value
    if isinstance(value, int):
        if value.bit_length() > MAX_INT_BITS:
            raise EventError("event int arg out of range", where="value_int_bits")
        return int(value)
    raise EventError("unsupported event arg type", where="value_type", data={"py_type": type(value).__name__})


class EventLog:
    """
    Append-only (modulo revert truncation) event log.

    `mark()` returns a position; `since(mark)` returns what was emitted after it;
    `truncate(mark)` drops it. `open_frame()` starts a per-invocation budget of
    `max_per_call` events.
    """

    def __init__(self, max_per_call: Optional[int] = None) -> None:
        self._events: List[Event] = []
        self._frame_start = 0
        self._max_per_call = CFG.max_events_per_call if max_per_call is None else max_per_call

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self):
        return iter(tuple(self._events))

    def open_frame(self) -> int:
        self._frame_start = len(self._events)
        return self._frame_start

    def emit(self, name: bytes, args: Mapping[Any, Any]) -> Event:
        bname = _check_name(name)
        if not isinstance(args, Mapping):
            raise EventError("event args must be a mapping", where="args_type")
        if len(self._events) - self._frame_start >= self._max_per_call:
            raise EventError("too many events in one invocation", where="frame_limit",
                             data={"limit": self._max_per_call})
        checked = {_check_key(k): _check_value(v) for k, v in args.items()}
        ev = Event(bname, checked)
        self._events.append(ev)
        return ev

    def mark(self) -> int:
        return len(self._events)

    def since(self, mark: int) -> List[Event]:
        return list(self._events[mark:])

    def truncate(self, mark: int) -> None:
        del self._events[mark:]
        self._frame_start = min(self._frame_start, mark)

    def named(self, name: bytes) -> List[Event]:
        return [ev for ev in self._events if ev.name == name]

    def last(self, name: Optional[bytes] = None) -> Optional[Event]:
        for ev in reversed(self._events):
            if name is None or ev.name == name:
                return ev
        return None

    def clear(self) -> None:
        self._events.clear()
        self._frame_start = 0


def event_to_dict(ev: Event) -> Dict[str, Any]:
    """JSON-friendly form with the event name decoded and bytes as 0x-hex."""
    args: Dict[str, Any] = {}
    for k, v in ev.args.items():
        args[k] = "0x" + v.hex() if isinstance(v, bytes) else v
    return {"name": ev.name.decode("utf-8", errors="replace"), "args": args}


def events_to_dicts(events: Sequence[Event]) -> List[Dict[str, Any]]:
    return [event_to_dict(ev) for ev in events]


__all__ = [
    "Event",
    "EventLog",
    "EventError",
    "event_to_dict",
    "events_to_dicts",
    "EV_MINTED",
    "EV_BURNED",
    "EV_LIQUIDATED",
    "EV_TRANSFER",
    "EV_APPROVAL",
    "MAX_EVENT_NAME_BYTES",
    "MAX_KEY_LEN",
    "MAX_BYTES_LEN",
    "MAX_INT_BITS",
]
