from __future__ import annotations

import pytest

import cotoken.events
from cotoken.events import EV_MINTED, MAX_BYTES_LEN, Event, EventError, EventLog, event_to_dict


def test_emit_and_read_back():
    log = EventLog()
    ev = log.emit(EV_MINTED, {"account": b"\x01" * 20, "amount": 3})
    assert isinstance(ev, Event)
    assert ev["amount"] == 3
    assert list(log) == [ev]
    assert log.named(EV_MINTED) == [ev]
    assert log.last() is ev


def test_mark_since_truncate():
    log = EventLog()
    log.emit(b"A", {"x": 1})
    m = log.mark()
    log.emit(b"B", {"x": 2})
    log.emit(b"C", {"x": 3})
    assert [e.name for e in log.since(m)] == [b"B", b"C"]
    log.truncate(m)
    assert [e.name for e in log] == [b"A"]


@pytest.mark.parametrize(
    "name,args,where",
    [
        ("Minted", {"a": 1}, "name_type"),
        (b"", {"a": 1}, "name_empty"),
        (b"x" * 65, {"a": 1}, "name_length"),
        (b"E", {"": 1}, "key_type"),
        (b"E", {"1bad": 1}, "key_grammar"),
        (b"E", {"a": 1.5}, "value_type"),
        (b"E", {"a": 1 << 300}, "value_int_bits"),
        (b"E", {"a": b"\x00" * (MAX_BYTES_LEN + 1)}, "value_bytes_length"),
        (b"E", [("a", 1)], "args_type"),
    ],
)
def test_emit_validation(name, args, where):
    log = EventLog()
    with pytest.raises(EventError) as ei:
        log.emit(name, args)
    assert ei.value.code == "EVENT_INVALID"
    assert ei.value.data["where"] == where
    assert len(log) == 0


def test_per_call_budget():
    log = EventLog(max_per_call=2)
    log.open_frame()
    log.emit(b"E", {"i": 0})
    log.emit(b"E", {"i": 1})
    with pytest.raises(EventError):
        log.emit(b"E", {"i": 2})
    log.open_frame()
    log.emit(b"E", {"i": 2})
    assert len(log) == 3


def test_dict_form():
    ev = Event(b"Burned", {"issuer": b"\xaa\xbb", "amount": 2, "ok": True})
    assert event_to_dict(ev) == {"name": "Burned", "args": {"issuer": "0xaabb", "amount": 2, "ok": True}}


def test_module_docstring():
    assert cotoken.events.__doc__.strip().startswith("cotoken.events")
