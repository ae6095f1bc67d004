"""
cotoken.journal — checkpoints, revert/commit over ledger state, treasury and events.

Every mutating ledger call runs inside one checkpoint. The checkpoint captures:

  - a copy of the LedgerState (supply, balances, allowances, collateral, flag)
  - a snapshot of the Treasury's native balances
  - the EventLog position

`commit()` discards the captured copy (effects stay); `revert()` restores all
three, so a failure anywhere in an invocation, including a failed outbound
transfer after state was already written, leaves no observable trace.

Checkpoints nest as a stack:

    j = Journal(state, treasury, events)
    with j.checkpoint():
        ...                       # raise → everything since entry is undone

Notes
-----
- The journal does not enforce economic rules; callers validate first.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List

from .events import EventLog
from .state import LedgerState
from .treasury import Treasury


@dataclass(frozen=True)
class _Checkpoint:
    state: LedgerState
    treasury: Dict[bytes, int]
    events_mark: int


class Journal:
    def __init__(self, state: LedgerState, treasury: Treasury, events: EventLog) -> None:
        self._state = state
        self._treasury = treasury
        self._events = events
        self._stack: List[_Checkpoint] = []

    def depth(self) -> int:
        """Number of open checkpoints."""
        return len(self._stack)

    def begin(self) -> int:
        """Open a checkpoint. Returns the new depth."""
        self._stack.append(
            _Checkpoint(
                state=self._state.copy(),
                treasury=self._treasury.snapshot(),
                events_mark=self._events.mark(),
            )
        )
        return len(self._stack)

    def commit(self) -> None:
        """Keep the effects of the top checkpoint (they fold into the parent, if any)."""
        if not self._stack:
            raise RuntimeError("journal: commit without begin")
        self._stack.pop()

    def revert(self) -> None:
        """Undo every effect since the top checkpoint was opened."""
        if not self._stack:
            raise RuntimeError("journal: revert without begin")
        cp = self._stack.pop()
        self._state.restore(cp.state)
        self._treasury.restore(cp.treasury)
        self._events.truncate(cp.events_mark)

    @contextmanager
    def checkpoint(self) -> Iterator[int]:
        depth = self.begin()
        try:
            yield depth
        except BaseException:
            self.revert()
            raise
        else:
            self.commit()


__all__ = ["Journal"]
