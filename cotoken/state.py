"""
cotoken.state — the ledger's mutable state and its checked arithmetic.

`LedgerState` is a plain container; all policy lives in cotoken.ledger. The
helpers here keep every stored quantity inside the unsigned range configured by
COTOKEN_MAX_BALANCE_BITS and make decrements fail loudly instead of wrapping.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .config import CFG
from .curve import SUPPLY_CAP, collateral_for
from .errors import ArithmeticOverflow, BalanceUnderflow

# ----------------------------
# Math (checked uint)
# ----------------------------


def u256(x: int) -> int:
    if isinstance(x, bool) or not isinstance(x, int):
        raise ArithmeticOverflow("value is not an integer", data={"type": type(x).__name__})
    if x < 0 or x > CFG.max_amount:
        raise ArithmeticOverflow(value=x)
    return x


def checked_add(a: int, b: int) -> int:
    return u256(u256(a) + u256(b))


def checked_sub(a: int, b: int) -> int:
    a = u256(a)
    b = u256(b)
    if b > a:
        raise BalanceUnderflow(balance=a, requested=b)
    return a - b


# ----------------------------
# State container
# ----------------------------


@dataclass
class LedgerState:
    """
    issuer:      privileged identity, fixed at construction
    supply:      units in circulation
    balances:    holder -> units (zero balances are pruned)
    allowances:  (owner, spender) -> units
    collateral:  native value held against the curve
    destroyed:   True once liquidated (terminal)
    """
    issuer: bytes
    supply: int = 0
    balances: Dict[bytes, int] = field(default_factory=dict)
    allowances: Dict[Tuple[bytes, bytes], int] = field(default_factory=dict)
    collateral: int = 0
    destroyed: bool = False

    def balance_of(self, addr: bytes) -> int:
        return self.balances.get(addr, 0)

    def set_balance(self, addr: bytes, value: int) -> None:
        value = u256(value)
        if value == 0:
            self.balances.pop(addr, None)
        else:
            self.balances[addr] = value

    def allowance(self, owner: bytes, spender: bytes) -> int:
        return self.allowances.get((owner, spender), 0)

    def set_allowance(self, owner: bytes, spender: bytes, value: int) -> None:
        value = u256(value)
        if value == 0:
            self.allowances.pop((owner, spender), None)
        else:
            self.allowances[(owner, spender)] = value

    def clear(self) -> None:
        """Drop every holding; issuer identity is kept for receipts."""
        self.supply = 0
        self.balances.clear()
        self.allowances.clear()
        self.collateral = 0

    def copy(self) -> "LedgerState":
        return LedgerState(
            issuer=self.issuer,
            supply=self.supply,
            balances=dict(self.balances),
            allowances=dict(self.allowances),
            collateral=self.collateral,
            destroyed=self.destroyed,
        )

    def restore(self, snap: "LedgerState") -> None:
        """Overwrite this state in place with a snapshot taken by copy()."""
        self.supply = snap.supply
        self.balances = dict(snap.balances)
        self.allowances = dict(snap.allowances)
        self.collateral = snap.collateral
        self.destroyed = snap.destroyed

    def invariant_violations(self) -> List[str]:
        """Return human-readable descriptions of broken accounting invariants (empty if sound)."""
        out: List[str] = []
        if not 0 <= self.supply <= SUPPLY_CAP:
            out.append(f"supply {self.supply} outside [0, {SUPPLY_CAP}]")
        held = sum(self.balances.values())
        if held != self.supply:
            out.append(f"sum(balances)={held} != supply={self.supply}")
        if any(v <= 0 for v in self.balances.values()):
            out.append("non-positive balance entry")
        expected = collateral_for(self.supply) if 0 <= self.supply <= SUPPLY_CAP else None
        if expected is not None and self.collateral != expected:
            out.append(f"collateral={self.collateral} != curve integral={expected}")
        if self.destroyed and (self.supply or self.balances or self.collateral):
            out.append("destroyed ledger still holds state")
        return out


__all__ = ["LedgerState", "u256", "checked_add", "checked_sub"]
