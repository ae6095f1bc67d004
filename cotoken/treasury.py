"""
cotoken.treasury — minimal, deterministic native-currency ledger.

This is the value-transfer primitive the bonding-curve ledger relies on: it holds
native balances for every account (including the ledger's own escrow account)
and moves value between them atomically.

API
---
- balance(addr) -> int
- credit(addr, amount) / debit(addr, amount)      # host/testing helpers
- transfer(frm, to, amount)                       # debit frm, credit to, run receive hook
- set_receive_hook(addr, fn) / clear_receive_hook(addr)
- snapshot() / restore(snap)                      # used by cotoken.journal

Receive hooks
-------------
An account may register a callable `fn(sender: bytes, amount: int)` that runs
after value has been credited to it, standing in for a payable fallback on the
host platform. Hooks can observe or call back into the ledger. If a hook
raises, the transfer is undone and reported as TransferFailure.

Notes
-----
* Deterministic: no wall-clock, no randomness, pure integer arithmetic with
  explicit caps (COTOKEN_MAX_BALANCE_BITS).
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Optional

from .config import CFG
from .context import to_address, to_hex
from .errors import ArithmeticOverflow, TransferFailure

log = logging.getLogger(__name__)

ReceiveHook = Callable[[bytes, int], None]


def _check_amount(amount: int) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ArithmeticOverflow("amount must be int", data={"type": type(amount).__name__})
    if amount < 0:
        raise ArithmeticOverflow("amount must be non-negative", value=amount)
    if amount.bit_length() > CFG.max_balance_bits:
        raise ArithmeticOverflow(f"amount exceeds {CFG.max_balance_bits}-bit limit", value=amount)
    return amount


def _add_checked(a: int, b: int) -> int:
    c = a + b
    if c > CFG.max_amount:
        raise ArithmeticOverflow("balance overflow", value=c)
    return c


class Treasury:
    """Thread-safe in-memory native balances with optional receive hooks."""

    def __init__(self, balances: Optional[Dict[bytes, int]] = None) -> None:
        self._lock = threading.RLock()
        self._ledger: Dict[bytes, int] = {}
        self._hooks: Dict[bytes, ReceiveHook] = {}
        for addr, amount in (balances or {}).items():
            self.credit(addr, amount)

    # ------------------------------ reads ------------------------------ #

    def balance(self, addr: bytes) -> int:
        baddr = to_address(addr)
        with self._lock:
            return self._ledger.get(baddr, 0)

    def total(self) -> int:
        with self._lock:
            return sum(self._ledger.values())

    # --------------------------- host helpers --------------------------- #

    def credit(self, addr: bytes, amount: int) -> None:
        """Increase balance of `addr` by `amount` (funding / faucet)."""
        baddr = to_address(addr)
        amount = _check_amount(amount)
        with self._lock:
            self._ledger[baddr] = _add_checked(self._ledger.get(baddr, 0), amount)

    def debit(self, addr: bytes, amount: int) -> None:
        """Decrease balance of `addr` by `amount` if sufficient."""
        baddr = to_address(addr)
        amount = _check_amount(amount)
        with self._lock:
            cur = self._ledger.get(baddr, 0)
            if amount > cur:
                raise TransferFailure("insufficient native balance", to=to_hex(baddr), amount=amount)
            self._ledger[baddr] = cur - amount

    def set_receive_hook(self, addr: bytes, fn: ReceiveHook) -> None:
        with self._lock:
            self._hooks[to_address(addr)] = fn

    def clear_receive_hook(self, addr: bytes) -> None:
        with self._lock:
            self._hooks.pop(to_address(addr), None)

    # ----------------------------- transfer ----------------------------- #

    def transfer(self, frm: bytes, to: bytes, amount: int) -> None:
        """
        Debit `frm` and credit `to` by `amount`, then run `to`'s receive hook.

        Atomic w.r.t. this ledger: if the debit is impossible or the hook
        raises, balances are left exactly as they were and TransferFailure is
        raised.
        """
        bfrm = to_address(frm)
        bto = to_address(to)
        amount = _check_amount(amount)

        with self._lock:
            cur_from = self._ledger.get(bfrm, 0)
            if amount > cur_from:
                raise TransferFailure(
                    "insufficient native balance",
                    to=to_hex(bto),
                    amount=amount,
                    data={"from": to_hex(bfrm), "available": cur_from},
                )
            before = dict(self._ledger)
            self._ledger[bfrm] = cur_from - amount
            self._ledger[bto] = _add_checked(self._ledger.get(bto, 0), amount)
            hook = self._hooks.get(bto)

            if hook is not None:
                try:
                    hook(bfrm, amount)
                except Exception as e:
                    self._ledger = before
                    log.debug("receive hook of %s rejected %d wei: %s", to_hex(bto), amount, e)
                    raise TransferFailure(
                        "recipient rejected transfer",
                        to=to_hex(bto),
                        amount=amount,
                        reason=str(e),
                    ) from e

        log.debug("transfer %s -> %s: %d wei", to_hex(bfrm), to_hex(bto), amount)

    # ----------------------------- journal ------------------------------ #

    def snapshot(self) -> Dict[bytes, int]:
        with self._lock:
            return dict(self._ledger)

    def restore(self, snap: Dict[bytes, int]) -> None:
        with self._lock:
            self._ledger = dict(snap)


__all__ = ["Treasury", "ReceiveHook"]
