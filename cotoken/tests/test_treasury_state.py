from __future__ import annotations

import pytest

from cotoken.config import CFG
from cotoken.context import ContextError
from cotoken.errors import ArithmeticOverflow, BalanceUnderflow, TransferFailure
from cotoken.state import LedgerState, checked_add, checked_sub, u256
from cotoken.treasury import Treasury

A = b"\x01" * 20
B = b"\x02" * 20


def test_credit_debit_transfer():
    t = Treasury()
    t.credit(A, 10)
    t.transfer(A, B, 4)
    t.debit(B, 1)
    assert (t.balance(A), t.balance(B), t.total()) == (6, 3, 9)


def test_transfer_insufficient_leaves_balances():
    t = Treasury({A: 5})
    with pytest.raises(TransferFailure) as ei:
        t.transfer(A, B, 6)
    assert ei.value.data["available"] == 5
    assert t.snapshot() == {A: 5}
    with pytest.raises(TransferFailure):
        t.debit(B, 1)


def test_hook_runs_after_credit_and_can_reject():
    t = Treasury({A: 5})
    seen = []
    t.set_receive_hook(B, lambda sender, amount: seen.append((sender, amount, t.balance(B))))
    t.transfer(A, B, 2)
    assert seen == [(A, 2, 2)]

    def reject(sender, amount):
        raise ValueError("nope")

    t.set_receive_hook(B, reject)
    with pytest.raises(TransferFailure) as ei:
        t.transfer(A, B, 1)
    assert ei.value.data["reason"] == "nope"
    assert isinstance(ei.value.__cause__, ValueError)
    assert t.snapshot() == {A: 3, B: 2}

    t.clear_receive_hook(B)
    t.transfer(A, B, 1)
    assert t.balance(B) == 3


@pytest.mark.parametrize("bad", [-1, True, 1.0, 1 << 300])
def test_amount_validation(bad):
    t = Treasury({A: 5})
    with pytest.raises(ArithmeticOverflow):
        t.credit(A, bad)


def test_address_length_enforced():
    t = Treasury()
    with pytest.raises(ContextError):
        t.credit(b"\x01" * 19, 1)


def test_checked_math():
    assert checked_add(1, 2) == 3
    assert checked_sub(3, 2) == 1
    with pytest.raises(BalanceUnderflow):
        checked_sub(1, 2)
    with pytest.raises(ArithmeticOverflow):
        checked_add(CFG.max_amount, 1)
    with pytest.raises(ArithmeticOverflow):
        u256(-1)


def test_state_prunes_zero_entries_and_copies():
    s = LedgerState(issuer=A)
    s.set_balance(B, 3)
    s.set_allowance(A, B, 2)
    snap = s.copy()
    s.set_balance(B, 0)
    s.set_allowance(A, B, 0)
    assert s.balances == {} and s.allowances == {}
    s.restore(snap)
    assert s.balance_of(B) == 3 and s.allowance(A, B) == 2


def test_invariant_violations_detects_drift():
    s = LedgerState(issuer=A, supply=2, balances={A: 1}, collateral=5)
    problems = s.invariant_violations()
    assert any("sum(balances)" in p for p in problems)
    assert any("collateral" in p for p in problems)
    assert LedgerState(issuer=A).invariant_violations() == []
