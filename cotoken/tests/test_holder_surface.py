from __future__ import annotations

import pytest

from cotoken.context import ContextError
from cotoken.errors import InsufficientAllowance, InsufficientBalance, InvalidQuantity
from cotoken.events import EV_APPROVAL, EV_TRANSFER

from .conftest import ALICE, BOB, ISSUER


def test_transfer_moves_units_only(ledger, mint, env):
    mint(ALICE, 5)
    supply, collateral = ledger.total_supply(), ledger.collateral_held()

    assert ledger.transfer(env(ALICE), BOB, 2) is True

    assert ledger.balance_of(ALICE) == 3
    assert ledger.balance_of(BOB) == 2
    assert (ledger.total_supply(), ledger.collateral_held()) == (supply, collateral)
    assert ledger.events.last(EV_TRANSFER).args == {"src": ALICE, "dst": BOB, "value": 2}
    assert ledger.check_invariants() == []


def test_transfer_accepts_hex_addresses(ledger, mint, env):
    mint(ALICE, 1)
    ledger.transfer(env(ALICE), "0x" + BOB.hex(), 1)
    assert ledger.balance_of(BOB.hex()) == 1


def test_transfer_rejects_bad_address(ledger, mint, env):
    mint(ALICE, 1)
    with pytest.raises(ContextError):
        ledger.transfer(env(ALICE), b"\x01\x02", 1)
    assert ledger.balance_of(ALICE) == 1


def test_transfer_over_balance(ledger, mint, env):
    mint(ALICE, 1)
    with pytest.raises(InsufficientBalance) as ei:
        ledger.transfer(env(ALICE), BOB, 2)
    assert ei.value.data == {"balance": 1, "requested": 2}


def test_transfer_zero_rejected(ledger, mint, env):
    mint(ALICE, 1)
    with pytest.raises(InvalidQuantity):
        ledger.transfer(env(ALICE), BOB, 0)


def test_self_transfer_is_noop(ledger, mint, env):
    mint(ALICE, 2)
    ledger.transfer(env(ALICE), ALICE, 2)
    assert ledger.balance_of(ALICE) == 2


def test_approve_and_transfer_from(ledger, mint, env):
    mint(ALICE, 4)
    assert ledger.approve(env(ALICE), BOB, 3) is True
    assert ledger.allowance(ALICE, BOB) == 3
    assert ledger.events.last(EV_APPROVAL).args == {"owner": ALICE, "spender": BOB, "value": 3}

    ledger.transfer_from(env(BOB), ALICE, ISSUER, 2)

    assert ledger.allowance(ALICE, BOB) == 1
    assert ledger.balance_of(ISSUER) == 2
    assert ledger.events.last(EV_APPROVAL)["value"] == 1
    assert ledger.events.last(EV_TRANSFER).args == {"src": ALICE, "dst": ISSUER, "value": 2}

    with pytest.raises(InsufficientAllowance):
        ledger.transfer_from(env(BOB), ALICE, BOB, 2)
    assert ledger.allowance(ALICE, BOB) == 1


def test_approve_zero_revokes(ledger, mint, env):
    mint(ALICE, 1)
    ledger.approve(env(ALICE), BOB, 1)
    ledger.approve(env(ALICE), BOB, 0)
    assert ledger.allowance(ALICE, BOB) == 0
    with pytest.raises(InsufficientAllowance):
        ledger.transfer_from(env(BOB), ALICE, BOB, 1)


@pytest.mark.parametrize("bad", [-1, 1.5, True])
def test_approve_rejects_bad_values(ledger, env, bad):
    with pytest.raises(InvalidQuantity):
        ledger.approve(env(ALICE), BOB, bad)


def test_owner_may_transfer_from_itself_without_allowance(ledger, mint, env):
    mint(ALICE, 2)
    ledger.transfer_from(env(ALICE), ALICE, BOB, 2)
    assert ledger.balance_of(BOB) == 2


def test_failed_transfer_from_keeps_allowance(ledger, mint, env):
    mint(ALICE, 1)
    ledger.approve(env(ALICE), BOB, 5)
    with pytest.raises(InsufficientBalance):
        ledger.transfer_from(env(BOB), ALICE, BOB, 3)
    assert ledger.allowance(ALICE, BOB) == 5
