"""
All-or-nothing behaviour of mutating calls when the outbound transfer fails or
the recipient tries to call back into the ledger.
"""

from __future__ import annotations

import pytest

from cotoken.errors import PaymentMismatch, TransferFailure
from cotoken.events import EV_BURNED

from .conftest import ALICE, ISSUER


def _observable(ledger, treasury):
    return ledger.snapshot(), treasury.snapshot(), list(ledger.events)


def _rejecting_hook(sender, amount):
    raise RuntimeError("no thanks")


def test_failed_refund_reverts_burn(ledger, mint, env, treasury):
    mint(ISSUER, 5)
    before = _observable(ledger, treasury)
    treasury.set_receive_hook(ISSUER, _rejecting_hook)

    with pytest.raises(TransferFailure) as ei:
        ledger.burn(env(ISSUER), 2)
    assert ei.value.data["reason"] == "no thanks"

    assert _observable(ledger, treasury) == before
    assert ledger.check_invariants() == []


def test_failed_payout_reverts_liquidation(ledger, mint, env, treasury):
    mint(ISSUER, 5)
    before = _observable(ledger, treasury)
    treasury.set_receive_hook(ISSUER, _rejecting_hook)

    with pytest.raises(TransferFailure):
        ledger.liquidate(env(ISSUER))

    assert not ledger.destroyed
    assert _observable(ledger, treasury) == before

    treasury.clear_receive_hook(ISSUER)
    assert ledger.liquidate(env(ISSUER)) > 0


def test_reentrant_burn_from_hook_is_rejected(ledger, mint, env, treasury):
    mint(ISSUER, 10)
    before = _observable(ledger, treasury)

    def reenter(sender, amount):
        ledger.burn(env(ISSUER), 1)

    treasury.set_receive_hook(ISSUER, reenter)
    with pytest.raises(TransferFailure) as ei:
        ledger.burn(env(ISSUER), 1)
    assert "REENTRANT_CALL" in ei.value.data["reason"]
    assert _observable(ledger, treasury) == before

    # the guard is released once the outer call has unwound
    treasury.clear_receive_hook(ISSUER)
    ledger.burn(env(ISSUER), 1)
    assert ledger.total_supply() == 9


def test_reentrant_mint_from_hook_is_rejected(ledger, mint, env, treasury):
    mint(ISSUER, 4)

    def reenter(sender, amount):
        ledger.mint(env(ISSUER, ledger.quote_buy(1)), 1)

    treasury.set_receive_hook(ISSUER, reenter)
    with pytest.raises(TransferFailure):
        ledger.burn(env(ISSUER), 4)
    assert ledger.total_supply() == 4


def test_hook_sees_state_committed_before_transfer(ledger, mint, env, treasury):
    mint(ISSUER, 6)
    seen = {}

    def observe(sender, amount):
        seen["supply"] = ledger.total_supply()
        seen["collateral"] = ledger.collateral_held()
        seen["amount"] = amount
        seen["sender"] = sender

    treasury.set_receive_hook(ISSUER, observe)
    refund = ledger.burn(env(ISSUER), 2)

    assert seen == {
        "supply": 4,
        "collateral": ledger.collateral_held(),
        "amount": refund,
        "sender": ledger.address,
    }
    assert ledger.events.last(EV_BURNED)["remainingSupply"] == 4


def test_failed_mint_leaves_no_event(ledger, env):
    with pytest.raises(PaymentMismatch):
        ledger.mint(env(ALICE, 1), 1)
    assert len(ledger.events) == 0
