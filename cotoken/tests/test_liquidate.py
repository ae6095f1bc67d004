from __future__ import annotations

import pytest

from cotoken.errors import IncompleteOwnership, LedgerDestroyed, Unauthorized
from cotoken.events import EV_LIQUIDATED

from .conftest import ALICE, BOB, FUNDING, ISSUER, ether


def test_only_issuer_can_liquidate(ledger, env):
    with pytest.raises(Unauthorized):
        ledger.liquidate(env(ALICE))
    assert not ledger.destroyed


def test_liquidate_after_sole_ownership(ledger, mint, env, treasury):
    mint(ISSUER, 10)
    after_purchase = treasury.balance(ISSUER)
    assert FUNDING - after_purchase == 2_500 * 10**15

    payout = ledger.liquidate(env(ISSUER))

    assert payout == 2_500 * 10**15
    assert treasury.balance(ISSUER) == FUNDING
    assert treasury.balance(ledger.address) == 0
    assert ledger.destroyed
    assert ledger.events.last(EV_LIQUIDATED).args == {"issuer": ISSUER, "payout": payout}
    assert ledger.check_invariants() == []


def test_liquidation_blocked_until_issuer_holds_everything(ledger, mint, env, treasury):
    mint(ISSUER, 33)
    mint(ALICE, 2)
    assert ledger.collateral_held() == ether(13_125)

    with pytest.raises(IncompleteOwnership) as ei:
        ledger.liquidate(env(ISSUER))
    assert ei.value.data == {"issuer_balance": 33, "supply": 35}
    assert not ledger.destroyed

    ledger.transfer(env(ALICE), ISSUER, 2)
    assert ledger.balance_of(ISSUER) == 35

    issuer_before = treasury.balance(ISSUER)
    payout = ledger.liquidate(env(ISSUER))

    assert payout == ether(13_125)
    assert treasury.balance(ISSUER) == issuer_before + ether(13_125)
    assert treasury.balance(ledger.address) == 0
    assert ledger.destroyed


def test_liquidation_via_delegated_transfer(ledger, mint, env):
    mint(ISSUER, 1)
    mint(BOB, 3)
    ledger.approve(env(BOB), ISSUER, 3)
    ledger.transfer_from(env(ISSUER), BOB, ISSUER, 3)
    held = ledger.collateral_held()
    assert ledger.liquidate(env(ISSUER)) == held
    assert ledger.destroyed


def test_empty_ledger_can_be_liquidated(ledger, env):
    assert ledger.liquidate(env(ISSUER)) == 0
    assert ledger.destroyed


@pytest.mark.parametrize(
    "op",
    [
        lambda led, env: led.quote_buy(1),
        lambda led, env: led.quote_sell(1),
        lambda led, env: led.total_supply(),
        lambda led, env: led.balance_of(ISSUER),
        lambda led, env: led.allowance(ISSUER, ALICE),
        lambda led, env: led.minter(),
        lambda led, env: led.collateral_held(),
        lambda led, env: led.mint(env(ALICE, ether(205)), 1),
        lambda led, env: led.burn(env(ISSUER), 1),
        lambda led, env: led.liquidate(env(ISSUER)),
        lambda led, env: led.transfer(env(ISSUER), ALICE, 1),
        lambda led, env: led.approve(env(ISSUER), ALICE, 1),
        lambda led, env: led.transfer_from(env(ISSUER), ISSUER, ALICE, 1),
    ],
)
def test_everything_fails_after_liquidation(ledger, mint, env, treasury, op):
    mint(ISSUER, 3)
    ledger.liquidate(env(ISSUER))
    before = treasury.snapshot()

    with pytest.raises(LedgerDestroyed):
        op(ledger, env)
    assert treasury.snapshot() == before
