"""
Shared fixtures for cotoken tests:
- Well-known accounts (issuer + two holders), each funded with 1000 ether
- A fresh Treasury and a ledger deployed by ISSUER on top of it
- `env(...)` helper building a CallEnv
"""

from __future__ import annotations

from typing import Callable

import pytest

from cotoken.context import CallEnv
from cotoken.curve import WEI_PER_ETHER
from cotoken.ledger import BondingCurveLedger
from cotoken.treasury import Treasury

ISSUER = b"\xaa" * 20
ALICE = b"\xbb" * 20
BOB = b"\xcc" * 20

FUNDING = 1000 * WEI_PER_ETHER


def ether(milli: int) -> int:
    """Amount in wei for `milli` thousandths of an ether (205 -> 0.205 ether)."""
    return milli * 10**15


@pytest.fixture
def treasury() -> Treasury:
    return Treasury({ISSUER: FUNDING, ALICE: FUNDING, BOB: FUNDING})


@pytest.fixture
def ledger(treasury: Treasury) -> BondingCurveLedger:
    return BondingCurveLedger.deploy(CallEnv(ISSUER), treasury=treasury)


@pytest.fixture
def env() -> Callable[..., CallEnv]:
    def _env(sender: bytes, value: int = 0) -> CallEnv:
        return CallEnv(sender, value)

    return _env


@pytest.fixture
def mint(ledger: BondingCurveLedger) -> Callable[[bytes, int], None]:
    """Mint `n` units to `who`, paying the exact quote."""

    def _mint(who: bytes, n: int) -> None:
        ledger.mint(CallEnv(who, ledger.quote_buy(n)), n)

    return _mint
