"""
cotoken.ledger — the bonding-curve ledger engine.

A single issuer deploys the ledger. Anyone may mint units by attaching exactly
the curve price; the issuer alone may burn units back against the curve and,
once it holds every unit in circulation, liquidate the ledger for all of its
collateral. Holders can move units between themselves with an ERC-20-like
surface (transfer / approve / transferFrom).

Entry points
------------
Views (no state change; fail once liquidated):
  - quote_buy(n) -> int         price of minting n units at the current supply
  - quote_sell(n) -> int        refund for burning the top n units
  - total_supply() -> int
  - balance_of(addr) -> int
  - allowance(owner, spender) -> int
  - minter() -> bytes
  - collateral_held() -> int
State-changing (atomic; all-or-nothing):
  - mint(env, n) -> bool                        payable, exact quote_buy(n)
  - burn(env, n) -> int                         issuer only, returns refund
  - liquidate(env) -> int                       issuer only, terminal, returns payout
  - transfer(env, to, n) -> bool
  - approve(env, spender, n) -> bool
  - transfer_from(env, src, dst, n) -> bool

Ordering rules
--------------
- Preconditions are checked before anything is written.
- Burn and liquidate write all internal state *before* sending value out; the
  surrounding journal checkpoint undoes the whole call if the transfer fails.
- Mutating calls do not nest: a call arriving while another is in flight (for
  instance from a recipient's receive hook) is rejected with ReentrantCall.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional

from .config import CFG
from .context import BytesLike, CallEnv, ContextError, to_address, to_hex
from .curve import SUPPLY_CAP, buy_quote, require_quantity, sell_quote
from .errors import (BalanceUnderflow, IncompleteOwnership, InsufficientAllowance,
                     InsufficientBalance, InsufficientSupply, InvalidQuantity,
                     LedgerDestroyed, PaymentMismatch, ReentrantCall,
                     SupplyCapExceeded, Unauthorized)
from .events import (EV_APPROVAL, EV_BURNED, EV_LIQUIDATED, EV_MINTED, EV_TRANSFER,
                     EventLog)
from .journal import Journal
from .state import LedgerState, checked_add, checked_sub, u256
from .treasury import Treasury

log = logging.getLogger(__name__)

_ADDRESS_DOMAIN = b"cotoken/ledger-address|"


def derive_ledger_address(issuer: bytes) -> bytes:
    """Deterministic escrow address for a ledger deployed by `issuer`."""
    return hashlib.shake_256(_ADDRESS_DOMAIN + bytes(issuer)).digest(CFG.address_len)


class BondingCurveLedger:
    """
    Bonding-curve token ledger with native-currency collateral in escrow.

    The ledger's collateral lives in `treasury` under `address`; the issuer is
    fixed here and there is no way to reassign it.
    """

    def __init__(
        self,
        issuer: BytesLike,
        *,
        treasury: Optional[Treasury] = None,
        address: Optional[BytesLike] = None,
    ) -> None:
        issuer_b = to_address(issuer)
        self.treasury = treasury if treasury is not None else Treasury()
        self.address = to_address(address) if address is not None else derive_ledger_address(issuer_b)
        if self.address == issuer_b:
            raise ContextError("ledger address must differ from the issuer")

        self._lock = threading.RLock()
        self._state = LedgerState(issuer=issuer_b)
        self.events = EventLog()
        self.journal = Journal(self._state, self.treasury, self.events)
        self._in_call: Optional[str] = None

        log.info("ledger %s deployed by issuer %s", to_hex(self.address), to_hex(issuer_b))

    @classmethod
    def deploy(
        cls,
        env: CallEnv,
        *,
        treasury: Optional[Treasury] = None,
        address: Optional[BytesLike] = None,
    ) -> "BondingCurveLedger":
        """Construct with Issuer = the deploying identity. The constructor is not payable."""
        if env.value:
            raise PaymentMismatch("constructor is not payable", expected=0, received=env.value)
        return cls(env.sender, treasury=treasury, address=address)

    # ------------------------------------------------------------------ #
    # Inspection (always available, including after liquidation)
    # ------------------------------------------------------------------ #

    @property
    def issuer(self) -> bytes:
        return self._state.issuer

    @property
    def supply(self) -> int:
        return self._state.supply

    @property
    def collateral(self) -> int:
        return self._state.collateral

    @property
    def destroyed(self) -> bool:
        return self._state.destroyed

    def snapshot(self) -> LedgerState:
        """Detached copy of the current state."""
        with self._lock:
            return self._state.copy()

    def check_invariants(self) -> List[str]:
        """Accounting invariants plus escrow == collateral; empty list when sound."""
        with self._lock:
            out = self._state.invariant_violations()
            escrow = self.treasury.balance(self.address)
            if not self._state.destroyed and escrow != self._state.collateral:
                out.append(f"escrow balance={escrow} != collateral={self._state.collateral}")
            return out

    # ------------------------------------------------------------------ #
    # Guards
    # ------------------------------------------------------------------ #

    def _require_active(self, op: str) -> None:
        if self._state.destroyed:
            raise LedgerDestroyed(op=op)

    def _only_issuer(self, env: CallEnv, op: str) -> None:
        if env.sender != self._state.issuer:
            raise Unauthorized(caller=to_hex(env.sender), op=op)

    def _require_no_value(self, env: CallEnv, op: str) -> None:
        if CFG.strict_mode and env.value != 0:
            raise PaymentMismatch(f"{op} is not payable", expected=0, received=env.value)

    @contextmanager
    def _invocation(self, op: str) -> Iterator[LedgerState]:
        with self._lock:
            if self._in_call is not None:
                raise ReentrantCall(op=op, data={"active": self._in_call})
            self._require_active(op)
            self._in_call = op
            self.events.open_frame()
            try:
                with self.journal.checkpoint():
                    yield self._state
            finally:
                self._in_call = None

    # ------------------------------------------------------------------ #
    # Views
    # ------------------------------------------------------------------ #

    def quote_buy(self, n: int) -> int:
        """Total payment to mint `n` units from the current supply. Ignores the cap."""
        with self._lock:
            self._require_active("quote_buy")
            supply = self._state.supply
            price = buy_quote(supply, n)
        log.debug("quote_buy(%s) at supply %d = %d", n, supply, price)
        return price

    def quote_sell(self, n: int) -> int:
        """Total refund for burning the top `n` units of the current supply."""
        with self._lock:
            self._require_active("quote_sell")
            supply = self._state.supply
            refund = sell_quote(supply, n)
        log.debug("quote_sell(%s) at supply %d = %d", n, supply, refund)
        return refund

    def total_supply(self) -> int:
        with self._lock:
            self._require_active("total_supply")
            return self._state.supply

    def balance_of(self, addr: BytesLike) -> int:
        with self._lock:
            self._require_active("balance_of")
            return self._state.balance_of(to_address(addr))

    def allowance(self, owner: BytesLike, spender: BytesLike) -> int:
        with self._lock:
            self._require_active("allowance")
            return self._state.allowance(to_address(owner), to_address(spender))

    def minter(self) -> bytes:
        with self._lock:
            self._require_active("minter")
            return self._state.issuer

    def collateral_held(self) -> int:
        with self._lock:
            self._require_active("collateral")
            return self._state.collateral

    # ------------------------------------------------------------------ #
    # Curve operations
    # ------------------------------------------------------------------ #

    def mint(self, env: CallEnv, n: int) -> bool:
        """
        Mint `n` units to the caller against exactly quote_buy(n) attached value.

        Emits: Minted(account, amount, newBalance, newSupply)
        """
        with self._invocation("mint") as st:
            n = require_quantity(n)
            if st.supply + n > SUPPLY_CAP:
                raise SupplyCapExceeded(supply=st.supply, requested=n, cap=SUPPLY_CAP)
            price = buy_quote(st.supply, n)
            if env.value != price:
                raise PaymentMismatch(expected=price, received=env.value)

            self.treasury.transfer(env.sender, self.address, env.value)

            st.supply = checked_add(st.supply, n)
            new_balance = checked_add(st.balance_of(env.sender), n)
            st.set_balance(env.sender, new_balance)
            st.collateral = checked_add(st.collateral, env.value)

            self.events.emit(EV_MINTED, {
                "account": env.sender,
                "amount": n,
                "newBalance": new_balance,
                "newSupply": st.supply,
            })
            supply = st.supply

        log.info("mint %d by %s for %d wei (supply=%d)", n, to_hex(env.sender), price, supply)
        return True

    def burn(self, env: CallEnv, n: int) -> int:
        """
        Issuer-only: remove the top `n` units and receive quote_sell(n).

        The bound is total supply; a burn that passes it but exceeds the issuer's
        own balance fails with BalanceUnderflow.

        Emits: Burned(issuer, amount, sellingPrice, remainingSupply)
        """
        with self._invocation("burn") as st:
            self._only_issuer(env, "burn")
            self._require_no_value(env, "burn")
            n = require_quantity(n)
            if n > st.supply:
                raise InsufficientSupply(supply=st.supply, requested=n)
            held = st.balance_of(st.issuer)
            if n > held:
                raise BalanceUnderflow("issuer balance cannot cover burn", balance=held, requested=n)

            refund = sell_quote(st.supply, n)

            st.supply = checked_sub(st.supply, n)
            st.set_balance(st.issuer, checked_sub(held, n))
            st.collateral = checked_sub(st.collateral, refund)

            self.treasury.transfer(self.address, st.issuer, refund)

            self.events.emit(EV_BURNED, {
                "issuer": st.issuer,
                "amount": n,
                "sellingPrice": refund,
                "remainingSupply": st.supply,
            })
            supply = st.supply

        log.info("burn %d by issuer for %d wei (supply=%d)", n, refund, supply)
        return refund

    def liquidate(self, env: CallEnv) -> int:
        """
        Issuer-only, terminal: pay out the whole escrow and destroy the ledger.

        Requires the issuer to hold every unit in circulation.

        Emits: Liquidated(issuer, payout)
        """
        with self._invocation("liquidate") as st:
            self._only_issuer(env, "liquidate")
            self._require_no_value(env, "liquidate")
            held = st.balance_of(st.issuer)
            if held != st.supply:
                raise IncompleteOwnership(issuer_balance=held, supply=st.supply)

            payout = self.treasury.balance(self.address)
            st.clear()
            st.destroyed = True

            self.treasury.transfer(self.address, st.issuer, payout)

            self.events.emit(EV_LIQUIDATED, {"issuer": st.issuer, "payout": payout})

        log.info("ledger %s liquidated; %d wei paid to issuer", to_hex(self.address), payout)
        return payout

    # ------------------------------------------------------------------ #
    # Holder surface
    # ------------------------------------------------------------------ #

    def transfer(self, env: CallEnv, to: BytesLike, n: int) -> bool:
        """Move `n` units from the caller to `to`. Emits: Transfer(src, dst, value)"""
        with self._invocation("transfer"):
            self._require_no_value(env, "transfer")
            self._move(env.sender, to_address(to), require_quantity(n))
        return True

    def approve(self, env: CallEnv, spender: BytesLike, n: int) -> bool:
        """Set allowance(caller, spender) to `n` (0 revokes). Emits: Approval(owner, spender, value)"""
        with self._invocation("approve") as st:
            self._require_no_value(env, "approve")
            if isinstance(n, bool) or not isinstance(n, int) or n < 0:
                raise InvalidQuantity("allowance must be a non-negative integer", quantity=n)
            spender_b = to_address(spender)
            st.set_allowance(env.sender, spender_b, u256(n))
            self.events.emit(EV_APPROVAL, {"owner": env.sender, "spender": spender_b, "value": n})
        return True

    def transfer_from(self, env: CallEnv, src: BytesLike, dst: BytesLike, n: int) -> bool:
        """
        Move `n` units from `src` to `dst`, spending allowance(src, caller) unless
        the caller is `src`.

        Emits: Approval(owner=src, spender=caller, value=remaining), Transfer(src, dst, n)
        """
        with self._invocation("transfer_from") as st:
            self._require_no_value(env, "transfer_from")
            n = require_quantity(n)
            src_b = to_address(src)
            dst_b = to_address(dst)
            if env.sender != src_b:
                cur = st.allowance(src_b, env.sender)
                if cur < n:
                    raise InsufficientAllowance(allowance=cur, requested=n)
                st.set_allowance(src_b, env.sender, cur - n)
                self.events.emit(EV_APPROVAL, {"owner": src_b, "spender": env.sender, "value": cur - n})
            self._move(src_b, dst_b, n)
        return True

    def _move(self, src: bytes, dst: bytes, n: int) -> None:
        st = self._state
        src_bal = st.balance_of(src)
        if n > src_bal:
            raise InsufficientBalance(balance=src_bal, requested=n)
        if src != dst:
            st.set_balance(src, src_bal - n)
            st.set_balance(dst, checked_add(st.balance_of(dst), n))
        self.events.emit(EV_TRANSFER, {"src": src, "dst": dst, "value": n})


__all__ = ["BondingCurveLedger", "derive_ledger_address"]
