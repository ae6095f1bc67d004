"""
cotoken.dispatcher — ABI entrypoint table for the ledger.

Maps the external call names (camelCase, as a host would route them) to engine
methods. Views take only their ABI arguments; mutating entrypoints also get the
CallEnv. Several names are aliases so tooling written against either naming
(buyPrice/sellPrice/destroy, or quoteBuy/quoteSell/liquidate) routes to the
same method.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Sequence

from .context import CallEnv
from .errors import PaymentMismatch, UnknownCall
from .ledger import BondingCurveLedger


@dataclass(frozen=True)
class Entry:
    method: str
    arity: int
    mutating: bool
    payable: bool = False


ENTRYPOINTS: Dict[str, Entry] = {
    # views
    "quoteBuy": Entry("quote_buy", 1, False),
    "buyPrice": Entry("quote_buy", 1, False),
    "quoteSell": Entry("quote_sell", 1, False),
    "sellPrice": Entry("quote_sell", 1, False),
    "totalSupply": Entry("total_supply", 0, False),
    "balanceOf": Entry("balance_of", 1, False),
    "allowance": Entry("allowance", 2, False),
    "issuer": Entry("minter", 0, False),
    "minter": Entry("minter", 0, False),
    "collateral": Entry("collateral_held", 0, False),
    # state-changing
    "mint": Entry("mint", 1, True, payable=True),
    "burn": Entry("burn", 1, True),
    "liquidate": Entry("liquidate", 0, True),
    "destroy": Entry("liquidate", 0, True),
    "transfer": Entry("transfer", 2, True),
    "approve": Entry("approve", 2, True),
    "transferFrom": Entry("transfer_from", 3, True),
}


def lookup(call: str) -> Entry:
    entry = ENTRYPOINTS.get(call)
    if entry is None:
        raise UnknownCall(call=call)
    return entry


def is_view(call: str) -> bool:
    return not lookup(call).mutating


def dispatch(ledger: BondingCurveLedger, call: str, args: Sequence[Any], env: CallEnv) -> Any:
    """
    Route one call to the engine and return its raw result.

    Raises any LedgerError the engine raises; raises UnknownCall for unknown
    names or wrong argument counts.
    """
    entry = lookup(call)
    args = list(args)
    if len(args) != entry.arity:
        raise UnknownCall(f"{call} expects {entry.arity} argument(s), got {len(args)}", call=call)
    fn = getattr(ledger, entry.method)
    if not entry.mutating:
        if env.value:
            raise PaymentMismatch(f"{call} is a view and cannot receive value", expected=0, received=env.value)
        return fn(*args)
    return fn(env, *args)


__all__ = ["Entry", "ENTRYPOINTS", "lookup", "is_view", "dispatch"]
