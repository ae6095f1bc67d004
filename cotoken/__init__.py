"""
CoToken — bonding-curve token ledger with native-currency collateral in escrow.

Quick use:

    from cotoken import BondingCurveLedger, CallEnv, Treasury

    treasury = Treasury({issuer: 10**21, alice: 10**21})
    ledger = BondingCurveLedger.deploy(CallEnv(issuer), treasury=treasury)
    ledger.mint(CallEnv(alice, ledger.quote_buy(2)), 2)

Host-style invocation (REVERT results instead of exceptions) lives in
cotoken.executor; the command-line tools in cotoken.cli.
"""

from .version import __version__
from .config import CFG, LedgerConfig, load_config
from .context import CallEnv, ContextError
from .curve import BASE_PRICE, SLOPE, SUPPLY_CAP, WEI_PER_ETHER
from .errors import LedgerError
from .ledger import BondingCurveLedger, derive_ledger_address
from .treasury import Treasury

__all__ = [
    "__version__",
    "CFG",
    "LedgerConfig",
    "load_config",
    "CallEnv",
    "ContextError",
    "BASE_PRICE",
    "SLOPE",
    "SUPPLY_CAP",
    "WEI_PER_ETHER",
    "LedgerError",
    "BondingCurveLedger",
    "derive_ledger_address",
    "Treasury",
]
