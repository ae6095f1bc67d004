"""
cotoken.errors — typed failures of the bonding-curve ledger.

Every rejected invocation is signalled by raising one of these exceptions at the
violated precondition. The executor turns them into REVERT results; nothing in
the engine retries or swallows them. They depend only on cotoken.status, so
low-level modules (curve, state, treasury) can raise them without import cycles.

Hierarchy
---------
LedgerError (base)
 ├─ InvalidQuantity        : quantity is not a positive integer
 ├─ SupplyCapExceeded      : mint would push supply above the cap
 ├─ PaymentMismatch        : attached value != quoted price (or value on a non-payable call)
 ├─ Unauthorized           : caller is not the issuer
 ├─ InsufficientSupply     : burn/sell quantity exceeds circulating supply
 ├─ IncompleteOwnership    : liquidate while other holders exist
 ├─ TransferFailure        : native-currency transfer could not complete
 ├─ BalanceUnderflow       : issuer balance cannot cover a burn that passed the supply check
 ├─ InsufficientBalance    : holder transfer exceeds balance
 ├─ InsufficientAllowance  : delegated transfer exceeds allowance
 ├─ LedgerDestroyed        : any call after liquidation
 ├─ ReentrantCall          : mutating call while another one is in flight
 ├─ ArithmeticOverflow     : uint bound violated
 └─ UnknownCall            : dispatcher has no such entrypoint
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .status import CallStatus


@dataclass(eq=False)
class LedgerError(Exception):
    """
    Base ledger error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g., 'INVALID_QUANTITY').
        data:    Optional structured details (kept JSON-serializable).
    """
    message: str = "ledger error"
    code: str = "LEDGER_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for results/receipts/CLI output."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


def _merge(data: Optional[Dict[str, Any]], **extra: Any) -> Optional[Dict[str, Any]]:
    d: Dict[str, Any] = dict(data or {})
    for k, v in extra.items():
        if v is not None:
            d.setdefault(k, v)
    return d or None


class InvalidQuantity(LedgerError):
    def __init__(self, message: str = "quantity must be a positive integer", *, quantity: Any = None,
                 data: Optional[Dict[str, Any]] = None):
        q = None if quantity is None else repr(quantity)
        super().__init__(message=message, code="INVALID_QUANTITY", data=_merge(data, quantity=q))


class SupplyCapExceeded(LedgerError):
    def __init__(self, message: str = "token supply limit has been reached", *, supply: Optional[int] = None,
                 requested: Optional[int] = None, cap: Optional[int] = None,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="SUPPLY_CAP_EXCEEDED",
            data=_merge(data, supply=supply, requested=requested, cap=cap),
        )


class PaymentMismatch(LedgerError):
    def __init__(self, message: str = "incorrect amount of value transferred", *, expected: Optional[int] = None,
                 received: Optional[int] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="PAYMENT_MISMATCH",
            data=_merge(data, expected=expected, received=received),
        )


class Unauthorized(LedgerError):
    """Caller is not the issuer. `caller` is kept as 0x-hex for JSON friendliness."""

    def __init__(self, message: str = "caller is not the issuer", *, caller: Optional[str] = None,
                 op: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="UNAUTHORIZED", data=_merge(data, caller=caller, op=op))


class InsufficientSupply(LedgerError):
    def __init__(self, message: str = "cannot remove more units than the total supply", *,
                 supply: Optional[int] = None, requested: Optional[int] = None,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="INSUFFICIENT_SUPPLY",
            data=_merge(data, supply=supply, requested=requested),
        )


class IncompleteOwnership(LedgerError):
    def __init__(self, message: str = "issuer must own all units in circulation", *,
                 issuer_balance: Optional[int] = None, supply: Optional[int] = None,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="INCOMPLETE_OWNERSHIP",
            data=_merge(data, issuer_balance=issuer_balance, supply=supply),
        )


class TransferFailure(LedgerError):
    def __init__(self, message: str = "native value transfer failed", *, to: Optional[str] = None,
                 amount: Optional[int] = None, reason: Optional[str] = None,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="TRANSFER_FAILURE",
            data=_merge(data, to=to, amount=amount, reason=reason),
        )


class BalanceUnderflow(LedgerError):
    def __init__(self, message: str = "balance would underflow", *, balance: Optional[int] = None,
                 requested: Optional[int] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="BALANCE_UNDERFLOW",
            data=_merge(data, balance=balance, requested=requested),
        )


class InsufficientBalance(LedgerError):
    def __init__(self, message: str = "insufficient balance", *, balance: Optional[int] = None,
                 requested: Optional[int] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="INSUFFICIENT_BALANCE",
            data=_merge(data, balance=balance, requested=requested),
        )


class InsufficientAllowance(LedgerError):
    def __init__(self, message: str = "insufficient allowance", *, allowance: Optional[int] = None,
                 requested: Optional[int] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="INSUFFICIENT_ALLOWANCE",
            data=_merge(data, allowance=allowance, requested=requested),
        )


class LedgerDestroyed(LedgerError):
    def __init__(self, message: str = "ledger has been liquidated", *, op: Optional[str] = None,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="LEDGER_DESTROYED", data=_merge(data, op=op))


class ReentrantCall(LedgerError):
    def __init__(self, message: str = "re-entrant call rejected", *, op: Optional[str] = None,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="REENTRANT_CALL", data=_merge(data, op=op))


class ArithmeticOverflow(LedgerError):
    def __init__(self, message: str = "uint bound exceeded", *, value: Optional[int] = None,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="ARITHMETIC_OVERFLOW", data=_merge(data, value=value))


class UnknownCall(LedgerError):
    def __init__(self, message: str = "unknown entrypoint", *, call: Optional[str] = None,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="UNKNOWN_CALL", data=_merge(data, call=call))


# -------- helper utilities ---------------------------------------------------


def error_to_result_fields(err: LedgerError) -> Dict[str, Any]:
    """
    Map a LedgerError to the CallResult fields of a reverted call.

    Returns:
        {"status": CallStatus.REVERT, "error": {code, message, data?}}
    """
    return {"status": CallStatus.REVERT, "error": err.to_dict()}


__all__ = [
    "LedgerError",
    "InvalidQuantity",
    "SupplyCapExceeded",
    "PaymentMismatch",
    "Unauthorized",
    "InsufficientSupply",
    "IncompleteOwnership",
    "TransferFailure",
    "BalanceUnderflow",
    "InsufficientBalance",
    "InsufficientAllowance",
    "LedgerDestroyed",
    "ReentrantCall",
    "ArithmeticOverflow",
    "UnknownCall",
    "error_to_result_fields",
]
