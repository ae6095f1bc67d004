"""
cotoken.executor — top-level orchestration for applying calls to a ledger.

Responsibilities
- apply_call: one-call execution wrapper. Routes through cotoken.dispatcher,
  turns a LedgerError into a REVERT CallResult and attaches a CBOR receipt.
- apply_calls: sequentially applies a list of calls against the same ledger and
  returns the per-call results in order.

Notes
- Atomicity is handled inside the ledger (each mutating call runs in its own
  journal checkpoint), so a REVERT result always means "no effect".
- Only LedgerError is converted. Anything else is a bug in the caller or the
  engine and propagates.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .context import BytesLike, CallEnv, to_hex
from .dispatcher import dispatch
from .errors import LedgerError, error_to_result_fields
from .ledger import BondingCurveLedger
from .receipts import receipt_to_cbor
from .result import CallResult
from .status import CallStatus

log = logging.getLogger(__name__)


def apply_call(
    ledger: BondingCurveLedger,
    call: str,
    args: Sequence[Any],
    env: CallEnv,
    *,
    with_receipt: bool = True,
) -> CallResult:
    """
    Apply a single call to `ledger` on behalf of `env.sender`.

    Returns:
        CallResult with status SUCCESS (value + events emitted by the call) or
        REVERT (error dict, no events).
    """
    mark = ledger.events.mark()
    try:
        value = dispatch(ledger, call, args, env)
    except LedgerError as exc:
        log.info("call %s from %s reverted: %s", call, to_hex(env.sender), exc)
        res = CallResult(call=call, sender=env.sender, **error_to_result_fields(exc))
    else:
        res = CallResult(
            call=call,
            sender=env.sender,
            status=CallStatus.SUCCESS,
            value=value,
            logs=tuple(ledger.events.since(mark)),
        )
        log.debug("call %s from %s ok -> %r", call, to_hex(env.sender), value)

    if with_receipt:
        res = res.with_receipt(receipt_to_cbor(res))
    return res


def apply_calls(
    ledger: BondingCurveLedger,
    calls: Iterable[Tuple[str, Sequence[Any], CallEnv]],
    *,
    with_receipt: bool = True,
) -> List[CallResult]:
    """Apply `(call, args, env)` triples in order; a REVERT does not stop the batch."""
    return [apply_call(ledger, c, a, e, with_receipt=with_receipt) for c, a, e in calls]


def call(
    ledger: BondingCurveLedger,
    name: str,
    *args: Any,
    sender: BytesLike,
    value: int = 0,
    receipt: Optional[bool] = None,
) -> CallResult:
    """Convenience form of apply_call taking positional ABI args."""
    env = CallEnv.from_dict({"sender": sender, "value": value})
    return apply_call(ledger, name, args, env, with_receipt=True if receipt is None else receipt)


__all__ = ["apply_call", "apply_calls", "call"]
