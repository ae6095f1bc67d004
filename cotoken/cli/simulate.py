"""
cotoken.cli.simulate — replay a JSON scenario against a fresh in-memory ledger.

Scenario format
---------------
{
  "issuer":   "0xaaaa…",                          # deployer / issuer address
  "accounts": {"0xaaaa…": "1000 ether", "0xbbbb…": 1000000000000000000000},
  "calls": [
    {"call": "mint", "from": "0xbbbb…", "value": "$quoteBuy:2", "args": [2]},
    {"call": "liquidate", "from": "0xaaaa…", "expect": "INCOMPLETE_OWNERSHIP"},
    ...
  ]
}

- `value` is an amount (see _fmt.parse_amount) or "$quoteBuy:N", resolved just
  before the call against the ledger's supply at that moment.
- `expect` is optional: "success", "revert", or a specific error code.
- Address arguments are passed through as hex strings; the ledger normalises them.
  A malformed one stops the run with exit code 2, like a malformed document.

Examples
--------
cotoken simulate scenario.json
cotoken simulate scenario.json --json
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import typer

from ..context import CallEnv, ContextError, to_address
from ..curve import buy_quote
from ..executor import apply_call
from ..ledger import BondingCurveLedger
from ..result import CallResult
from ..treasury import Treasury
from ._fmt import fmt_amount, parse_amount, short_hex

QUOTE_PLACEHOLDER = "$quoteBuy:"


class ScenarioError(ValueError):
    """Malformed scenario document."""


@dataclass
class ScenarioCall:
    call: str
    sender: bytes
    value: Any = 0
    args: List[Any] = field(default_factory=list)
    expect: Optional[str] = None


@dataclass
class Scenario:
    issuer: bytes
    accounts: Dict[bytes, int]
    calls: List[ScenarioCall]


@dataclass
class ScenarioRun:
    ledger: BondingCurveLedger
    results: List[CallResult]
    mismatches: List[int]

    @property
    def ok(self) -> bool:
        return not self.mismatches


def _parse_value(v: Any) -> Any:
    if isinstance(v, str) and v.startswith(QUOTE_PLACEHOLDER):
        raw = v[len(QUOTE_PLACEHOLDER):]
        if not raw.isdigit() or int(raw) < 1:
            raise ScenarioError(f"bad placeholder {v!r}: expected {QUOTE_PLACEHOLDER}N with N >= 1")
        return v
    return parse_amount(v)


def parse_scenario(doc: Mapping[str, Any]) -> Scenario:
    if not isinstance(doc, Mapping):
        raise ScenarioError("scenario must be a JSON object")
    try:
        issuer = to_address(doc["issuer"])
        accounts = {to_address(a): parse_amount(v) for a, v in dict(doc.get("accounts") or {}).items()}
        calls: List[ScenarioCall] = []
        for i, c in enumerate(doc.get("calls") or []):
            if not isinstance(c, Mapping) or "call" not in c or "from" not in c:
                raise ScenarioError(f"call #{i} needs 'call' and 'from'")
            args = c.get("args") or []
            if not isinstance(args, list):
                raise ScenarioError(f"call #{i}: 'args' must be a list")
            calls.append(ScenarioCall(
                call=str(c["call"]),
                sender=to_address(c["from"]),
                value=_parse_value(c.get("value", 0)),
                args=args,
                expect=c.get("expect"),
            ))
    except ScenarioError:
        raise
    except KeyError as e:
        raise ScenarioError(f"missing field: {e.args[0]}") from e
    except ValueError as e:
        # ContextError (bad address) and amount parse failures
        raise ScenarioError(str(e)) from e
    return Scenario(issuer=issuer, accounts=accounts, calls=calls)


def load_scenario(path: Path) -> Scenario:
    try:
        doc = json.loads(Path(path).read_text(encoding="utf-8"))
    except UnicodeDecodeError as e:
        raise ScenarioError(f"scenario is not UTF-8 text: {e}") from e
    except json.JSONDecodeError as e:
        raise ScenarioError(f"invalid JSON: {e}") from e
    return parse_scenario(doc)


def _resolve_value(ledger: BondingCurveLedger, v: Any) -> int:
    if isinstance(v, str) and v.startswith(QUOTE_PLACEHOLDER):
        return buy_quote(ledger.supply, int(v[len(QUOTE_PLACEHOLDER):]))
    return v


def _matches(res: CallResult, expect: Optional[str]) -> bool:
    if expect is None:
        return True
    e = expect.strip()
    if e.lower() == "success":
        return res.is_success
    if e.lower() == "revert":
        return not res.is_success
    return res.error_code == e.upper()


def run_scenario(sc: Scenario) -> ScenarioRun:
    treasury = Treasury(sc.accounts)
    ledger = BondingCurveLedger.deploy(CallEnv(sc.issuer), treasury=treasury)
    results: List[CallResult] = []
    mismatches: List[int] = []
    for i, c in enumerate(sc.calls):
        env = CallEnv(c.sender, _resolve_value(ledger, c.value))
        try:
            res = apply_call(ledger, c.call, c.args, env)
        except ContextError as e:
            raise ScenarioError(f"call #{i} ({c.call}): {e}") from e
        results.append(res)
        if not _matches(res, c.expect):
            mismatches.append(i)
    return ScenarioRun(ledger=ledger, results=results, mismatches=mismatches)


def _summary(run: ScenarioRun) -> Dict[str, Any]:
    led = run.ledger
    return {
        "ledger": "0x" + led.address.hex(),
        "issuer": "0x" + led.issuer.hex(),
        "supply": led.supply,
        "collateral": led.collateral,
        "escrow": led.treasury.balance(led.address),
        "destroyed": led.destroyed,
    }


def _print_results(run: ScenarioRun, calls: Sequence[ScenarioCall]) -> None:
    for i, (c, res) in enumerate(zip(calls, run.results)):
        flag = "!" if i in run.mismatches else " "
        if res.is_success:
            tail = f"-> {res.value!r}" if not isinstance(res.value, bytes) else f"-> 0x{res.value.hex()}"
            if res.logs:
                tail += "  [" + ", ".join(ev.name.decode() for ev in res.logs) + "]"
            color = None
        else:
            tail = f"{res.error_code}: {(res.error or {}).get('message', '')}"
            color = typer.colors.RED if i in run.mismatches else typer.colors.YELLOW
        line = f"{flag}{i:>3}  {c.call:<13} {short_hex(c.sender):<14} {str(res.status):<8} {tail}"
        if color is None:
            typer.echo(line)
        else:
            typer.secho(line, fg=color)
    s = _summary(run)
    typer.echo("")
    typer.echo(f"supply={s['supply']} collateral={fmt_amount(s['collateral'])} destroyed={s['destroyed']}")


def simulate(
    scenario: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Scenario JSON file."),
    json_out: bool = typer.Option(False, "--json", help="Output results as JSON."),
) -> None:
    """Replay a scenario; exit code 1 if any call contradicts its `expect`."""
    try:
        sc = load_scenario(scenario)
        run = run_scenario(sc)
    except ScenarioError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(2)

    if json_out:
        doc = {
            "results": [r.to_dict() for r in run.results],
            "mismatches": run.mismatches,
            "final": _summary(run),
        }
        typer.echo(json.dumps(doc, indent=2, sort_keys=True))
    else:
        _print_results(run, sc.calls)

    if not run.ok:
        raise typer.Exit(1)


__all__ = [
    "Scenario",
    "ScenarioCall",
    "ScenarioError",
    "ScenarioRun",
    "parse_scenario",
    "load_scenario",
    "run_scenario",
    "simulate",
]
