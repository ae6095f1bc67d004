"""
cotoken.cli.quote — price queries against the curve at an arbitrary supply.

Implements:
  - cotoken quote buy N [--supply S]     payment to mint N units on top of S
  - cotoken quote sell N --supply S      refund for burning the top N of S
"""

from __future__ import annotations

import json

import typer

from ..curve import SUPPLY_CAP, buy_quote, sell_quote
from ..errors import LedgerError
from ._fmt import fmt_amount

app = typer.Typer(help="Quote mint payments and burn refunds", no_args_is_help=True)


def _emit(kind: str, n: int, supply: int, wei: int, json_out: bool) -> None:
    if json_out:
        typer.echo(json.dumps({"kind": kind, "n": n, "supply": supply, "wei": wei}, sort_keys=True))
    else:
        typer.echo(f"{kind} {n} @ supply {supply}: {fmt_amount(wei)}")


@app.command("buy")
def quote_buy(
    n: int = typer.Argument(..., help="Units to mint."),
    supply: int = typer.Option(0, "--supply", "-s", min=0, help="Current circulating supply."),
    json_out: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Payment required to mint N units. Does not consult the supply cap."""
    try:
        wei = buy_quote(supply, n)
    except LedgerError as e:
        typer.secho(f"Error: {e.message}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    _emit("buy", n, supply, wei, json_out)
    if supply + n > SUPPLY_CAP and not json_out:
        typer.secho(f"note: a mint of {n} at supply {supply} would exceed the cap of {SUPPLY_CAP}",
                    fg=typer.colors.YELLOW, err=True)


@app.command("sell")
def quote_sell(
    n: int = typer.Argument(..., help="Units to burn."),
    supply: int = typer.Option(..., "--supply", "-s", min=0, help="Current circulating supply."),
    json_out: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Refund for burning the top N units of the given supply."""
    try:
        wei = sell_quote(supply, n)
    except LedgerError as e:
        typer.secho(f"Error: {e.message}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    _emit("sell", n, supply, wei, json_out)
