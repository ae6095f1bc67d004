"""
cotoken — command-line interface for the bonding-curve ledger.

Commands:
  - cotoken quote buy N [--supply S]     Payment to mint N units
  - cotoken quote sell N --supply S      Refund for burning N units
  - cotoken curve [--upto N]             Unit price table
  - cotoken simulate SCENARIO.json       Replay calls against an in-memory ledger
  - cotoken version

Global options:
  --verbose / -v     DEBUG logging (default level from COTOKEN_LOG_LEVEL)

Examples:
  cotoken quote buy 1
  cotoken quote sell 50 --supply 100
  cotoken curve --upto 10 --json
  cotoken simulate scenario.json --json
"""

from __future__ import annotations

import json
import logging

import typer

from ..config import CFG
from ..curve import SUPPLY_CAP, price_table
from ..version import __version__
from . import quote
from ._fmt import fmt_ether
from .simulate import simulate

app = typer.Typer(
    name="cotoken",
    help="Bonding-curve token ledger tools",
    no_args_is_help=True,
    add_completion=False,
)


def _setup_logging(verbose: bool) -> None:
    # Basic logging if caller hasn't configured it
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=logging.DEBUG if verbose else getattr(logging, CFG.log_level, logging.INFO),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Increase verbosity"),
) -> None:
    """
    Quote, tabulate and simulate the CoToken bonding curve.

    The curve is fixed: the k-th unit costs 0.195 + 0.01*k ether and at most
    100 units can exist.
    """
    _setup_logging(verbose)


@app.command("curve")
def curve(
    upto: int = typer.Option(SUPPLY_CAP, "--upto", min=1, max=SUPPLY_CAP, help="Last unit index to show."),
    json_out: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Unit prices and cumulative collateral for units 1..upto."""
    rows = [{"unit": k, "price": p, "collateral": c} for k, p, c in price_table(upto)]
    if json_out:
        typer.echo(json.dumps(rows, indent=2))
        return
    typer.secho(f"{'unit':>4}  {'price (ether)':>14}  {'collateral (ether)':>18}", bold=True)
    for r in rows:
        typer.echo(f"{r['unit']:>4}  {fmt_ether(r['price']):>14}  {fmt_ether(r['collateral']):>18}")


@app.command("version")
def version() -> None:
    """Print the package version."""
    typer.echo(__version__)


app.add_typer(quote.app, name="quote")
app.command("simulate")(simulate)


def main() -> None:
    """Entry point for the cotoken CLI."""
    app()


if __name__ == "__main__":
    main()
