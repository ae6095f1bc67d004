"""
cotoken.cli — command-line tools for the bonding-curve ledger.

Entry point: `cotoken` (see cotoken.cli.main).
"""

from .main import app, main

__all__ = ["app", "main"]
