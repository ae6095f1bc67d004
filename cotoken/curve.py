"""
cotoken.curve — the bonding curve: unit prices and range costs.

Every amount here is an integer in the native unit (wei). Floats never enter
the computation, so quotes are exact and identical on every run.

Curve
-----
    price(k) = BASE_PRICE + SLOPE * k        (k = 1-based unit index)

The cost of a contiguous range of units is the sum of their prices. Buy and sell
quotes are both expressed through `range_cost`, so minting n units and then
burning the same n units moves exactly the same amount of collateral in each
direction.

    range_cost(start, n) = Σ_{k=start+1}^{start+n} price(k)
                         = n*BASE_PRICE + SLOPE * n * (2*start + n + 1) / 2

n*(2*start + n + 1) is always even, so the division is exact.
"""

from __future__ import annotations

from typing import Final, Iterator, Tuple

from .errors import InsufficientSupply, InvalidQuantity

WEI_PER_ETHER: Final[int] = 10**18

SUPPLY_CAP: Final[int] = 100
SLOPE: Final[int] = 10**16  # 0.01 ether per unit index
BASE_PRICE: Final[int] = 195 * 10**15  # 0.195 ether; first unit costs 0.205 ether


def is_valid_quantity(n: object) -> bool:
    """True iff `n` is a positive int (bool excluded)."""
    return isinstance(n, int) and not isinstance(n, bool) and n >= 1


def require_quantity(n: object) -> int:
    """Return `n` if it is a positive integer unit count, else raise InvalidQuantity."""
    if not is_valid_quantity(n):
        if isinstance(n, int) and not isinstance(n, bool) and n < 1:
            raise InvalidQuantity("cannot use fewer than 1 unit", quantity=n)
        raise InvalidQuantity(quantity=n)
    return n  # type: ignore[return-value]


def unit_price(k: int) -> int:
    """Price of the k-th unit (1-based)."""
    if isinstance(k, bool) or not isinstance(k, int) or k < 1:
        raise InvalidQuantity("unit index must be a positive integer", quantity=k)
    return BASE_PRICE + SLOPE * k


def range_cost(start: int, n: int) -> int:
    """Sum of unit prices for indices start+1 .. start+n."""
    n = require_quantity(n)
    if isinstance(start, bool) or not isinstance(start, int) or start < 0:
        raise InvalidQuantity("range start must be a non-negative integer", quantity=start)
    return n * BASE_PRICE + SLOPE * (n * (2 * start + n + 1)) // 2


def buy_quote(supply: int, n: int) -> int:
    """Payment required to mint `n` units on top of `supply`. The cap is not consulted."""
    return range_cost(supply, n)


def sell_quote(supply: int, n: int) -> int:
    """Refund for removing the top `n` units of `supply`."""
    n = require_quantity(n)
    if n > supply:
        raise InsufficientSupply(supply=supply, requested=n)
    return range_cost(supply - n, n)


def collateral_for(supply: int) -> int:
    """Collateral the ledger must hold at `supply`: the curve integrated from 0."""
    if supply == 0:
        return 0
    return range_cost(0, supply)


def price_table(upto: int = SUPPLY_CAP) -> Iterator[Tuple[int, int, int]]:
    """Yield (index, unit price, cumulative collateral) for indices 1..upto."""
    total = 0
    for k in range(1, upto + 1):
        p = unit_price(k)
        total += p
        yield k, p, total


__all__ = [
    "WEI_PER_ETHER",
    "SUPPLY_CAP",
    "SLOPE",
    "BASE_PRICE",
    "is_valid_quantity",
    "require_quantity",
    "unit_price",
    "range_cost",
    "buy_quote",
    "sell_quote",
    "collateral_for",
    "price_table",
]
