from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Union

from ..curve import WEI_PER_ETHER


def fmt_ether(wei: int) -> str:
    """Exact decimal rendering of a wei amount in ether ("0.205", "70")."""
    whole, frac = divmod(int(wei), WEI_PER_ETHER)
    if not frac:
        return str(whole)
    return f"{whole}.{frac:018d}".rstrip("0")


def fmt_amount(wei: int) -> str:
    return f"{wei} wei ({fmt_ether(wei)} ether)"


def parse_amount(v: Union[int, str, Any]) -> int:
    """
    Parse a native amount: an int (wei), a decimal string of wei, or a string
    with an "ether" suffix ("1.5 ether", "0.205ether").
    """
    if isinstance(v, bool):
        raise ValueError(f"invalid amount: {v!r}")
    if isinstance(v, int):
        if v < 0:
            raise ValueError(f"amount must be non-negative: {v}")
        return v
    if not isinstance(v, str):
        raise ValueError(f"invalid amount: {v!r}")
    s = v.strip().lower()
    scale = 1
    if s.endswith("ether"):
        s = s[: -len("ether")].strip()
        scale = WEI_PER_ETHER
    try:
        d = Decimal(s) * scale
    except InvalidOperation as e:
        raise ValueError(f"invalid amount: {v!r}") from e
    if d < 0 or d != d.to_integral_value():
        raise ValueError(f"amount must be a non-negative whole number of wei: {v!r}")
    return int(d)


def short_hex(b: bytes, n: int = 10) -> str:
    h = "0x" + bytes(b).hex()
    if len(h) <= n + 2:
        return h
    return h[: n + 2] + "…"
