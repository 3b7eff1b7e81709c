"""Currency helpers for the storefront.

Prices are stored as ``Decimal`` euros with two decimal places
(``Numeric(10, 2)`` columns). Display follows the French locale used by the
storefront: ``1 250,00 €``.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

# ─── constants ───────────────────────────────────────────────────────────────

CENT = Decimal("0.01")
_GROUP_SEPARATOR = "\u202f"  # narrow no-break space
_CURRENCY_SEPARATOR = "\u00a0"  # no-break space before the symbol


# ─── helpers ──────────────────────────────────────────────────────────────────


def to_money(value: Union[Decimal, int, float, str]) -> Decimal:
    """Quantize a value to cents (round half-up)."""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_eur(value: Union[Decimal, int, float, str]) -> str:
    """Format an amount the way fr-FR displays euros, e.g. ``1 250,00 €``."""
    amount = to_money(value)
    sign = "-" if amount < 0 else ""
    units, cents = f"{abs(amount):.2f}".split(".")

    groups = []
    while len(units) > 3:
        groups.insert(0, units[-3:])
        units = units[:-3]
    groups.insert(0, units)

    return f"{sign}{_GROUP_SEPARATOR.join(groups)},{cents}{_CURRENCY_SEPARATOR}€"
