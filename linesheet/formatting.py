"""Display formatting for colors, size ranges, and prices."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

LETTER_SIZES: Tuple[str, ...] = ("XXXS", "XXS", "XS", "S", "M", "L", "XL", "XXL", "XXXL", "XXXXL")
NUMERIC_SIZES: Tuple[str, ...] = tuple(str(n) for n in range(28, 53, 2))
DEFAULT_SIZE_ORDER: Tuple[str, ...] = LETTER_SIZES + NUMERIC_SIZES

DEFAULT_COLOR_NAMES: Dict[str, str] = {
    "NAVY": "DARK NAVY",
    "ROYAL BLUE": "AZURE BLUE",
    "LIGHT BLUE": "AZURE BLUE",
    "BLACK": "BLACK",
    "WHITE": "WHITE",
    "GRAY": "GRAY",
    "GREY": "GRAY",
    "RED": "RED",
    "GREEN": "GREEN",
    "BLUE": "BLUE",
    "YELLOW": "YELLOW",
    "ORANGE": "ORANGE",
    "PURPLE": "PURPLE",
    "PINK": "PINK",
    "BROWN": "BROWN",
    "BEIGE": "BEIGE",
    "KHAKI": "KHAKI",
    "OLIVE": "OLIVE",
    "MAROON": "MAROON",
    "BURGUNDY": "BURGUNDY",
}

CURRENCY_SYMBOLS: Dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CAD": "CA$",
    "AUD": "A$",
    "NZD": "NZ$",
    "CNY": "CN¥",
    "INR": "₹",
    "KRW": "₩",
    "MXN": "MX$",
    "BRL": "R$",
}

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_NON_NUMERIC = re.compile(r"[^\d.-]")
_CENTS = Decimal("0.01")


class ColorNormalizer:
    """Maps free-form color names onto the house color vocabulary."""

    def __init__(self, mapping: Optional[Mapping[str, str]] = None) -> None:
        source = DEFAULT_COLOR_NAMES if mapping is None else mapping
        self.mapping = {key.upper(): value for key, value in source.items()}

    def __call__(self, color: str) -> str:
        upper = (color or "").strip().upper()
        return self.mapping.get(upper, upper)


def format_colors(colors: Iterable[str]) -> str:
    unique = list(dict.fromkeys(colors))
    if not unique:
        return ""
    if len(unique) == 1:
        return unique[0]
    return "+".join(sorted(unique))


class SizeRangeFormatter:
    """Sort a size set by a canonical order and collapse dense runs into a range.

    A run collapses to ``"<largest> - <smallest>"`` when both ends are known
    sizes on the same scale, they are at most ``max_gap`` positions apart, and at
    least ``min_density`` of the positions in between are present. Everything
    else is listed explicitly in canonical order.
    """

    def __init__(
        self,
        order: Optional[Sequence[str]] = None,
        *,
        scales: Optional[Sequence[Sequence[str]]] = None,
        max_gap: int = 8,
        min_density: float = 0.8,
    ) -> None:
        if order is None:
            self.order: Tuple[str, ...] = DEFAULT_SIZE_ORDER
            default_scales: Sequence[Sequence[str]] = (LETTER_SIZES, NUMERIC_SIZES)
        else:
            self.order = tuple(order)
            default_scales = (self.order,)
        self.scales = [frozenset(scale) for scale in (scales or default_scales)]
        self.max_gap = max_gap
        self.min_density = min_density
        self._index = {size: idx for idx, size in enumerate(self.order)}

    def sort(self, sizes: Iterable[str]) -> List[str]:
        return sorted(dict.fromkeys(sizes), key=self._sort_key)

    def format(self, sizes: Iterable[str]) -> str:
        ordered = self.sort(sizes)
        if not ordered:
            return ""
        if len(ordered) == 1:
            return ordered[0]

        first, last = ordered[0], ordered[-1]
        first_idx = self._index.get(first)
        last_idx = self._index.get(last)
        if first_idx is not None and last_idx is not None and self._same_scale(first, last):
            gap = last_idx - first_idx
            if gap <= self.max_gap and len(ordered) >= (gap + 1) * self.min_density:
                return f"{last} - {first}"

        return ", ".join(ordered)

    __call__ = format

    def _sort_key(self, size: str) -> Tuple[int, int, str]:
        idx = self._index.get(size)
        if idx is None:
            return (1, 0, size)
        return (0, idx, "")

    def _same_scale(self, first: str, last: str) -> bool:
        return any(first in scale and last in scale for scale in self.scales)


def format_price(price: str | float | int, currency: str) -> str:
    """Format an amount as en-US currency text; unparseable input comes back unchanged."""

    amount = _to_decimal(price)
    if amount is None:
        return str(price)

    code = (currency or "").strip().upper()
    try:
        quantized = amount.quantize(_CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return str(price)
    sign = "-" if quantized < 0 else ""
    digits = f"{abs(quantized):,.2f}"
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol:
        return f"{sign}{symbol}{digits}"
    if not code:
        return f"{sign}{digits}"
    # Code and amount are joined by a non-breaking space (U+00A0).
    return f"{sign}{code} {digits}"


def parse_price(text: Optional[str]) -> Optional[float]:
    """Recover a numeric amount from a formatted price string such as ``$1,250.00``."""

    if not text:
        return None
    cleaned = _NON_NUMERIC.sub("", text)
    try:
        return float(cleaned)
    except ValueError:
        return None


def _to_decimal(value: str | float | int) -> Optional[Decimal]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        text = repr(value)
    else:
        match = _LEADING_NUMBER.match(str(value or ""))
        if not match:
            return None
        text = match.group(1)
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount
