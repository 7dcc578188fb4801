"""Decimal money utilities.

Balances, stakes and profits are ``Decimal`` quantized to 2 places
(ROUND_HALF_UP). Odds are ``Decimal`` without fixed scale. No float.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

_CURRENCY_PREFIXES = ("US$", "R$", "$", "€", "£")
_THOUSANDS_ONLY_RE = re.compile(r"^\d{1,3}(\.\d{3})+$")


def to_money(value: Decimal | int | str | float) -> Decimal:
    """Quantize any numeric value to 2 decimal places."""
    if isinstance(value, float):
        value = repr(value)
    try:
        return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    except ArithmeticError:
        # Beyond the 28-digit context, or NaN / Infinity
        raise ValueError(f"amount out of range: {value!r}") from None


def _strip_currency(s: str) -> str:
    for prefix in _CURRENCY_PREFIXES:
        if s.upper().startswith(prefix):
            return s[len(prefix):].strip()
    return s


def parse_money(raw: str) -> Decimal:
    """Parse a money-like cell: ``"R$ 1.234,56"``, ``"-12,50"``, ``"12.50"``.

    ``.`` is a thousands separator and ``,`` the decimal separator. When the
    text has no comma, a ``.`` is read as thousands only if every group after
    it has exactly 3 digits (``"1.234"``); otherwise it is a decimal point.
    """
    s = (raw or "").strip().replace(" ", "").replace("\u00a0", "")
    if not s:
        raise ValueError("amount is empty")

    negative = False
    # Sign may appear before or after the currency symbol: "-R$10" / "R$-10"
    if s.startswith("-"):
        negative, s = True, s[1:]
    elif s.startswith("+"):
        s = s[1:]
    s = _strip_currency(s)
    if s.startswith("-"):
        negative, s = not negative, s[1:]

    if "," in s:
        s = s.replace(".", "").replace(",", ".")
    elif _THOUSANDS_ONLY_RE.match(s):
        s = s.replace(".", "")

    try:
        amount = Decimal(s)
    except InvalidOperation:
        raise ValueError(f"invalid amount: {raw!r}") from None
    if not amount.is_finite():
        raise ValueError(f"invalid amount: {raw!r}")
    return to_money(-amount if negative else amount)


def parse_odd(raw: str) -> Decimal:
    """Parse an odd, accepting either ``,`` or ``.`` as decimal separator."""
    s = (raw or "").strip().replace(",", ".")
    try:
        odd = Decimal(s)
    except InvalidOperation:
        raise ValueError(f"invalid odd: {raw!r}") from None
    if not odd.is_finite():
        raise ValueError(f"invalid odd: {raw!r}")
    return odd


def money_to_display(value: Decimal) -> str:
    """Render as pt-BR currency: 1234.5 -> 'R$ 1.234,50', -12 -> '-R$ 12,00'."""
    amount = to_money(value)
    sign = "-" if amount < 0 else ""
    text = f"{abs(amount):,.2f}"  # 1,234.50
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {text}"
