from __future__ import annotations
from datetime import date

_SYMBOLS = {"INR": "₹", "USD": "$", "EUR": "€"}


def format_money(amount: float, currency: str) -> str:
    try:
        value = float(amount)
    except (TypeError, ValueError):
        value = 0.0
    sign = "-" if value < 0 else ""
    return f"{sign}{_SYMBOLS.get(currency, currency + ' ')}{abs(value):,.2f}"


def format_date(value: str) -> str:
    try:
        return date.fromisoformat(value).strftime("%d %b %Y")
    except (TypeError, ValueError):
        return value or "—"
