# priceboard/ui/formatting.py

"""Display formatting for prices and the header clock."""

from datetime import datetime


def format_price(price: int) -> str:
    """Group digits in threes with dots: ``82500000`` -> ``82.500.000``."""
    return f"{price:,}".replace(",", ".")


def format_clock(moment: datetime) -> str:
    """Header clock text, e.g. ``09:05 - 19/10/2026``."""
    return moment.strftime("%H:%M - %d/%m/%Y")
