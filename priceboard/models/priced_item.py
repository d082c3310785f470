# priceboard/models/priced_item.py

"""Priced item data model shared by the store, API and clients."""

from dataclasses import dataclass
from typing import Any

from priceboard.models.errors import ValidationError

PRICE_FIELDS: tuple[str, ...] = ("buy", "sell")
EDITABLE_FIELDS: tuple[str, ...] = ("name", *PRICE_FIELDS)

# SQLite INTEGER is a signed 64-bit value
MAX_INT: int = 2**63 - 1
MIN_INT: int = -(2**63)


def _require_int(raw: dict[str, Any], key: str) -> int:
    """Fetch an integer field, rejecting bools and floats."""
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Field '{key}' must be an integer")
    if not MIN_INT <= value <= MAX_INT:
        raise ValidationError(f"Field '{key}' is out of range")
    return value


@dataclass(frozen=True)
class PricedItem:
    """A single named item with its buy and sell price."""

    id: int
    name: str
    buy: int = 0
    sell: int = 0

    def __post_init__(self) -> None:
        if not MIN_INT <= self.id <= MAX_INT:
            raise ValidationError("Item id is out of range")
        if not (0 <= self.buy <= MAX_INT and 0 <= self.sell <= MAX_INT):
            raise ValidationError("Prices must be between 0 and 2**63-1")

    @classmethod
    def from_dict(cls, raw: object) -> "PricedItem":
        """Build an item from a decoded JSON object.

        Raises ``ValidationError`` when a field is missing, has the
        wrong type, or a price is negative.
        """
        if not isinstance(raw, dict):
            raise ValidationError("Each item must be an object")
        item_id = _require_int(raw, "id")
        name = raw.get("name")
        if not isinstance(name, str):
            raise ValidationError("Field 'name' must be a string")
        buy = _require_int(raw, "buy")
        sell = _require_int(raw, "sell")
        if buy < 0 or sell < 0:
            raise ValidationError("Prices must be non-negative")
        return cls(id=item_id, name=name, buy=buy, sell=sell)

    def to_dict(self) -> dict[str, object]:
        """Serialise to the wire shape ``{id, name, buy, sell}``."""
        return {
            "id": self.id,
            "name": self.name,
            "buy": self.buy,
            "sell": self.sell,
        }
