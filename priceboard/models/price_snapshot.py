# priceboard/models/price_snapshot.py

"""Immutable view of the whole price list at one instant."""

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from priceboard.models.errors import ValidationError
from priceboard.models.priced_item import PricedItem


def format_timestamp(moment: datetime) -> str:
    """Render an aware datetime as ISO-8601 UTC with a ``Z`` suffix."""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(raw: str) -> datetime:
    """Parse an ISO-8601 timestamp (``Z`` or offset form) to aware UTC."""
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except (AttributeError, ValueError) as exc:
        raise ValidationError(f"Bad timestamp: {raw!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class PriceSnapshot:
    """An ordered, immutable price list plus its last-modified time.

    A new edit always produces a new snapshot; published snapshots are
    never mutated in place.  Ids are unique within a snapshot.
    """

    items: tuple[PricedItem, ...]
    updated_at: datetime

    def __post_init__(self) -> None:
        ids = [item.id for item in self.items]
        if len(ids) != len(set(ids)):
            raise ValidationError("Item ids must be unique")

    def __iter__(self) -> Iterator[PricedItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def by_id(self) -> dict[int, PricedItem]:
        """Index the items by id."""
        return {item.id: item for item in self.items}

    def to_payload(self) -> dict[str, object]:
        """Serialise to the wire shape ``{data, updatedAt}``."""
        return {
            "data": [item.to_dict() for item in self.items],
            "updatedAt": format_timestamp(self.updated_at),
        }

    @classmethod
    def from_payload(cls, payload: object) -> "PriceSnapshot":
        """Decode a ``{data, updatedAt}`` object received over the wire."""
        if not isinstance(payload, dict):
            raise ValidationError("Snapshot payload must be an object")
        body: dict[str, Any] = payload
        data = body.get("data")
        if not isinstance(data, list):
            raise ValidationError("Snapshot 'data' must be a list")
        items = tuple(PricedItem.from_dict(row) for row in data)
        return cls(
            items=items,
            updated_at=parse_timestamp(str(body.get("updatedAt", ""))),
        )
