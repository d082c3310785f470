# priceboard/services/admin_session.py

"""Operator-side working copy of the price list.

The session is seeded once from the first successful read and then owns
its edits: later fetches never overwrite them until :meth:`reset`.  Every
commit sends the *entire* working copy through ``replace_all``; "save
one" differs from "save all" only in the message shown to the operator.
Two sessions committing around the same time race, and the later write
wins in full.
"""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import replace
from enum import Enum
from typing import Protocol

from priceboard.config.settings import Settings
from priceboard.models.errors import TransportError, ValidationError
from priceboard.models.price_snapshot import PriceSnapshot
from priceboard.models.priced_item import (
    EDITABLE_FIELDS,
    MAX_INT,
    PRICE_FIELDS,
    PricedItem,
)
from priceboard.services.sync_client import SharedSnapshotCache

logger = logging.getLogger("priceboard.admin")

_NON_DIGITS = re.compile(r"[^0-9]")

Notifier = Callable[[str, str], None]
ConfirmGate = Callable[[str], Awaitable[bool]]


class PriceWriter(Protocol):
    """Anything that can replace the whole list (e.g. PriceClient)."""

    def replace_all(
        self, items: Sequence[PricedItem],
    ) -> PriceSnapshot: ...


class SessionPhase(Enum):
    """Whether the working copy has been seeded yet."""

    UNINITIALIZED = "uninitialized"
    EDITING = "editing"


def normalize_price(raw: str) -> int:
    """Keep only the digits of *raw*; an empty result means 0.

    ``"82.500.000"`` becomes ``82500000`` so operators can type
    thousands separators or paste formatted prices.  Values beyond what
    the store can hold are capped at ``MAX_INT``.
    """
    digits = _NON_DIGITS.sub("", raw).lstrip("0")
    if not digits:
        return 0
    if len(digits) > len(str(MAX_INT)):
        return MAX_INT
    return min(int(digits), MAX_INT)


def _silent(message: str, severity: str) -> None:
    logger.debug("(no notifier) %s: %s", severity, message)


class AdminEditSession:
    """Stages field edits locally and commits the whole list on save."""

    def __init__(
        self,
        writer: PriceWriter,
        cache: SharedSnapshotCache | None = None,
        notify: Notifier | None = None,
    ) -> None:
        self._writer = writer
        self._cache = cache
        self._notify: Notifier = notify or _silent
        self.phase = SessionPhase.UNINITIALIZED
        self._items: list[PricedItem] = []
        self.is_saving = False

    # ── Working copy ─────────────────────────────────────

    @property
    def items(self) -> tuple[PricedItem, ...]:
        return tuple(self._items)

    def seed(self, snapshot: PriceSnapshot) -> bool:
        """Adopt *snapshot* as the working copy, once per session.

        Returns False (and changes nothing) when already editing.
        """
        if self.phase is SessionPhase.EDITING:
            return False
        self._items = list(snapshot.items)
        self.phase = SessionPhase.EDITING
        logger.info("Admin session seeded with %d items", len(self._items))
        return True

    def reset(self) -> None:
        """Discard the working copy so the next read seeds again."""
        self._items = []
        self.phase = SessionPhase.UNINITIALIZED
        logger.info("Admin session reset")

    def _require_editing(self) -> None:
        if self.phase is not SessionPhase.EDITING:
            raise RuntimeError("Admin session has not been seeded yet")

    def _index_of(self, item_id: int) -> int:
        for idx, item in enumerate(self._items):
            if item.id == item_id:
                return idx
        raise ValidationError(f"No item with id {item_id}")

    def edit_field(
        self, item_id: int, field: str, raw_input: str,
    ) -> PricedItem:
        """Apply one keystroke-level edit and return the updated row."""
        self._require_editing()
        if field not in EDITABLE_FIELDS:
            raise ValidationError(f"Unknown field '{field}'")
        idx = self._index_of(item_id)
        if field in PRICE_FIELDS:
            updated = replace(
                self._items[idx], **{field: normalize_price(raw_input)}
            )
        else:
            updated = replace(self._items[idx], name=raw_input)
        self._items[idx] = updated
        return updated

    def add_row(self) -> PricedItem:
        """Append a blank row with the next free id."""
        self._require_editing()
        new_id = max((item.id for item in self._items), default=0) + 1
        row = PricedItem(id=new_id, name=Settings.NEW_ITEM_NAME)
        self._items.append(row)
        logger.info("Added row %d", new_id)
        return row

    # ── Commits ──────────────────────────────────────────

    async def delete_row(self, item_id: int, confirm: ConfirmGate) -> bool:
        """Remove a row after confirmation and commit immediately."""
        self._require_editing()
        idx = self._index_of(item_id)
        row = self._items[idx]
        if not await confirm(f"Delete '{row.name}'?"):
            return False

        self._items.pop(idx)
        snapshot = await self._commit(f"Deleted {row.name}")
        if snapshot is None:
            if all(item.id != row.id for item in self._items):
                self._items.insert(min(idx, len(self._items)), row)
            return False
        return True

    async def save_one(self, item_id: int) -> bool:
        """Commit the whole working copy, reporting on one row."""
        self._require_editing()
        name = self._items[self._index_of(item_id)].name
        return await self._commit(f"Saved {name}") is not None

    async def save_all(self) -> bool:
        """Commit the whole working copy."""
        self._require_editing()
        return await self._commit(
            "Prices updated, every display now shows them"
        ) is not None

    async def _commit(self, success_message: str) -> PriceSnapshot | None:
        if self.is_saving:
            self._notify("A save is already in progress", "warning")
            return None

        self.is_saving = True
        items = tuple(self._items)
        try:
            snapshot = await asyncio.to_thread(
                self._writer.replace_all, items,
            )
        except ValidationError as exc:
            logger.warning("Commit rejected: %s", exc)
            self._notify(f"Error saving prices: {exc}", "error")
            return None
        except TransportError as exc:
            logger.error("Commit failed: %s", exc)
            self._notify("Connection error, please try again", "error")
            return None
        finally:
            self.is_saving = False

        if self._cache is not None:
            self._cache.publish(snapshot)
        self._notify(success_message, "information")
        logger.info("Committed %d items", len(snapshot))
        return snapshot
