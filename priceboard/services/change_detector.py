# priceboard/services/change_detector.py

"""Per-field price movement between two consecutive observed snapshots."""

import logging
from dataclasses import dataclass
from enum import Enum

from priceboard.models.price_snapshot import PriceSnapshot

logger = logging.getLogger("priceboard.changes")


class Change(Enum):
    """Direction a price moved between two observations."""

    UP = "up"
    DOWN = "down"
    NONE = "none"


@dataclass(frozen=True)
class PriceChange:
    """Buy and sell movement for one item."""

    buy_change: Change = Change.NONE
    sell_change: Change = Change.NONE

    @property
    def changed(self) -> bool:
        """True when either field moved."""
        return (
            self.buy_change is not Change.NONE
            or self.sell_change is not Change.NONE
        )


ChangeMap = dict[int, PriceChange]


def _direction(current: int, previous: int) -> Change:
    if current > previous:
        return Change.UP
    if current < previous:
        return Change.DOWN
    return Change.NONE


def diff(
    previous: PriceSnapshot | None, current: PriceSnapshot,
) -> ChangeMap:
    """Compare *current* against the immediately preceding snapshot.

    The first observation (``previous is None``) yields an empty map, and
    items that are new in *current* get no entry, so they render without
    a highlight.
    """
    if previous is None:
        return {}
    before = previous.by_id()
    changes: ChangeMap = {}
    for item in current:
        prev = before.get(item.id)
        if prev is None:
            continue
        changes[item.id] = PriceChange(
            buy_change=_direction(item.buy, prev.buy),
            sell_change=_direction(item.sell, prev.sell),
        )
    return changes


class SnapshotWindow:
    """Two-slot window holding the previous and current snapshot.

    Every :meth:`push` shifts the window by exactly one observation and
    returns the diff of that single transition, so a comparison never
    spans more than two snapshots.
    """

    def __init__(self) -> None:
        self._previous: PriceSnapshot | None = None
        self._current: PriceSnapshot | None = None
        self._changes: ChangeMap = {}

    @property
    def previous(self) -> PriceSnapshot | None:
        return self._previous

    @property
    def current(self) -> PriceSnapshot | None:
        return self._current

    @property
    def changes(self) -> ChangeMap:
        """Diff of the latest transition (a copy)."""
        return dict(self._changes)

    def push(self, snapshot: PriceSnapshot) -> ChangeMap:
        """Observe *snapshot* and return its diff against the last one."""
        changes = diff(self._current, snapshot)
        self._previous, self._current = self._current, snapshot
        self._changes = changes
        moved = sum(1 for c in changes.values() if c.changed)
        if moved:
            logger.debug("Snapshot moved %d item(s)", moved)
        return dict(changes)

    def clear_changes(self) -> None:
        """Drop the highlight state without touching the window."""
        self._changes = {}

    def reset(self) -> None:
        """Forget both slots; the next push is a first observation."""
        self._previous = None
        self._current = None
        self._changes = {}
