# tests/test_change_detector.py

"""Tests for snapshot diffing and the two-slot window."""

import unittest
from datetime import datetime, timezone

from priceboard.models.price_snapshot import PriceSnapshot
from priceboard.models.priced_item import PricedItem
from priceboard.services.change_detector import (
    Change,
    PriceChange,
    SnapshotWindow,
    diff,
)

_T0 = datetime(2024, 5, 1, tzinfo=timezone.utc)


def _snap(*rows: tuple[int, int, int]) -> PriceSnapshot:
    return PriceSnapshot(
        items=tuple(
            PricedItem(id=i, name=f"item {i}", buy=b, sell=s)
            for i, b, s in rows
        ),
        updated_at=_T0,
    )


class TestDiff(unittest.TestCase):
    """Tests for the pure diff function."""

    def test_buy_up_sell_unchanged(self) -> None:
        """A higher buy price is UP; an equal sell price is NONE."""
        changes = diff(_snap((1, 100, 110)), _snap((1, 120, 110)))
        self.assertEqual(
            changes, {1: PriceChange(Change.UP, Change.NONE)}
        )

    def test_down_movement(self) -> None:
        """Lower prices are DOWN."""
        changes = diff(_snap((1, 100, 110)), _snap((1, 90, 100)))
        self.assertEqual(changes[1].buy_change, Change.DOWN)
        self.assertEqual(changes[1].sell_change, Change.DOWN)

    def test_first_observation_is_empty(self) -> None:
        """No previous snapshot means no highlights."""
        self.assertEqual(diff(None, _snap((1, 1, 1))), {})

    def test_new_item_has_no_entry(self) -> None:
        """Items absent from the previous snapshot are not flagged."""
        changes = diff(_snap(), _snap((9, 5, 5)))
        self.assertNotIn(9, changes)

    def test_removed_item_ignored(self) -> None:
        """Items that vanished produce no entry."""
        changes = diff(_snap((1, 1, 1), (2, 2, 2)), _snap((1, 1, 1)))
        self.assertEqual(list(changes), [1])
        self.assertFalse(changes[1].changed)


class TestSnapshotWindow(unittest.TestCase):
    """Tests for the previous/current ring."""

    def test_first_push_has_no_changes(self) -> None:
        """The first observation yields an empty map."""
        window = SnapshotWindow()
        self.assertEqual(window.push(_snap((1, 100, 100))), {})
        self.assertIsNone(window.previous)

    def test_compares_only_adjacent_pushes(self) -> None:
        """An unchanged push clears a highlight from the step before."""
        window = SnapshotWindow()
        window.push(_snap((1, 100, 100)))
        self.assertEqual(
            window.push(_snap((1, 120, 100)))[1].buy_change, Change.UP
        )
        self.assertEqual(
            window.push(_snap((1, 120, 100)))[1].buy_change, Change.NONE
        )

    def test_skipped_middle_snapshot_is_not_retained(self) -> None:
        """Sampling first and third compares those two only."""
        first, middle, third = (
            _snap((1, 100, 100)), _snap((1, 150, 100)), _snap((1, 100, 90)),
        )
        window = SnapshotWindow()
        window.push(first)
        changes = window.push(third)
        self.assertEqual(changes[1], PriceChange(Change.NONE, Change.DOWN))
        self.assertIsNot(window.previous, middle)

    def test_changes_is_a_copy(self) -> None:
        """Mutating the returned map leaves the window intact."""
        window = SnapshotWindow()
        window.push(_snap((1, 1, 1)))
        window.push(_snap((1, 2, 1)))
        window.changes.clear()
        self.assertIn(1, window.changes)

    def test_clear_changes_keeps_slots(self) -> None:
        """clear_changes drops highlights but keeps both snapshots."""
        window = SnapshotWindow()
        window.push(_snap((1, 1, 1)))
        window.push(_snap((1, 2, 1)))
        window.clear_changes()
        self.assertEqual(window.changes, {})
        self.assertIsNotNone(window.previous)

    def test_reset_makes_next_push_first(self) -> None:
        """After reset the next push is a first observation."""
        window = SnapshotWindow()
        window.push(_snap((1, 1, 1)))
        window.reset()
        self.assertIsNone(window.current)
        self.assertEqual(window.push(_snap((1, 5, 5))), {})


if __name__ == "__main__":
    unittest.main()
