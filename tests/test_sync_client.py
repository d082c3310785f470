# tests/test_sync_client.py

"""Tests for the polling SyncClient and the shared snapshot cache."""

import asyncio
import threading
import unittest
from datetime import datetime, timezone

from priceboard.models.errors import TransportError
from priceboard.models.price_snapshot import PriceSnapshot
from priceboard.models.priced_item import PricedItem
from priceboard.services.sync_client import (
    SharedSnapshotCache,
    SyncClient,
    SyncState,
    SyncStatus,
)


def _snap(sell: int, item_id: int = 1) -> PriceSnapshot:
    return PriceSnapshot(
        items=(PricedItem(id=item_id, name="SJC 9999", buy=1, sell=sell),),
        updated_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )


class _ScriptedFetch:
    """Returns queued results; exceptions in the queue are raised."""

    def __init__(self, *results: object) -> None:
        self.results = list(results)
        self.calls = 0

    def __call__(self) -> PriceSnapshot:
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        assert isinstance(result, PriceSnapshot)
        return result


class _BlockingFetch:
    """Blocks in the worker thread until released."""

    def __init__(self, snapshot: PriceSnapshot) -> None:
        self.snapshot = snapshot
        self.release = threading.Event()
        self.calls = 0

    def __call__(self) -> PriceSnapshot:
        self.calls += 1
        self.release.wait(timeout=5)
        return self.snapshot


async def _wait_for(predicate: object, timeout: float = 2.0) -> None:
    async def poll() -> None:
        while not predicate():  # type: ignore[operator]
            await asyncio.sleep(0.005)

    await asyncio.wait_for(poll(), timeout)


class TestSyncClient(unittest.IsolatedAsyncioTestCase):
    """Tests for polling, error retention and serialisation."""

    async def test_initial_state_is_loading(self) -> None:
        """Before any poll the client reports LOADING."""
        client = SyncClient(_ScriptedFetch(_snap(1)))
        self.assertEqual(client.state, SyncState())
        self.assertIs(client.state.status, SyncStatus.LOADING)

    async def test_refresh_success(self) -> None:
        """A successful poll moves to READY with the snapshot."""
        client = SyncClient(_ScriptedFetch(_snap(100)))
        seen: list[SyncState] = []
        client.subscribe(seen.append)
        self.assertTrue(await client.refresh())
        self.assertIs(client.state.status, SyncStatus.READY)
        self.assertEqual(client.state.snapshot, _snap(100))
        self.assertEqual(len(seen), 1)

    async def test_error_retains_last_snapshot(self) -> None:
        """A failed poll keeps the last good list and records the error."""
        client = SyncClient(
            _ScriptedFetch(_snap(100), TransportError("down"))
        )
        await client.refresh()
        self.assertFalse(await client.refresh())
        state = client.state
        self.assertIs(state.status, SyncStatus.ERROR)
        self.assertEqual(state.snapshot, _snap(100))
        self.assertEqual(state.last_error, "down")

    async def test_error_before_first_load(self) -> None:
        """An error with nothing loaded leaves snapshot as None."""
        client = SyncClient(_ScriptedFetch(TransportError("x")))
        await client.refresh()
        self.assertIs(client.state.status, SyncStatus.ERROR)
        self.assertIsNone(client.state.snapshot)

    async def test_polls_never_overlap(self) -> None:
        """A trigger during an in-flight poll is skipped."""
        fetch = _BlockingFetch(_snap(5))
        client = SyncClient(fetch)
        first = asyncio.create_task(client.refresh())
        try:
            await _wait_for(lambda: fetch.calls == 1)
            self.assertTrue(client.in_flight)
            self.assertFalse(await client.refresh())
            self.assertIsNone(client.on_focus())
        finally:
            fetch.release.set()
        self.assertTrue(await first)
        self.assertEqual(fetch.calls, 1)
        self.assertFalse(client.in_flight)

    async def test_loop_retries_after_error(self) -> None:
        """The loop keeps polling on the fixed period after a failure."""
        fetch = _ScriptedFetch(TransportError("x"), TransportError("y"), _snap(7))
        client = SyncClient(fetch, interval=0.01)
        client.start()
        try:
            await _wait_for(lambda: client.state.status is SyncStatus.READY)
        finally:
            await client.stop()
        self.assertGreaterEqual(fetch.calls, 3)
        self.assertEqual(client.state.snapshot, _snap(7))

    async def test_stop_cancels_loop(self) -> None:
        """After stop no further polls happen."""
        fetch = _ScriptedFetch(_snap(1))
        client = SyncClient(fetch, interval=0.01)
        client.start()
        self.assertTrue(client.running)
        await _wait_for(lambda: fetch.calls >= 1)
        await client.stop()
        self.assertFalse(client.running)
        calls = fetch.calls
        await asyncio.sleep(0.05)
        self.assertEqual(fetch.calls, calls)

    async def test_on_focus_triggers_poll(self) -> None:
        """Regaining focus runs an immediate poll."""
        fetch = _ScriptedFetch(_snap(3))
        client = SyncClient(fetch, interval=60)
        task = client.on_focus()
        self.assertIsNotNone(task)
        assert task is not None
        self.assertTrue(await task)
        self.assertEqual(fetch.calls, 1)

    async def test_apply_sets_ready(self) -> None:
        """apply adopts a snapshot without polling."""
        fetch = _ScriptedFetch(_snap(1))
        client = SyncClient(fetch)
        client.apply(_snap(9))
        self.assertIs(client.state.status, SyncStatus.READY)
        self.assertEqual(client.state.snapshot, _snap(9))
        self.assertEqual(fetch.calls, 0)

    async def test_poll_superseded_by_apply_is_dropped(self) -> None:
        """A poll that started before a local commit cannot overwrite it."""
        fetch = _BlockingFetch(_snap(100))
        client = SyncClient(fetch)
        pending = asyncio.create_task(client.refresh())
        try:
            await _wait_for(lambda: fetch.calls == 1)
            client.apply(_snap(50))
        finally:
            fetch.release.set()
        self.assertFalse(await pending)
        self.assertEqual(client.state.snapshot, _snap(50))

    async def test_unsubscribe(self) -> None:
        """An unsubscribed listener is no longer called."""
        client = SyncClient(_ScriptedFetch(_snap(1)))
        seen: list[SyncState] = []
        unsubscribe = client.subscribe(seen.append)
        unsubscribe()
        unsubscribe()
        await client.refresh()
        self.assertEqual(seen, [])


class TestSharedSnapshotCache(unittest.TestCase):
    """Tests for in-process fan-out."""

    def test_publish_reaches_every_client(self) -> None:
        """Every registered client adopts the published snapshot."""
        cache = SharedSnapshotCache()
        board = SyncClient(_ScriptedFetch(_snap(1)), name="board")
        admin = SyncClient(_ScriptedFetch(_snap(1)), name="admin")
        cache.register(board)
        cache.register(admin)
        cache.register(board)
        self.assertEqual(cache.publish(_snap(42)), 2)
        self.assertEqual(board.state.snapshot, _snap(42))
        self.assertEqual(admin.state.snapshot, _snap(42))
        self.assertEqual(cache.latest, _snap(42))

    def test_unregistered_client_is_skipped(self) -> None:
        """A client removed from the cache keeps its own state."""
        cache = SharedSnapshotCache()
        client = SyncClient(_ScriptedFetch(_snap(1)))
        cache.register(client)
        cache.unregister(client)
        self.assertEqual(cache.publish(_snap(2)), 0)
        self.assertIsNone(client.state.snapshot)
        self.assertEqual(cache.clients, ())


if __name__ == "__main__":
    unittest.main()
