# priceboard/services/sync_client.py

"""Client-driven polling of the price list.

Each display surface owns a :class:`SyncClient` that pulls the list on a
fixed period and whenever the terminal regains focus.  Surfaces in the
same process also share a :class:`SharedSnapshotCache`, through which an
admin commit reaches every open surface without waiting for a tick.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from priceboard.config.settings import Settings
from priceboard.models.price_snapshot import PriceSnapshot

logger = logging.getLogger("priceboard.sync")


class SyncStatus(Enum):
    """Lifecycle of a client's view of the list."""

    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class SyncState:
    """What a display surface renders from."""

    status: SyncStatus = SyncStatus.LOADING
    snapshot: PriceSnapshot | None = None
    last_error: str | None = None


SyncListener = Callable[[SyncState], None]


class SyncClient:
    """Fixed-period pull loop exposing the latest snapshot.

    Polls never overlap: a trigger that arrives while a poll is in flight
    is skipped.  A failed poll flips the status to ``error`` but keeps the
    last good snapshot, and the loop retries on the same period.
    """

    def __init__(
        self,
        fetch: Callable[[], PriceSnapshot],
        interval: float | None = None,
        name: str = "board",
    ) -> None:
        self.name = name
        self.interval: float = (
            interval if interval is not None else Settings.POLL_INTERVAL
        )
        self._fetch = fetch
        self._state = SyncState()
        self._listeners: list[SyncListener] = []
        self._task: asyncio.Task[None] | None = None
        self._in_flight = False
        self._applied_in_flight = False
        self._pending: set[asyncio.Task[bool]] = set()

    # ── Observation ──────────────────────────────────────

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def subscribe(self, listener: SyncListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unsubscribes."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: SyncState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    # ── Loop control ─────────────────────────────────────

    def start(self) -> None:
        """Start polling on the running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(
            self._run(), name=f"sync-{self.name}",
        )
        logger.info(
            "[%s] Polling every %.1fs", self.name, self.interval,
        )

    async def stop(self) -> None:
        """Cancel the loop and any focus-triggered poll."""
        tasks = list(self._pending)
        if self._task is not None:
            tasks.append(self._task)
            self._task = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._pending.clear()
        logger.info("[%s] Polling stopped", self.name)

    async def _run(self) -> None:
        while True:
            await self.refresh()
            await asyncio.sleep(self.interval)

    def on_focus(self) -> asyncio.Task[bool] | None:
        """Schedule an out-of-band poll after the surface regains focus."""
        if self._in_flight:
            return None
        task = asyncio.get_running_loop().create_task(self.refresh())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    # ── Polling ──────────────────────────────────────────

    async def refresh(self) -> bool:
        """Poll once.  Returns True when a new snapshot was applied."""
        if self._in_flight:
            logger.debug("[%s] Poll already in flight, skipping", self.name)
            return False

        self._in_flight = True
        self._applied_in_flight = False
        try:
            snapshot = await asyncio.to_thread(self._fetch)
        except Exception as exc:
            logger.warning("[%s] Poll failed: %s", self.name, exc)
            self._set_state(SyncState(
                status=SyncStatus.ERROR,
                snapshot=self._state.snapshot,
                last_error=str(exc),
            ))
            return False
        finally:
            self._in_flight = False

        if self._applied_in_flight:
            # A local commit landed while we were waiting; it is newer.
            logger.debug(
                "[%s] Dropping poll result superseded by local commit",
                self.name,
            )
            return False
        self._set_state(SyncState(status=SyncStatus.READY, snapshot=snapshot))
        return True

    def apply(self, snapshot: PriceSnapshot) -> None:
        """Adopt a snapshot propagated from a local commit."""
        if self._in_flight:
            self._applied_in_flight = True
        self._set_state(SyncState(status=SyncStatus.READY, snapshot=snapshot))


class SharedSnapshotCache:
    """Fans an authoritative snapshot out to every registered client."""

    def __init__(self) -> None:
        self._clients: list[SyncClient] = []
        self._latest: PriceSnapshot | None = None

    @property
    def latest(self) -> PriceSnapshot | None:
        return self._latest

    @property
    def clients(self) -> tuple[SyncClient, ...]:
        return tuple(self._clients)

    def register(self, client: SyncClient) -> None:
        if client not in self._clients:
            self._clients.append(client)

    def unregister(self, client: SyncClient) -> None:
        if client in self._clients:
            self._clients.remove(client)

    def publish(self, snapshot: PriceSnapshot) -> int:
        """Push *snapshot* to every client; returns how many received it."""
        self._latest = snapshot
        clients = list(self._clients)
        for client in clients:
            client.apply(snapshot)
        logger.info(
            "Published %d-item snapshot to %d client(s)",
            len(snapshot),
            len(clients),
        )
        return len(clients)
