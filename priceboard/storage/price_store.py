# priceboard/storage/price_store.py

"""SQLite-backed canonical price list with whole-collection writes."""

import logging
import sqlite3
import threading
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from priceboard.config.settings import Settings
from priceboard.models.errors import TransportError, ValidationError
from priceboard.models.price_snapshot import PriceSnapshot
from priceboard.models.priced_item import PricedItem

logger = logging.getLogger("priceboard.store")

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS prices (
    position   INTEGER PRIMARY KEY,
    id         INTEGER NOT NULL UNIQUE,
    name       TEXT    NOT NULL,
    buy        INTEGER NOT NULL CHECK (buy >= 0),
    sell       INTEGER NOT NULL CHECK (sell >= 0),
    updated_at TEXT    NOT NULL
);
"""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StoreConnection:
    """Lazily opened SQLite handle, reused until :meth:`close`.

    The first call to :meth:`get` connects and applies the schema; every
    later call returns the same handle.  ``lock`` serialises use of the
    handle across the server's worker threads.
    """

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path: Path = db_path or Settings.PRICE_DB_PATH
        self.lock = threading.Lock()
        self._conn: sqlite3.Connection | None = None

    @property
    def is_open(self) -> bool:
        """Whether the underlying handle has been created."""
        return self._conn is not None

    def get(self) -> sqlite3.Connection:
        """Return the cached handle, connecting on first use."""
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(
                str(self.db_path), check_same_thread=False,
            )
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(_SCHEMA)
            self._conn = conn
            logger.debug("Price store opened at %s", self.db_path)
        return self._conn

    def close(self) -> None:
        """Close the handle if it was ever opened."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("Price store closed at %s", self.db_path)


def _coerce_items(items: object) -> tuple[PricedItem, ...]:
    """Validate a replace-all payload and normalise it to items."""
    if (
        isinstance(items, (str, bytes, Mapping))
        or not isinstance(items, Sequence)
    ):
        raise ValidationError("Items must be a sequence")
    if not items:
        raise ValidationError("Items must not be empty")
    return tuple(
        row if isinstance(row, PricedItem) else PricedItem.from_dict(row)
        for row in items
    )


class PriceStore:
    """Owns the canonical price list.

    The only write is :meth:`replace_all`, which swaps the whole list in
    one transaction.  Two concurrent writers race and the later commit
    wins in full; nothing is merged.
    """

    def __init__(
        self,
        connection: StoreConnection | None = None,
        clock: Callable[[], datetime] = _utc_now,
        default_items: list[dict[str, object]] | None = None,
    ) -> None:
        self._handle = connection or StoreConnection()
        self._clock = clock
        self._defaults = tuple(
            PricedItem.from_dict(row)
            for row in (default_items or Settings.DEFAULT_ITEMS)
        )

    def close(self) -> None:
        """Release the database handle."""
        self._handle.close()

    # ── Reading ──────────────────────────────────────────

    def read_all(self) -> PriceSnapshot:
        """Return the current list, seeding the defaults if empty."""
        try:
            with self._handle.lock:
                conn = self._handle.get()
                rows = self._select(conn)
                if not rows:
                    self._write(conn, self._defaults, self._clock())
                    logger.info(
                        "Seeded empty store with %d default items",
                        len(self._defaults),
                    )
                    rows = self._select(conn)
        except sqlite3.Error as exc:
            logger.error("Price store read failed", exc_info=True)
            raise TransportError("Failed to read prices") from exc
        return self._to_snapshot(rows)

    # ── Writing ──────────────────────────────────────────

    def replace_all(self, items: Sequence[object]) -> PriceSnapshot:
        """Atomically replace every row with *items*.

        Raises ``ValidationError`` for a non-sequence, an empty list, a
        malformed item or duplicate ids; the stored list is untouched in
        that case.
        """
        now = self._clock()
        snapshot = PriceSnapshot(items=_coerce_items(items), updated_at=now)
        try:
            with self._handle.lock:
                self._write(self._handle.get(), snapshot.items, now)
        except sqlite3.Error as exc:
            logger.error("Price store write failed", exc_info=True)
            raise TransportError("Failed to update prices") from exc
        logger.info("Replaced price list with %d items", len(snapshot))
        return snapshot

    # ── Internals ────────────────────────────────────────

    @staticmethod
    def _select(conn: sqlite3.Connection) -> list[tuple[Any, ...]]:
        return conn.execute(
            "SELECT id, name, buy, sell, updated_at "
            "FROM prices ORDER BY position ASC"
        ).fetchall()

    @staticmethod
    def _write(
        conn: sqlite3.Connection,
        items: Sequence[PricedItem],
        stamped_at: datetime,
    ) -> None:
        """Delete and re-insert inside one transaction."""
        ts = stamped_at.isoformat()
        with conn:
            conn.execute("DELETE FROM prices")
            conn.executemany(
                "INSERT INTO prices "
                "(position, id, name, buy, sell, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                [
                    (pos, it.id, it.name, it.buy, it.sell, ts)
                    for pos, it in enumerate(items)
                ],
            )

    @staticmethod
    def _to_snapshot(rows: list[tuple[Any, ...]]) -> PriceSnapshot:
        items = tuple(
            PricedItem(
                id=int(r[0]),
                name=str(r[1]),
                buy=int(r[2]),
                sell=int(r[3]),
            )
            for r in rows
        )
        updated_at = max(
            datetime.fromisoformat(str(r[4])) for r in rows
        )
        return PriceSnapshot(items=items, updated_at=updated_at)
