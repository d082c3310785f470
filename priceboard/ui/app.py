# priceboard/ui/app.py

"""Terminal price board with kiosk auto-scroll and an admin editor."""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import cast

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import Screen
from textual.timer import Timer
from textual.widgets import DataTable, Footer, Static

from priceboard.config.settings import Settings
from priceboard.models.price_snapshot import PriceSnapshot
from priceboard.models.priced_item import PricedItem
from priceboard.services.admin_gate import AdminGate
from priceboard.services.auto_scroller import AutoScroller
from priceboard.services.change_detector import (
    Change,
    ChangeMap,
    SnapshotWindow,
)
from priceboard.services.price_client import PriceClient
from priceboard.services.sync_client import (
    SharedSnapshotCache,
    SyncClient,
    SyncState,
    SyncStatus,
)
from priceboard.ui.admin_screen import AdminScreen, LoginScreen
from priceboard.ui.formatting import format_clock, format_price

logger = logging.getLogger("priceboard.ui")

_CHANGE_STYLES: dict[Change, str] = {
    Change.UP: "bold black on green",
    Change.DOWN: "bold white on red",
    Change.NONE: "",
}


class BoardScreen(Screen[None]):
    """Public price board: header, live clock and the price table."""

    BINDINGS = [
        Binding("t", "toggle_kiosk", "TV mode"),
        Binding("r", "refresh", "Refresh"),
    ]

    def __init__(self, sync: SyncClient, kiosk: bool = False) -> None:
        super().__init__()
        self.settings = Settings()
        self.sync = sync
        self.window = SnapshotWindow()
        self.kiosk = kiosk
        self.scroller: AutoScroller | None = None
        self._row_ids: list[int] = []
        self._highlight_timer: Timer | None = None
        self._unsubscribe: Callable[[], None] | None = None

    def compose(self) -> ComposeResult:
        """Build the widget tree for the board."""
        yield Container(
            Static(self.settings.SHOP_NAME.upper(), id="shop_name"),
            Static(self._headline(), id="headline"),
            Static(
                f"{self.settings.SHOP_ADDRESS} | "
                f"{self.settings.SHOP_HOTLINE}",
                id="contact",
            ),
            id="board_header",
        )
        yield Static("⏳ Loading prices...", id="status")
        yield cast(
            DataTable[str | Text],
            DataTable(
                id="price_table",
                zebra_stripes=True,
                cursor_type="none",
                show_cursor=False,
            ),
        )
        yield Static("TV mode, press t to exit", id="kiosk_hint")
        yield Footer()

    def on_mount(self) -> None:
        """Wire the table, the clock, the scroller and the poll loop."""
        table = self._table()
        table.add_column("Item", key="name")
        table.add_column("Buy", key="buy")
        table.add_column("Sell", key="sell")

        self.scroller = AutoScroller(
            scheduler=table, on_scroll=self._scroll_table,
        )
        self.scroller.set_enabled(self.kiosk)
        self.set_class(self.kiosk, "kiosk")
        self.set_interval(1.0, self._tick_clock)

        self._unsubscribe = self.sync.subscribe(self._on_sync_state)
        if self.sync.state.snapshot is not None:
            self._on_sync_state(self.sync.state)
        self.sync.start()

    async def on_unmount(self) -> None:
        """Stop every timer and the poll loop with the screen."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        try:
            if self.scroller is not None:
                self.scroller.shutdown()
        finally:
            await self.sync.stop()

    def on_resize(self, event: events.Resize) -> None:
        """Re-check overflow once the new layout is in place."""
        self.call_after_refresh(self._measure)

    # ── Rendering ────────────────────────────────────────

    def _table(self) -> DataTable[str | Text]:
        return cast(
            DataTable[str | Text],
            self.query_one("#price_table", DataTable),
        )

    def _headline(self) -> str:
        return (
            f"{self.settings.BOARD_TITLE}  {format_clock(datetime.now())}"
        )

    def _tick_clock(self) -> None:
        self.query_one("#headline", Static).update(self._headline())

    def _on_sync_state(self, state: SyncState) -> None:
        status = self.query_one("#status", Static)
        snapshot = state.snapshot
        if snapshot is not None and snapshot is not self.window.current:
            changes = self.window.push(snapshot)
            self._render_snapshot(snapshot, changes)
            self._arm_highlight_clear(changes)

        if state.status is SyncStatus.ERROR:
            status.add_class("error")
            if snapshot is None:
                status.update(f"❌ Cannot load prices: {state.last_error}")
            else:
                status.update(
                    "⚠ Connection lost, showing last known prices"
                )
        elif state.status is SyncStatus.READY:
            status.remove_class("error")
            status.update(f"✅ Updated {datetime.now():%H:%M:%S}")

    @staticmethod
    def _cells(
        item: PricedItem, changes: ChangeMap,
    ) -> tuple[Text, Text, Text]:
        change = changes.get(item.id)
        buy_style = _CHANGE_STYLES[change.buy_change] if change else ""
        sell_style = _CHANGE_STYLES[change.sell_change] if change else ""
        return (
            Text(item.name, style="bold"),
            Text(format_price(item.buy), style=buy_style, justify="right"),
            Text(
                format_price(item.sell), style=sell_style, justify="right",
            ),
        )

    def _render_snapshot(
        self, snapshot: PriceSnapshot, changes: ChangeMap,
    ) -> None:
        """Update cells in place, rebuilding only when rows changed."""
        table = self._table()
        ids = [item.id for item in snapshot]
        if ids != self._row_ids:
            table.clear()
            for item in snapshot:
                table.add_row(*self._cells(item, changes), key=str(item.id))
            self._row_ids = ids
            self.call_after_refresh(self._measure)
            return

        for item in snapshot:
            name, buy, sell = self._cells(item, changes)
            row_key = str(item.id)
            table.update_cell(row_key, "name", name, update_width=True)
            table.update_cell(row_key, "buy", buy, update_width=True)
            table.update_cell(row_key, "sell", sell, update_width=True)

    def _arm_highlight_clear(self, changes: ChangeMap) -> None:
        if self._highlight_timer is not None:
            self._highlight_timer.stop()
            self._highlight_timer = None
        if any(change.changed for change in changes.values()):
            self._highlight_timer = self.set_timer(
                self.settings.HIGHLIGHT_SECONDS, self._clear_highlights,
            )

    def _clear_highlights(self) -> None:
        self._highlight_timer = None
        self.window.clear_changes()
        if self.window.current is not None:
            self._render_snapshot(self.window.current, {})

    # ── Kiosk scrolling ──────────────────────────────────

    def _measure(self) -> None:
        if self.scroller is None:
            return
        table = self._table()
        self.scroller.update_extents(
            table.virtual_size.height,
            table.scrollable_content_region.height,
        )

    def _scroll_table(self, position: float) -> None:
        tables = self.query("#price_table").results(DataTable)
        for table in tables:
            table.scroll_to(y=position, animate=False)

    def action_toggle_kiosk(self) -> None:
        """Switch TV mode on or off."""
        self.kiosk = not self.kiosk
        self.set_class(self.kiosk, "kiosk")
        if self.scroller is not None:
            self.scroller.set_enabled(self.kiosk)
        self.call_after_refresh(self._measure)
        logger.info("TV mode %s", "on" if self.kiosk else "off")

    def action_refresh(self) -> None:
        """Poll right away instead of waiting for the next tick."""
        self.sync.on_focus()


class PriceBoardApp(App[object]):
    """Price board display with a password-gated admin editor."""

    CSS_PATH = "styles.css"
    TITLE = "priceboard"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("a", "admin", "Admin"),
    ]

    def __init__(
        self,
        client: PriceClient | None = None,
        kiosk: bool = False,
        poll_interval: float | None = None,
    ) -> None:
        super().__init__()
        self.settings = Settings()
        self.price_client = client or PriceClient()
        self.cache = SharedSnapshotCache()
        self.sync = SyncClient(
            self.price_client.fetch, interval=poll_interval, name="board",
        )
        self.cache.register(self.sync)
        self.board = BoardScreen(self.sync, kiosk=kiosk)

    def get_default_screen(self) -> Screen[None]:
        return self.board

    def on_app_focus(self, event: events.AppFocus) -> None:
        """Regaining terminal focus triggers an immediate poll."""
        for client in self.cache.clients:
            client.on_focus()

    def action_admin(self) -> None:
        """Open the admin login modal."""
        if isinstance(self.screen, (AdminScreen, LoginScreen)):
            return
        self.push_screen(LoginScreen(AdminGate()), callback=self._on_login)

    def _on_login(self, accepted: bool | None) -> None:
        if accepted:
            self.push_screen(AdminScreen(self.price_client, self.cache))
