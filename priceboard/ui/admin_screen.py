# priceboard/ui/admin_screen.py

"""Admin login modal, delete confirmation and the price editor screen."""

import logging
from collections.abc import Callable
from typing import cast

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, VerticalScroll
from textual.notifications import SeverityLevel
from textual.screen import ModalScreen, Screen
from textual.widgets import Button, Footer, Input, Static

from priceboard.models.priced_item import (
    EDITABLE_FIELDS,
    PRICE_FIELDS,
    PricedItem,
)
from priceboard.services.admin_gate import AdminGate
from priceboard.services.admin_session import (
    AdminEditSession,
    SessionPhase,
)
from priceboard.services.price_client import PriceClient
from priceboard.services.sync_client import (
    SharedSnapshotCache,
    SyncClient,
    SyncState,
    SyncStatus,
)
from priceboard.ui.formatting import format_price

logger = logging.getLogger("priceboard.ui")


def load_error_text(error: str | None) -> str:
    """Status line shown when the editor has nothing to edit yet."""
    return f"❌ Cannot load prices: {error}. Press ctrl+r to retry."


class LoginScreen(ModalScreen[bool]):
    """Password prompt; locks after too many wrong attempts."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, gate: AdminGate | None = None) -> None:
        super().__init__()
        self.gate = gate or AdminGate()

    def compose(self) -> ComposeResult:
        yield Container(
            Static("Admin login", id="login_title"),
            Input(
                placeholder="Password",
                password=True,
                id="password_input",
            ),
            Static("", id="login_error"),
            Horizontal(
                Button("Log in", variant="primary", id="login_btn"),
                Button("Cancel", id="cancel_btn"),
            ),
            id="login_dialog",
        )

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "login_btn":
            self._attempt()
        elif event.button.id == "cancel_btn":
            self.action_cancel()

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "password_input":
            self._attempt()

    def action_cancel(self) -> None:
        self.dismiss(False)

    def _attempt(self) -> None:
        if self.gate.locked:
            return
        password_input = self.query_one("#password_input", Input)
        if self.gate.check(password_input.value):
            self.dismiss(True)
            return

        password_input.value = ""
        error = self.query_one("#login_error", Static)
        error.update(
            f"Wrong password! {self.gate.remaining} attempt(s) left."
        )
        if self.gate.locked:
            self.query_one("#login_btn", Button).disabled = True
            self.set_timer(1.0, self.action_cancel)


class ConfirmScreen(ModalScreen[bool]):
    """Yes/no question returning the operator's answer."""

    BINDINGS = [
        Binding("y", "answer(True)", "Yes"),
        Binding("n,escape", "answer(False)", "No"),
    ]

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        yield Container(
            Static(self.message, id="confirm_message"),
            Horizontal(
                Button("Yes", variant="error", id="yes_btn"),
                Button("No", id="no_btn"),
            ),
            id="confirm_dialog",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "yes_btn")

    def action_answer(self, answer: bool) -> None:
        self.dismiss(answer)


class AdminScreen(Screen[None]):
    """Row editor over an :class:`AdminEditSession`.

    Field edits stay local until a save; deletes are confirmed and then
    committed right away.
    """

    BINDINGS = [
        Binding("escape", "back", "Back"),
        Binding("ctrl+n", "add_row", "Add item"),
        Binding("ctrl+s", "save_all", "Save all"),
        Binding("ctrl+r", "reload", "Discard edits"),
    ]

    def __init__(
        self,
        client: PriceClient,
        cache: SharedSnapshotCache,
    ) -> None:
        super().__init__()
        self.cache = cache
        self.sync = SyncClient(client.fetch, name="admin")
        self.session = AdminEditSession(
            client, cache=cache, notify=self._notify,
        )
        self._unsubscribe: Callable[[], None] | None = None

    def compose(self) -> ComposeResult:
        yield Static("🔧 Price administration", id="admin_title")
        yield Static("⏳ Loading prices...", id="admin_status")
        yield VerticalScroll(id="admin_rows")
        yield Horizontal(
            Button("➕ Add item", variant="primary", id="add_btn"),
            Button("💾 SAVE ALL", variant="success", id="save_all_btn"),
            Button("← Back", id="back_btn"),
            id="admin_actions",
        )
        yield Static(
            "Saved prices reach every open display within one refresh.",
            id="admin_note",
        )
        yield Footer()

    def on_mount(self) -> None:
        """Load the list once; later reads never overwrite edits."""
        self.cache.register(self.sync)
        self._unsubscribe = self.sync.subscribe(self._on_sync_state)
        self.run_worker(self.sync.refresh(), group="admin-load")

    async def on_unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        try:
            self.cache.unregister(self.sync)
        finally:
            await self.sync.stop()

    # ── Session wiring ───────────────────────────────────

    def _notify(self, message: str, severity: str) -> None:
        self.app.notify(message, severity=cast(SeverityLevel, severity))

    async def _confirm(self, message: str) -> bool:
        answer = await self.app.push_screen_wait(ConfirmScreen(message))
        return bool(answer)

    def _on_sync_state(self, state: SyncState) -> None:
        status = self.query_one("#admin_status", Static)
        if state.snapshot is not None and self.session.seed(state.snapshot):
            status.update(f"Editing {len(self.session.items)} item(s)")
            self.run_worker(self._populate_rows(), group="admin-rows")
        elif (
            state.status is SyncStatus.ERROR
            and self.session.phase is SessionPhase.UNINITIALIZED
        ):
            status.update(load_error_text(state.last_error))

    async def _populate_rows(self) -> None:
        rows = self.query_one("#admin_rows", VerticalScroll)
        await rows.remove_children()
        await rows.mount_all(
            [self._row_widget(item) for item in self.session.items]
        )

    @staticmethod
    def _row_widget(item: PricedItem) -> Horizontal:
        return Horizontal(
            Input(item.name, placeholder="Name", id=f"name_{item.id}"),
            Input(
                format_price(item.buy),
                placeholder="Buy",
                id=f"buy_{item.id}",
                classes="price_input",
            ),
            Input(
                format_price(item.sell),
                placeholder="Sell",
                id=f"sell_{item.id}",
                classes="price_input",
            ),
            Button("💾 Save", variant="success", id=f"save_{item.id}"),
            Button("🗑", variant="error", id=f"delete_{item.id}"),
            id=f"row_{item.id}",
            classes="admin_row",
        )

    # ── Events ───────────────────────────────────────────

    def on_input_changed(self, event: Input.Changed) -> None:
        """Stage the edit and redisplay prices in grouped form."""
        field, _, raw_id = (event.input.id or "").partition("_")
        if field not in EDITABLE_FIELDS or not raw_id.isdigit():
            return
        if self.session.phase is SessionPhase.UNINITIALIZED:
            return
        updated = self.session.edit_field(int(raw_id), field, event.value)
        if field in PRICE_FIELDS:
            formatted = format_price(getattr(updated, field))
            if event.input.value != formatted:
                event.input.value = formatted
                event.input.cursor_position = len(formatted)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id or ""
        if button_id == "add_btn":
            self.action_add_row()
        elif button_id == "save_all_btn":
            self.action_save_all()
        elif button_id == "back_btn":
            self.action_back()
        else:
            action, _, raw_id = button_id.partition("_")
            if not raw_id.isdigit():
                return
            if self.session.phase is SessionPhase.UNINITIALIZED:
                self.app.notify("Prices are still loading", severity="warning")
                return
            if action == "save":
                self.run_worker(
                    self.session.save_one(int(raw_id)), group="commit",
                )
            elif action == "delete":
                self.run_worker(
                    self._delete_row(int(raw_id)), group="commit",
                )

    async def _delete_row(self, item_id: int) -> None:
        if await self.session.delete_row(item_id, self._confirm):
            await self.query_one(f"#row_{item_id}").remove()

    # ── Actions ──────────────────────────────────────────

    def action_add_row(self) -> None:
        """Append a blank row to the working copy."""
        if self.session.phase is SessionPhase.UNINITIALIZED:
            self.app.notify("Prices are still loading", severity="warning")
            return
        row = self.session.add_row()
        widget = self._row_widget(row)
        self.query_one("#admin_rows", VerticalScroll).mount(widget)
        widget.scroll_visible()

    def action_save_all(self) -> None:
        """Commit the whole working copy."""
        if self.session.phase is SessionPhase.UNINITIALIZED:
            self.app.notify("Prices are still loading", severity="warning")
            return
        self.run_worker(self.session.save_all(), group="commit")

    def action_back(self) -> None:
        """Return to the board."""
        self.app.pop_screen()

    def action_reload(self) -> None:
        """Drop local edits and seed again from a fresh read."""
        self.session.reset()
        self.query_one("#admin_status", Static).update("⏳ Loading prices...")
        self.run_worker(self.sync.refresh(), group="admin-load")
