# priceboard/services/auto_scroller.py

"""Kiosk-mode auto-scroll state machine.

The scroller walks a viewport back and forth over content that does not
fit, pausing at each end.  Timers come from a scheduler with Textual's
``set_interval`` / ``set_timer`` API, so any widget can drive it directly
and tests can drive it with a manual clock.
"""

import logging
from collections.abc import Callable
from enum import Enum
from typing import Protocol

from priceboard.config.settings import Settings

logger = logging.getLogger("priceboard.scroller")


class TimerHandle(Protocol):
    """A running timer that can be cancelled."""

    def stop(self) -> object: ...


class Scheduler(Protocol):
    """The subset of Textual's timer API the scroller relies on."""

    def set_interval(
        self, interval: float, callback: Callable[[], object],
    ) -> TimerHandle: ...

    def set_timer(
        self, delay: float, callback: Callable[[], object],
    ) -> TimerHandle: ...


class ScrollState(Enum):
    """Where the scroller is in its forward/pause/backward cycle."""

    IDLE = "idle"
    SCROLLING_FORWARD = "scrolling-forward"
    PAUSED_AT_END = "paused-at-end"
    SCROLLING_BACKWARD = "scrolling-backward"
    PAUSED_AT_START = "paused-at-start"


class AutoScroller:
    """Drives a scroll position between the two ends of a viewport.

    Active only while enabled *and* the content overflows the viewport.
    Leaving either condition cancels every timer, returns to ``IDLE``
    and scrolls back to the top.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_scroll: Callable[[float], None],
        step: float | None = None,
        tick_interval: float | None = None,
        pause: float | None = None,
        epsilon: float | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._on_scroll = on_scroll
        self.step: float = step if step is not None else Settings.SCROLL_STEP
        self.tick_interval: float = (
            tick_interval if tick_interval is not None
            else Settings.SCROLL_TICK
        )
        self.pause: float = (
            pause if pause is not None else Settings.SCROLL_PAUSE
        )
        self.epsilon: float = (
            epsilon if epsilon is not None else Settings.SCROLL_EPSILON
        )

        self.state = ScrollState.IDLE
        self.position: float = 0.0
        self.enabled = False
        self._content: float = 0.0
        self._viewport: float = 0.0
        self._ticker: TimerHandle | None = None
        self._pause_timer: TimerHandle | None = None

    # ── Derived state ────────────────────────────────────

    @property
    def max_position(self) -> float:
        return max(0.0, self._content - self._viewport)

    @property
    def overflowing(self) -> bool:
        return self._content > self._viewport

    @property
    def has_timers(self) -> bool:
        """True while a tick or pause timer is armed."""
        return self._ticker is not None or self._pause_timer is not None

    # ── Inputs ───────────────────────────────────────────

    def set_enabled(self, enabled: bool) -> None:
        """Turn kiosk scrolling on or off."""
        self.enabled = enabled
        self._reconcile()

    def update_extents(self, content: float, viewport: float) -> None:
        """Record new content/viewport sizes (edit, resize)."""
        self._content = max(0.0, content)
        self._viewport = max(0.0, viewport)
        self._reconcile()

    def shutdown(self) -> None:
        """Stop for good, e.g. when the owning widget unmounts.

        The viewport may already be gone, so no final scroll is issued.
        """
        self.enabled = False
        self._cancel_timers()
        self.state = ScrollState.IDLE
        self.position = 0.0

    # ── Transitions ──────────────────────────────────────

    def _reconcile(self) -> None:
        if not (self.enabled and self.overflowing):
            if self.state is not ScrollState.IDLE or self.position:
                self._halt()
            return

        if self.state is ScrollState.IDLE:
            logger.debug(
                "Auto-scroll starting (content=%.1f viewport=%.1f)",
                self._content,
                self._viewport,
            )
            self.state = ScrollState.SCROLLING_FORWARD
            self._start_ticker()
        elif self.position > self.max_position:
            self._move_to(self.max_position)

    def _halt(self) -> None:
        self._cancel_timers()
        if self.state is not ScrollState.IDLE:
            logger.debug("Auto-scroll halted from %s", self.state.value)
        self.state = ScrollState.IDLE
        if self.position:
            self._move_to(0.0)

    def _cancel_timers(self) -> None:
        if self._ticker is not None:
            self._ticker.stop()
            self._ticker = None
        if self._pause_timer is not None:
            self._pause_timer.stop()
            self._pause_timer = None

    def _start_ticker(self) -> None:
        self._cancel_timers()
        self._ticker = self._scheduler.set_interval(
            self.tick_interval, self.tick,
        )

    def _enter_pause(self, state: ScrollState) -> None:
        self._cancel_timers()
        self.state = state
        self._pause_timer = self._scheduler.set_timer(
            self.pause, self._resume,
        )

    def _resume(self) -> None:
        self._pause_timer = None
        if self.state is ScrollState.PAUSED_AT_END:
            self.state = ScrollState.SCROLLING_BACKWARD
        elif self.state is ScrollState.PAUSED_AT_START:
            self.state = ScrollState.SCROLLING_FORWARD
        else:
            return
        self._start_ticker()

    def _move_to(self, position: float) -> None:
        self.position = position
        self._on_scroll(position)

    def tick(self) -> None:
        """Advance one step in the current direction."""
        limit = self.max_position
        if self.state is ScrollState.SCROLLING_FORWARD:
            self._move_to(min(self.position + self.step, limit))
            if self.position >= limit - self.epsilon:
                self._enter_pause(ScrollState.PAUSED_AT_END)
        elif self.state is ScrollState.SCROLLING_BACKWARD:
            self._move_to(max(self.position - self.step, 0.0))
            if self.position <= self.epsilon:
                self._enter_pause(ScrollState.PAUSED_AT_START)
