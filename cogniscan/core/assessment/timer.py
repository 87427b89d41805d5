"""
Stimulus Timer

Shows a recall sequence for a fixed interval, hides it, and signals
completion exactly once. All timing goes through a scheduler with
asyncio's `call_later` signature so sessions run on the service's event loop
and tests can drive a manual clock.
"""
from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional, Protocol, Sequence, Tuple

from cogniscan.utils import get_logger

logger = get_logger(__name__)

DEFAULT_PRESENTATION_MS = 5000
DEFAULT_AUTO_ADVANCE_MS = 500


class TimerHandle(Protocol):
    def cancel(self) -> Any: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


class CancellableTimer:
    """
    One pending callback at a time.

    Starting again replaces the pending callback. After `cancel()` the
    callback never runs, even if the underlying handle already fired into
    the loop's ready queue.
    """

    def __init__(self, scheduler: Optional[Scheduler] = None, name: str = "timer"):
        self._scheduler = scheduler
        self._handle: Optional[TimerHandle] = None
        self._generation = 0
        self.name = name

    @property
    def active(self) -> bool:
        return self._handle is not None

    def start(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.cancel()
        scheduler = self._scheduler or asyncio.get_running_loop()
        generation = self._generation

        def _fire():
            if generation != self._generation:
                return
            self._handle = None
            self._generation += 1
            callback()

        self._handle = scheduler.call_later(delay_ms / 1000.0, _fire)
        logger.debug(f"{self.name} armed for {delay_ms} ms")

    def cancel(self) -> bool:
        """Release the pending callback. Returns True if one was pending."""
        self._generation += 1
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        logger.debug(f"{self.name} cancelled")
        return True


class StimulusTimer:
    """Presents memorization items for `duration_ms`, then hides them."""

    def __init__(
        self,
        duration_ms: int = DEFAULT_PRESENTATION_MS,
        scheduler: Optional[Scheduler] = None
    ):
        self.duration_ms = duration_ms
        self._timer = CancellableTimer(scheduler, name="stimulus")
        self._items: Tuple[str, ...] = ()
        self._visible = False

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def items(self) -> Tuple[str, ...]:
        """Items currently on screen; empty once hidden."""
        return self._items if self._visible else ()

    @property
    def active(self) -> bool:
        return self._timer.active

    def present(
        self,
        items: Sequence[str],
        on_complete: Callable[[], None],
        duration_ms: Optional[int] = None
    ) -> None:
        """
        Show `items` and hide them after the presentation interval.

        Calling again while a presentation is running restarts it with the
        new items; the earlier `on_complete` is dropped.
        """
        duration = self.duration_ms if duration_ms is None else duration_ms
        self._timer.cancel()
        self._items = tuple(items)
        self._visible = True

        def _hide():
            self._visible = False
            logger.debug(f"Stimulus hidden after {duration} ms")
            on_complete()

        self._timer.start(duration, _hide)

    def cancel(self) -> None:
        """Hide immediately without signalling completion."""
        self._timer.cancel()
        self._visible = False
