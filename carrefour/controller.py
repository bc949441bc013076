"""Periodic alternator moving the single light permit between approaches.

Per tick the controller sleeps, takes the permit back from the green side
(waiting for a crossing vehicle to let go of it), hands one permit to the
other side and only then flips the published :class:`LightState`.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from .errors import Cancelled
from .models import Approach, LightState
from .semaphore import Semaphore

logger = logging.getLogger(__name__)

LightListener = Callable[[LightState], None]


class TrafficController:
    """Alternates right-of-way between approach A and approach B."""

    def __init__(
        self,
        light_a: Semaphore,
        light_b: Semaphore,
        cancel: threading.Event,
        tick_interval_ms: int = 2000,
    ) -> None:
        self._lights = {Approach.A: light_a, Approach.B: light_b}
        self._cancel = cancel
        self._interval_s = tick_interval_ms / 1000.0

        self._lock = threading.Lock()
        self._state = LightState.A_GREEN
        self._tick_count = 0
        self._next_tick_at: float | None = None
        self._listeners: list[LightListener] = []

    # ------------------------------------------------------------------
    # Published state
    # ------------------------------------------------------------------

    @property
    def light_state(self) -> LightState:
        with self._lock:
            return self._state

    @property
    def tick_count(self) -> int:
        with self._lock:
            return self._tick_count

    def ms_until_next_tick(self) -> int:
        """Best-effort countdown; 0 while a switch is in progress."""
        with self._lock:
            next_tick_at = self._next_tick_at
        if next_tick_at is None:
            return int(self._interval_s * 1000)
        return max(0, int((next_tick_at - time.monotonic()) * 1000))

    def add_listener(self, callback: LightListener) -> None:
        with self._lock:
            self._listeners.append(callback)

    # ------------------------------------------------------------------
    # Thread body
    # ------------------------------------------------------------------

    def run(self) -> None:
        while True:
            with self._lock:
                self._next_tick_at = time.monotonic() + self._interval_s
            if self._cancel.wait(self._interval_s):
                break
            try:
                self.switch()
            except Cancelled:
                break
        logger.info("traffic controller interrupted after %d switches", self.tick_count)

    def switch(self) -> LightState:
        """Move the permit from the green approach to the other one."""
        with self._lock:
            green = self._state.green
            self._next_tick_at = time.monotonic()

        # Blocks until no vehicle holds the green permit.
        self._lights[green].acquire(self._cancel)
        self._lights[green.other].release()

        with self._lock:
            self._state = self._state.flipped()
            self._tick_count += 1
            state = self._state
            listeners = list(self._listeners)

        logger.info("traffic light %s is now GREEN", state.green.name)
        for callback in listeners:
            try:
                callback(state)
            except Exception:
                logger.exception("light change listener %r failed", callback)
        return state
