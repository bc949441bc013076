"""Per-vehicle control routine: lane permit, light permit, cross, release.

A vehicle is a plain control routine tagged with its approach; the only
per-approach differences are the semaphores it is handed and the counters
it reports to.  Rendering state lives with the renderer.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from .errors import Cancelled, InternalError
from .models import Approach, Stage
from .semaphore import Semaphore
from .stats import StatisticsTracker

logger = logging.getLogger(__name__)

StageListener = Callable[["Vehicle", Stage], None]


class Vehicle:
    """One vehicle's trip through the intersection, run on its own thread.

    FINISHED is entered while the light permit is still held, so ``history``
    only lists both releases once ``finished`` is True.
    """

    def __init__(
        self,
        index: int,
        approach: Approach,
        lane: Semaphore,
        light: Semaphore,
        tracker: StatisticsTracker,
        cancel: threading.Event,
        crossing_duration_ms: int = 100,
        on_stage: StageListener | None = None,
    ) -> None:
        self.index = index
        self.approach = approach
        self._lane = lane
        self._light = light
        self._tracker = tracker
        self._cancel = cancel
        self._crossing_s = crossing_duration_ms / 1000.0
        self._on_stage = on_stage

        self.stage = Stage.CREATED
        self.finished = False
        self.cancelled = False
        self.wait_ms: float | None = None
        self.wait_start_time = time.monotonic()

        # Permits this vehicle owns right now, in acquisition order.
        self._held: list[Semaphore] = []
        # Complete only once `finished` is set.
        self.history: list[tuple[str, str]] = []

    @property
    def vehicle_id(self) -> str:
        return f"{self.approach.name}-{self.index}"

    @property
    def held(self) -> tuple[str, ...]:
        return tuple(sem.name for sem in self._held)

    # ------------------------------------------------------------------
    # Permit accounting
    # ------------------------------------------------------------------

    def _acquire(self, sem: Semaphore) -> None:
        sem.acquire(self._cancel)
        self._held.append(sem)
        self.history.append(("acquire", sem.name))

    def _release(self, sem: Semaphore) -> None:
        if sem not in self._held:
            raise InternalError(f"vehicle {self.vehicle_id} released {sem.name} without holding it")
        self._held.remove(sem)
        sem.release()
        self.history.append(("release", sem.name))

    def _release_held(self) -> None:
        for sem in reversed(self._held):
            self._release(sem)

    def _advance(self, stage: Stage) -> None:
        if stage <= self.stage:
            raise InternalError(
                f"vehicle {self.vehicle_id} moved from {self.stage.name} back to {stage.name}"
            )
        self.stage = stage
        logger.debug("vehicle %s -> %s", self.vehicle_id, stage.name)
        if self._on_stage is not None:
            try:
                self._on_stage(self, stage)
            except Exception:
                logger.exception("stage listener failed for vehicle %s", self.vehicle_id)

    def _sleep(self, seconds: float) -> None:
        if self._cancel.wait(seconds):
            raise Cancelled(f"vehicle {self.vehicle_id} interrupted while crossing")

    # ------------------------------------------------------------------
    # Thread body
    # ------------------------------------------------------------------

    def run(self) -> None:
        self._tracker.vehicle_started(self.approach)
        try:
            self._advance(Stage.WAITING_LANE)
            self._acquire(self._lane)

            self._advance(Stage.WAITING_LIGHT)
            self._acquire(self._light)

            self.wait_ms = (time.monotonic() - self.wait_start_time) * 1000.0
            self._advance(Stage.CROSSING)
            logger.debug("vehicle %s entering intersection", self.vehicle_id)
            self._sleep(self._crossing_s)

            # Crossing is over once the time has elapsed; leave the stage
            # while the light permit is still held.
            self._advance(Stage.FINISHED)
            self._release(self._light)
            self._release(self._lane)
        except Cancelled:
            self.cancelled = True
            if self._held:
                logger.warning("vehicle %s cancelled holding %s", self.vehicle_id, ", ".join(self.held))
            self._release_held()
            return

        self._tracker.vehicle_crossed(self.approach, self.wait_ms)
        self.finished = True
        logger.info("vehicle %s completed crossing in %.1fms", self.vehicle_id, self.wait_ms)

    def __repr__(self) -> str:
        return f"Vehicle({self.vehicle_id}, stage={self.stage.name})"
