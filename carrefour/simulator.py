"""Simulation harness: semaphores, controller thread, vehicle spawner.

Every actor (controller, spawner, each vehicle) runs on its own daemon
thread.  They all share one ``threading.Event``; shutdown sets it and
interrupts every semaphore so blocked acquires notice and unwind.

Thread safety: ``Simulation._lock`` guards the vehicle/thread registry,
``Simulation._shutdown_lock`` serialises shutdown so later callers block
until the first one has quiesced everything.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Mapping
from typing import Any

from .config import SimulationConfig, coerce_config
from .controller import LightListener, TrafficController
from .errors import InternalError
from .models import Approach, SemaphoreInfo, SimulationSnapshot, Stage
from .semaphore import Semaphore
from .stats import StatisticsTracker
from .vehicle import StageListener, Vehicle

logger = logging.getLogger(__name__)


class Simulation:
    """Handle returned by :func:`start_simulation`."""

    def __init__(self, config: SimulationConfig | Mapping[str, Any] | None = None) -> None:
        self.config = coerce_config(config)
        self.tracker = StatisticsTracker()
        self.errors: list[str] = []

        self._cancel = threading.Event()
        self._lock = threading.Lock()
        self._shutdown_lock = threading.Lock()
        self._started = False
        self._stopped = False

        self.lights = {
            Approach.A: Semaphore(1, "light_A"),
            Approach.B: Semaphore(0, "light_B"),
        }
        self.lanes = {
            Approach.A: Semaphore(1, "lane_A"),
            Approach.B: Semaphore(1, "lane_B"),
        }
        self.controller = TrafficController(
            self.lights[Approach.A],
            self.lights[Approach.B],
            self._cancel,
            tick_interval_ms=self.config.tick_interval_ms,
        )

        self._vehicles: list[Vehicle] = []
        self._vehicle_threads: list[threading.Thread] = []
        self._stage_listeners: list[StageListener] = []
        self._controller_thread: threading.Thread | None = None
        self._spawner_thread: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        with self._lock:
            return self._started and not self._stopped

    def start(self) -> Simulation:
        with self._lock:
            if self._started or self._stopped:
                raise RuntimeError("simulation already started or shut down")
            self._started = True
            self._controller_thread = threading.Thread(
                target=self._guard, args=(self.controller.run,),
                name="TrafficController", daemon=True,
            )
            self._spawner_thread = threading.Thread(
                target=self._guard, args=(self._spawn_all,),
                name="VehicleSpawner", daemon=True,
            )
        logger.info(
            "starting simulation: %d vehicles per approach, tick %dms",
            self.config.vehicle_count_per_approach, self.config.tick_interval_ms,
        )
        self._controller_thread.start()
        self._spawner_thread.start()
        return self

    def _stop_requested(self) -> None:
        self._cancel.set()
        for sem in self._all_semaphores():
            sem.interrupt()

    def shutdown(self, timeout: float | None = None) -> None:
        """Cancel every actor and wait for them to exit. Idempotent."""
        with self._shutdown_lock:
            with self._lock:
                if self._stopped:
                    return
                self._stopped = True
            self._stop_requested()

            threads = [self._controller_thread, self._spawner_thread]
            # The spawner may still be adding vehicles; join it first.
            for thread in threads:
                if thread is not None:
                    thread.join(timeout)
            with self._lock:
                threads = list(self._vehicle_threads)
            for thread in threads:
                thread.join(timeout)
            logger.info("simulation shut down: %s", self.tracker.snapshot())

    def reset(self) -> None:
        """Shut down, then zero the statistics.

        Safe because every vehicle has either crossed or been cancelled by
        the time shutdown returns.
        """
        self.shutdown()
        self.tracker.reset()

    def wait_until_finished(self, timeout: float | None = None) -> bool:
        """Block until every configured vehicle has run to completion."""
        deadline = None if timeout is None else time.monotonic() + timeout

        def remaining() -> float | None:
            return None if deadline is None else max(0.0, deadline - time.monotonic())

        if self._spawner_thread is None:
            return self.config.vehicle_count_per_approach == 0
        self._spawner_thread.join(remaining())
        if self._spawner_thread.is_alive():
            return False
        with self._lock:
            threads = list(self._vehicle_threads)
        for thread in threads:
            thread.join(remaining())
            if thread.is_alive():
                return False
        return all(vehicle.finished for vehicle in self.vehicles())

    # ------------------------------------------------------------------
    # Actors
    # ------------------------------------------------------------------

    def _guard(self, target: Callable[[], None]) -> None:
        try:
            target()
        except InternalError as exc:
            logger.exception("internal error in %s", threading.current_thread().name)
            with self._lock:
                self.errors.append(str(exc))
            self._stop_requested()

    def _spawn_all(self) -> None:
        interval_s = self.config.spawn_interval_ms / 1000.0
        for index in range(self.config.vehicle_count_per_approach):
            if self._cancel.is_set():
                break
            self._spawn(index, Approach.A)
            self._spawn(index, Approach.B)
            if interval_s and self._cancel.wait(interval_s):
                break

    def _spawn(self, index: int, approach: Approach) -> Vehicle:
        vehicle = Vehicle(
            index,
            approach,
            self.lanes[approach],
            self.lights[approach],
            self.tracker,
            self._cancel,
            crossing_duration_ms=self.config.crossing_duration_ms,
            on_stage=self._notify_stage,
        )
        thread = threading.Thread(
            target=self._guard, args=(vehicle.run,),
            name=f"Vehicle-{vehicle.vehicle_id}", daemon=True,
        )
        with self._lock:
            self._vehicles.append(vehicle)
            self._vehicle_threads.append(thread)
        thread.start()
        return vehicle

    def _notify_stage(self, vehicle: Vehicle, stage: Stage) -> None:
        with self._lock:
            listeners = list(self._stage_listeners)
        for callback in listeners:
            callback(vehicle, stage)

    # ------------------------------------------------------------------
    # Rendering-side interface
    # ------------------------------------------------------------------

    def snapshot(self) -> SimulationSnapshot:
        return SimulationSnapshot(
            statistics=self.tracker.snapshot(),
            light_state=self.controller.light_state,
            ms_until_next_tick=self.controller.ms_until_next_tick() if self.running else 0,
            light_changes=self.controller.tick_count,
            running=self.running,
        )

    def on_light_change(self, callback: LightListener) -> None:
        self.controller.add_listener(callback)

    def add_stage_listener(self, callback: StageListener) -> None:
        with self._lock:
            self._stage_listeners.append(callback)

    def vehicles(self) -> list[Vehicle]:
        with self._lock:
            return list(self._vehicles)

    def _all_semaphores(self) -> list[Semaphore]:
        return [*self.lights.values(), *self.lanes.values()]

    def semaphores(self) -> list[SemaphoreInfo]:
        return [SemaphoreInfo(name=sem.name, count=sem.peek_count()) for sem in self._all_semaphores()]


def start_simulation(config: SimulationConfig | Mapping[str, Any] | None = None) -> Simulation:
    """Build a simulation from *config* and start its controller and spawner."""
    return Simulation(config).start()


# ---------------------------------------------------------------------------
# Process-wide manager used by the HTTP API
# ---------------------------------------------------------------------------

class SimulationAlreadyRunning(RuntimeError):
    pass


class SimulationManager:
    """Owns the current simulation; every public call holds one lock."""

    def __init__(self, config: SimulationConfig | None = None) -> None:
        self._lock = threading.Lock()
        self._simulation = Simulation(config)

    def start(self, config: SimulationConfig) -> SimulationSnapshot:
        with self._lock:
            if self._simulation.running:
                raise SimulationAlreadyRunning("a simulation is already running")
            self._simulation.shutdown()
            self._simulation = start_simulation(config)
            return self._simulation.snapshot()

    def state(self) -> SimulationSnapshot:
        with self._lock:
            return self._simulation.snapshot()

    def shutdown(self) -> SimulationSnapshot:
        with self._lock:
            self._simulation.shutdown()
            return self._simulation.snapshot()

    def reset(self) -> None:
        with self._lock:
            self._simulation.shutdown()
            self._simulation = Simulation(self._simulation.config)
