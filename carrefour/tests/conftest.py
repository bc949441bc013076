from __future__ import annotations

import time

import pytest

from carrefour.simulator import Simulation


def wait_for(predicate, timeout: float = 5.0, interval: float = 0.005) -> bool:
    """Poll *predicate* until it is truthy or *timeout* seconds pass."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return bool(predicate())


@pytest.fixture
def make_simulation():
    """Build (not start) simulations that are always shut down afterwards."""
    created: list[Simulation] = []

    def factory(**options) -> Simulation:
        sim = Simulation(options)
        created.append(sim)
        return sim

    yield factory
    for sim in created:
        sim.shutdown(timeout=5)
