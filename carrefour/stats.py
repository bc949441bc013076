"""Thread-safe counters and wait-time sums for both approaches.

Only raw totals are stored; averages are derived in :meth:`snapshot`.
"""

from __future__ import annotations

import threading

from .models import Approach, StatisticsSnapshot


def _average(total: float, count: int) -> float:
    if count == 0:
        return 0.0
    return total / count


class StatisticsTracker:
    """Live per-approach counts and wait totals."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._zero()

    def _zero(self) -> None:
        self._spawned: dict[Approach, int] = {a: 0 for a in Approach}
        self._waiting: dict[Approach, int] = {a: 0 for a in Approach}
        self._crossed: dict[Approach, int] = {a: 0 for a in Approach}
        self._total_wait_ms: dict[Approach, float] = {a: 0.0 for a in Approach}

    # ------------------------------------------------------------------
    # Lifecycle hooks
    # ------------------------------------------------------------------

    def vehicle_started(self, approach: Approach) -> None:
        with self._lock:
            self._waiting[approach] += 1
            self._spawned[approach] += 1

    def vehicle_crossed(self, approach: Approach, wait_ms: float) -> None:
        with self._lock:
            self._crossed[approach] += 1
            self._waiting[approach] -= 1
            self._total_wait_ms[approach] += wait_ms

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def snapshot(self) -> StatisticsSnapshot:
        with self._lock:
            crossed = dict(self._crossed)
            waiting = dict(self._waiting)
            spawned = dict(self._spawned)
            total = dict(self._total_wait_ms)
        return StatisticsSnapshot(
            crossed_A=crossed[Approach.A],
            crossed_B=crossed[Approach.B],
            waiting_A=waiting[Approach.A],
            waiting_B=waiting[Approach.B],
            spawned_A=spawned[Approach.A],
            spawned_B=spawned[Approach.B],
            avg_wait_ms_A=_average(total[Approach.A], crossed[Approach.A]),
            avg_wait_ms_B=_average(total[Approach.B], crossed[Approach.B]),
            avg_wait_ms_overall=_average(sum(total.values()), sum(crossed.values())),
        )

    def reset(self) -> None:
        """Zero every counter.

        The caller must make sure no vehicle is between ``vehicle_started``
        and ``vehicle_crossed``; nothing here checks it.
        """
        with self._lock:
            self._zero()
