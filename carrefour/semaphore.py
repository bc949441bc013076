"""Counting semaphore with cancellable P (acquire) and V (release).

Waiters block on a single condition variable and re-test the zero count
after every wakeup.  A waiter that passes a ``cancel`` event gives up with
:class:`Cancelled` once the event is set and somebody calls
:meth:`Semaphore.interrupt`; the count is left untouched in that case.
"""

from __future__ import annotations

import logging
import threading

from .errors import Cancelled, InvalidArgument

logger = logging.getLogger(__name__)


class Semaphore:
    """Counting semaphore shared between actor threads."""

    def __init__(self, initial_count: int, name: str) -> None:
        if initial_count < 0:
            raise InvalidArgument(f"semaphore {name!r}: initial count must be non-negative, got {initial_count}")
        self._count = initial_count
        self._name = name
        self._cond = threading.Condition()

    @property
    def name(self) -> str:
        return self._name

    def acquire(self, cancel: threading.Event | None = None) -> None:
        """Take one permit, blocking while none is available."""
        with self._cond:
            while True:
                if cancel is not None and cancel.is_set():
                    logger.debug("acquire on %s cancelled", self._name)
                    raise Cancelled(f"acquire on {self._name} cancelled")
                if self._count > 0:
                    break
                self._cond.wait()
            self._count -= 1

    def release(self) -> None:
        """Return one permit. Never blocks."""
        with self._cond:
            self._count += 1
            # Cancelled waiters may consume a notification, so wake everyone.
            self._cond.notify_all()

    def interrupt(self) -> None:
        """Wake all waiters so they re-check their cancel event."""
        with self._cond:
            self._cond.notify_all()

    def peek_count(self) -> int:
        """Best-effort count, for diagnostics only."""
        with self._cond:
            return self._count

    def __repr__(self) -> str:
        return f"Semaphore(name={self._name!r}, count={self._count})"
