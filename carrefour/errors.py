"""Exception taxonomy shared by the simulation core."""

from __future__ import annotations


class CarrefourError(Exception):
    """Base class for every error raised by the simulation."""


class InvalidArgument(CarrefourError, ValueError):
    """A constructor or config option received an out-of-range value."""


class Cancelled(CarrefourError):
    """A blocking operation was interrupted because the simulation is stopping.

    Always recoverable: the owning actor releases the permits it holds and
    exits.
    """


class InternalError(CarrefourError):
    """An invariant was observably violated. Fatal to the raising actor."""
