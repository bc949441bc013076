"""Pydantic models and enums describing the intersection state."""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field, computed_field

# ---------------------------------------------------------------------------
# Domain enums
# ---------------------------------------------------------------------------

class Approach(IntEnum):
    A = 0
    B = 1

    @property
    def other(self) -> Approach:
        return Approach.B if self is Approach.A else Approach.A


class LightState(IntEnum):
    A_GREEN = 1
    B_GREEN = 2

    @property
    def green(self) -> Approach:
        """The approach that currently has right-of-way."""
        return Approach.A if self is LightState.A_GREEN else Approach.B

    def flipped(self) -> LightState:
        return LightState.B_GREEN if self is LightState.A_GREEN else LightState.A_GREEN

    @classmethod
    def green_for(cls, approach: Approach) -> LightState:
        return cls.A_GREEN if approach is Approach.A else cls.B_GREEN


class Stage(IntEnum):
    """Vehicle lifecycle stages; values only ever increase for one vehicle."""

    CREATED       = 0
    WAITING_LANE  = 1
    WAITING_LIGHT = 2
    CROSSING      = 3
    FINISHED      = 4


# ---------------------------------------------------------------------------
# Snapshots handed to the rendering side
# ---------------------------------------------------------------------------

class StatisticsSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    crossed_A: int = Field(ge=0)
    crossed_B: int = Field(ge=0)
    waiting_A: int = Field(ge=0)
    waiting_B: int = Field(ge=0)
    spawned_A: int = Field(ge=0)
    spawned_B: int = Field(ge=0)
    avg_wait_ms_A: float
    avg_wait_ms_B: float
    avg_wait_ms_overall: float

    @computed_field
    @property
    def crossed_total(self) -> int:
        return self.crossed_A + self.crossed_B

    def crossed(self, approach: Approach) -> int:
        return self.crossed_A if approach is Approach.A else self.crossed_B

    def waiting(self, approach: Approach) -> int:
        return self.waiting_A if approach is Approach.A else self.waiting_B


class SemaphoreInfo(BaseModel):
    name: str
    count: int


class SimulationSnapshot(BaseModel):
    statistics: StatisticsSnapshot
    light_state: LightState
    ms_until_next_tick: int
    light_changes: int
    running: bool


class ResetResponse(BaseModel):
    ok: bool
