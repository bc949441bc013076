"""Simulation options and their loading from the environment."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import InvalidArgument


class SimulationConfig(BaseModel):
    """Options for one run; never reads the environment."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    vehicle_count_per_approach: Annotated[int, Field(ge=0)] = 100
    spawn_interval_ms: Annotated[int, Field(ge=0)] = 600
    tick_interval_ms: Annotated[int, Field(gt=0)] = 2000
    crossing_duration_ms: Annotated[int, Field(ge=0)] = 100


class SimulationSettings(BaseSettings, SimulationConfig):
    """The same options, filled from CARREFOUR_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CARREFOUR_",
        env_ignore_empty=True,
        extra="forbid",
        frozen=True,
    )


def load_config(overrides: Mapping[str, Any] | None = None) -> SimulationConfig:
    """Build a config from defaults, then CARREFOUR_* variables, then *overrides*.

    Raises InvalidArgument for negative, non-integer or unknown options.
    """
    try:
        return SimulationSettings(**dict(overrides or {}))
    except ValidationError as exc:
        raise InvalidArgument(str(exc)) from exc


def coerce_config(config: SimulationConfig | Mapping[str, Any] | None) -> SimulationConfig:
    if isinstance(config, SimulationConfig):
        return config
    try:
        return SimulationConfig.model_validate(dict(config or {}))
    except ValidationError as exc:
        raise InvalidArgument(str(exc)) from exc
