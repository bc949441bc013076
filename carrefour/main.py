"""FastAPI entry point exposing the intersection simulation over REST."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .config import SimulationConfig, load_config
from .models import ResetResponse, SimulationSnapshot
from .simulator import SimulationAlreadyRunning, SimulationManager

manager = SimulationManager(load_config())

# ---------------------------------------------------------------------------
# App lifecycle
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    manager.shutdown()


app = FastAPI(
    title="Carrefour Intersection API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# API routes
# ---------------------------------------------------------------------------

@app.get("/api/state", response_model=SimulationSnapshot)
def get_state():
    """Return statistics, the current light and the countdown to the next switch."""
    return manager.state()


@app.post("/api/simulation", response_model=SimulationSnapshot, status_code=201)
def start(config: SimulationConfig):
    """Start a new simulation.

    - Rejected with 409 while another simulation is still running.
    - Negative or unknown options are rejected with 422.
    """
    try:
        return manager.start(config)
    except SimulationAlreadyRunning as exc:
        raise HTTPException(status_code=409, detail=str(exc))


@app.post("/api/shutdown", response_model=SimulationSnapshot)
def shutdown():
    """Stop every vehicle and the controller; returns the final totals."""
    return manager.shutdown()


@app.post("/api/reset", response_model=ResetResponse)
def reset():
    """Stop the current simulation and replace it with a fresh, idle one."""
    manager.reset()
    return ResetResponse(ok=True)
