# Licensed under the PolyForm Noncommercial License 1.0.0
"""Two-stage ascent simulator - RK4 point-mass ascent of a two-stage rocket to a circular orbit."""

from .models import (
    G,
    R_earth,
    M_earth,
    g0,
    EARTH,
    DEFAULT_CONFIG,
    PhysicalConstants,
    SimulationConfig,
    RocketSpecification,
    LaunchParameters,
    FlightState,
    TrajectorySample,
    OptimalParameters,
    SimulationResult,
    RunStatus,
    PhaseOutcome,
)
from .errors import InvalidSpecification, IntegrationFault, PhaseStepBudgetExceeded
from .physics import PhysicsModel
from .guidance import target_flight_path_angle
from .integrator import StateIntegrator
from .core import TwoStageAscentSimulator, run_simulation
from .metrics import summarize
from .engines import ENGINES, specification_from_engines
from .plotting import plot_results

__version__ = "0.1.0"
__all__ = [
    "G",
    "R_earth",
    "M_earth",
    "g0",
    "EARTH",
    "DEFAULT_CONFIG",
    "PhysicalConstants",
    "SimulationConfig",
    "RocketSpecification",
    "LaunchParameters",
    "FlightState",
    "TrajectorySample",
    "OptimalParameters",
    "SimulationResult",
    "RunStatus",
    "PhaseOutcome",
    "InvalidSpecification",
    "IntegrationFault",
    "PhaseStepBudgetExceeded",
    "PhysicsModel",
    "target_flight_path_angle",
    "StateIntegrator",
    "TwoStageAscentSimulator",
    "run_simulation",
    "summarize",
    "ENGINES",
    "specification_from_engines",
    "plot_results",
]
