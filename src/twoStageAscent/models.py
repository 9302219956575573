# Licensed under the PolyForm Noncommercial License 1.0.0
"""Data models and constants for the two-stage ascent simulator."""

import enum
import numbers
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Tuple

import numpy as np
from scipy import constants as sc

from .errors import InvalidSpecification

# Physical constants
G = sc.G  # Gravitational constant (m^3 kg^-1 s^-2)
R_earth = 6378137.0  # Earth's equatorial radius, WGS84 (m)
M_earth = 5.9722e24  # Earth's mass (kg)
omega_earth = 7.2921159e-5  # Earth's rotation rate (rad/s)
g0 = sc.g  # Standard gravity (m/s^2)
mu = M_earth * G  # Earth's gravitational parameter (m^3 s^-2)

# Atmosphere
rho0 = 1.225  # Sea level air density (kg/m^3)
scale_height = 8400.0  # Atmospheric scale height (m)
karman_line = 100000.0  # Top of the modelled atmosphere (m)
R_air = 287.0  # Specific gas constant of dry air (J kg^-1 K^-1)
gamma_air = 1.4  # Ratio of specific heats

J2 = 1.08263e-3  # Earth's oblateness coefficient


@dataclass(frozen=True)
class PhysicalConstants:
    """Planetary constants used by every model.

    Attributes:
        G: Gravitational constant (m^3 kg^-1 s^-2)
        planet_mass: Planet mass (kg)
        planet_radius: Equatorial radius (m)
        rotation_rate: Sidereal rotation rate (rad/s)
        standard_gravity: Standard gravity used for ISP conversion (m/s^2)
        sea_level_density: Air density at sea level (kg/m^3)
        scale_height: Exponential atmosphere scale height (m)
        karman_line: Altitude above which the atmosphere is ignored (m)
        j2: Oblateness coefficient
        gas_constant: Specific gas constant of air (J kg^-1 K^-1)
        heat_capacity_ratio: Ratio of specific heats of air
    """
    G: float = G
    planet_mass: float = M_earth
    planet_radius: float = R_earth
    rotation_rate: float = omega_earth
    standard_gravity: float = g0
    sea_level_density: float = rho0
    scale_height: float = scale_height
    karman_line: float = karman_line
    j2: float = J2
    gas_constant: float = R_air
    heat_capacity_ratio: float = gamma_air

    @property
    def mu(self) -> float:
        return self.G * self.planet_mass


EARTH = PhysicalConstants()


@dataclass(frozen=True)
class SimulationConfig:
    """Tunable numbers of the ascent engine.

    The insertion derating factors are empirical; they approximate a
    circularisation burn and are not derived from engine data.
    """
    dt: float = 0.5  # Integration time step (s)
    min_dt: float = 0.01  # Smallest step tried after a numerical fault (s)
    reference_area: float = 15.0  # Vehicle cross-section (m^2)
    mass_floor: float = 1000.0  # Lower bound on vehicle mass (kg)
    step_margin: int = 100  # Extra steps allowed per phase
    coast_duration: float = 300.0  # Time budget of the coast/insertion phase (s)

    insertion_thrust_factor: float = 0.8
    insertion_isp_factor: float = 1.1
    insertion_velocity_threshold: float = 100.0  # Minimum deficit to burn (m/s)
    insertion_min_mass: float = 5000.0  # (kg)
    insertion_altitude_fraction: float = 0.9
    orbit_velocity_fraction: float = 0.95

    vacuum_isp_gain: float = 0.15
    isp_blend_height: float = 10000.0  # (m)
    nozzle_base_efficiency: float = 0.85
    nozzle_blend_height: float = 20000.0  # (m)

    pitch_gain: float = 0.08  # (1/s)
    max_pitch_rate: float = 0.015  # (rad/s)
    centrifugal_altitude: float = 50000.0  # (m)

    layered_atmosphere: bool = True
    compressibility: bool = True
    j2_correction: bool = True
    launch_eastward: bool = True


DEFAULT_CONFIG = SimulationConfig()


def _check(value: float, field_name: str, constraint: str, test: Callable[[float], bool]) -> None:
    """Raise InvalidSpecification unless value is a finite real number passing test."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidSpecification(field_name, f"a real number {constraint}", value)
    if not np.isfinite(value) or not test(value):
        raise InvalidSpecification(field_name, constraint, value)


@dataclass(frozen=True)
class RocketSpecification:
    """Mass, propulsion and aerodynamic description of a two-stage vehicle.

    Attributes:
        mass: Total lift-off mass (kg)
        stage_separation_mass: Mass left after the first stage is jettisoned (kg)
        drag_coefficient: Zero-lift drag coefficient
        stage1_thrust: First stage thrust (N)
        stage1_isp: First stage specific impulse (s)
        stage1_burn_time: First stage burn duration (s)
        stage2_thrust: Second stage thrust (N)
        stage2_isp: Second stage specific impulse (s)
        stage2_burn_time: Second stage burn duration (s)
    """
    mass: float
    stage_separation_mass: float
    drag_coefficient: float
    stage1_thrust: float
    stage1_isp: float
    stage1_burn_time: float
    stage2_thrust: float
    stage2_isp: float
    stage2_burn_time: float

    def validate(self) -> None:
        """Raise InvalidSpecification on the first violated invariant."""
        _check(self.mass, "mass", "> 0", lambda v: v > 0)
        _check(self.stage_separation_mass, "stage_separation_mass", "> 0", lambda v: v > 0)
        _check(self.stage_separation_mass, "stage_separation_mass", "< mass", lambda v: v < self.mass)
        _check(self.drag_coefficient, "drag_coefficient", ">= 0", lambda v: v >= 0)
        for stage in (1, 2):
            _check(getattr(self, f"stage{stage}_thrust"), f"stage{stage}_thrust", ">= 0", lambda v: v >= 0)
            _check(getattr(self, f"stage{stage}_isp"), f"stage{stage}_isp", "> 0", lambda v: v > 0)
            _check(getattr(self, f"stage{stage}_burn_time"), f"stage{stage}_burn_time", "> 0", lambda v: v > 0)

    def stage_parameters(self, stage: int) -> Tuple[float, float, float]:
        """Return (thrust, isp, burn_time) for stage 1 or 2."""
        if stage == 1:
            return self.stage1_thrust, self.stage1_isp, self.stage1_burn_time
        if stage == 2:
            return self.stage2_thrust, self.stage2_isp, self.stage2_burn_time
        raise ValueError(f"stage must be 1 or 2, got {stage}")


@dataclass(frozen=True)
class LaunchParameters:
    """Launch site, target orbit and vehicle for one simulation run.

    Attributes:
        latitude: Launch site latitude (deg)
        longitude: Launch site longitude (deg)
        orbit_height: Target circular orbit altitude (km)
        rocket: Vehicle specification
    """
    latitude: float
    longitude: float
    orbit_height: float
    rocket: RocketSpecification

    @property
    def target_altitude(self) -> float:
        """Target orbit altitude in metres."""
        return self.orbit_height * 1000.0

    def validate(self) -> None:
        _check(self.latitude, "latitude", "in [-90, 90]", lambda v: -90.0 <= v <= 90.0)
        _check(self.longitude, "longitude", "in [-180, 180]", lambda v: -180.0 <= v <= 180.0)
        _check(self.orbit_height, "orbit_height", "in [0, 1000] km", lambda v: 0.0 <= v <= 1000.0)
        if not isinstance(self.rocket, RocketSpecification):
            raise InvalidSpecification("rocket", "a RocketSpecification", self.rocket)
        self.rocket.validate()


@dataclass(frozen=True)
class FlightState:
    """Integration state of the vehicle.

    Position is (downrange x, altitude, out-of-plane z) in metres, velocity
    (vx, vy) in m/s, flight path angle in radians from local horizontal.
    ``clamped`` names the clamps applied by the step that produced the state.
    """
    time: float
    x: float
    altitude: float
    vx: float
    vy: float
    mass: float
    flight_path_angle: float
    z: float = 0.0
    clamped: Tuple[str, ...] = ()

    @property
    def speed(self) -> float:
        return float(np.hypot(self.vx, self.vy))

    def as_vector(self) -> np.ndarray:
        """State vector [x, altitude, vx, vy, m, gamma] used by the integrator."""
        return np.array([self.x, self.altitude, self.vx, self.vy, self.mass, self.flight_path_angle],
                        dtype=float)

    @classmethod
    def from_vector(cls, t: float, y: np.ndarray, z: float = 0.0,
                    clamped: Tuple[str, ...] = ()) -> "FlightState":
        x, altitude, vx, vy, m, gamma = (float(v) for v in y)
        return cls(time=float(t), x=x, altitude=altitude, vx=vx, vy=vy, mass=m,
                   flight_path_angle=gamma, z=z, clamped=clamped)

    @classmethod
    def on_pad(cls, mass: float) -> "FlightState":
        """Vehicle at rest on the pad, pointing straight up."""
        return cls(time=0.0, x=0.0, altitude=0.0, vx=0.0, vy=0.0, mass=mass,
                   flight_path_angle=np.pi / 2)


@dataclass(frozen=True)
class TrajectorySample:
    """One recorded observation of the flight."""
    time: float
    altitude: float
    velocity: float
    acceleration: float
    thrust: float
    mass: float
    x: float
    y: float
    z: float
    stage: int
    flight_path_angle: float = 0.0
    mach_number: float = 0.0
    dynamic_pressure: float = 0.0


@dataclass(frozen=True)
class OptimalParameters:
    """Summary metrics derived from a trajectory."""
    required_velocity: float  # Circular velocity at the target altitude (m/s)
    rotation_bonus: float  # Eastward surface velocity from planet rotation (m/s)
    effective_required_velocity: float  # required_velocity - rotation_bonus (m/s)
    achieved_velocity: float  # (m/s)
    launch_angle: float  # (deg)
    stage1_burn_time: float  # (s)
    stage2_burn_time: float  # (s)
    max_altitude: float  # (m)
    total_flight_time: float  # (s)
    stage_separation_time: float  # (s)
    stage_separation_altitude: float  # (m)
    final_altitude: float  # (m)
    downrange: float  # (m)
    velocity_achievement: float  # achieved / effective required (%)
    max_dynamic_pressure: float  # (Pa)
    max_acceleration_g: float  # (g)


class RunStatus(str, enum.Enum):
    COMPLETED = "completed"
    STEP_BUDGET_EXCEEDED = "step_budget_exceeded"
    INVALID_SPECIFICATION = "invalid_specification"
    INTEGRATION_FAULT = "integration_fault"


class PhaseOutcome(str, enum.Enum):
    BURN_COMPLETED = "burn_completed"
    PROPELLANT_DEPLETED = "propellant_depleted"
    GROUND_CONTACT = "ground_contact"
    ORBIT_ACHIEVED = "orbit_achieved"
    TIME_BUDGET_EXHAUSTED = "time_budget_exhausted"
    STEP_BUDGET_EXCEEDED = "step_budget_exceeded"


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of a simulation run.

    A failed run keeps whatever samples were recorded before the failure and
    stores the exception in ``error``; ``optimal_params`` is only set for runs
    that reached the end of the coast phase. The result is read-only: the
    trajectory is stored as a tuple and the mappings as read-only views.
    """
    status: RunStatus
    trajectory: Tuple[TrajectorySample, ...] = ()
    optimal_params: Optional[OptimalParameters] = None
    error: Optional[Exception] = None
    phase_outcomes: Mapping[str, PhaseOutcome] = field(default_factory=dict)
    diagnostics: Mapping[str, int] = field(default_factory=dict)
    orbit_achieved: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'trajectory', tuple(self.trajectory))
        object.__setattr__(self, 'phase_outcomes', MappingProxyType(dict(self.phase_outcomes)))
        object.__setattr__(self, 'diagnostics', MappingProxyType(dict(self.diagnostics)))

    @property
    def succeeded(self) -> bool:
        return self.status is RunStatus.COMPLETED

    def raise_for_status(self) -> None:
        """Re-raise the stored error, if any."""
        if self.error is not None:
            raise self.error

    def stage_samples(self, stage: int) -> List[TrajectorySample]:
        return [s for s in self.trajectory if s.stage == stage]

    def as_arrays(self) -> Dict[str, np.ndarray]:
        """Trajectory as numpy arrays, one per sample field."""
        names = ['time', 'altitude', 'velocity', 'acceleration', 'thrust', 'mass',
                 'x', 'y', 'z', 'stage', 'flight_path_angle', 'mach_number', 'dynamic_pressure']
        arrays = {name: np.array([getattr(s, name) for s in self.trajectory], dtype=float)
                  for name in names}
        arrays['stage'] = arrays['stage'].astype(int)
        return arrays

    def plot_series(self) -> Dict[str, np.ndarray]:
        """Per-field (time, value) series of shape (N, 2) for a charting layer."""
        arrays = self.as_arrays()
        t = arrays['time']
        series = {name: np.column_stack([t, arrays[name]])
                  for name in ('altitude', 'velocity', 'acceleration', 'thrust', 'mass')}
        for stage in (1, 2):
            mask = arrays['stage'] == stage
            series[f'stage{stage}_trajectory'] = np.column_stack([t[mask], arrays['altitude'][mask]])
        return series
