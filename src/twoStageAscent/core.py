# Licensed under the PolyForm Noncommercial License 1.0.0
"""Flight-phase control of a two-stage ascent."""

import dataclasses
from typing import Dict, List, Optional

import numpy as np

from .errors import IntegrationFault, InvalidSpecification, PhaseStepBudgetExceeded
from .integrator import StateIntegrator
from .metrics import required_orbital_velocity, rotation_bonus, summarize
from .models import (
    DEFAULT_CONFIG,
    EARTH,
    FlightState,
    LaunchParameters,
    PhaseOutcome,
    PhysicalConstants,
    RunStatus,
    SimulationConfig,
    SimulationResult,
    TrajectorySample,
)
from .physics import PhysicsModel

STAGE1_BURN = "stage1_burn"
STAGE2_BURN = "stage2_burn"
COAST = "coast"

# Slack on phase end times as a fraction of dt; time is a running sum of steps
TIME_TOLERANCE = 1e-6


def step_budgets(params: LaunchParameters, config: SimulationConfig = DEFAULT_CONFIG) -> Dict[str, int]:
    """Upper bound on the number of steps (and samples) of each flight phase."""
    rocket = params.rocket
    durations = {
        STAGE1_BURN: rocket.stage1_burn_time,
        STAGE2_BURN: rocket.stage2_burn_time,
        COAST: config.coast_duration,
    }
    return {phase: int(np.ceil(duration / config.dt)) + config.step_margin
            for phase, duration in durations.items()}


class TwoStageAscentSimulator:
    """
    Simulates the ascent of a two-stage rocket to a circular orbit.

    The flight runs through four phases: stage 1 burn, stage separation,
    stage 2 burn and a coast phase that may include a circularisation burn.
    One trajectory sample is recorded per integration step.
    """

    def __init__(self, config: Optional[SimulationConfig] = None,
                 constants: Optional[PhysicalConstants] = None,
                 physics: Optional[PhysicsModel] = None):
        """
        Initialize the simulator.

        Args:
            config: Simulation configuration; defaults to DEFAULT_CONFIG
            constants: Planetary constants; defaults to EARTH
            physics: Environment models; built from constants and config when omitted
        """
        self.config = config or DEFAULT_CONFIG
        self.constants = constants or EARTH
        self.physics = physics or PhysicsModel(self.constants, self.config)

    def simulate(self, params: LaunchParameters, verbose: bool = False) -> SimulationResult:
        """
        Run one simulation.

        Failures are reported in the returned result rather than raised:
        invalid input gives RunStatus.INVALID_SPECIFICATION with no samples,
        an unrecoverable numerical fault gives RunStatus.INTEGRATION_FAULT
        and a phase that hit its step limit gives RunStatus.STEP_BUDGET_EXCEEDED.

        Args:
            params: Launch site, target orbit and vehicle
            verbose: Print progress while the simulation runs

        Returns:
            SimulationResult
        """
        try:
            params.validate()
        except InvalidSpecification as exc:
            if verbose:
                print(f"Invalid specification: {exc}")
            return SimulationResult(status=RunStatus.INVALID_SPECIFICATION, error=exc)

        return _AscentRun(self, params, verbose).execute()


def run_simulation(params: LaunchParameters, config: Optional[SimulationConfig] = None,
                   constants: Optional[PhysicalConstants] = None, verbose: bool = False) -> SimulationResult:
    """Run a two-stage ascent simulation; see TwoStageAscentSimulator.simulate."""
    return TwoStageAscentSimulator(config, constants).simulate(params, verbose=verbose)


class _AscentRun:
    """State of a single simulation run."""

    def __init__(self, simulator: TwoStageAscentSimulator, params: LaunchParameters, verbose: bool):
        self.config = simulator.config
        self.constants = simulator.constants
        self.physics = simulator.physics
        self.params = params
        self.rocket = params.rocket
        self.verbose = verbose

        self.target_altitude = params.target_altitude
        self.required_velocity = required_orbital_velocity(self.target_altitude, self.constants)
        self.rotation_bonus = rotation_bonus(params.latitude, self.constants, self.config)
        self.effective_velocity = self.required_velocity - self.rotation_bonus

        # Keep the floor below the upper stage so stage 2 always has propellant to burn
        self.mass_floor = min(self.config.mass_floor, 0.5 * self.rocket.stage_separation_mass)
        self.integrator = StateIntegrator(self.physics, latitude=params.latitude,
                                          required_velocity=self.effective_velocity,
                                          mass_floor=self.mass_floor)
        self.vehicle = dict(drag_coefficient=self.rocket.drag_coefficient,
                            reference_area=self.config.reference_area,
                            target_altitude=self.target_altitude)

        self.budgets = step_budgets(params, self.config)
        self.state = FlightState.on_pad(self.rocket.mass)
        self.samples: List[TrajectorySample] = []
        self.phase_outcomes: Dict[str, PhaseOutcome] = {}
        self.budget_errors: List[PhaseStepBudgetExceeded] = []
        self.fault_retries = 0
        self.separation_time = 0.0
        self.separation_altitude = 0.0
        self.orbit_achieved = False

    def execute(self) -> SimulationResult:
        if self.verbose:
            print(f"Target: {self.target_altitude / 1000:.1f} km circular orbit")
            print(f"Required orbital velocity: {self.required_velocity:.2f} m/s "
                  f"(rotation bonus {self.rotation_bonus:.2f} m/s)")
        try:
            self._stage1_burn()
            self._separate()
            self._stage2_burn()
            self._coast()
        except IntegrationFault as exc:
            if self.verbose:
                print(f"Simulation aborted: {exc}")
            return self._result(RunStatus.INTEGRATION_FAULT, error=exc)

        optimal = summarize(self.samples, self.params, self.constants, self.config)
        if self.verbose:
            self._print_summary(optimal)

        if self.budget_errors:
            return self._result(RunStatus.STEP_BUDGET_EXCEEDED, error=self.budget_errors[0],
                                optimal=optimal)
        return self._result(RunStatus.COMPLETED, optimal=optimal)

    # Phases

    def _stage1_burn(self):
        if self.verbose:
            print("Stage 1 ignition")
        thrust, isp, burn_time = self.rocket.stage_parameters(1)
        self._burn(STAGE1_BURN, 1, thrust, isp, burn_time, self.rocket.stage_separation_mass,
                   report_every=25)

    def _separate(self):
        self.separation_time = self.state.time
        self.separation_altitude = self.state.altitude
        self.state = dataclasses.replace(self.state, mass=self.rocket.stage_separation_mass, clamped=())
        if self.verbose:
            print(f"Stage separation at t={self.separation_time:.1f}s: "
                  f"altitude {self.separation_altitude / 1000:.2f} km, velocity {self.state.speed:.1f} m/s, "
                  f"flight path angle {np.degrees(self.state.flight_path_angle):.1f} deg")
            print("Stage 2 ignition")

    def _stage2_burn(self):
        thrust, isp, burn_time = self.rocket.stage_parameters(2)
        self._burn(STAGE2_BURN, 2, thrust, isp, self.separation_time + burn_time, self.mass_floor,
                   report_every=40)

    def _burn(self, phase: str, stage: int, thrust: float, isp: float, end_time: float,
              mass_limit: float, report_every: int):
        """Burn at full thrust until end_time, propellant runs out or the vehicle is below ground."""
        budget = self.budgets[phase]
        steps = 0
        while self._before(end_time) and self.state.altitude >= 0 and self.state.mass > mass_limit:
            if steps >= budget:
                self._budget_exceeded(phase, steps, budget)
                return
            self._record(stage, thrust, isp, True)
            self._advance(stage, thrust, isp, True)
            steps += 1
            self._report(report_every)

        if self.state.mass <= mass_limit:
            self.phase_outcomes[phase] = PhaseOutcome.PROPELLANT_DEPLETED
        elif not self._before(end_time):
            self.phase_outcomes[phase] = PhaseOutcome.BURN_COMPLETED
        else:
            self.phase_outcomes[phase] = PhaseOutcome.GROUND_CONTACT

    def _coast(self):
        """Coast with the engine off, firing a derated stage 2 burn to circularise when needed."""
        if self.verbose:
            print("Coast / orbital insertion")
        cfg = self.config
        thrust = self.rocket.stage2_thrust * cfg.insertion_thrust_factor
        isp = self.rocket.stage2_isp * cfg.insertion_isp_factor
        end_time = self.state.time + cfg.coast_duration
        budget = self.budgets[COAST]
        outcome = PhaseOutcome.TIME_BUDGET_EXHAUSTED

        steps = 0
        while self._before(end_time) and self.state.altitude >= 0:
            if steps >= budget:
                self._budget_exceeded(COAST, steps, budget)
                return
            burn = self._needs_insertion_burn()
            self._record(2, thrust, isp, burn)

            if self._in_orbit():
                self.orbit_achieved = True
                outcome = PhaseOutcome.ORBIT_ACHIEVED
                if self.verbose:
                    print(f"Orbital velocity achieved at t={self.state.time:.1f}s")
                break
            if self.state.altitude <= 0 and self.state.vy <= 0:
                outcome = PhaseOutcome.GROUND_CONTACT
                break

            self._advance(2, thrust, isp, burn)
            steps += 1

        self.phase_outcomes[COAST] = outcome

    def _before(self, end_time: float) -> bool:
        return self.state.time < end_time - TIME_TOLERANCE * self.config.dt

    def _needs_insertion_burn(self) -> bool:
        cfg = self.config
        s = self.state
        deficit = self.effective_velocity - s.speed
        return (s.altitude >= cfg.insertion_altitude_fraction * self.target_altitude
                and deficit > cfg.insertion_velocity_threshold
                and s.mass > max(cfg.insertion_min_mass, self.mass_floor))

    def _in_orbit(self) -> bool:
        cfg = self.config
        s = self.state
        orbital_speed = self.physics.circular_velocity(s.altitude) - self.rotation_bonus
        return (s.speed >= cfg.orbit_velocity_fraction * orbital_speed
                and s.altitude >= cfg.orbit_velocity_fraction * self.target_altitude)

    # Stepping and recording

    def _advance(self, stage: int, thrust: float, isp: float, engine_on: bool):
        """One integration step; a faulting step is retried from the same state with half the step."""
        dt = self.config.dt
        while True:
            try:
                self.state = self.integrator.step(self.state, dt, thrust, isp, engine_on=engine_on,
                                                  stage=stage, **self.vehicle)
                return
            except IntegrationFault as exc:
                if dt / 2 < self.config.min_dt:
                    raise
                dt /= 2
                self.fault_retries += 1
                if self.verbose:
                    print(f"{exc}; retrying with dt={dt:g}s")

    def _record(self, stage: int, thrust: float, isp: float, engine_on: bool):
        s = self.state
        forces = self.integrator.forces(s.time, s.as_vector(), thrust, isp, engine_on=engine_on,
                                        stage=stage, **self.vehicle)
        self.samples.append(TrajectorySample(
            time=s.time,
            altitude=s.altitude,
            velocity=s.speed,
            acceleration=forces.acceleration,
            thrust=forces.thrust,
            mass=s.mass,
            x=s.x,
            y=s.altitude,
            z=s.z,
            stage=stage,
            flight_path_angle=s.flight_path_angle,
            mach_number=forces.mach_number,
            dynamic_pressure=forces.dynamic_pressure,
        ))

    def _budget_exceeded(self, phase: str, steps: int, budget: int):
        self.phase_outcomes[phase] = PhaseOutcome.STEP_BUDGET_EXCEEDED
        self.budget_errors.append(PhaseStepBudgetExceeded(phase, steps, budget))
        if self.verbose:
            print(f"Step budget of {phase} exhausted after {steps} steps")

    def _report(self, every: int):
        if not self.verbose:
            return
        t = self.state.time
        if int(t) % every == 0 and int(t) != int(t - self.config.dt):
            print(f"t={t:.1f}s: altitude {self.state.altitude / 1000:.2f} km, "
                  f"velocity {self.state.speed:.1f} m/s, "
                  f"angle {np.degrees(self.state.flight_path_angle):.1f} deg")

    def _result(self, status: RunStatus, error: Optional[Exception] = None, optimal=None) -> SimulationResult:
        diagnostics = {f"{name}_clamps": count for name, count in self.integrator.clamp_counts.items()}
        diagnostics['fault_retries'] = self.fault_retries
        diagnostics['steps'] = len(self.samples)
        return SimulationResult(
            status=status,
            trajectory=tuple(self.samples),
            optimal_params=optimal,
            error=error,
            phase_outcomes=dict(self.phase_outcomes),
            diagnostics=diagnostics,
            orbit_achieved=self.orbit_achieved,
        )

    def _print_summary(self, optimal):
        print("Final analysis")
        print(f"  Final altitude: {optimal.final_altitude / 1000:.2f} km")
        print(f"  Final velocity: {optimal.achieved_velocity:.2f} m/s")
        print(f"  Required velocity: {optimal.effective_required_velocity:.2f} m/s")
        print(f"  Orbital achievement: {optimal.velocity_achievement:.1f}%")
        print(f"  Downrange: {optimal.downrange / 1000:.2f} km")
        print(f"  Flight time: {optimal.total_flight_time:.1f} s")
        print(f"  Orbit achieved: {self.orbit_achieved}")
        print(f"  Data points: {len(self.samples)}")
