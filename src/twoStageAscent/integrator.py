# Licensed under the PolyForm Noncommercial License 1.0.0
"""Equations of motion and the RK4 state integrator."""

from typing import Callable, Dict, NamedTuple, Optional, Tuple

import numpy as np

from .errors import IntegrationFault
from .guidance import guidance_command, pitch_rate
from .models import FlightState
from .physics import PhysicsModel


def rk4(f: Callable[[float, np.ndarray], np.ndarray], t: float, y: np.ndarray, dt: float) -> np.ndarray:
    """
    Classic fourth-order Runge-Kutta step of dy/dt = f(t, y).
    """
    k1 = f(t, y)
    k2 = f(t + 0.5 * dt, y + 0.5 * dt * k1)
    k3 = f(t + 0.5 * dt, y + 0.5 * dt * k2)
    k4 = f(t + dt, y + dt * k3)
    return y + (dt / 6.0) * (k1 + 2 * k2 + 2 * k3 + k4)


class Forces(NamedTuple):
    thrust: float  # effective thrust (N)
    drag: float  # (N)
    gravity: float  # (m/s^2)
    mach_number: float
    dynamic_pressure: float  # (Pa)
    mass_flow_rate: float  # (kg/s)
    ax: float  # horizontal acceleration (m/s^2)
    ay: float  # vertical acceleration (m/s^2)
    pitch_rate: float  # (rad/s)

    @property
    def acceleration(self) -> float:
        return float(np.hypot(self.ax, self.ay))


class StateIntegrator:
    """
    Advances a FlightState with RK4 under thrust, drag, gravity and guidance.

    State vector: [x, altitude, vx, vy, m, gamma]
    Derivatives: [vx, vy, ax, ay, -m_dot, gamma_dot]

    Every accepted step is clamped so that mass stays above the floor,
    altitude stays non-negative and the flight path angle stays within
    [-pi/2, pi/2]. Clamps are reported on the returned state and counted in
    ``clamp_counts``.
    """

    def __init__(self, physics: Optional[PhysicsModel] = None, latitude: Optional[float] = None,
                 required_velocity: Optional[float] = None, mass_floor: Optional[float] = None):
        """
        Args:
            physics: Environment models; defaults to Earth with the default config
            latitude: Launch latitude (deg) for the J2 gravity term, or None
            required_velocity: Orbital speed handed to guidance (m/s)
            mass_floor: Lower bound on mass (kg); defaults to config.mass_floor
        """
        self.physics = physics or PhysicsModel()
        self.config = self.physics.config
        self.latitude = latitude
        self.required_velocity = required_velocity
        self.mass_floor = self.config.mass_floor if mass_floor is None else mass_floor
        self.clamp_counts: Dict[str, int] = {'mass': 0, 'altitude': 0, 'flight_path_angle': 0}

    def forces(self, t: float, y: np.ndarray, thrust: float, isp: float, drag_coefficient: float,
               reference_area: float, engine_on: bool, stage: int, target_altitude: float) -> Forces:
        """Forces and accelerations acting on the vehicle in state y at time t."""
        x, altitude, vx, vy, m, gamma = y
        m = max(m, self.mass_floor)
        speed = np.hypot(vx, vy)

        g = self.physics.gravity(altitude, self.latitude)
        prop = self.physics.propulsion(thrust, isp, altitude, engine_on)
        drag = self.physics.drag(speed, altitude, drag_coefficient, reference_area)

        ax = prop.thrust / m * np.cos(gamma)
        ay = prop.thrust / m * np.sin(gamma) - g

        # Drag along -v
        if speed > 0.1:
            ax -= drag.force / m * vx / speed
            ay -= drag.force / m * vy / speed

        if altitude > self.config.centrifugal_altitude:
            ay += vx ** 2 / (self.physics.constants.planet_radius + altitude)

        command = guidance_command(t, altitude, speed, stage, target_altitude, self.required_velocity)
        gamma_dot = pitch_rate(gamma, command.angle, self.config.pitch_gain, self.config.max_pitch_rate)

        return Forces(
            thrust=prop.thrust,
            drag=drag.force,
            gravity=g,
            mach_number=drag.mach_number,
            dynamic_pressure=drag.dynamic_pressure,
            mass_flow_rate=prop.mass_flow_rate,
            ax=ax,
            ay=ay,
            pitch_rate=gamma_dot,
        )

    def derivatives(self, t: float, y: np.ndarray, thrust: float, isp: float, drag_coefficient: float,
                    reference_area: float, engine_on: bool, stage: int, target_altitude: float) -> np.ndarray:
        """Time derivative of the state vector y."""
        f = self.forces(t, y, thrust, isp, drag_coefficient, reference_area, engine_on, stage, target_altitude)
        return np.array([y[2], y[3], f.ax, f.ay, -f.mass_flow_rate, f.pitch_rate], dtype=float)

    def step(self, state: FlightState, dt: float, thrust: float, isp: float, drag_coefficient: float,
             reference_area: float, engine_on: bool, stage: int, target_altitude: float) -> FlightState:
        """
        Advance the state by one RK4 step of length dt.

        Raises:
            IntegrationFault: if the step produces a non-finite value. The
                input state is left as it was, so the caller can retry.
        """
        def f(t, y):
            return self.derivatives(t, y, thrust, isp, drag_coefficient, reference_area,
                                    engine_on, stage, target_altitude)

        try:
            with np.errstate(all='ignore'):
                y_new = rk4(f, state.time, state.as_vector(), dt)
        except (ZeroDivisionError, OverflowError) as exc:
            raise IntegrationFault(state.time, stage, dt, str(exc)) from exc

        if not np.all(np.isfinite(y_new)):
            raise IntegrationFault(state.time, stage, dt)

        y_new, clamped = self._clamp(y_new)
        return FlightState.from_vector(state.time + dt, y_new, z=state.z, clamped=clamped)

    def _clamp(self, y: np.ndarray) -> Tuple[np.ndarray, Tuple[str, ...]]:
        clamped = []

        if y[4] < self.mass_floor:
            y[4] = self.mass_floor
            clamped.append('mass')

        # Ground contact: no sinking below sea level
        if y[1] < 0:
            y[1] = 0.0
            y[3] = max(y[3], 0.0)
            clamped.append('altitude')

        if abs(y[5]) > np.pi / 2:
            y[5] = np.clip(y[5], -np.pi / 2, np.pi / 2)
            clamped.append('flight_path_angle')

        for name in clamped:
            self.clamp_counts[name] += 1
        return y, tuple(clamped)
