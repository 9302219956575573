# Licensed under the PolyForm Noncommercial License 1.0.0
"""Atmosphere, gravity, drag and propulsion models."""

from typing import NamedTuple, Optional

import numpy as np

from .models import DEFAULT_CONFIG, EARTH, PhysicalConstants, SimulationConfig

# Base altitude (m), base temperature (K), base pressure (Pa), lapse rate (K/m)
ATMOSPHERIC_LAYERS = (
    (0.0, 288.15, 101325.0, -0.0065),
    (11000.0, 216.65, 22632.0, 0.0),
    (20000.0, 216.65, 5474.9, 0.001),
    (32000.0, 228.65, 868.02, 0.0028),
    (47000.0, 270.65, 110.91, 0.0),
    (51000.0, 270.65, 66.939, -0.0028),
    (71000.0, 214.65, 3.9564, -0.002),
)

SEA_LEVEL_PRESSURE = 101325.0  # (Pa)
SEA_LEVEL_TEMPERATURE = 288.15  # (K)


class AtmosphereProperties(NamedTuple):
    density: float  # (kg/m^3)
    pressure: float  # (Pa)
    temperature: float  # (K)
    speed_of_sound: float  # (m/s)


class DragForce(NamedTuple):
    force: float  # (N)
    mach_number: float
    dynamic_pressure: float  # (Pa)
    drag_coefficient: float  # after compressibility correction


class PropulsionOutput(NamedTuple):
    thrust: float  # effective thrust (N)
    mass_flow_rate: float  # (kg/s)
    exhaust_velocity: float  # (m/s)
    isp: float  # altitude-compensated specific impulse (s)
    nozzle_efficiency: float


VACUUM = AtmosphereProperties(0.0, 0.0, 0.0, 0.0)
NO_THRUST = PropulsionOutput(0.0, 0.0, 0.0, 0.0, 0.0)


class PhysicsModel:
    """
    Physical environment of the vehicle: atmosphere, gravity, drag and engines.
    """

    def __init__(self, constants: PhysicalConstants = EARTH, config: SimulationConfig = DEFAULT_CONFIG):
        self.constants = constants
        self.config = config

    # Atmosphere

    def atmosphere(self, altitude: float) -> AtmosphereProperties:
        """
        Atmospheric properties at the given altitude.

        Negative altitudes are treated as sea level and everything above the
        Karman line is vacuum.

        Args:
            altitude: Altitude above sea level (m)

        Returns:
            AtmosphereProperties(density, pressure, temperature, speed_of_sound)
        """
        c = self.constants
        altitude = max(altitude, 0.0)
        if altitude > c.karman_line:
            return VACUUM

        if not self.config.layered_atmosphere:
            decay = np.exp(-altitude / c.scale_height)
            temperature = SEA_LEVEL_TEMPERATURE
            return AtmosphereProperties(
                density=c.sea_level_density * decay,
                pressure=SEA_LEVEL_PRESSURE * decay,
                temperature=temperature,
                speed_of_sound=np.sqrt(c.heat_capacity_ratio * c.gas_constant * temperature),
            )

        base_altitude, base_temperature, base_pressure, lapse_rate = ATMOSPHERIC_LAYERS[0]
        for layer in reversed(ATMOSPHERIC_LAYERS):
            if altitude >= layer[0]:
                base_altitude, base_temperature, base_pressure, lapse_rate = layer
                break

        h = altitude - base_altitude
        temperature = base_temperature + lapse_rate * h
        R = c.gas_constant
        if abs(lapse_rate) < 1e-10:
            # Isothermal layer
            pressure = base_pressure * np.exp(-c.standard_gravity * h / (R * base_temperature))
        else:
            pressure = base_pressure * (temperature / base_temperature) ** (-c.standard_gravity / (R * lapse_rate))

        return AtmosphereProperties(
            density=pressure / (R * temperature),
            pressure=pressure,
            temperature=temperature,
            speed_of_sound=np.sqrt(c.heat_capacity_ratio * R * temperature),
        )

    def density(self, altitude: float) -> float:
        """Air density at the given altitude (kg/m^3)."""
        return self.atmosphere(altitude).density

    # Gravity

    def gravity(self, altitude: float, latitude: Optional[float] = None) -> float:
        """
        Gravitational acceleration at altitude (m/s^2).

        Args:
            altitude: Altitude above the reference radius (m)
            latitude: Geodetic latitude (deg). When given, and the J2
                correction is enabled, the oblateness term is applied.
        """
        c = self.constants
        r = c.planet_radius + altitude
        g = c.mu / r ** 2
        if latitude is not None and self.config.j2_correction:
            sin_lat = np.sin(np.radians(latitude))
            g *= 1 + 1.5 * c.j2 * (c.planet_radius / r) ** 2 * (1 - 5 * sin_lat ** 2)
        return g

    def circular_velocity(self, altitude: float) -> float:
        """Speed of a circular orbit at the given altitude (m/s)."""
        return np.sqrt(self.constants.mu / (self.constants.planet_radius + altitude))

    def rotation_velocity(self, latitude: float) -> float:
        """Eastward surface speed due to planet rotation at a latitude (m/s)."""
        c = self.constants
        return c.rotation_rate * c.planet_radius * np.cos(np.radians(latitude))

    # Aerodynamics

    def drag(self, speed: float, altitude: float, drag_coefficient: float, reference_area: float) -> DragForce:
        """
        Aerodynamic drag with a transonic/supersonic drag-rise correction.

        Args:
            speed: Airspeed (m/s)
            altitude: Altitude (m)
            drag_coefficient: Subsonic drag coefficient
            reference_area: Reference area (m^2)

        Returns:
            DragForce(force, mach_number, dynamic_pressure, drag_coefficient)
        """
        atm = self.atmosphere(altitude)
        if atm.density < 1e-10 or abs(speed) < 0.1:
            return DragForce(0.0, 0.0, 0.0, drag_coefficient)

        mach = abs(speed) / atm.speed_of_sound
        q = 0.5 * atm.density * speed ** 2

        cd = drag_coefficient
        if self.config.compressibility and mach > 0.8:
            if mach < 1.2:
                cd *= 1 + 2.5 * (mach - 0.8) ** 2
            else:
                cd *= 1 + 1.5 / np.sqrt(mach)

        return DragForce(q * cd * reference_area, mach, q, cd)

    # Propulsion

    def propulsion(self, thrust: float, isp: float, altitude: float, engine_on: bool) -> PropulsionOutput:
        """
        Effective thrust and propellant consumption of an engine.

        Specific impulse rises from its sea-level value toward a vacuum value
        with altitude, and a nozzle efficiency factor approaches 1.0 in
        thin air.

        Args:
            thrust: Commanded (rated) thrust (N)
            isp: Sea-level specific impulse (s)
            altitude: Altitude (m)
            engine_on: Engine ignition state

        Returns:
            PropulsionOutput(thrust, mass_flow_rate, exhaust_velocity, isp, nozzle_efficiency)
        """
        if not engine_on or thrust <= 0:
            return NO_THRUST

        cfg = self.config
        altitude = max(altitude, 0.0)
        vacuum_isp = isp * (1 + cfg.vacuum_isp_gain)
        altitude_isp = isp + (vacuum_isp - isp) * (1 - np.exp(-altitude / cfg.isp_blend_height))
        exhaust_velocity = altitude_isp * self.constants.standard_gravity

        nozzle_efficiency = min(1.0, cfg.nozzle_base_efficiency +
                                (1 - cfg.nozzle_base_efficiency) * (1 - np.exp(-altitude / cfg.nozzle_blend_height)))
        effective_thrust = thrust * nozzle_efficiency

        return PropulsionOutput(
            thrust=effective_thrust,
            mass_flow_rate=effective_thrust / exhaust_velocity,
            exhaust_velocity=exhaust_velocity,
            isp=altitude_isp,
            nozzle_efficiency=nozzle_efficiency,
        )
