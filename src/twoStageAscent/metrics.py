# Licensed under the PolyForm Noncommercial License 1.0.0
"""Summary metrics of a simulated ascent."""

from typing import Sequence

import numpy as np

from .models import (
    DEFAULT_CONFIG,
    EARTH,
    LaunchParameters,
    OptimalParameters,
    PhysicalConstants,
    SimulationConfig,
    TrajectorySample,
)

NOMINAL_LAUNCH_ANGLE = 45.0  # (deg)


def required_orbital_velocity(target_altitude: float, constants: PhysicalConstants = EARTH) -> float:
    """Circular orbit speed at the target altitude (m/s)."""
    return float(np.sqrt(constants.mu / (constants.planet_radius + target_altitude)))


def rotation_bonus(latitude: float, constants: PhysicalConstants = EARTH,
                   config: SimulationConfig = DEFAULT_CONFIG) -> float:
    """Velocity gained from planet rotation on an eastward launch (m/s)."""
    if not config.launch_eastward:
        return 0.0
    return float(constants.rotation_rate * constants.planet_radius * np.cos(np.radians(latitude)))


def summarize(trajectory: Sequence[TrajectorySample], params: LaunchParameters,
              constants: PhysicalConstants = EARTH,
              config: SimulationConfig = DEFAULT_CONFIG) -> OptimalParameters:
    """
    Derive the summary parameters of a run from its trajectory.

    Args:
        trajectory: Recorded samples in chronological order
        params: Launch parameters of the run
        constants: Planetary constants
        config: Simulation configuration

    Returns:
        OptimalParameters
    """
    if not trajectory:
        raise ValueError("cannot summarize an empty trajectory")

    rocket = params.rocket
    required = required_orbital_velocity(params.target_altitude, constants)
    bonus = rotation_bonus(params.latitude, constants, config)
    effective = required - bonus

    altitude = np.array([s.altitude for s in trajectory])
    final = trajectory[-1]

    separation = next((s for s in trajectory if s.stage == 2), None)
    if separation is not None:
        separation_time, separation_altitude = separation.time, separation.altitude
    else:
        separation_time, separation_altitude = rocket.stage1_burn_time, 0.0

    # atan2 is meaningless for a vehicle that never moved downrange
    downrange = final.x
    if downrange > 1e-6:
        launch_angle = float(np.degrees(np.arctan2(final.altitude, downrange)))
    else:
        launch_angle = NOMINAL_LAUNCH_ANGLE

    achievement = 100.0 * final.velocity / effective if effective > 0 else 0.0

    return OptimalParameters(
        required_velocity=required,
        rotation_bonus=bonus,
        effective_required_velocity=effective,
        achieved_velocity=final.velocity,
        launch_angle=launch_angle,
        stage1_burn_time=rocket.stage1_burn_time,
        stage2_burn_time=rocket.stage2_burn_time,
        max_altitude=float(altitude.max()),
        total_flight_time=final.time,
        stage_separation_time=separation_time,
        stage_separation_altitude=separation_altitude,
        final_altitude=final.altitude,
        downrange=downrange,
        velocity_achievement=achievement,
        max_dynamic_pressure=max(s.dynamic_pressure for s in trajectory),
        max_acceleration_g=max(s.acceleration for s in trajectory) / constants.standard_gravity,
    )
