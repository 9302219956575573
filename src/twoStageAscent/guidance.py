# Licensed under the PolyForm Noncommercial License 1.0.0
"""Gravity-turn ascent guidance."""

from typing import NamedTuple, Optional

import numpy as np

from .models import EARTH

VERTICAL_ASCENT_TIME = 10.0  # (s)
PITCH_INITIATION_TIME = 20.0  # (s)


class GuidanceCommand(NamedTuple):
    angle: float  # target flight path angle (rad)
    phase: str


def guidance_command(time: float, altitude: float, speed: float, stage: int,
                     target_altitude: float, required_velocity: Optional[float] = None) -> GuidanceCommand:
    """
    Target flight path angle for the current point of the ascent.

    The profile holds the vehicle vertical to clear the pad, pitches over
    gently, then lowers the angle in altitude bands while the first stage
    burns. The second stage flattens the trajectory as the vehicle nears the
    target altitude so that thrust goes into horizontal velocity.

    Args:
        time: Mission elapsed time (s)
        altitude: Altitude (m)
        speed: Speed (m/s)
        stage: Active stage, 1 or 2
        target_altitude: Target orbit altitude (m)
        required_velocity: Orbital speed to aim for (m/s). Defaults to the
            circular velocity at the target altitude.

    Returns:
        GuidanceCommand(angle, phase)
    """
    if time < VERTICAL_ASCENT_TIME:
        return GuidanceCommand(np.pi / 2, "vertical_ascent")

    if time < PITCH_INITIATION_TIME:
        progress = (time - VERTICAL_ASCENT_TIME) / (PITCH_INITIATION_TIME - VERTICAL_ASCENT_TIME)
        return GuidanceCommand(np.pi / 2 * (1 - 0.15 * progress), "pitch_initiation")

    if stage == 1:
        if altitude < 20000:
            angle = np.pi * 0.42
        elif altitude < 50000:
            angle = np.pi * 0.35
        else:
            angle = np.pi * 0.28
        return GuidanceCommand(angle, "gravity_turn")

    if required_velocity is None:
        required_velocity = np.sqrt(EARTH.mu / (EARTH.planet_radius + target_altitude))

    # Fractions of the target altitude; a zero target is already reached
    if target_altitude <= 0:
        altitude_ratio = np.inf
    else:
        altitude_ratio = altitude / target_altitude

    if altitude_ratio < 0.3:
        angle = np.pi * 0.25
    elif altitude_ratio < 0.7:
        progress = (altitude_ratio - 0.3) / 0.4
        angle = np.pi * (0.25 - 0.15 * progress)
    elif speed / required_velocity < 0.8:
        angle = np.pi * 0.08
    else:
        angle = np.pi * 0.05
    return GuidanceCommand(angle, "orbital_insertion")


def target_flight_path_angle(time: float, altitude: float, speed: float, stage: int,
                             target_altitude: float, required_velocity: Optional[float] = None) -> float:
    """Target flight path angle (rad); see guidance_command."""
    return guidance_command(time, altitude, speed, stage, target_altitude, required_velocity).angle


def pitch_rate(current: float, target: float, gain: float, max_rate: float) -> float:
    """Proportional pitch rate toward the target angle, capped at max_rate (rad/s)."""
    error = target - current
    return float(np.sign(error) * min(abs(error) * gain, max_rate))
