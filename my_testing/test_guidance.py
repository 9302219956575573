"""Unit tests for the gravity-turn guidance."""

import numpy as np
import pytest

from twoStageAscent import target_flight_path_angle
from twoStageAscent.guidance import guidance_command, pitch_rate

TARGET = 400000.0
V_ORBIT = 7668.6


def test_vertical_ascent():
    """Test that the vehicle is held vertical for the first seconds."""
    for t in (0.0, 5.0, 9.99):
        command = guidance_command(t, 100.0, 50.0, 1, TARGET)
        assert command.angle == np.pi / 2
        assert command.phase == "vertical_ascent"


def test_pitch_initiation():
    assert np.isclose(target_flight_path_angle(10.0, 0, 0, 1, TARGET), np.pi / 2)
    assert np.isclose(target_flight_path_angle(15.0, 0, 0, 1, TARGET), np.pi / 2 * (1 - 0.075))
    assert guidance_command(15.0, 0, 0, 1, TARGET).phase == "pitch_initiation"


@pytest.mark.parametrize("altitude, fraction", [(10000, 0.42), (30000, 0.35), (60000, 0.28)])
def test_stage1_gravity_turn_bands(altitude, fraction):
    command = guidance_command(60.0, altitude, 1000.0, 1, TARGET)
    assert command.phase == "gravity_turn"
    assert np.isclose(command.angle, np.pi * fraction)


def test_stage2_flattens_toward_target():
    """Test that the stage 2 angle decreases as the target altitude is approached."""
    assert np.isclose(target_flight_path_angle(200.0, 0.1 * TARGET, 3000, 2, TARGET, V_ORBIT), np.pi / 4)
    assert np.isclose(target_flight_path_angle(200.0, 0.5 * TARGET, 3000, 2, TARGET, V_ORBIT), np.pi * 0.175)
    assert np.isclose(target_flight_path_angle(200.0, 0.9 * TARGET, 3000, 2, TARGET, V_ORBIT), np.pi * 0.08)
    assert np.isclose(target_flight_path_angle(200.0, 0.9 * TARGET, 7000, 2, TARGET, V_ORBIT), np.pi * 0.05)

    altitudes = np.linspace(0, TARGET, 40)
    angles = [target_flight_path_angle(200.0, h, 3000, 2, TARGET, V_ORBIT) for h in altitudes]
    assert all(a >= b for a, b in zip(angles, angles[1:]))


def test_stage2_default_required_velocity():
    """Test that the circular velocity at the target is used when none is given."""
    assert target_flight_path_angle(200.0, 0.9 * TARGET, 0.85 * V_ORBIT, 2, TARGET) == np.pi * 0.05
    assert target_flight_path_angle(200.0, 0.9 * TARGET, 0.75 * V_ORBIT, 2, TARGET) == np.pi * 0.08


def test_zero_target_altitude():
    command = guidance_command(200.0, 0.0, 100.0, 2, 0.0, V_ORBIT)
    assert command.phase == "orbital_insertion"
    assert np.isclose(command.angle, np.pi * 0.08)


def test_pitch_rate_is_capped():
    """Test that the pitch rate is proportional to the error but never exceeds the cap."""
    assert np.isclose(pitch_rate(1.0, 1.1, 0.08, 0.015), 0.008)
    assert pitch_rate(1.5, 0.5, 0.08, 0.015) == -0.015
    assert pitch_rate(0.7, 0.7, 0.08, 0.015) == 0.0
