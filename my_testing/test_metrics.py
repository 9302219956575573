"""Tests for the summary metrics of a trajectory."""

import dataclasses

import numpy as np
import pytest

from conftest import cape_launch
from twoStageAscent import DEFAULT_CONFIG, EARTH, TrajectorySample, g0, summarize
from twoStageAscent.metrics import NOMINAL_LAUNCH_ANGLE, required_orbital_velocity, rotation_bonus


def sample(time, altitude, x, stage, velocity=100.0, acceleration=10.0, dynamic_pressure=0.0):
    return TrajectorySample(time=time, altitude=altitude, velocity=velocity, acceleration=acceleration,
                            thrust=1e6, mass=1e5, x=x, y=altitude, z=0.0, stage=stage,
                            dynamic_pressure=dynamic_pressure)


def test_empty_trajectory_raises():
    with pytest.raises(ValueError):
        summarize([], cape_launch())


def test_launch_angle_from_final_position():
    params = cape_launch()
    assert np.isclose(summarize([sample(0, 0, 0, 1), sample(1, 1000, 1000, 2)], params).launch_angle, 45.0)

    altitude = 1000 * np.tan(np.radians(60))
    assert np.isclose(summarize([sample(1, altitude, 1000, 2)], params).launch_angle, 60.0)


def test_launch_angle_without_downrange_motion():
    """Test that a purely vertical flight reports the nominal angle."""
    optimal = summarize([sample(0, 0, 0, 1), sample(1, 500, 0, 1)], cape_launch())
    assert optimal.launch_angle == NOMINAL_LAUNCH_ANGLE


def test_separation_point():
    trajectory = [sample(0, 0, 0, 1), sample(0.5, 10, 0, 1), sample(1.0, 25, 1, 2), sample(1.5, 40, 2, 2)]
    optimal = summarize(trajectory, cape_launch())
    assert optimal.stage_separation_time == 1.0
    assert optimal.stage_separation_altitude == 25


def test_separation_fallback_without_stage2():
    params = cape_launch()
    optimal = summarize([sample(0, 0, 0, 1), sample(0.5, 3, 0, 1)], params)
    assert optimal.stage_separation_time == params.rocket.stage1_burn_time
    assert optimal.stage_separation_altitude == 0


def test_summary_fields():
    """Test the extrema and final values taken from the trajectory."""
    params = cape_launch()
    trajectory = [
        sample(0, 0, 0, 1, velocity=0, acceleration=2 * g0, dynamic_pressure=0),
        sample(100, 90000, 50000, 2, velocity=3000, acceleration=g0, dynamic_pressure=35000),
        sample(200, 80000, 150000, 2, velocity=4000, acceleration=0.5 * g0, dynamic_pressure=100),
    ]
    optimal = summarize(trajectory, params)

    assert optimal.max_altitude == 90000
    assert optimal.final_altitude == 80000
    assert optimal.downrange == 150000
    assert optimal.total_flight_time == 200
    assert optimal.achieved_velocity == 4000
    assert optimal.max_dynamic_pressure == 35000
    assert np.isclose(optimal.max_acceleration_g, 2.0)
    assert optimal.stage1_burn_time == params.rocket.stage1_burn_time
    assert optimal.stage2_burn_time == params.rocket.stage2_burn_time
    assert np.isclose(optimal.velocity_achievement, 100 * 4000 / optimal.effective_required_velocity)


def test_required_orbital_velocity():
    assert required_orbital_velocity(400000) == pytest.approx(7669, abs=2)
    assert required_orbital_velocity(0) > required_orbital_velocity(400000)


def test_rotation_bonus():
    assert rotation_bonus(0.0) == pytest.approx(465.1, abs=0.01)
    assert rotation_bonus(0.0) == pytest.approx(EARTH.rotation_rate * EARTH.planet_radius)
    assert rotation_bonus(60.0) == pytest.approx(rotation_bonus(0.0) / 2)

    westward = dataclasses.replace(DEFAULT_CONFIG, launch_eastward=False)
    assert rotation_bonus(0.0, config=westward) == 0.0
    assert summarize([sample(0, 0, 0, 1)], cape_launch(), config=westward).rotation_bonus == 0.0
