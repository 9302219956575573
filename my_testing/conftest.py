import pytest

from twoStageAscent import LaunchParameters, RocketSpecification


def falcon_like(**overrides):
    """Falcon 9-like vehicle; keyword arguments replace individual fields."""
    fields = dict(
        mass=549054.0,
        stage_separation_mass=131000.0,
        drag_coefficient=0.3,
        stage1_thrust=7.607e6,
        stage1_isp=282.0,
        stage1_burn_time=162.0,
        stage2_thrust=9.34e5,
        stage2_isp=421.0,
        stage2_burn_time=397.0,
    )
    fields.update(overrides)
    return RocketSpecification(**fields)


def cape_launch(rocket=None, orbit_height=400.0):
    return LaunchParameters(latitude=28.5721, longitude=-80.6480, orbit_height=orbit_height,
                            rocket=rocket or falcon_like())


@pytest.fixture
def launch_params():
    return cape_launch()
