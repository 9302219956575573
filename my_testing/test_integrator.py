"""Tests for the equations of motion and the RK4 integrator."""

import numpy as np
import pytest
from scipy.integrate import solve_ivp

from twoStageAscent import FlightState, IntegrationFault, PhysicsModel, StateIntegrator
from twoStageAscent.integrator import rk4

TARGET = 400000.0


def coast(integrator, state, duration, dt=0.5, drag_coefficient=0.0):
    """Integrate with the engine off."""
    for _ in range(int(round(duration / dt))):
        state = integrator.step(state, dt, 0.0, 300.0, drag_coefficient, 15.0, False, 1, TARGET)
    return state


def test_rk4_exponential_growth():
    """Test the generic RK4 step on dy/dt = y."""
    y = np.array([1.0])
    for _ in range(10):
        y = rk4(lambda t, y: y, 0.0, y, 0.1)
    assert np.isclose(y[0], np.e, rtol=1e-5)


def test_free_fall_matches_closed_form():
    """Test that an unpowered drop from rest follows h0 - g t^2 / 2."""
    integrator = StateIntegrator()
    h0 = 5000.0
    state = FlightState(time=0.0, x=0.0, altitude=h0, vx=0.0, vy=0.0, mass=1e5, flight_path_angle=np.pi / 2)

    state = coast(integrator, state, 20.0)

    g = integrator.physics.gravity(h0)
    expected = h0 - 0.5 * g * 20.0 ** 2
    assert np.isclose(state.time, 20.0)
    assert abs(state.altitude - expected) / expected < 1e-3
    assert np.isclose(state.vy, -g * 20.0, rtol=1e-3)
    assert state.x == 0.0


def test_vertical_shot_matches_closed_form():
    """Test an unpowered vertical shot from the ground."""
    integrator = StateIntegrator()
    v0 = 300.0
    state = FlightState(time=0.0, x=0.0, altitude=0.0, vx=0.0, vy=v0, mass=1e5, flight_path_angle=np.pi / 2)

    state = coast(integrator, state, 20.0)

    g = integrator.physics.gravity(0.0)
    expected = v0 * 20.0 - 0.5 * g * 20.0 ** 2
    assert abs(state.altitude - expected) / expected < 1e-3


def test_powered_ascent_matches_reference_solver():
    """Test the RK4 step against scipy's DOP853 on the same equations of motion."""
    integrator = StateIntegrator(latitude=28.5)
    args = (7.607e6, 282.0, 0.3, 15.0, True, 1, TARGET)
    state = FlightState.on_pad(549054.0)
    y0 = state.as_vector()

    for _ in range(16):
        state = integrator.step(state, 0.5, *args)

    sol = solve_ivp(lambda t, y: integrator.derivatives(t, y, *args), (0.0, 8.0), y0,
                    method='DOP853', rtol=1e-10, atol=1e-8)
    reference = sol.y[:, -1]

    assert np.isclose(state.altitude, reference[1], rtol=1e-5)
    assert np.isclose(state.vy, reference[3], rtol=1e-5)
    assert np.isclose(state.mass, reference[4], rtol=1e-8)
    assert state.mass < 549054.0
    assert state.altitude > 0


def test_mass_floor_clamp():
    """Test that mass never drops below the floor and the clamp is reported."""
    integrator = StateIntegrator(mass_floor=1000.0)
    state = FlightState(time=0.0, x=0.0, altitude=1000.0, vx=0.0, vy=100.0, mass=1500.0,
                        flight_path_angle=np.pi / 2)

    state = integrator.step(state, 0.5, 1e7, 100.0, 0.0, 15.0, True, 1, TARGET)

    assert state.mass == 1000.0
    assert 'mass' in state.clamped
    assert integrator.clamp_counts['mass'] == 1
    assert np.all(np.isfinite(state.as_vector()))


def test_ground_clamp():
    """Test that a vehicle without thrust stays on the pad."""
    integrator = StateIntegrator()
    state = FlightState.on_pad(1e5)

    state = integrator.step(state, 0.5, 0.0, 300.0, 0.3, 15.0, False, 1, TARGET)

    assert state.altitude == 0.0
    assert state.vy == 0.0
    assert state.clamped == ('altitude',)
    assert integrator.clamp_counts['altitude'] == 1


def test_flight_path_angle_clamp():
    integrator = StateIntegrator()
    state = FlightState(time=0.0, x=0.0, altitude=1000.0, vx=0.0, vy=100.0, mass=1e5, flight_path_angle=2.0)

    state = integrator.step(state, 0.5, 0.0, 300.0, 0.0, 15.0, False, 1, TARGET)

    assert state.flight_path_angle == np.pi / 2
    assert 'flight_path_angle' in state.clamped


def test_pitch_follows_guidance_at_bounded_rate():
    """Test that the flight path angle moves toward the guidance target no faster than the cap."""
    integrator = StateIntegrator()
    state = FlightState(time=30.0, x=0.0, altitude=10000.0, vx=0.0, vy=500.0, mass=4e5,
                        flight_path_angle=np.pi / 2)

    new = integrator.step(state, 0.5, 7.607e6, 282.0, 0.3, 15.0, True, 1, TARGET)

    change = state.flight_path_angle - new.flight_path_angle
    assert 0 < change <= integrator.config.max_pitch_rate * 0.5 + 1e-12


def test_forces_on_the_pad():
    integrator = StateIntegrator()
    forces = integrator.forces(0.0, FlightState.on_pad(5e5).as_vector(), 7.607e6, 282.0, 0.3, 15.0,
                               True, 1, TARGET)
    assert np.isclose(forces.thrust, 0.85 * 7.607e6)
    assert forces.drag == 0
    assert np.isclose(forces.ax, 0.0, atol=1e-9)
    assert np.isclose(forces.ay, forces.thrust / 5e5 - forces.gravity)
    assert np.isclose(forces.acceleration, abs(forces.ay))


class NaNGravity(PhysicsModel):
    def gravity(self, altitude, latitude=None):
        return np.nan


def test_non_finite_step_raises_fault():
    """Test that a non-finite step is rejected instead of propagated."""
    integrator = StateIntegrator(NaNGravity(), latitude=0.0)
    state = FlightState(time=12.5, x=0.0, altitude=1000.0, vx=0.0, vy=100.0, mass=1e5,
                        flight_path_angle=np.pi / 2)

    with pytest.raises(IntegrationFault) as excinfo:
        integrator.step(state, 0.5, 1e6, 300.0, 0.3, 15.0, True, 2, TARGET)

    assert excinfo.value.time == 12.5
    assert excinfo.value.stage == 2
    assert excinfo.value.dt == 0.5
    assert state.altitude == 1000.0
