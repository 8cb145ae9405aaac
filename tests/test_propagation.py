"""
Test suite for analytic propagation.

Tests cover:
- Kepler equation solvers (Newton and fixed-point)
- Conservation properties of the two-body step
- Return to start after one period
- Third-body perturbation step
- Validation of unbound / degenerate orbits
"""

import pytest
import numpy as np
from trochia import (
    OrbitalElements, Spacecraft, CelestialBody, EARTH, MOON,
    propagate, solve_kepler, temp_config, orbital_energy, angular_momentum,
)
from trochia.propagation import true_from_eccentric, third_body_acceleration


MU_EARTH = 398600.4418  # km³/s²


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def circular():
    """Circular inclined spacecraft orbit."""
    oe = OrbitalElements(a=7000.0, e=0.0, i=0.3, raan=0.5, argp=0.0, nu=0.0, body=EARTH)
    return Spacecraft.from_elements(oe, mass=1000.0, fuel=500.0)


@pytest.fixture
def eccentric():
    oe = OrbitalElements(a=9000.0, e=0.3, i=0.8, raan=2.0, argp=1.0, nu=0.5, body=EARTH)
    return Spacecraft.from_elements(oe, mass=1000.0, fuel=500.0)


@pytest.fixture
def leo():
    """Low Earth orbit matching the mission start in km units."""
    oe = OrbitalElements(a=6671.0, e=0.01, i=0.1, raan=0.0, argp=0.0, nu=0.0, body=EARTH)
    return Spacecraft.from_elements(oe, mass=1000.0, fuel=500.0)


# =============================================================================
# Test Kepler Solver
# =============================================================================

class TestSolveKepler:
    """solve_kepler() for both methods."""

    @pytest.mark.parametrize("e", [0.0, 0.1, 0.5, 0.7, 0.95])
    @pytest.mark.parametrize("M", [0.0, 0.3, 1.5, 3.0, 5.0])
    def test_newton_satisfies_equation(self, M, e):
        E = solve_kepler(M, e, method='newton')
        assert E - e*np.sin(E) == pytest.approx(M, abs=1e-10)

    def test_circular_is_identity(self):
        assert solve_kepler(1.234, 0.0) == pytest.approx(1.234)
        assert solve_kepler(1.234, 0.0, method='fixed_point') == 1.234

    @pytest.mark.parametrize("M", [0.5, 2.0, 4.0])
    def test_fixed_point_close_for_low_eccentricity(self, M):
        E = solve_kepler(M, 0.05, method='fixed_point')
        assert E - 0.05*np.sin(E) == pytest.approx(M, abs=1e-5)

    def test_default_method_from_config(self):
        with temp_config(KEPLER_METHOD='fixed_point', KEPLER_FIXED_POINT_ITER=1):
            E = solve_kepler(1.0, 0.5)
        assert E == pytest.approx(1.0 + 0.5*np.sin(1.0))

    def test_fixed_point_iteration_count(self):
        with temp_config(KEPLER_FIXED_POINT_ITER=0):
            assert solve_kepler(1.0, 0.5, method='fixed_point') == 1.0

    def test_unknown_method(self):
        with pytest.raises(ValueError, match="Unknown Kepler solver"):
            solve_kepler(1.0, 0.1, method='halley')


class TestTrueFromEccentric:
    """true_from_eccentric()."""

    def test_periapsis(self):
        assert true_from_eccentric(0.0, 0.5) == 0.0

    def test_apoapsis(self):
        assert abs(true_from_eccentric(np.pi, 0.5)) == pytest.approx(np.pi)

    def test_circular_identity(self):
        assert true_from_eccentric(1.0, 0.0) == pytest.approx(1.0)

    def test_true_ahead_of_eccentric_before_apoapsis(self):
        assert true_from_eccentric(1.0, 0.5) > 1.0


# =============================================================================
# Test Two-Body Propagation
# =============================================================================

class TestTwoBody:
    """propagate() without a perturbing body."""

    def test_circular_returns_after_one_period(self, circular):
        period = circular.orbital_elements.orbital_period()
        after = propagate(circular, EARTH, period)
        assert np.allclose(after.position, circular.position, atol=1e-6)
        assert np.allclose(after.velocity, circular.velocity, atol=1e-9)

    def test_eccentric_returns_after_one_period(self, eccentric):
        period = eccentric.orbital_elements.orbital_period()
        after = propagate(eccentric, EARTH, period)
        assert np.allclose(after.position, eccentric.position, atol=1e-5)

    def test_half_period_circular_is_opposite(self, circular):
        period = circular.orbital_elements.orbital_period()
        after = propagate(circular, EARTH, period / 2)
        assert np.allclose(after.position, -circular.position, atol=1e-6)

    @pytest.mark.parametrize("dt", [10.0, 600.0, 3000.0, 12345.0])
    def test_energy_and_momentum_conserved(self, eccentric, dt):
        after = propagate(eccentric, EARTH, dt)
        energy = orbital_energy(after.position, after.velocity, MU_EARTH)
        assert energy == pytest.approx(-MU_EARTH / (2 * 9000.0), rel=1e-9)
        h = np.linalg.norm(angular_momentum(after.position, after.velocity))
        assert h == pytest.approx(np.sqrt(MU_EARTH * 9000.0 * (1 - 0.3**2)), rel=1e-9)

    def test_shape_elements_unchanged(self, eccentric):
        after = propagate(eccentric, EARTH, 1000.0)
        before_oe, after_oe = eccentric.orbital_elements, after.orbital_elements
        assert after_oe.a == before_oe.a
        assert after_oe.e == before_oe.e
        assert after_oe.i == before_oe.i
        assert after_oe.raan == before_oe.raan
        assert after_oe.argp == before_oe.argp

    def test_mean_anomaly_advances(self, eccentric):
        oe = eccentric.orbital_elements
        dt = 500.0
        after = propagate(eccentric, EARTH, dt)
        expected = np.mod(oe.M + oe.mean_motion() * dt, 2*np.pi)
        assert after.orbital_elements.M == pytest.approx(expected)

    def test_mean_anomaly_wrapped(self, circular):
        period = circular.orbital_elements.orbital_period()
        after = propagate(circular, EARTH, 3.5 * period)
        assert 0 <= after.orbital_elements.M < 2*np.pi

    def test_zero_dt_keeps_position(self, eccentric):
        after = propagate(eccentric, EARTH, 0.0)
        assert np.allclose(after.position, eccentric.position)

    def test_leo_altitude_change_small(self, leo):
        """1% of an orbit moves the altitude by only a few km."""
        dt = 0.01 * leo.orbital_elements.orbital_period()
        after = propagate(leo, EARTH, dt)
        assert abs(after.orbital_elements.altitude - leo.orbital_elements.altitude) < 5.0

    def test_altitude_from_final_position(self, eccentric):
        after = propagate(eccentric, EARTH, 777.0)
        expected = np.linalg.norm(after.position) - EARTH.radius
        assert after.orbital_elements.altitude == pytest.approx(expected)

    def test_input_not_mutated(self, eccentric):
        position = eccentric.position.copy()
        M = eccentric.orbital_elements.M
        propagate(eccentric, EARTH, 1000.0)
        assert np.array_equal(eccentric.position, position)
        assert eccentric.orbital_elements.M == M

    def test_mass_and_fuel_carried_over(self, eccentric):
        after = propagate(eccentric, EARTH, 100.0)
        assert after.mass == eccentric.mass
        assert after.fuel == eccentric.fuel
        assert after.max_fuel == eccentric.max_fuel


# =============================================================================
# Test Perturbation
# =============================================================================

class TestPerturbation:
    """Third-body step on top of the two-body solution."""

    def test_third_body_acceleration_direction(self):
        accel = third_body_acceleration([0.0, 0.0, 0.0], MOON)
        assert accel[0] > 0
        assert accel[0] == pytest.approx(MOON.mu / 60000.0**2)
        assert accel[1] == 0.0

    def test_floor_keeps_acceleration_finite(self):
        accel = third_body_acceleration(MOON.position, MOON)
        assert np.all(np.isfinite(accel))
        near = third_body_acceleration(MOON.position + np.array([1e-9, 0, 0]), MOON)
        assert np.all(np.isfinite(near))

    def test_semi_implicit_step(self, eccentric):
        dt = 60.0
        plain = propagate(eccentric, EARTH, dt)
        perturbed = propagate(eccentric, EARTH, dt, perturber=MOON)
        accel = third_body_acceleration(plain.position, MOON)
        assert np.allclose(perturbed.velocity - plain.velocity, accel * dt)
        assert np.allclose(perturbed.position - plain.position, accel * dt**2)

    def test_perturbed_elements_keep_two_body_solution(self, eccentric):
        plain = propagate(eccentric, EARTH, 60.0)
        perturbed = propagate(eccentric, EARTH, 60.0, perturber=MOON)
        assert perturbed.orbital_elements.nu == plain.orbital_elements.nu
        assert perturbed.orbital_elements.M == plain.orbital_elements.M

    def test_perturbed_altitude_from_perturbed_position(self, eccentric):
        perturbed = propagate(eccentric, EARTH, 600.0, perturber=MOON)
        expected = np.linalg.norm(perturbed.position) - EARTH.radius
        assert perturbed.orbital_elements.altitude == pytest.approx(expected)

    def test_weak_perturber_negligible(self, eccentric):
        pebble = CelestialBody(mu=1e-20, radius=1.0, mass=1.0, position=(1e6, 0, 0))
        plain = propagate(eccentric, EARTH, 60.0)
        perturbed = propagate(eccentric, EARTH, 60.0, perturber=pebble)
        assert np.allclose(perturbed.position, plain.position)


# =============================================================================
# Test Validation
# =============================================================================

class TestValidation:
    """Unbound or degenerate element sets are rejected."""

    def _spacecraft(self, elements):
        oe = OrbitalElements(elements, validate=False, altitude=0.0)
        return Spacecraft(position=(7000.0, 0, 0), velocity=(0, 7.5, 0),
                          mass=1000.0, fuel=500.0, max_fuel=500.0,
                          max_mass=1000.0, orbital_elements=oe)

    def test_negative_semi_major_axis(self):
        sc = self._spacecraft([-7000, 0.5, 0, 0, 0, 0, 0])
        with pytest.raises(ValueError, match="semi-major"):
            propagate(sc, EARTH, 10.0)

    def test_unbound_eccentricity(self):
        sc = self._spacecraft([7000, 1.2, 0, 0, 0, 0, 0])
        with pytest.raises(ValueError, match="bound orbit"):
            propagate(sc, EARTH, 10.0)

    def test_parabolic_eccentricity(self):
        sc = self._spacecraft([7000, 1.0, 0, 0, 0, 0, 0])
        with pytest.raises(ValueError):
            propagate(sc, EARTH, 10.0)
