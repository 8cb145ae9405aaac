"""
Test suite for Hohmann transfers and sampled orbit tracks.

Tests cover:
- Hohmann delta-v against textbook values
- Degenerate and inward transfers
- OrbitTrack sequence protocol (len, iteration, indexing)
- DataFrame export and Plotly figures
"""

import pytest
import numpy as np
import pandas as pd
import plotly.graph_objects as go
from trochia import (
    OrbitalElements, OrbitTrack, EARTH, hohmann_transfer, sample_points,
    temp_config, config,
)


MU_EARTH = 398600.4418  # km³/s²


@pytest.fixture
def ellipse():
    return OrbitalElements(a=10000.0, e=0.3, i=0.4, raan=1.0, argp=0.5, nu=2.0, body=EARTH)


@pytest.fixture
def circle():
    return OrbitalElements(a=7000.0, e=0.0, i=0.2, raan=0.0, argp=0.0, nu=0.0, body=EARTH)


# =============================================================================
# Test Hohmann Transfer
# =============================================================================

class TestHohmann:
    """hohmann_transfer()."""

    def test_equal_radii_zero(self):
        dv1, dv2 = hohmann_transfer(7000.0, 7000.0, MU_EARTH)
        assert dv1 == 0.0
        assert dv2 == 0.0

    def test_leo_to_geo(self):
        """Classic LEO to GEO transfer, about 2.43 + 1.47 km/s."""
        dv1, dv2 = hohmann_transfer(6678.0, 42164.0, MU_EARTH)
        assert dv1 == pytest.approx(2.426, abs=0.01)
        assert dv2 == pytest.approx(1.467, abs=0.01)

    def test_inward_transfer_negative(self):
        dv1, dv2 = hohmann_transfer(42164.0, 6678.0, MU_EARTH)
        assert dv1 < 0
        assert dv2 < 0

    def test_inward_mirrors_outward(self):
        out1, out2 = hohmann_transfer(7000.0, 20000.0, MU_EARTH)
        in1, in2 = hohmann_transfer(20000.0, 7000.0, MU_EARTH)
        assert in1 == pytest.approx(-out2)
        assert in2 == pytest.approx(-out1)

    def test_returns_floats(self):
        dv1, dv2 = hohmann_transfer(7000.0, 8000.0, MU_EARTH)
        assert isinstance(dv1, float)
        assert isinstance(dv2, float)

    @pytest.mark.parametrize("r1, r2", [(0.0, 7000.0), (7000.0, -1.0)])
    def test_non_positive_radius(self, r1, r2):
        with pytest.raises(ValueError, match="positive radii"):
            hohmann_transfer(r1, r2, MU_EARTH)


# =============================================================================
# Test OrbitTrack
# =============================================================================

class TestOrbitTrack:
    """Sequence behaviour of sampled orbits."""

    def test_length(self, ellipse):
        assert len(sample_points(ellipse, 10)) == 10

    def test_default_length_from_config(self, ellipse):
        assert len(sample_points(ellipse)) == config.DEFAULT_ORBIT_POINTS
        with temp_config(DEFAULT_ORBIT_POINTS=16):
            assert len(sample_points(ellipse)) == 16

    def test_invalid_count(self, ellipse):
        with pytest.raises(ValueError):
            OrbitTrack(ellipse, 0)

    def test_restartable(self, ellipse):
        track = sample_points(ellipse, 12)
        first = np.array(list(track))
        second = np.array(list(track))
        assert first.shape == (12, 3)
        assert np.array_equal(first, second)

    def test_starts_at_periapsis(self, ellipse):
        track = sample_points(ellipse, 8)
        periapsis, _ = ellipse.with_anomaly(0.0).to_state()
        assert np.allclose(track[0], periapsis)

    def test_points_on_orbit(self, ellipse):
        radii = np.linalg.norm(sample_points(ellipse, 50).to_numpy(), axis=1)
        assert np.all(radii >= 10000.0 * 0.7 - 1e-6)
        assert np.all(radii <= 10000.0 * 1.3 + 1e-6)

    def test_circle_constant_radius(self, circle):
        radii = np.linalg.norm(sample_points(circle, 20).to_numpy(), axis=1)
        assert np.allclose(radii, 7000.0)

    def test_anomalies_uniform(self, circle):
        track = sample_points(circle, 4)
        assert np.allclose(track.anomalies, [0, np.pi/2, np.pi, 3*np.pi/2])

    def test_negative_index(self, ellipse):
        track = sample_points(ellipse, 5)
        assert np.array_equal(track[-1], track[4])

    def test_slice(self, ellipse):
        track = sample_points(ellipse, 6)
        part = track[1:3]
        assert len(part) == 2
        assert np.array_equal(part[0], track[1])

    def test_index_out_of_range(self, ellipse):
        track = sample_points(ellipse, 5)
        with pytest.raises(IndexError):
            track[5]
        with pytest.raises(IndexError):
            track[-6]

    def test_source_elements_untouched(self, ellipse):
        list(sample_points(ellipse, 5))
        assert ellipse.nu == 2.0

    def test_repr(self, ellipse):
        assert "n_points=7" in repr(sample_points(ellipse, 7))


class TestExport:
    """DataFrame and Plotly output."""

    def test_to_dataframe(self, circle):
        df = sample_points(circle, 10).to_dataframe()
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == ['nu', 'x', 'y', 'z']
        assert len(df) == 10
        assert df['nu'].iloc[0] == 0.0

    def test_plot_3d_with_body(self, circle):
        fig = sample_points(circle, 10).plot_3d(body=EARTH)
        assert isinstance(fig, go.Figure)
        assert len(fig.data) == 2
        assert isinstance(fig.data[0], go.Surface)
        assert isinstance(fig.data[1], go.Scatter3d)

    def test_plot_3d_closes_loop(self, circle):
        fig = sample_points(circle, 10).plot_3d()
        trace = fig.data[0]
        assert len(trace.x) == 11
        assert trace.x[0] == trace.x[-1]

    def test_add_to_plot(self, circle, ellipse):
        fig = sample_points(circle, 10).plot_3d()
        returned = sample_points(ellipse, 10).add_to_plot(fig)
        assert returned is fig
        assert len(fig.data) == 2
        assert fig.data[1].name == 'Orbit 2'
