'''Transfer calculations and sampled orbit tracks

Closed-form Hohmann transfer delta-v plus OrbitTrack, a lazily evaluated
set of points around an orbit used for trajectory display'''

import numpy as np
import pandas as pd
import plotly.graph_objects as go
from typing import Optional, Tuple, TYPE_CHECKING
from .config import config
from .orbital_elements import OrbitalElements, elements_to_state
from .utils import validation_error

if TYPE_CHECKING:
    from .bodies import CelestialBody


def hohmann_transfer(r1: float, r2: float, mu: float) -> Tuple[float, float]:
    """
    Delta-v of a two-impulse Hohmann transfer between circular orbits.

    Δv₁ = √(μ/r₁)(√(2r₂/(r₁+r₂)) − 1)
    Δv₂ = √(μ/r₂)(1 − √(2r₁/(r₁+r₂)))

    Parameters
    ----------
    r1, r2 : float
        Radii of the departure and arrival orbits (> 0)
    mu : float
        Gravitational parameter in matching units

    Returns
    -------
    (dv1, dv2) : tuple of float
        Signed burn magnitudes; both negative for an inward transfer
    """
    if r1 <= 0 or r2 <= 0:
        validation_error(f"Hohmann transfer requires positive radii, got r1={r1}, r2={r2}")
    dv1 = np.sqrt(mu/r1) * (np.sqrt(2*r2/(r1 + r2)) - 1)
    dv2 = np.sqrt(mu/r2) * (1 - np.sqrt(2*r1/(r1 + r2)))
    return float(dv1), float(dv2)


class OrbitTrack:
    """
    Finite, restartable sequence of points around an orbit.

    Points are produced on demand by sweeping true anomaly uniformly over
    [0, 2π) with every other element held fixed. Each iteration starts
    again from ν = 0. Used for display only.

    Attributes:
        elements: Orbit being sampled
        n_points: Number of points per sweep
    """
    # ========== CONSTRUCTION ==========
    def __init__(self, elements: OrbitalElements, n_points: Optional[int] = None):
        if n_points is None:
            n_points = config.DEFAULT_ORBIT_POINTS
        if n_points < 1:
            raise ValueError(f"n_points must be at least 1, got {n_points}")
        self._elements = elements
        self._n_points = int(n_points)

    # ========== PROPERTY ACCESS ==========
    @property
    def elements(self) -> OrbitalElements:
        return self._elements

    @property
    def n_points(self) -> int:
        return self._n_points

    @property
    def anomalies(self) -> np.ndarray:
        """True anomalies of the sample points [rad]"""
        return 2*np.pi*np.arange(self._n_points)/self._n_points

    # ========== UTILITY METHODS ==========
    def point_at(self, index: int) -> np.ndarray:
        """Position of the index-th sample point."""
        nu = 2*np.pi*index/self._n_points
        swept = self._elements.with_anomaly(nu, altitude=self._elements.altitude)
        position, _ = elements_to_state(swept)
        return position

    def to_numpy(self) -> np.ndarray:
        """All points as an array of shape (n_points, 3)"""
        return np.array(list(self))

    def to_dataframe(self) -> pd.DataFrame:
        """
        Export the track to a pandas DataFrame.

        Returns:
            DataFrame with columns nu, x, y, z
        """
        points = self.to_numpy()
        return pd.DataFrame({
            'nu': self.anomalies,
            'x': points[:, 0],
            'y': points[:, 1],
            'z': points[:, 2],
        })

    # ========== SPECIAL METHODS ==========
    def __len__(self):
        return self._n_points

    def __iter__(self):
        for index in range(self._n_points):
            yield self.point_at(index)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self.point_at(k) for k in range(*index.indices(self._n_points))]
        if index < 0:
            index += self._n_points
        if not 0 <= index < self._n_points:
            raise IndexError(f"Track index {index} out of range for {self._n_points} points")
        return self.point_at(index)

    def __repr__(self):
        return (f"OrbitTrack(a={self._elements.a}, e={self._elements.e}, "
                f"n_points={self._n_points})")

    # ========== PLOTTING ==========
    def plot_3d(self, body: Optional["CelestialBody"] = None,
                body_color: Optional[str] = None,
                traj_color: Optional[str] = None,
                body_opacity: Optional[float] = None) -> go.Figure:
        """
        Create 3D plot of the orbit track with an optional central body.

        Parameters:
            body: Body drawn as a sphere at its position (default: none)
            body_color: Color of central body (default: config)
            traj_color: Color of track line (default: config)
            body_opacity: Opacity of central body (default: config)

        Returns:
            Plotly Figure object
        """
        body_color = body_color or config.DEFAULT_BODY_COLOR
        traj_color = traj_color or config.DEFAULT_TRAJ_COLOR
        if body_opacity is None:
            body_opacity = config.DEFAULT_BODY_OPACITY

        fig = go.Figure()
        if body is not None:
            _add_sphere_to_plot(fig, center=body.position, radius=body.radius,
                                color=body_color, opacity=body_opacity,
                                name=body.name or "Central Body")
        self.add_to_plot(fig, color=traj_color, name='Orbit')

        fig.update_layout(
            scene=dict(
                xaxis_title='X',
                yaxis_title='Y',
                zaxis_title='Z',
                aspectmode='data'
            ),
            title='Orbit Track',
            showlegend=True
        )
        return fig

    def add_to_plot(self, fig: go.Figure, color: Optional[str] = None,
                    name: Optional[str] = None, **kwargs) -> go.Figure:
        """
        Add this track to an existing Plotly figure.

        Parameters:
            fig: Existing Plotly Figure object
            color: Color of the line (default: config.DEFAULT_TRAJ_COLOR_ADD)
            name: Legend name (default: 'Orbit N')
            **kwargs: Additional arguments passed to Scatter3d

        Returns:
            Updated Plotly Figure object (same object, modified in place)
        """
        color = color or config.DEFAULT_TRAJ_COLOR_ADD
        points = self.to_numpy()
        # close the loop for display
        points = np.vstack([points, points[:1]])

        if name is None:
            n_existing = sum(1 for trace in fig.data if isinstance(trace, go.Scatter3d))
            name = f'Orbit {n_existing + 1}'

        fig.add_trace(go.Scatter3d(
            x=points[:, 0],
            y=points[:, 1],
            z=points[:, 2],
            mode='lines',
            line=dict(color=color, width=3),
            name=name,
            hovertemplate='x: %{x:.3f}<br>y: %{y:.3f}<br>z: %{z:.3f}<extra></extra>',
            **kwargs
        ))
        return fig


def _add_sphere_to_plot(fig, center, radius, color, opacity, name):
    """Helper to add a sphere to the plot at specified center."""
    u = np.linspace(0, 2 * np.pi, 30)
    v = np.linspace(0, np.pi, 20)

    x = center[0] + radius * np.outer(np.cos(u), np.sin(v))
    y = center[1] + radius * np.outer(np.sin(u), np.sin(v))
    z = center[2] + radius * np.outer(np.ones(np.size(u)), np.cos(v))

    fig.add_trace(go.Surface(
        x=x, y=y, z=z,
        colorscale=[[0, color], [1, color]],
        showscale=False,
        opacity=opacity,
        name=name,
        hoverinfo='name'
    ))


def sample_points(elements: OrbitalElements, n: Optional[int] = None) -> OrbitTrack:
    """
    Sample n points around an orbit for display.

    Parameters
    ----------
    elements : OrbitalElements
        Orbit to sample; only ν varies between points
    n : int, optional
        Number of points, defaults to config.DEFAULT_ORBIT_POINTS

    Returns
    -------
    OrbitTrack
        Lazy, restartable sequence of positions
    """
    return OrbitTrack(elements, n)
