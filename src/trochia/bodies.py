'''Celestial body definitions for the Trochia simulation core

Immutable gravitational bodies plus the Earth and Moon used by the mission.
Values are referenced to km (i.e. mu = km^3/s^2) unless a body has been
rescaled with CelestialBody.scaled()'''

import numpy as np
from dataclasses import dataclass, field
from typing import Optional
from .config import config
from .utils import as_vector

# 1 visualization unit = 1000 km
VISUALIZATION_SCALE = 1000.0


@dataclass(frozen=True, eq=False)
class CelestialBody:
    """
    Immutable parameters for a gravitating body.

    Attributes
    ----------
    mu : float
        Gravitational parameter [length³/s²]
    radius : float
        Mean radius [length]
    mass : float
        Mass [kg]
    position : array-like
        Position of the body centre [length]; fixed within a tick
    name : str, optional
        Body identifier
    km_per_unit : float
        Kilometres represented by one length unit (1.0 for km)

    Notes
    -----
    The Moon is held at a fixed position in this simulation; it does not
    orbit the Earth.
    """
    mu: float
    radius: float
    mass: float
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    name: Optional[str] = None
    km_per_unit: float = 1.0

    def __post_init__(self):
        if self.mu <= 0:
            raise ValueError(f"Gravitational parameter must be positive, got {self.mu}")
        if self.radius <= 0:
            raise ValueError(f"Radius must be positive, got {self.radius}")
        if self.mass <= 0:
            raise ValueError(f"Mass must be positive, got {self.mass}")
        if self.km_per_unit <= 0:
            raise ValueError(f"km_per_unit must be positive, got {self.km_per_unit}")
        object.__setattr__(self, 'position', as_vector(self.position))

    def scaled(self, scale: float) -> "CelestialBody":
        """
        Express this body in units of ``scale`` current length units.

        Parameters
        ----------
        scale : float
            Number of current length units per new unit
            (e.g. VISUALIZATION_SCALE to go from km to 1000 km units)

        Returns
        -------
        CelestialBody
            New body with mu / scale³, radius / scale, position / scale
        """
        if scale <= 0:
            raise ValueError(f"Scale must be positive, got {scale}")
        return CelestialBody(
            mu=self.mu / scale**3,
            radius=self.radius / scale,
            mass=self.mass,
            position=self.position / scale,
            name=self.name,
            km_per_unit=self.km_per_unit * scale,
        )

    def altitude_of(self, position) -> float:
        """Height of a point above this body's surface [km]"""
        r = np.linalg.norm(np.asarray(position, dtype=float) - self.position)
        return float((r - self.radius) * self.km_per_unit)

    def distance_to(self, position) -> float:
        """Distance from the body centre to a point [length units]"""
        return float(np.linalg.norm(np.asarray(position, dtype=float) - self.position))

    def __eq__(self, other) -> bool:
        if not isinstance(other, CelestialBody):
            return NotImplemented
        rtol, atol = config.EQUALITY_RTOL, config.EQUALITY_ATOL
        return (
            np.isclose(self.mu, other.mu, rtol=rtol, atol=atol) and
            np.isclose(self.radius, other.radius, rtol=rtol, atol=atol) and
            np.isclose(self.mass, other.mass, rtol=rtol, atol=atol) and
            np.allclose(self.position, other.position, rtol=rtol, atol=atol) and
            np.isclose(self.km_per_unit, other.km_per_unit, rtol=rtol, atol=atol) and
            self.name == other.name
        )

    def __hash__(self) -> int:
        decimals = config.HASH_DECIMALS
        return hash((round(self.mu, decimals), round(self.radius, decimals),
                     self.name, round(self.km_per_unit, decimals)))

    def __repr__(self) -> str:
        name_str = f"'{self.name}'" if self.name else "unnamed"
        return (f"CelestialBody({name_str}, mu={self.mu:.6g}, "
                f"radius={self.radius:.6g}, km_per_unit={self.km_per_unit:g})")


EARTH = CelestialBody(
    mu=398600.4418,
    radius=6371.0,
    mass=5.972e24,
    name='Earth'
)

MOON = CelestialBody(
    mu=4902.7779,
    radius=1737.0,
    mass=7.342e22,
    position=(60000.0, 0.0, 0.0),
    name='Moon'
)
