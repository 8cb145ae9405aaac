'''Spacecraft value type for the Trochia simulation core

Immutable snapshot of a spacecraft's state and propellant budget'''

import numpy as np
from typing import Optional
from .config import config
from .orbital_elements import OrbitalElements
from .utils import as_vector


class Spacecraft:
    """
    Represents a spacecraft's kinematic state and propellant budget.

    Instances are immutable. The propagator and the propulsion model
    return new instances through :meth:`replace`.

    Parameters
    ----------
    position : array-like
        Position relative to the primary body [length units]
    velocity : array-like
        Velocity [length units/s]
    mass : float
        Current wet mass (dry + propellant) [kg]
    fuel : float
        Remaining propellant [kg]
    max_fuel : float
        Propellant capacity [kg]
    max_mass : float
        Fully fuelled mass [kg]
    orbital_elements : OrbitalElements
        Elements derived from the current Cartesian state
    is_burning : bool, optional
        Display flag set by a burn, cleared by the caller after one tick
    name : str, optional
        Spacecraft identifier

    Notes
    -----
    mass = max_mass - (max_fuel - fuel) holds for any spacecraft created
    full and changed only through the propulsion model.
    """

    def __init__(
        self,
        position,
        velocity,
        mass: float,
        fuel: float,
        max_fuel: float,
        max_mass: float,
        orbital_elements: OrbitalElements,
        is_burning: bool = False,
        name: Optional[str] = None
    ):
        # Validate inputs
        if max_fuel <= 0:
            raise ValueError(f"Fuel capacity must be positive, got {max_fuel}")
        if max_mass <= max_fuel:
            raise ValueError(f"Maximum mass ({max_mass}) must exceed "
                             f"fuel capacity ({max_fuel})")
        if fuel < 0 or fuel > max_fuel:
            raise ValueError(f"Fuel must be in [0, {max_fuel}], got {fuel}")
        if mass <= fuel:
            raise ValueError(f"Mass ({mass}) must exceed remaining fuel ({fuel})")
        if not isinstance(orbital_elements, OrbitalElements):
            raise TypeError(f"orbital_elements must be OrbitalElements, "
                            f"got {type(orbital_elements)}")

        self._position = as_vector(position)
        self._velocity = as_vector(velocity)
        self._mass = float(mass)
        self._fuel = float(fuel)
        self._max_fuel = float(max_fuel)
        self._max_mass = float(max_mass)
        self._orbital_elements = orbital_elements
        self._is_burning = bool(is_burning)
        self._name = name

    @classmethod
    def from_elements(cls, orbital_elements: OrbitalElements, mass: float,
                      fuel: float, max_fuel: Optional[float] = None,
                      max_mass: Optional[float] = None,
                      name: Optional[str] = None) -> "Spacecraft":
        """
        Create a spacecraft whose Cartesian state is derived from elements.

        max_fuel and max_mass default to the given fuel and mass, i.e. a
        spacecraft that starts with a full tank.
        """
        position, velocity = orbital_elements.to_state()
        return cls(
            position=position,
            velocity=velocity,
            mass=mass,
            fuel=fuel,
            max_fuel=fuel if max_fuel is None else max_fuel,
            max_mass=mass if max_mass is None else max_mass,
            orbital_elements=orbital_elements,
            name=name,
        )

    def replace(self, **changes) -> "Spacecraft":
        """New spacecraft with the given attributes changed"""
        params = dict(
            position=self._position,
            velocity=self._velocity,
            mass=self._mass,
            fuel=self._fuel,
            max_fuel=self._max_fuel,
            max_mass=self._max_mass,
            orbital_elements=self._orbital_elements,
            is_burning=self._is_burning,
            name=self._name,
        )
        unknown = set(changes) - set(params)
        if unknown:
            raise AttributeError(f"Spacecraft has no attribute(s) {sorted(unknown)}")
        params.update(changes)
        return Spacecraft(**params)

    @property
    def position(self) -> np.ndarray:
        """Position vector (read-only)"""
        return self._position

    @property
    def velocity(self) -> np.ndarray:
        """Velocity vector (read-only)"""
        return self._velocity

    @property
    def mass(self) -> float:
        """Current wet mass [kg]"""
        return self._mass

    @property
    def fuel(self) -> float:
        """Remaining propellant [kg]"""
        return self._fuel

    @property
    def max_fuel(self) -> float:
        """Propellant capacity [kg]"""
        return self._max_fuel

    @property
    def max_mass(self) -> float:
        """Fully fuelled mass [kg]"""
        return self._max_mass

    @property
    def dry_mass(self) -> float:
        """Mass without propellant [kg]"""
        return self._mass - self._fuel

    @property
    def orbital_elements(self) -> OrbitalElements:
        return self._orbital_elements

    @property
    def is_burning(self) -> bool:
        return self._is_burning

    @property
    def name(self) -> Optional[str]:
        """Spacecraft identifier"""
        return self._name

    def __repr__(self) -> str:
        name_str = f"'{self.name}'" if self.name else "unnamed"
        return (f"Spacecraft({name_str}, mass={self.mass:.2f} kg, "
                f"fuel={self.fuel:.2f}/{self.max_fuel:.2f} kg, "
                f"altitude={self.orbital_elements.altitude:.2f} km)")

    def __eq__(self, other) -> bool:
        if not isinstance(other, Spacecraft):
            return NotImplemented
        rtol, atol = config.EQUALITY_RTOL, config.EQUALITY_ATOL
        return (
            np.allclose(self.position, other.position, rtol=rtol, atol=atol) and
            np.allclose(self.velocity, other.velocity, rtol=rtol, atol=atol) and
            np.isclose(self.mass, other.mass, rtol=rtol, atol=atol) and
            np.isclose(self.fuel, other.fuel, rtol=rtol, atol=atol) and
            self.max_fuel == other.max_fuel and
            self.max_mass == other.max_mass and
            self.orbital_elements == other.orbital_elements and
            self.is_burning == other.is_burning and
            self.name == other.name
        )

    def __hash__(self) -> int:
        decimals = config.HASH_DECIMALS
        position = tuple(round(x, decimals) for x in self.position)
        velocity = tuple(round(x, decimals) for x in self.velocity)
        return hash((position, velocity, round(self.mass, decimals),
                     round(self.fuel, decimals), self.name))
