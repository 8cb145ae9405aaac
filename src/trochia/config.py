"""
Global Configuration for Trochia Package
========================================

This module provides package-wide configuration settings that users can modify
to control numerical tolerances, solver behaviour, validation behaviour and
the mission defaults used by :mod:`trochia.mission`.

Examples
--------
View current configuration:

>>> import trochia
>>> print(trochia.config)

Modify settings:

>>> trochia.config.KEPLER_METHOD = "fixed_point"  # 5-step fixed-point solver
>>> trochia.config.DEFAULT_ORBIT_POINTS = 256      # Smoother orbit tracks

Reset to defaults:

>>> trochia.config.reset()

Temporarily modify settings:

>>> with trochia.temp_config(STRICT_VALIDATION=False):
...     # Validation failures only warn inside this block
...     trochia.propagate(spacecraft, trochia.EARTH, 10.0)

Notes
-----
These settings affect package-wide behavior. Modifying them will impact
all subsequent operations until changed again or reset.
"""

from dataclasses import dataclass
from contextlib import contextmanager
import math


@dataclass
class TrochiaConfig:
    """
    Global configuration for Trochia package.

    Attributes
    ----------
    EQUALITY_RTOL : float
        Relative tolerance for floating-point equality comparisons.
        Default: 1e-12
    EQUALITY_ATOL : float
        Absolute tolerance for floating-point equality comparisons.
        Default: 1e-14
    HASH_DECIMALS : int
        Number of decimal places for rounding when computing hash values.
        Automatically computed to preserve hash contract
    STRICT_VALIDATION : bool
        If True, validation failures raise exceptions.
        If False, validation failures issue warnings.
        Default: True
    KEPLER_METHOD : str
        Kepler equation solver, "newton" or "fixed_point".
        Default: "newton"
    KEPLER_MAX_ITER : int
        Iteration cap for the Newton solver. Default: 20
    KEPLER_TOL : float
        Convergence tolerance on the eccentric anomaly [rad]. Default: 1e-12
    KEPLER_FIXED_POINT_ITER : int
        Number of fixed-point iterations E = M + e sin(E). Default: 5
    SEPARATION_FLOOR : float
        Smallest distance used in inverse-square terms. Default: 1e-6
    STANDARD_GRAVITY : float
        g0 used to turn specific impulse into exhaust velocity [m/s^2].
        Default: 9.81
    DEFAULT_ISP : float
        Specific impulse of the spacecraft engine [s]. Default: 300
    METERS_PER_KM : float
        Conversion from burn delta-v [m/s] to km/s. Default: 1000
    STORM_KP_THRESHOLD : float
        Kp index at or above which a radiation hazard counts as a
        geomagnetic storm. Default: 7
    DEFAULT_ORBIT_POINTS : int
        Number of points in a sampled orbit track. Default: 64
    SIMULATION_SPEED : float
        Constant factor applied to frame time on every tick. Default: 20
    DEFAULT_BURN_DV : float
        Delta-v of a single burn command [m/s]. Default: 1.0
    MOON_SOI_RADIUS : float
        Distance from the Moon (in snapshot units) that counts as entering
        its sphere of influence. Default: 10.0
    LOW_FUEL_THRESHOLD : float
        Remaining fuel [kg] below which a low-fuel event is logged.
        Default: 100.0
    MAX_SCORE : float
        Score awarded for a full tank. Default: 1000.0
    DEFAULT_BODY_COLOR : str
        Default color for celestial bodies in plots.
    DEFAULT_TRAJ_COLOR : str
        Default color for orbit tracks in plots.
    DEFAULT_BODY_OPACITY : float
        Default opacity for celestial body spheres (0.0 to 1.0).
    """

    # Numerical tolerance for equality comparisons
    EQUALITY_RTOL: float = 1e-12
    EQUALITY_ATOL: float = 1e-14

    # Validation behavior
    STRICT_VALIDATION: bool = True

    # Kepler solver
    KEPLER_METHOD: str = 'newton'
    KEPLER_MAX_ITER: int = 20
    KEPLER_TOL: float = 1e-12
    KEPLER_FIXED_POINT_ITER: int = 5
    SEPARATION_FLOOR: float = 1e-6

    # Propulsion
    STANDARD_GRAVITY: float = 9.81
    DEFAULT_ISP: float = 300.0
    METERS_PER_KM: float = 1000.0

    # Hazards
    STORM_KP_THRESHOLD: float = 7.0

    # Mission defaults
    DEFAULT_ORBIT_POINTS: int = 64
    SIMULATION_SPEED: float = 20.0
    DEFAULT_BURN_DV: float = 1.0
    MOON_SOI_RADIUS: float = 10.0
    LOW_FUEL_THRESHOLD: float = 100.0
    MAX_SCORE: float = 1000.0

    # Plotting defaults
    DEFAULT_BODY_COLOR: str = 'lightblue'
    DEFAULT_TRAJ_COLOR: str = 'red'
    DEFAULT_TRAJ_COLOR_ADD: str = 'blue'
    DEFAULT_BODY_OPACITY: float = 0.6

    @property
    def HASH_DECIMALS(self) -> int:
        """
        Compute hash rounding decimals from equality tolerance.

        The hash rounding must be coarse enough that if two values
        are equal (within EQUALITY_ATOL), they hash to the same value.

        Formula: HASH_DECIMALS = -floor(log10(ATOL)) - 2

        Returns
        -------
        int
            Number of decimal places for hash rounding
        """
        magnitude = -math.floor(math.log10(self.EQUALITY_ATOL))
        return max(magnitude - 2, 0)

    def reset(self):
        """
        Reset all configuration values to package defaults.

        Examples
        --------
        >>> import trochia
        >>> trochia.config.KEPLER_MAX_ITER = 3
        >>> trochia.config.reset()
        >>> trochia.config.KEPLER_MAX_ITER
        20
        """
        defaults = TrochiaConfig()
        for key in self.__dataclass_fields__:
            setattr(self, key, getattr(defaults, key))

    def __repr__(self):
        """Return formatted string showing all configuration values."""
        lines = ["TrochiaConfig:"]
        lines.append("  Numerical Tolerances:")
        lines.append(f"    EQUALITY_RTOL = {self.EQUALITY_RTOL}")
        lines.append(f"    EQUALITY_ATOL = {self.EQUALITY_ATOL}")
        lines.append(f"    HASH_DECIMALS = {self.HASH_DECIMALS}")
        lines.append("  Kepler Solver:")
        lines.append(f"    KEPLER_METHOD = '{self.KEPLER_METHOD}'")
        lines.append(f"    KEPLER_MAX_ITER = {self.KEPLER_MAX_ITER}")
        lines.append(f"    KEPLER_TOL = {self.KEPLER_TOL}")
        lines.append(f"    KEPLER_FIXED_POINT_ITER = {self.KEPLER_FIXED_POINT_ITER}")
        lines.append(f"    SEPARATION_FLOOR = {self.SEPARATION_FLOOR}")
        lines.append("  Propulsion:")
        lines.append(f"    STANDARD_GRAVITY = {self.STANDARD_GRAVITY}")
        lines.append(f"    DEFAULT_ISP = {self.DEFAULT_ISP}")
        lines.append(f"    METERS_PER_KM = {self.METERS_PER_KM}")
        lines.append("  Behavior:")
        lines.append(f"    STRICT_VALIDATION = {self.STRICT_VALIDATION}")
        lines.append(f"    STORM_KP_THRESHOLD = {self.STORM_KP_THRESHOLD}")
        lines.append("  Mission:")
        lines.append(f"    SIMULATION_SPEED = {self.SIMULATION_SPEED}")
        lines.append(f"    DEFAULT_BURN_DV = {self.DEFAULT_BURN_DV}")
        lines.append(f"    MOON_SOI_RADIUS = {self.MOON_SOI_RADIUS}")
        lines.append(f"    LOW_FUEL_THRESHOLD = {self.LOW_FUEL_THRESHOLD}")
        lines.append(f"    MAX_SCORE = {self.MAX_SCORE}")
        lines.append("  Plotting:")
        lines.append(f"    DEFAULT_ORBIT_POINTS = {self.DEFAULT_ORBIT_POINTS}")
        lines.append(f"    DEFAULT_BODY_COLOR = '{self.DEFAULT_BODY_COLOR}'")
        lines.append(f"    DEFAULT_TRAJ_COLOR = '{self.DEFAULT_TRAJ_COLOR}'")
        lines.append(f"    DEFAULT_BODY_OPACITY = {self.DEFAULT_BODY_OPACITY}")
        return "\n".join(lines)


# Global configuration instance
config = TrochiaConfig()


@contextmanager
def temp_config(**kwargs):
    """
    Context manager for temporarily modifying configuration values.

    Configuration is automatically restored when the context exits,
    even if an exception occurs.

    Parameters
    ----------
    **kwargs
        Configuration attributes to temporarily modify.

    Examples
    --------
    >>> import trochia
    >>> with trochia.temp_config(KEPLER_METHOD="fixed_point"):
    ...     sc = trochia.propagate(sc, earth, 5.0)
    >>> trochia.config.KEPLER_METHOD
    'newton'

    Raises
    ------
    AttributeError
        If an invalid configuration attribute is specified.
    """
    old_values = {}
    for key, value in kwargs.items():
        if not hasattr(config, key):
            raise AttributeError(
                f"TrochiaConfig has no attribute '{key}'. "
                f"Valid attributes: {list(config.__dataclass_fields__.keys())}"
            )
        old_values[key] = getattr(config, key)
        setattr(config, key, value)

    try:
        yield config
    finally:
        for key, value in old_values.items():
            setattr(config, key, value)
