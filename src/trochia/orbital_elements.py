'''Classical orbital elements and conversions to and from Cartesian state

OrbitalElements class definition plus the element/state converter used by
the propagator, the transfer calculator and the propulsion model'''

import numpy as np
from typing import Optional, Tuple, TYPE_CHECKING
from .config import config
from .utils import as_vector, validation_error

if TYPE_CHECKING:
    from .bodies import CelestialBody

# order of the element vector
ELEMENT_NAMES = ('a', 'e', 'i', 'raan', 'argp', 'nu', 'M')


class OrbitalElements:
    """
    Represents a bound orbit as classical Keplerian elements plus the
    current position along it.

    Element vector is [a, e, i, Ω, ω, ν, M]; all angles in radians.
    ``altitude`` is the height above the reference body in km and is
    always derived from a Cartesian radius, never integrated.
    OrbitalElements is immutable, create a new instance to change
    """

    # Default gravitational parameter (Earth)
    DEFAULT_MU = 398600.4418  # km³/s²

    # ========== CONSTRUCTION ==========
    def __init__(self, elements=None, validate=True, body=None, mu=None,
                 altitude=None, **kwargs):
        """
        Create orbital elements.

        Can be called in two ways:

        1. Array-based (fast for propagation):
        OrbitalElements([6671, 0.01, 0.1, 0, 0, 0, 0], mu=398600.4418)

        2. Named parameters (readable for setup):
        OrbitalElements(a=6671, e=0.01, i=0.1, raan=0, argp=0, nu=0, body=EARTH)

        Parameters
        ----------
        elements : array-like, optional
            7-element array [a, e, i, Ω, ω, ν, M]
        validate : bool, optional
            Whether to validate elements (default True)
        body : CelestialBody, optional
            Reference body; supplies mu and the altitude reference
        mu : float, optional
            Gravitational parameter, overrides body.mu
            Defaults to Earth's GM if neither body nor mu provided
        altitude : float, optional
            Altitude above the reference body [km]. Computed from the
            Cartesian radius when omitted
        **kwargs : dict
            Named parameters a, e, i, raan, argp, nu and optionally M.
            If M is omitted it is computed from ν.
        """
        self._body = body
        if mu is not None:
            self._mu = float(mu)
        elif body is not None:
            self._mu = float(body.mu)
        else:
            self._mu = self.DEFAULT_MU

        if elements is not None:
            self.elements = np.array(elements, dtype=float)
        elif kwargs:
            self.elements = self._from_named_params(kwargs)
        else:
            raise ValueError(
                "Must provide either an elements array [a, e, i, raan, argp, nu, M] "
                "or named parameters (a, e, i, raan, argp, nu[, M])"
            )
        # Ensure immutability of elements array
        self.elements.flags.writeable = False
        if validate:
            self._validate()

        if altitude is None:
            position, _ = _state_from_elements(self.elements, self._mu)
            if body is not None:
                altitude = body.altitude_of(position)
            else:
                altitude = float(np.linalg.norm(position))
        self._altitude = float(altitude)

    # ========== VALIDATION ==========
    def _validate(self):
        """Check that the elements describe a bound orbit
        If validation fails inappropriately, set validate=False for constructor
        """
        if len(self.elements) != len(ELEMENT_NAMES):
            raise ValueError("Orbital elements must be 7-element vector")
        if not np.all(np.isfinite(self.elements)):
            raise ValueError("Elements contain NaN or Inf")
        a, e, i, raan, argp, nu, M = self.elements
        if e < 0 or e >= 1:
            raise ValueError(f"Eccentricity must be in [0, 1), got e={e}")
        if a <= 0:
            raise ValueError(f"Bound orbit requires positive semi-major axis, got a={a}")
        if i > np.pi or i < 0:
            raise ValueError("Inclination out of range")
        if raan < -np.pi or raan > 2*np.pi:
            raise ValueError("RAAN out of range")
        if argp < -np.pi or argp > 2*np.pi:
            raise ValueError("Arg of Periapsis out of range")
        if nu < -np.pi or nu > 2*np.pi:
            raise ValueError("True Anomaly out of range")

    @staticmethod
    def _from_named_params(kwargs):
        """Build the element vector from keyword arguments."""
        required = ELEMENT_NAMES[:6]
        missing = [k for k in required if k not in kwargs]
        if missing:
            raise ValueError(
                f"Missing orbital element(s) {missing}; "
                f"named construction requires {list(required)} and optionally 'M'"
            )
        unknown = set(kwargs) - set(ELEMENT_NAMES)
        if unknown:
            raise ValueError(f"Unknown orbital element(s): {sorted(unknown)}")
        values = [float(kwargs[k]) for k in required]
        if 'M' in kwargs:
            M = float(kwargs['M'])
        else:
            M = mean_from_true(values[5], values[1])
        return np.array(values + [M])

    # ========== CONVERSIONS ==========
    def to_state(self) -> Tuple[np.ndarray, np.ndarray]:
        """Cartesian (position, velocity) about the stored mu"""
        return elements_to_state(self, self._mu)

    def with_anomaly(self, nu: float, M: Optional[float] = None,
                     altitude: Optional[float] = None) -> "OrbitalElements":
        """
        Copy of these elements placed at a different point on the orbit.

        Parameters
        ----------
        nu : float
            New true anomaly [rad]
        M : float, optional
            New mean anomaly [rad], defaults to the value consistent with nu
        altitude : float, optional
            Altitude to store instead of recomputing it
        """
        if M is None:
            M = mean_from_true(nu, self.e)
        elements = self.elements.copy()
        elements[5] = nu
        elements[6] = M
        return OrbitalElements(elements, validate=False, body=self._body,
                               mu=self._mu, altitude=altitude)

    # ========== PROPERTY ACCESS ==========
    @property
    def body(self):
        """Reference body (if provided)"""
        return self._body

    @property
    def mu(self):
        """Gravitational parameter"""
        return self._mu

    @property
    def a(self):
        """Semi-major axis"""
        return self.elements[0]

    @property
    def e(self):
        """Eccentricity"""
        return self.elements[1]

    @property
    def i(self):
        """Inclination [rad]"""
        return self.elements[2]

    @property
    def raan(self):
        """Longitude of the ascending node Ω [rad]"""
        return self.elements[3]

    @property
    def argp(self):
        """Argument of periapsis ω [rad]"""
        return self.elements[4]

    @property
    def nu(self):
        """True anomaly ν [rad]"""
        return self.elements[5]

    @property
    def M(self):
        """Mean anomaly [rad]"""
        return self.elements[6]

    @property
    def altitude(self):
        """Altitude above the reference body [km]"""
        return self._altitude

    # ========== ORBITAL PROPERTIES ==========
    def orbital_period(self):
        """Orbital period [s] (only for elliptic orbits)"""
        if self.e >= 1:
            raise ValueError("Orbital period undefined for parabolic/hyperbolic orbits")
        return 2 * np.pi * np.sqrt(self.a**3 / self._mu)

    def mean_motion(self):
        """
        Calculate mean motion (n = √(μ/a³))

        Returns
        -------
        float
            Mean motion [rad/s]

        Raises
        ------
        ValueError
            If the orbit is parabolic/hyperbolic
        """
        if self.e >= 1:
            raise ValueError("Mean motion undefined for parabolic/hyperbolic orbits")
        return np.sqrt(self._mu / self.a**3)

    def specific_energy(self):
        """Specific orbital energy (energy per unit mass)"""
        return -self._mu / (2 * self.a)

    def specific_angular_momentum(self):
        """Specific angular momentum magnitude h = √(μp)"""
        p = self.a * (1 - self.e**2)
        return np.sqrt(self._mu * p)

    # ========== UTILITY METHODS ==========
    def copy(self):
        """Create a deep copy of the orbital elements"""
        return OrbitalElements(self.elements.copy(), validate=False, body=self._body,
                               mu=self._mu, altitude=self._altitude)

    def to_dict(self):
        """Element values keyed by name, plus altitude"""
        data = {name: float(value) for name, value in zip(ELEMENT_NAMES, self.elements)}
        data['altitude'] = self._altitude
        return data

    # ========== SPECIAL METHODS ==========
    def __len__(self):
        return len(ELEMENT_NAMES)

    def __getitem__(self, key):
        return self.elements[key]

    def __iter__(self):
        return iter(self.elements)

    def __repr__(self):
        return (f"OrbitalElements({self.elements.tolist()}, "
                f"mu={self._mu}, altitude={self._altitude})")

    def __str__(self):
        a, e, i, raan, argp, nu, M = self.elements
        return (f"Keplerian Elements:\n"
                f"  a     = {a:12.4f}\n"
                f"  e     = {e:12.6f}\n"
                f"  i     = {np.degrees(i):12.4f}°\n"
                f"  RAAN  = {np.degrees(raan):12.4f}°\n"
                f"  ω     = {np.degrees(argp):12.4f}°\n"
                f"  ν     = {np.degrees(nu):12.4f}°\n"
                f"  M     = {np.degrees(M):12.4f}°\n"
                f"  alt   = {self._altitude:12.4f} km")

    def __eq__(self, other):
        if not isinstance(other, OrbitalElements):
            return False
        return (np.allclose(self.elements, other.elements,
                            rtol=config.EQUALITY_RTOL,
                            atol=config.EQUALITY_ATOL) and
                np.isclose(self._mu, other._mu,
                           rtol=config.EQUALITY_RTOL,
                           atol=config.EQUALITY_ATOL))

    def __hash__(self):
        rounded = tuple(round(x, config.HASH_DECIMALS) for x in self.elements)
        return hash(rounded)


# ========== ELEMENT / STATE CONVERSION ==========
def _rotation_matrix(raan, i, argp):
    """3-1-3 DCM from the perifocal frame to the reference frame."""
    # rotation about z-axis by RAAN
    R3_raan = np.array([
        [np.cos(raan), -np.sin(raan), 0],
        [np.sin(raan),  np.cos(raan), 0],
        [0,             0,            1]
    ])
    # rotation about x-axis by inclination
    R1_i = np.array([
        [1,  0,          0         ],
        [0,  np.cos(i), -np.sin(i) ],
        [0,  np.sin(i),  np.cos(i) ]
    ])
    # rotation about z-axis by argument of periapsis
    R3_argp = np.array([
        [np.cos(argp), -np.sin(argp), 0],
        [np.sin(argp),  np.cos(argp), 0],
        [0,             0,            1]
    ])
    return R3_raan @ R1_i @ R3_argp


def _state_from_elements(elements, mu):
    """Unchecked element vector to (position, velocity)."""
    a, e, i, raan, argp, nu = elements[:6]
    # semi-latus rectum
    p = a*(1 - e**2)
    # position in perifocal frame
    r_mag = p / (1 + e*np.cos(nu))
    rvec = np.array([r_mag*np.cos(nu), r_mag*np.sin(nu), 0])
    # velocity in perifocal frame
    vvec = np.array([-np.sqrt(mu/p) * np.sin(nu),
                     np.sqrt(mu/p) * (e + np.cos(nu)), 0])
    DCM = _rotation_matrix(raan, i, argp)
    return as_vector(DCM @ rvec), as_vector(DCM @ vvec)


def elements_to_state(elements: OrbitalElements,
                      mu: Optional[float] = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Convert orbital elements to a Cartesian state vector.

    Parameters
    ----------
    elements : OrbitalElements
        Bound-orbit elements (0 <= e < 1, a > 0)
    mu : float, optional
        Gravitational parameter, defaults to elements.mu

    Returns
    -------
    position, velocity : np.ndarray
        Read-only 3-vectors in the reference frame
    """
    if mu is None:
        mu = elements.mu
    if elements.e >= 1:
        validation_error(
            f"Element conversion requires a bound orbit, got e={elements.e}")
    if elements.a <= 0:
        validation_error(
            f"Element conversion requires positive semi-major axis, got a={elements.a}")
    return _state_from_elements(elements.elements, mu)


def state_to_elements(position, velocity, mu: float,
                      body: Optional["CelestialBody"] = None) -> OrbitalElements:
    """
    Convert a Cartesian state vector to orbital elements.

    Argument of periapsis is reported as 0 and mean anomaly equals true
    anomaly. This is exact only for circular orbits; eccentric,
    non-equatorial states will not reproduce their original ω and M.

    Parameters
    ----------
    position, velocity : array-like
        Cartesian state relative to the attracting body
    mu : float
        Gravitational parameter of the attracting body
    body : CelestialBody, optional
        Reference for altitude; without it altitude is the radial distance

    Returns
    -------
    OrbitalElements
        Unvalidated elements (an unbound state is representable)
    """
    rvec = np.asarray(position, dtype=float)
    vvec = np.asarray(velocity, dtype=float)
    r = np.linalg.norm(rvec)
    v2 = np.dot(vvec, vvec)

    # angular momentum vector h = r × v
    hvec = np.cross(rvec, vvec)
    h = np.linalg.norm(hvec)

    # semi-major axis from energy equation
    energy = v2/2 - mu/r
    a = -mu/(2*energy) if energy != 0 else np.inf
    e = np.sqrt(max(0.0, 1 + (2*energy*h**2)/mu**2))

    if h > 0:
        i = np.arccos(np.clip(hvec[2]/h, -1.0, 1.0))
    else:
        i = 0.0

    # longitude of ascending node from the node vector
    n_x = -hvec[1]
    n_y = hvec[0]
    n = np.hypot(n_x, n_y)
    raan = 0.0
    if n > 0:
        raan = np.arccos(np.clip(n_x/n, -1.0, 1.0))
        if n_y < 0:
            raan = 2*np.pi - raan

    # true anomaly from e cos(nu) = p/r - 1, e sin(nu) = sqrt(p/mu) (r . v)
    if h > 0:
        p = h**2/mu
        nu = np.arctan2(np.sqrt(p/mu)*np.dot(rvec, vvec), p/r - 1)
    else:
        nu = 0.0

    if body is not None:
        altitude = body.altitude_of(rvec)
    else:
        altitude = r
    return OrbitalElements([a, e, i, raan, 0.0, nu, nu], validate=False,
                           body=body, mu=mu, altitude=altitude)


# ========== ANOMALY HELPERS ==========
def mean_from_true(nu: float, e: float) -> float:
    """Mean anomaly for a true anomaly on an elliptic orbit [rad]"""
    E = 2*np.arctan2(np.sqrt(1 - e)*np.sin(nu/2), np.sqrt(1 + e)*np.cos(nu/2))
    return float(E - e*np.sin(E))


# ========== SCALAR ORBIT PROPERTIES ==========
def vis_viva_speed(r: float, a: float, mu: float) -> float:
    """Orbital speed from the vis-viva equation v = √(μ(2/r − 1/a))"""
    return float(np.sqrt(mu*(2/r - 1/a)))


def orbital_energy(position, velocity, mu: float) -> float:
    """Specific orbital energy E = v²/2 − μ/r"""
    r = np.linalg.norm(np.asarray(position, dtype=float))
    v = np.linalg.norm(np.asarray(velocity, dtype=float))
    return float(v**2/2 - mu/r)


def angular_momentum(position, velocity) -> np.ndarray:
    """Specific angular momentum vector h = r × v"""
    return as_vector(np.cross(np.asarray(position, dtype=float),
                              np.asarray(velocity, dtype=float)))
