'''Analytic two-body propagation with an optional third-body nudge

The spacecraft is advanced along its Keplerian orbit by mean motion; a
perturbing body, if given, then adds one semi-implicit Euler step of its
point-mass acceleration to the resulting Cartesian state'''

import numpy as np
from typing import Optional
from .bodies import CelestialBody
from .config import config
from .orbital_elements import elements_to_state
from .spacecraft import Spacecraft
from .utils import as_vector, validation_error

_TWO_PI = 2*np.pi


def solve_kepler(M: float, e: float, method: Optional[str] = None) -> float:
    """
    Solve Kepler's equation M = E − e·sin(E) for the eccentric anomaly.

    Parameters
    ----------
    M : float
        Mean anomaly [rad]
    e : float
        Eccentricity, 0 <= e < 1
    method : str, optional
        "newton" (capped Newton-Raphson) or "fixed_point" (a fixed number
        of E = M + e·sin(E) iterations). Defaults to config.KEPLER_METHOD

    Returns
    -------
    float
        Eccentric anomaly [rad]

    Notes
    -----
    Both methods run a bounded number of iterations. The fixed-point form
    can under-converge for high eccentricity.
    """
    if method is None:
        method = config.KEPLER_METHOD

    if method == 'fixed_point':
        E = M
        for _ in range(config.KEPLER_FIXED_POINT_ITER):
            E = M + e*np.sin(E)
        return float(E)

    if method == 'newton':
        E = M if e < 0.8 else np.pi
        for _ in range(config.KEPLER_MAX_ITER):
            dE = (E - e*np.sin(E) - M) / (1 - e*np.cos(E))
            E -= dE
            if abs(dE) < config.KEPLER_TOL:
                break
        return float(E)

    raise ValueError(f"Unknown Kepler solver '{method}'. Use: ['newton', 'fixed_point']")


def true_from_eccentric(E: float, e: float) -> float:
    """True anomaly from eccentric anomaly [rad]"""
    return float(2*np.arctan2(np.sqrt(1 + e)*np.sin(E/2),
                              np.sqrt(1 - e)*np.cos(E/2)))


def third_body_acceleration(position, body: CelestialBody) -> np.ndarray:
    """
    Point-mass acceleration of a perturbing body on a spacecraft.

    a = μ_b·Δr/|Δr|³ with Δr = r_body − r; |Δr| is floored at
    config.SEPARATION_FLOOR.
    """
    dr = body.position - np.asarray(position, dtype=float)
    dist = max(np.linalg.norm(dr), config.SEPARATION_FLOOR)
    return as_vector(body.mu * dr / dist**3)


def propagate(spacecraft: Spacecraft, primary: CelestialBody, dt: float,
              perturber: Optional[CelestialBody] = None) -> Spacecraft:
    """
    Advance a spacecraft along its orbit by dt.

    Steps: advance mean anomaly by n·dt, solve Kepler's equation, recover
    the true anomaly, convert to Cartesian state. If a perturbing body with
    nonzero mu is given, its acceleration is then applied for dt:
    v += a·dt, r += a·dt². The stored elements keep the two-body solution;
    only the altitude reflects the perturbed position.

    Parameters
    ----------
    spacecraft : Spacecraft
        Current state; its orbital_elements drive the propagation
    primary : CelestialBody
        Attracting body; supplies mu and the altitude reference
    dt : float
        Elapsed simulation time [s]
    perturber : CelestialBody, optional
        Third body (e.g. the Moon)

    Returns
    -------
    Spacecraft
        New spacecraft with updated position, velocity and elements
    """
    elements = spacecraft.orbital_elements
    a, e = elements.a, elements.e
    if a <= 0:
        validation_error(f"Propagation requires positive semi-major axis, got a={a}")
    if e >= 1:
        validation_error(f"Propagation requires a bound orbit, got e={e}")

    mu = primary.mu
    n = np.sqrt(mu / a**3)
    M = float(np.mod(elements.M + n*dt, _TWO_PI))
    E = solve_kepler(M, e)
    nu = true_from_eccentric(E, e)

    # altitude is replaced once the final position is known
    new_elements = elements.with_anomaly(nu, M, altitude=elements.altitude)
    position, velocity = elements_to_state(new_elements, mu)

    if perturber is not None and perturber.mu != 0:
        accel = third_body_acceleration(position, perturber)
        dv = accel * dt
        velocity = as_vector(velocity + dv)
        position = as_vector(position + dv * dt)

    new_elements = new_elements.with_anomaly(nu, M,
                                             altitude=primary.altitude_of(position))
    return spacecraft.replace(position=position, velocity=velocity,
                              orbital_elements=new_elements)
