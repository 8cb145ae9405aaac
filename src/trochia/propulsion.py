'''Rocket-equation propulsion model

Delta-v / propellant conversions and the impulsive burn applied to a
Spacecraft. Burns never fail for lack of fuel: a request larger than the
remaining propellant is trimmed to what the tank can deliver'''

import numpy as np
from enum import Enum
from typing import NamedTuple, Optional
from .bodies import CelestialBody
from .config import config
from .orbital_elements import state_to_elements
from .spacecraft import Spacecraft
from .utils import as_vector, rtn_frame, validation_error


class BurnResult(NamedTuple):
    """Outcome of :func:`apply_burn`"""
    spacecraft: Spacecraft
    delta_v: float      # achieved delta-v [m/s]
    fuel_used: float    # propellant consumed [kg]


# burn directions in the spacecraft's local frame
class BurnDirection(Enum):
    PROGRADE = 'prograde'
    RETROGRADE = 'retrograde'
    NORMAL = 'normal'
    ANTINORMAL = 'antinormal'
    RADIAL = 'radial'
    ANTIRADIAL = 'antiradial'


def delta_v_from_masses(initial_mass: float, final_mass: float,
                        specific_impulse: Optional[float] = None) -> float:
    """
    Tsiolkovsky rocket equation, Δv = Isp·g₀·ln(mᵢ/m_f).

    Parameters
    ----------
    initial_mass : float
        Mass before the burn [kg]
    final_mass : float
        Mass after the burn [kg], must be positive and <= initial_mass
    specific_impulse : float, optional
        Isp [s], defaults to config.DEFAULT_ISP

    Returns
    -------
    float
        Delta-v [m/s]
    """
    if specific_impulse is None:
        specific_impulse = config.DEFAULT_ISP
    if final_mass <= 0:
        validation_error(f"Final mass must be positive, got {final_mass}")
    if initial_mass < final_mass:
        validation_error(f"Initial mass ({initial_mass}) must not be less "
                         f"than final mass ({final_mass})")
    exhaust_velocity = specific_impulse * config.STANDARD_GRAVITY
    return float(exhaust_velocity * np.log(initial_mass / final_mass))


def fuel_for_delta_v(delta_v: float, mass: float,
                     specific_impulse: Optional[float] = None) -> float:
    """
    Propellant needed to impart delta_v [m/s] to a spacecraft of mass [kg].

    fuel = m·(R − 1)/R with mass ratio R = exp(Δv/(Isp·g₀))
    """
    if specific_impulse is None:
        specific_impulse = config.DEFAULT_ISP
    exhaust_velocity = specific_impulse * config.STANDARD_GRAVITY
    mass_ratio = np.exp(delta_v / exhaust_velocity)
    return float(mass * (mass_ratio - 1) / mass_ratio)


def apply_burn(spacecraft: Spacecraft, direction, delta_v: float,
               primary: CelestialBody,
               specific_impulse: Optional[float] = None) -> BurnResult:
    """
    Apply an impulsive burn to a spacecraft.

    A zero direction vector is a no-op. If the propellant needed for
    delta_v exceeds what is on board, all remaining fuel is burnt, fuel is
    set to exactly 0 and the achievable delta-v is applied instead.

    Parameters
    ----------
    spacecraft : Spacecraft
        Spacecraft before the burn
    direction : array-like
        Thrust direction, any nonzero length
    delta_v : float
        Requested delta-v [m/s]
    primary : CelestialBody
        Attracting body; its mu is used to recompute the elements and its
        km_per_unit converts m/s into state velocity units
    specific_impulse : float, optional
        Isp [s], defaults to config.DEFAULT_ISP

    Returns
    -------
    BurnResult
        (spacecraft, delta_v achieved [m/s], fuel_used [kg])
    """
    direction = np.asarray(direction, dtype=float)
    magnitude = np.linalg.norm(direction)
    if magnitude == 0:
        return BurnResult(spacecraft, 0.0, 0.0)
    if delta_v < 0:
        validation_error(f"Burn delta-v must be non-negative, got {delta_v}")
    unit = direction / magnitude

    if specific_impulse is None:
        specific_impulse = config.DEFAULT_ISP
    fuel_used = fuel_for_delta_v(delta_v, spacecraft.mass, specific_impulse)

    if fuel_used > spacecraft.fuel:
        fuel_used = spacecraft.fuel
        delta_v = delta_v_from_masses(spacecraft.mass, spacecraft.mass - fuel_used,
                                      specific_impulse)
        new_fuel = 0.0
    else:
        new_fuel = spacecraft.fuel - fuel_used

    unit_conversion = config.METERS_PER_KM * primary.km_per_unit
    velocity = as_vector(spacecraft.velocity + unit * delta_v / unit_conversion)
    elements = state_to_elements(spacecraft.position, velocity, primary.mu, body=primary)

    burnt = spacecraft.replace(
        velocity=velocity,
        mass=spacecraft.mass - fuel_used,
        fuel=new_fuel,
        orbital_elements=elements,
        is_burning=True,
    )
    return BurnResult(burnt, float(delta_v), float(fuel_used))


def burn_vector(spacecraft: Spacecraft, direction) -> np.ndarray:
    """
    Unit thrust vector for a named burn direction.

    Prograde follows the velocity, normal follows the orbital angular
    momentum and radial points away from the primary.

    Parameters
    ----------
    spacecraft : Spacecraft
    direction : BurnDirection or str
    """
    if isinstance(direction, str):
        try:
            direction = BurnDirection(direction.lower())
        except ValueError:
            raise ValueError(f"Unknown burn direction '{direction}'. "
                             f"Use: {[d.value for d in BurnDirection]}") from None
    if not isinstance(direction, BurnDirection):
        raise TypeError(f"direction must be BurnDirection or str, got {type(direction)}")

    radial, _, normal = rtn_frame(spacecraft.position, spacecraft.velocity)
    speed = np.linalg.norm(spacecraft.velocity)
    prograde = spacecraft.velocity / speed if speed > 0 else np.zeros(3)

    vectors = {
        BurnDirection.PROGRADE: prograde,
        BurnDirection.RETROGRADE: -prograde,
        BurnDirection.NORMAL: normal,
        BurnDirection.ANTINORMAL: -normal,
        BurnDirection.RADIAL: radial,
        BurnDirection.ANTIRADIAL: -radial,
    }
    return as_vector(vectors[direction])


def performance_metrics(spacecraft: Spacecraft) -> dict:
    """
    Fuel usage summary.

    Returns
    -------
    dict
        efficiency : fraction of the tank not yet used
        fuel_ratio : remaining fuel / capacity
        total_delta_v : delta-v spent since the tank was full [m/s]
    """
    fuel_used = spacecraft.max_fuel - spacecraft.fuel
    return {
        'efficiency': 1 - fuel_used / spacecraft.max_fuel,
        'fuel_ratio': spacecraft.fuel / spacecraft.max_fuel,
        'total_delta_v': delta_v_from_masses(spacecraft.max_mass, spacecraft.mass),
    }


def can_reach_target(spacecraft: Spacecraft, target,
                     primary: Optional[CelestialBody] = None) -> bool:
    """
    Rough reachability check: remaining delta-v against √(distance in km) m/s.

    Not a trajectory computation; used for UI hints only.
    """
    km_per_unit = primary.km_per_unit if primary is not None else 1.0
    distance = np.linalg.norm(spacecraft.position - np.asarray(target, dtype=float))
    estimated_delta_v = np.sqrt(distance * km_per_unit)
    available = delta_v_from_masses(spacecraft.mass, spacecraft.dry_mass)
    return bool(available >= estimated_delta_v)
