'''Transient space hazards: radiation storms, orbital debris, perturbations

Hazards are immutable values. generate() creates a batch, advance() ages
and moves them and drops the expired ones, and the remaining functions
score a spacecraft's exposure'''

import numpy as np
import pandas as pd
from dataclasses import dataclass, replace
from enum import Enum
from typing import ClassVar, Iterable, List, Optional, Union
from .config import config
from .utils import as_vector


# define an enumerated list of hazard kinds
class HazardType(Enum):
    RADIATION = 'radiation'
    DEBRIS = 'debris'
    PERTURBATION = 'perturbation'


@dataclass(frozen=True, eq=False)
class Hazard:
    """
    Fields shared by every hazard kind.

    Attributes
    ----------
    id : str
        Identifier, unique within a generated batch
    position : np.ndarray
        Centre of the hazard [length units]
    radius : float
        Extent of the hazard [length units]
    intensity : float
        Kind-specific strength (radiation flux scale, 1 for debris)
    duration : float
        Total lifetime [s], inf for hazards that never expire
    time_remaining : float
        Remaining lifetime [s]
    """
    kind: ClassVar[HazardType]

    id: str
    position: np.ndarray
    radius: float
    intensity: float
    duration: float
    time_remaining: float

    def __post_init__(self):
        if type(self) is Hazard:
            raise TypeError("Hazard is a base class; create a RadiationStorm, "
                            "OrbitalDebris or Perturbation")
        if self.radius <= 0:
            raise ValueError(f"Hazard radius must be positive, got {self.radius}")
        if self.intensity < 0:
            raise ValueError(f"Hazard intensity must be non-negative, got {self.intensity}")
        if self.duration <= 0:
            raise ValueError(f"Hazard duration must be positive, got {self.duration}")
        object.__setattr__(self, 'position', as_vector(self.position))

    def distance_to(self, position) -> float:
        """Distance from the hazard centre to a point"""
        return float(np.linalg.norm(np.asarray(position, dtype=float) - self.position))


@dataclass(frozen=True, eq=False)
class RadiationStorm(Hazard):
    """Stationary radiation cloud; kp_index is the geomagnetic Kp index (0-9)"""
    kind: ClassVar[HazardType] = HazardType.RADIATION

    kp_index: float = 0.0

    def __post_init__(self):
        super().__post_init__()
        if not 0 <= self.kp_index <= 9:
            raise ValueError(f"Kp index must be in [0, 9], got {self.kp_index}")


@dataclass(frozen=True, eq=False)
class OrbitalDebris(Hazard):
    """Debris fragment moving in a straight line at constant velocity"""
    kind: ClassVar[HazardType] = HazardType.DEBRIS

    velocity: np.ndarray = None
    mass: float = 1.0

    def __post_init__(self):
        super().__post_init__()
        if self.mass <= 0:
            raise ValueError(f"Debris mass must be positive, got {self.mass}")
        velocity = np.zeros(3) if self.velocity is None else self.velocity
        object.__setattr__(self, 'velocity', as_vector(velocity))


@dataclass(frozen=True, eq=False)
class Perturbation(Hazard):
    """Region applying a force given in the RTN frame. Stationary."""
    kind: ClassVar[HazardType] = HazardType.PERTURBATION

    force: np.ndarray = None

    def __post_init__(self):
        super().__post_init__()
        force = np.zeros(3) if self.force is None else self.force
        object.__setattr__(self, 'force', as_vector(force))


def generate(count: int, seed_time: float,
             rng: Union[np.random.Generator, int, None] = None) -> List[Hazard]:
    """
    Create a batch of random radiation storms and debris.

    Parameters
    ----------
    count : int
        Number of hazards
    seed_time : float
        Simulation time of the batch, used in hazard ids
    rng : numpy.random.Generator or int, optional
        Random source or seed; None draws fresh entropy

    Returns
    -------
    list of Hazard
        Radiation storms last 60-360 s; debris never expires
    """
    if count < 0:
        raise ValueError(f"Hazard count must be non-negative, got {count}")
    rng = np.random.default_rng(rng)

    hazards = []
    for index in range(count):
        kind = HazardType.RADIATION if rng.random() < 0.5 else HazardType.DEBRIS
        hazard_id = f"{kind.value}_{seed_time}_{index}"

        if kind == HazardType.RADIATION:
            offset = 20 if rng.random() > 0.5 else -20
            position = (rng.random(3) - 0.5) * 40
            position[0] += offset
            duration = 60 + rng.random() * 300
            hazards.append(RadiationStorm(
                id=hazard_id,
                position=position,
                radius=1 + rng.random() * 3,
                intensity=rng.random() * 100,
                duration=duration,
                time_remaining=duration,
                kp_index=5 + rng.random() * 4,
            ))
        else:
            offset = 15 if rng.random() > 0.5 else -15
            position = (rng.random(3) - 0.5) * 30
            position[0] += offset
            hazards.append(OrbitalDebris(
                id=hazard_id,
                position=position,
                radius=0.5 + rng.random() * 2,
                intensity=1.0,
                duration=np.inf,
                time_remaining=np.inf,
                velocity=(rng.random(3) - 0.5) * 10,
                mass=1 + rng.random() * 100,
            ))
    return hazards


def _advance_one(hazard: Hazard, dt: float, time_remaining: float) -> Hazard:
    if isinstance(hazard, OrbitalDebris):
        return replace(hazard, position=hazard.position + hazard.velocity * dt,
                       time_remaining=time_remaining)
    elif isinstance(hazard, (RadiationStorm, Perturbation)):
        return replace(hazard, time_remaining=time_remaining)
    raise TypeError(f"Unknown hazard type {type(hazard).__name__}")


def advance(hazards: Iterable[Hazard], dt: float) -> List[Hazard]:
    """
    Age every hazard by dt, move debris, and drop expired hazards.

    A hazard is removed exactly when its time_remaining reaches 0 or below.
    Radiation storms and perturbations do not move.
    """
    advanced = []
    for hazard in hazards:
        time_remaining = hazard.time_remaining - dt
        if time_remaining <= 0:
            continue
        advanced.append(_advance_one(hazard, dt, time_remaining))
    return advanced


def collisions(position, hazards: Iterable[Hazard]) -> List[Hazard]:
    """Hazards whose centre lies within their radius of position (inclusive)"""
    return [hazard for hazard in hazards
            if hazard.distance_to(position) <= hazard.radius]


def radiation_dose(position, hazards: Iterable[Hazard]) -> float:
    """
    Radiation dose at a point.

    Sum of intensity·max(0, 1 − d/R) over the radiation storms containing
    the point; 0 if none do.
    """
    dose = 0.0
    for hazard in hazards:
        if not isinstance(hazard, RadiationStorm):
            continue
        distance = hazard.distance_to(position)
        if distance <= hazard.radius:
            dose += hazard.intensity * max(0.0, 1 - distance / hazard.radius)
    return dose


def storm_active(hazards: Iterable[Hazard]) -> bool:
    """True if any radiation storm has Kp >= config.STORM_KP_THRESHOLD"""
    return any(isinstance(hazard, RadiationStorm) and
               hazard.kp_index >= config.STORM_KP_THRESHOLD
               for hazard in hazards)


def collision_probability(position, velocity, debris: Hazard) -> float:
    """
    Heuristic collision risk in [0, 1).

    (1/(1 + d))·min(1, |v − v_debris|/10). A monotonic risk score for
    display and decisions, not a physical probability.
    """
    debris_velocity = debris.velocity if isinstance(debris, OrbitalDebris) else np.zeros(3)
    relative_speed = np.linalg.norm(np.asarray(velocity, dtype=float) - debris_velocity)
    distance = debris.distance_to(position)
    return float((1 / (1 + distance)) * min(1.0, relative_speed / 10))


def to_dataframe(hazards: Iterable[Hazard], index: Optional[list] = None) -> pd.DataFrame:
    """
    Tabulate hazards, one row per hazard.

    Kind-specific columns (kp_index, vx/vy/vz, mass, fx/fy/fz) are NaN for
    hazards of other kinds.
    """
    rows = []
    for hazard in hazards:
        row = {
            'id': hazard.id,
            'type': hazard.kind.value,
            'x': hazard.position[0],
            'y': hazard.position[1],
            'z': hazard.position[2],
            'radius': hazard.radius,
            'intensity': hazard.intensity,
            'duration': hazard.duration,
            'time_remaining': hazard.time_remaining,
            'kp_index': np.nan,
            'vx': np.nan, 'vy': np.nan, 'vz': np.nan,
            'mass': np.nan,
            'fx': np.nan, 'fy': np.nan, 'fz': np.nan,
        }
        if isinstance(hazard, RadiationStorm):
            row['kp_index'] = hazard.kp_index
        elif isinstance(hazard, OrbitalDebris):
            row['vx'], row['vy'], row['vz'] = hazard.velocity
            row['mass'] = hazard.mass
        elif isinstance(hazard, Perturbation):
            row['fx'], row['fy'], row['fz'] = hazard.force
        else:
            raise TypeError(f"Unknown hazard type {type(hazard).__name__}")
        rows.append(row)

    columns = ['id', 'type', 'x', 'y', 'z', 'radius', 'intensity', 'duration',
               'time_remaining', 'kp_index', 'vx', 'vy', 'vz', 'mass',
               'fx', 'fy', 'fz']
    return pd.DataFrame(rows, columns=columns, index=index)
