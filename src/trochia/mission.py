'''Mission snapshot and the per-frame / per-command transitions on it

A MissionSnapshot bundles everything the simulation needs between frames.
tick() and burn() are pure: they return a new snapshot and leave the old
one untouched, so the caller decides when to commit'''

import numpy as np
import pandas as pd
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Optional, Tuple, Union
from .bodies import CelestialBody, EARTH, MOON, VISUALIZATION_SCALE
from .config import config
from .hazards import Hazard, advance, collisions, generate
from .orbital_elements import OrbitalElements
from .propagation import propagate
from .propulsion import BurnDirection, apply_burn, burn_vector
from .spacecraft import Spacecraft

# initial low orbit
INITIAL_ALTITUDE_KM = 300.0
INITIAL_MASS = 1000.0   # kg
INITIAL_FUEL = 500.0    # kg


class EventType(Enum):
    BURN = 'burn'
    HAZARD = 'hazard'
    MILESTONE = 'milestone'


@dataclass(frozen=True)
class MissionEvent:
    """
    Entry in the mission log.

    Attributes
    ----------
    time : float
        Simulation time of the event [s]
    category : EventType
    description : str
    delta_v : float, optional
        Delta-v of a burn [m/s]
    """
    time: float
    category: EventType
    description: str
    delta_v: Optional[float] = None


@dataclass(frozen=True, eq=False)
class MissionSnapshot:
    """
    Complete simulation state between two frames.

    Distances are in visualization units (1 unit = VISUALIZATION_SCALE km)
    with Earth and Moon rescaled to match. events is append-only and is
    cleared only by reset().
    """
    spacecraft: Spacecraft
    earth: CelestialBody
    moon: CelestialBody
    hazards: Tuple[Hazard, ...] = ()
    game_time: float = 0.0
    time_warp: float = 2.0
    events: Tuple[MissionEvent, ...] = ()
    score: float = field(default_factory=lambda: config.MAX_SCORE)

    def with_events(self, *events: MissionEvent) -> "MissionSnapshot":
        """Snapshot with events appended to the log"""
        return replace(self, events=self.events + tuple(events))


def initial_snapshot(rng: Union[np.random.Generator, int, None] = None,
                     hazard_count: int = 5,
                     time_warp: float = 2.0) -> MissionSnapshot:
    """
    Mission start: a fully fuelled spacecraft in low Earth orbit.

    Parameters
    ----------
    rng : numpy.random.Generator or int, optional
        Random source or seed for the initial hazards
    hazard_count : int
        Number of hazards generated at t = 0
    time_warp : float
        Initial time-warp multiplier
    """
    earth = EARTH.scaled(VISUALIZATION_SCALE)
    moon = MOON.scaled(VISUALIZATION_SCALE)
    elements = OrbitalElements(
        a=(EARTH.radius + INITIAL_ALTITUDE_KM) / VISUALIZATION_SCALE,
        e=0.01, i=0.1, raan=0.0, argp=0.0, nu=0.0, M=0.0,
        body=earth,
    )
    spacecraft = Spacecraft.from_elements(elements, mass=INITIAL_MASS,
                                          fuel=INITIAL_FUEL)
    return MissionSnapshot(
        spacecraft=spacecraft,
        earth=earth,
        moon=moon,
        hazards=tuple(generate(hazard_count, 0, rng)),
        time_warp=time_warp,
    )


def reset(rng: Union[np.random.Generator, int, None] = None,
          hazard_count: int = 5) -> MissionSnapshot:
    """Fresh mission with an empty log and time warp 1"""
    return initial_snapshot(rng, hazard_count=hazard_count, time_warp=1.0)


def toggle_time_warp(snapshot: MissionSnapshot) -> MissionSnapshot:
    """Switch time warp between 1x and 2x"""
    return replace(snapshot, time_warp=2.0 if snapshot.time_warp == 1 else 1.0)


def tick(snapshot: MissionSnapshot, frame_dt: float,
         speed: Optional[float] = None) -> MissionSnapshot:
    """
    Advance the mission by one rendered frame.

    Simulation time step is frame_dt · time_warp · speed. The spacecraft is
    propagated about the Earth with the Moon as perturber, hazards are aged,
    the burn display flag is cleared and milestone events are logged.

    Parameters
    ----------
    snapshot : MissionSnapshot
    frame_dt : float
        Wall-clock frame duration [s]
    speed : float, optional
        Simulation speed-up, defaults to config.SIMULATION_SPEED
    """
    if speed is None:
        speed = config.SIMULATION_SPEED
    dt = frame_dt * snapshot.time_warp * speed
    game_time = snapshot.game_time + dt

    spacecraft = propagate(snapshot.spacecraft.replace(is_burning=False),
                           snapshot.earth, dt, perturber=snapshot.moon)
    hazards = tuple(advance(snapshot.hazards, dt))

    events = []
    soi = config.MOON_SOI_RADIUS
    if (snapshot.moon.distance_to(snapshot.spacecraft.position) >= soi and
            snapshot.moon.distance_to(spacecraft.position) < soi):
        events.append(MissionEvent(game_time, EventType.MILESTONE,
                                   "Entered Moon's sphere of influence!"))

    previous = {hazard.id for hazard in
                collisions(snapshot.spacecraft.position, snapshot.hazards)}
    for hazard in collisions(spacecraft.position, hazards):
        if hazard.id not in previous:
            events.append(MissionEvent(game_time, EventType.HAZARD,
                                       f"Entered {hazard.kind.value} hazard {hazard.id}"))

    return replace(snapshot, spacecraft=spacecraft, hazards=hazards,
                   game_time=game_time).with_events(*events)


def burn(snapshot: MissionSnapshot,
         direction: Union[BurnDirection, str, Iterable[float]] = BurnDirection.PROGRADE,
         delta_v: Optional[float] = None) -> MissionSnapshot:
    """
    Apply a burn command against the Earth and log it.

    Parameters
    ----------
    snapshot : MissionSnapshot
    direction : BurnDirection, str or array-like
        Named local direction or an explicit thrust vector
    delta_v : float, optional
        Requested delta-v [m/s], defaults to config.DEFAULT_BURN_DV

    Returns
    -------
    MissionSnapshot
        Unchanged if the tank is already empty
    """
    spacecraft = snapshot.spacecraft
    if spacecraft.fuel <= 0:
        return snapshot
    if delta_v is None:
        delta_v = config.DEFAULT_BURN_DV
    if isinstance(direction, (BurnDirection, str)):
        direction = burn_vector(spacecraft, direction)

    result = apply_burn(spacecraft, direction, delta_v, snapshot.earth)
    burnt = result.spacecraft

    events = [MissionEvent(
        snapshot.game_time, EventType.BURN,
        f"Burn: {result.delta_v:.2f} m/s, Fuel: {burnt.fuel:.1f} kg",
        delta_v=result.delta_v,
    )]
    threshold = config.LOW_FUEL_THRESHOLD
    if spacecraft.fuel >= threshold > burnt.fuel > 0:
        events.append(MissionEvent(snapshot.game_time, EventType.HAZARD,
                                   "Low fuel warning!"))

    return replace(snapshot, spacecraft=burnt,
                   score=config.MAX_SCORE * burnt.fuel / burnt.max_fuel).with_events(*events)


def events_to_dataframe(events: Iterable[MissionEvent]) -> pd.DataFrame:
    """Mission log as a DataFrame with columns time, category, description, delta_v"""
    rows = [{
        'time': event.time,
        'category': event.category.value,
        'description': event.description,
        'delta_v': np.nan if event.delta_v is None else event.delta_v,
    } for event in events]
    return pd.DataFrame(rows, columns=['time', 'category', 'description', 'delta_v'])
