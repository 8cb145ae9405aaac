"""
Trochia: Orbital Mechanics Core for Interactive Mission Simulation

A Python package for Keplerian propagation, rocket-equation propulsion,
Hohmann transfers and transient space hazards, built from pure functions
over immutable values.
"""

# Configuration
from .config import config, temp_config

# Core classes
from .orbital_elements import OrbitalElements, OrbitalElements as OE
from .bodies import CelestialBody, VISUALIZATION_SCALE
from .spacecraft import Spacecraft
from .transfer import OrbitTrack
from .hazards import (
    HazardType, Hazard, RadiationStorm, OrbitalDebris, Perturbation,
)
from .mission import EventType, MissionEvent, MissionSnapshot
from .propulsion import BurnDirection, BurnResult

# Commonly-used celestial bodies
from .bodies import EARTH, MOON

# Operations
from .orbital_elements import (
    elements_to_state, state_to_elements,
    vis_viva_speed, orbital_energy, angular_momentum,
)
from .propagation import propagate, solve_kepler
from .transfer import hohmann_transfer, sample_points
from .propulsion import (
    delta_v_from_masses, fuel_for_delta_v, apply_burn, burn_vector,
    performance_metrics, can_reach_target,
)
from . import hazards
from . import mission

# Package metadata
__version__ = "0.1.0"

# Define what gets imported with "from trochia import *"
__all__ = [
    # Configuration
    "config",
    "temp_config",
    # Classes
    "OrbitalElements",
    "CelestialBody",
    "Spacecraft",
    "OrbitTrack",
    "HazardType",
    "Hazard",
    "RadiationStorm",
    "OrbitalDebris",
    "Perturbation",
    "EventType",
    "MissionEvent",
    "MissionSnapshot",
    "BurnDirection",
    "BurnResult",
    # Abbreviations
    "OE",
    # Constants
    "EARTH",
    "MOON",
    "VISUALIZATION_SCALE",
    # Operations
    "elements_to_state",
    "state_to_elements",
    "vis_viva_speed",
    "orbital_energy",
    "angular_momentum",
    "propagate",
    "solve_kepler",
    "hohmann_transfer",
    "sample_points",
    "delta_v_from_masses",
    "fuel_for_delta_v",
    "apply_burn",
    "burn_vector",
    "performance_metrics",
    "can_reach_target",
    # Submodules
    "hazards",
    "mission",
]
