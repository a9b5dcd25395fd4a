#!/usr/bin/env python3
"""
Threat and Defense Catalog for the Planetary Defense Simulator.

Defines the two immutable inputs to a mission run:
- Asteroid: the incoming body (size, speed, hazard scales, orbit descriptors)
- DefenseStrategy: the mitigation technique and its success characteristics

Built-in entries are loaded from the packaged ``data/catalog.json``. Custom
asteroids authored by a user are built with ``create_custom_asteroid``;
storing them is the host application's business.
"""

from __future__ import annotations

import json
import math
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


# =============================================================================
# CONSTANTS
# =============================================================================

# Bulk density assumed when deriving mass from diameter (kg/m^3)
ASTEROID_DENSITY_KG_M3 = 2000.0

# Size class boundaries (metres)
SMALL_MAX_DIAMETER_M = 100.0
MEDIUM_MAX_DIAMETER_M = 500.0

# Strategy code for the nuclear-class strategy
NUCLEAR_STRATEGY_CODE = "NUKE"

DEFAULT_CATALOG_PATH = Path(__file__).parent / "data" / "catalog.json"

TORINO_DESCRIPTIONS: dict[int, str] = {
    0: "No hazard - likelihood of collision zero or well below chance of random object striking Earth",
    1: "Normal - a routine discovery with pass near Earth posing no unusual level of danger",
    2: "Meriting attention - somewhat close but not highly unusual encounter; collision very unlikely",
    3: "Meriting attention - close encounter with 1% or greater chance of collision causing local destruction",
    4: "Meriting attention - close encounter with 1% or greater chance of regional devastation",
    5: "Threatening - close encounter with significant threat of regional devastation",
    6: "Threatening - close encounter with significant threat of global catastrophe",
    7: "Threatening - very close encounter with extremely significant threat of global catastrophe",
    8: "Certain collision - collision capable of causing localized destruction",
    9: "Certain collision - collision capable of causing unprecedented regional devastation",
    10: "Certain collision - collision capable of causing global climatic catastrophe",
}


# =============================================================================
# ENUMS
# =============================================================================

class SizeClass(Enum):
    """Target size class used for strategy effectiveness lookups."""
    SMALL = "small"      # < 100 m
    MEDIUM = "medium"    # 100-500 m
    LARGE = "large"      # >= 500 m


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class Asteroid:
    """
    An incoming near-Earth object.

    Orbital descriptors are carried for visualisation placement only; the
    simulation core reads diameter, velocity, mass and torino_scale.

    Attributes:
        asteroid_id: Catalog identifier.
        name: Display name.
        diameter_m: Mean diameter in metres.
        velocity_kps: Approach velocity in km/s.
        mass_kg: Mass in kg (derived from diameter for catalog entries).
        torino_scale: Torino hazard rating 0-10.
        palermo_scale: Palermo technical hazard rating.
        impact_probability: Probability of impact (0-1).
        distance: Current distance from Earth (catalog units).
        semi_major_axis_au: Orbit semi-major axis in AU.
        eccentricity: Orbit eccentricity.
        inclination_deg: Orbit inclination to the ecliptic.
        orbital_period_years: Orbital period in years.
        is_custom: True for user-authored asteroids.
    """
    asteroid_id: str
    name: str
    diameter_m: float
    velocity_kps: float
    mass_kg: float
    torino_scale: int = 0
    palermo_scale: float = 0.0
    impact_probability: float = 0.0
    distance: float = 0.0
    designation: str = ""
    semi_major_axis_au: float = 1.0
    eccentricity: float = 0.0
    inclination_deg: float = 0.0
    orbital_period_years: float = 1.0
    close_approach_date: str = ""
    discovery_date: str = ""
    is_custom: bool = False

    @property
    def size_class(self) -> SizeClass:
        """Size class derived from diameter."""
        return classify_size(self.diameter_m)

    @classmethod
    def from_json(cls, data: dict) -> Asteroid:
        """
        Create an Asteroid from a catalog entry.

        Mass is derived from diameter unless the entry supplies ``mass_kg``.
        """
        diameter = float(data.get("diameter_m", 0.0))
        return cls(
            asteroid_id=data["id"],
            name=data.get("name", data["id"]),
            designation=data.get("designation", data.get("name", data["id"])),
            diameter_m=diameter,
            velocity_kps=float(data.get("velocity_kps", 0.0)),
            mass_kg=float(data.get("mass_kg", calculate_mass(diameter))),
            torino_scale=int(data.get("torino_scale", 0)),
            palermo_scale=float(data.get("palermo_scale", 0.0)),
            impact_probability=float(data.get("impact_probability", 0.0)),
            distance=float(data.get("distance", 0.0)),
            semi_major_axis_au=float(data.get("semi_major_axis_au", 1.0)),
            eccentricity=float(data.get("eccentricity", 0.0)),
            inclination_deg=float(data.get("inclination_deg", 0.0)),
            orbital_period_years=float(data.get("orbital_period_years", 1.0)),
            close_approach_date=data.get("close_approach_date", ""),
            discovery_date=data.get("discovery_date", ""),
            is_custom=bool(data.get("is_custom", False)),
        )


@dataclass(frozen=True)
class DefenseStrategy:
    """
    A planetary defense technique.

    Attributes:
        strategy_id: Catalog identifier (e.g. 'kinetic').
        name: Display name.
        code: Short mission code (DART, GRAV, NUKE, LASR).
        success_rate: Baseline success rate (0-1).
        effectiveness: Success multiplier keyed by target size class.
        lead_time_years: Years of warning the technique needs.
        tech_readiness: Technology readiness level (1-9).
        cost_billion_usd: Programme cost estimate.
        description: One-paragraph summary.
    """
    strategy_id: str
    name: str
    code: str
    success_rate: float
    effectiveness: dict[SizeClass, float] = field(default_factory=dict)
    lead_time_years: float = 0.0
    tech_readiness: int = 1
    cost_billion_usd: float = 0.0
    description: str = ""

    @property
    def is_nuclear(self) -> bool:
        """Whether this is the nuclear-class strategy."""
        return self.code == NUCLEAR_STRATEGY_CODE

    def effectiveness_for(self, size_class: SizeClass) -> float:
        """Effectiveness multiplier for a size class (0 if not listed)."""
        return self.effectiveness.get(size_class, 0.0)

    @classmethod
    def from_json(cls, data: dict) -> DefenseStrategy:
        """Create a DefenseStrategy from a catalog entry."""
        effectiveness = {
            SizeClass(key): float(value)
            for key, value in data.get("effectiveness", {}).items()
        }
        return cls(
            strategy_id=data["id"],
            name=data.get("name", data["id"]),
            code=data["code"],
            success_rate=float(data.get("success_rate", 0.0)),
            effectiveness=effectiveness,
            lead_time_years=float(data.get("lead_time_years", 0.0)),
            tech_readiness=int(data.get("tech_readiness", 1)),
            cost_billion_usd=float(data.get("cost_billion_usd", 0.0)),
            description=data.get("description", ""),
        )


@dataclass(frozen=True)
class TimelineStep:
    """One step of the presentational mission timeline."""
    step_id: int
    name: str
    duration: str
    description: str


@dataclass(frozen=True)
class AsteroidPreset:
    """Starting values offered when authoring a custom asteroid."""
    name: str
    diameter_m: float
    velocity_kps: float
    impact_probability: float
    torino_scale: int


CUSTOM_PRESETS: tuple[AsteroidPreset, ...] = (
    AsteroidPreset("Small Rock", 10, 15, 0.001, 0),
    AsteroidPreset("City Killer", 100, 20, 0.005, 4),
    AsteroidPreset("Regional Threat", 300, 25, 0.01, 6),
    AsteroidPreset("Extinction Event", 1000, 30, 0.1, 10),
)


MISSION_TIMELINE: tuple[TimelineStep, ...] = (
    TimelineStep(1, "DETECTION", "T-5 Years", "Asteroid identified and tracked by global observation network"),
    TimelineStep(2, "ASSESSMENT", "T-4 Years", "Threat analysis and international coordination initiated"),
    TimelineStep(3, "PREPARATION", "T-3 Years", "Defense mission designed and spacecraft constructed"),
    TimelineStep(4, "LAUNCH", "T-1 Year", "Deflection spacecraft launched toward intercept trajectory"),
    TimelineStep(5, "INTERCEPT", "T-0", "Defense system engages target asteroid"),
)


# =============================================================================
# DERIVED QUANTITIES
# =============================================================================

def calculate_mass(diameter_m: float, density_kg_m3: float = ASTEROID_DENSITY_KG_M3) -> float:
    """
    Mass of a uniform sphere of the given diameter.

    Non-finite or non-positive diameters give zero mass.
    """
    if not math.isfinite(diameter_m) or diameter_m <= 0:
        return 0.0
    radius = diameter_m / 2.0
    volume = (4.0 / 3.0) * math.pi * radius**3
    return volume * density_kg_m3


def classify_size(diameter_m: float) -> SizeClass:
    """Classify a diameter: small < 100 m <= medium < 500 m <= large."""
    if diameter_m < SMALL_MAX_DIAMETER_M:
        return SizeClass.SMALL
    if diameter_m < MEDIUM_MAX_DIAMETER_M:
        return SizeClass.MEDIUM
    return SizeClass.LARGE


def get_torino_description(scale: int) -> str:
    """Public-communication description of a Torino scale level."""
    return TORINO_DESCRIPTIONS.get(scale, "Unknown classification")


def torino_band(scale: int) -> str:
    """Colour band for a Torino level: none, normal, attention, threatening, certain."""
    if scale <= 0:
        return "none"
    if scale <= 1:
        return "normal"
    if scale <= 4:
        return "attention"
    if scale <= 7:
        return "threatening"
    return "certain"


# =============================================================================
# CATALOG LOADING
# =============================================================================

def load_catalog_data(filepath: str | Path = DEFAULT_CATALOG_PATH) -> dict:
    """
    Load raw catalog data from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    with open(filepath, "r") as f:
        return json.load(f)


def load_asteroids(catalog_data: Optional[dict] = None) -> list[Asteroid]:
    """All asteroids in the catalog, in catalog order."""
    data = catalog_data if catalog_data is not None else load_catalog_data()
    return [Asteroid.from_json(entry) for entry in data.get("asteroids", [])]


def load_strategies(catalog_data: Optional[dict] = None) -> list[DefenseStrategy]:
    """All defense strategies in the catalog, in catalog order."""
    data = catalog_data if catalog_data is not None else load_catalog_data()
    return [DefenseStrategy.from_json(entry) for entry in data.get("strategies", [])]


def get_asteroid(asteroid_id: str, catalog_data: Optional[dict] = None) -> Asteroid:
    """
    Look up a catalog asteroid by id.

    Raises:
        KeyError: If the asteroid is not in the catalog.
    """
    for asteroid in load_asteroids(catalog_data):
        if asteroid.asteroid_id == asteroid_id:
            return asteroid
    raise KeyError(f"Asteroid '{asteroid_id}' not found in catalog")


def get_strategy(key: str, catalog_data: Optional[dict] = None) -> DefenseStrategy:
    """
    Look up a strategy by id ('kinetic') or mission code ('DART').

    Raises:
        KeyError: If no strategy matches.
    """
    for strategy in load_strategies(catalog_data):
        if key in (strategy.strategy_id, strategy.code):
            return strategy
    raise KeyError(f"Defense strategy '{key}' not found in catalog")


# =============================================================================
# CUSTOM ASTEROIDS
# =============================================================================

def _base36(value: int) -> str:
    digits = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(digits[rem])
    return "".join(reversed(out))


def create_custom_asteroid(
    name: str = "",
    diameter_m: float = 50.0,
    velocity_kps: float = 20.0,
    impact_probability: float = 0.01,
    torino_scale: int = 1,
    semi_major_axis_au: float = 1.5,
    eccentricity: float = 0.3,
    inclination_deg: float = 5.0,
    close_approach_date: str = "2030-01-01",
    timestamp_ms: Optional[int] = None,
) -> Asteroid:
    """
    Build a well-formed Asteroid from user-authored values.

    A blank name becomes ``Custom-<base36 timestamp>``. Orbital period comes
    from Kepler's third law (a^1.5 years for a in AU) and the Palermo scale
    is approximated as log10(impact probability) + 1. Values are taken as
    given otherwise; the simulation core tolerates degenerate sizes/speeds.

    Args:
        name: Display name (optional).
        diameter_m: Diameter in metres.
        velocity_kps: Velocity in km/s.
        impact_probability: Probability of impact (0-1).
        torino_scale: Torino rating, clamped to 0-10.
        semi_major_axis_au: Semi-major axis in AU.
        eccentricity: Orbital eccentricity.
        inclination_deg: Orbital inclination.
        close_approach_date: ISO date of close approach.
        timestamp_ms: Creation time in ms (defaults to now).

    Returns:
        A new custom Asteroid.
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    stamp = _base36(timestamp_ms)
    display_name = name.strip() or f"Custom-{stamp}"

    palermo = math.log10(impact_probability) + 1 if impact_probability > 0 else -10.0
    period = semi_major_axis_au ** 1.5 if semi_major_axis_au > 0 else 0.0

    return Asteroid(
        asteroid_id=f"custom-{timestamp_ms}",
        name=display_name,
        designation=display_name,
        diameter_m=diameter_m,
        velocity_kps=velocity_kps,
        mass_kg=calculate_mass(diameter_m),
        torino_scale=max(0, min(10, int(torino_scale))),
        palermo_scale=palermo,
        impact_probability=impact_probability,
        distance=semi_major_axis_au * 0.01,
        semi_major_axis_au=semi_major_axis_au,
        eccentricity=eccentricity,
        inclination_deg=inclination_deg,
        orbital_period_years=period,
        close_approach_date=close_approach_date,
        discovery_date=time.strftime("%Y-%m-%d", time.gmtime(timestamp_ms / 1000)),
        is_custom=True,
    )
