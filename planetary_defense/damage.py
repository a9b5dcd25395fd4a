#!/usr/bin/env python3
"""
Impact Damage Model for the Planetary Defense Simulator.

Maps an impactor's mass and velocity to a damage assessment:
- Kinetic energy in megatons of TNT
- Destruction, crater, fireball, thermal and shockwave radii
- Tsunami height for large impacts
- Casualty band from a seven-step energy ladder
- Cumulative list of environmental effects
- Equivalent number of 15 kt fission weapons

Every function here is pure. Non-finite or non-positive inputs are treated
as a zero-energy Minor Event instead of raising, since user-authored
asteroids can carry arbitrary values.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# CONSTANTS
# =============================================================================

# 1 megaton TNT in joules
MEGATON_TNT_JOULES = 4.184e15

# Reference fission weapon yield (megatons)
HIROSHIMA_YIELD_MT = 0.015

# Tsunami threshold (megatons)
TSUNAMI_THRESHOLD_MT = 10.0


@dataclass(frozen=True)
class CasualtyBand:
    """One rung of the casualty ladder; matches energies above ``threshold_mt``."""
    threshold_mt: float
    min_casualties: int
    max_casualties: int
    label: str


# Highest threshold first; the last rung catches everything else
CASUALTY_LADDER: tuple[CasualtyBand, ...] = (
    CasualtyBand(10000.0, 1_000_000_000, 8_000_000_000, "Extinction Event"),
    CasualtyBand(1000.0, 100_000_000, 1_000_000_000, "Global Catastrophe"),
    CasualtyBand(100.0, 10_000_000, 100_000_000, "Continental Devastation"),
    CasualtyBand(10.0, 1_000_000, 10_000_000, "Regional Disaster"),
    CasualtyBand(1.0, 100_000, 1_000_000, "City Destroyer"),
    CasualtyBand(0.01, 1_000, 100_000, "Local Impact"),
    CasualtyBand(-math.inf, 0, 1_000, "Minor Event"),
)

# Ascending thresholds; each crossed threshold adds its label in this order
ENVIRONMENTAL_EFFECT_LADDER: tuple[tuple[float, str], ...] = (
    (0.01, "Local seismic activity"),
    (0.1, "Widespread fires"),
    (1.0, "Regional dust cloud"),
    (10.0, "Atmospheric shockwave"),
    (100.0, "Global temperature drop"),
    (1000.0, "Impact winter (years)"),
    (10000.0, "Mass extinction event"),
)


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class CasualtyEstimate:
    """Casualty range and its label."""
    min: int
    max: int
    label: str


@dataclass(frozen=True)
class DamageAssessment:
    """
    Damage assessment for one impact. Immutable once computed.

    Attributes:
        impact_energy_mt: Kinetic energy in megatons TNT.
        casualties: Casualty range and label.
        destruction_radius_km: Radius of total destruction.
        crater_diameter_km: Final crater diameter.
        fireball_radius_km: Fireball radius.
        thermal_radius_km: Third-degree burn radius.
        shockwave_radius_km: Structural damage radius.
        tsunami_height_m: Wave height for ocean impacts, None below 10 MT.
        environmental_effects: Ordered effect labels.
        equivalent_nukes: Number of 15 kt weapons releasing the same energy.
    """
    impact_energy_mt: float
    casualties: CasualtyEstimate
    destruction_radius_km: float
    crater_diameter_km: float
    fireball_radius_km: float
    thermal_radius_km: float
    shockwave_radius_km: float
    tsunami_height_m: Optional[float]
    environmental_effects: tuple[str, ...]
    equivalent_nukes: int

    def to_dict(self) -> dict:
        """Plain-dict form for JSON output."""
        return {
            "impact_energy_mt": self.impact_energy_mt,
            "casualties": {
                "min": self.casualties.min,
                "max": self.casualties.max,
                "label": self.casualties.label,
            },
            "destruction_radius_km": self.destruction_radius_km,
            "crater_diameter_km": self.crater_diameter_km,
            "fireball_radius_km": self.fireball_radius_km,
            "thermal_radius_km": self.thermal_radius_km,
            "shockwave_radius_km": self.shockwave_radius_km,
            "tsunami_height_m": self.tsunami_height_m,
            "environmental_effects": list(self.environmental_effects),
            "equivalent_nukes": self.equivalent_nukes,
        }


# =============================================================================
# ENERGY AND RADII
# =============================================================================

def _positive_or_zero(value: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value) or value <= 0:
        return 0.0
    return value


def round_half_up(value: float) -> int:
    """Round halves up (2.5 -> 3, 62.5 -> 63) instead of to even."""
    return int(math.floor(value + 0.5))


def calculate_impact_energy(mass_kg: float, velocity_kps: float) -> float:
    """
    Kinetic energy of an impactor in megatons TNT.

    E = 0.5 * m * v^2 with v converted from km/s to m/s.
    """
    mass_kg = _positive_or_zero(mass_kg)
    velocity_ms = _positive_or_zero(velocity_kps) * 1000.0
    energy_joules = 0.5 * mass_kg * velocity_ms * velocity_ms
    energy_mt = energy_joules / MEGATON_TNT_JOULES
    return energy_mt if math.isfinite(energy_mt) else 0.0


def calculate_damage_radius(energy_mt: float) -> float:
    """Destruction radius in km, scaling as E^(1/3)."""
    return _positive_or_zero(energy_mt) ** (1.0 / 3.0) * 2.5


def classify_casualties(energy_mt: float) -> CasualtyBand:
    """
    Casualty band for an impact energy.

    Rungs are checked from the highest threshold down, so each energy
    matches exactly one band.
    """
    energy_mt = _positive_or_zero(energy_mt)
    for band in CASUALTY_LADDER:
        if energy_mt > band.threshold_mt:
            return band
    return CASUALTY_LADDER[-1]


def environmental_effects(energy_mt: float, tsunami_height_m: Optional[float] = None) -> tuple[str, ...]:
    """Ordered environmental effects: thresholds ascending, tsunami last."""
    energy_mt = _positive_or_zero(energy_mt)
    effects = [label for threshold, label in ENVIRONMENTAL_EFFECT_LADDER if energy_mt > threshold]
    if tsunami_height_m:
        effects.append(f"Mega-tsunami ({tsunami_height_m:.0f}m waves)")
    return tuple(effects)


# =============================================================================
# ASSESSMENT
# =============================================================================

def assess(mass_kg: float, velocity_kps: float) -> DamageAssessment:
    """
    Compute the damage assessment for an impactor.

    Args:
        mass_kg: Impactor mass in kilograms.
        velocity_kps: Impact velocity in km/s.

    Returns:
        A new DamageAssessment. Calling twice with the same inputs gives
        equal results.
    """
    energy = calculate_impact_energy(mass_kg, velocity_kps)

    tsunami_height = energy ** 0.5 * 5 if energy > TSUNAMI_THRESHOLD_MT else None
    band = classify_casualties(energy)

    return DamageAssessment(
        impact_energy_mt=energy,
        casualties=CasualtyEstimate(band.min_casualties, band.max_casualties, band.label),
        destruction_radius_km=calculate_damage_radius(energy),
        crater_diameter_km=energy ** 0.3 * 1.5,
        fireball_radius_km=energy ** 0.4 * 0.5,
        thermal_radius_km=energy ** 0.4 * 2,
        shockwave_radius_km=energy ** 0.33 * 4,
        tsunami_height_m=tsunami_height,
        environmental_effects=environmental_effects(energy, tsunami_height),
        equivalent_nukes=round_half_up(energy * 1000 / HIROSHIMA_YIELD_MT),
    )


# =============================================================================
# PRESENTATION HELPERS
# =============================================================================

def explosion_scale(energy_mt: float) -> float:
    """Visual explosion scale, log-scaled and clamped to [0.3, 3]."""
    energy_mt = _positive_or_zero(energy_mt)
    return min(max(math.log10(energy_mt + 1) * 0.5, 0.3), 3.0)


def sound_intensity(energy_mt: float) -> float:
    """Explosion cue intensity, log-scaled and clamped to [0.5, 1.5]."""
    energy_mt = _positive_or_zero(energy_mt)
    return min(max(math.log10(energy_mt + 1) * 0.3, 0.5), 1.5)


def explosion_color(energy_mt: float) -> str:
    """Hex colour for the impact fireball by energy band."""
    if energy_mt > 1000:
        return "#ff4444"
    if energy_mt > 100:
        return "#ff8844"
    if energy_mt > 10:
        return "#ffaa44"
    return "#ffdd44"


def format_count(num: float) -> str:
    """Compact count: 1.2B, 3.4M, 5.6K, or the plain number."""
    if num >= 1_000_000_000:
        return f"{num / 1_000_000_000:.1f}B"
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1000:
        return f"{num / 1000:.1f}K"
    return str(num)
