"""
Mission Report Generator for the Planetary Defense Simulator.

This module turns run results into presentation data:
- MissionReport: results of one run (outcome, deflection, energy figures,
  damage assessment and an event timeline), rendered as text or JSON
- ThreatAssessment: pre-mission briefing figures for one asteroid
- StrategyComparison: effectiveness-weighted comparison of every strategy
  against one asteroid

Everything here is derived from catalog inputs and recorded events; nothing
feeds back into the simulation.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from .catalog import Asteroid, DefenseStrategy, get_torino_description, torino_band
from .damage import (
    CasualtyEstimate,
    DamageAssessment,
    assess,
    calculate_damage_radius,
    calculate_impact_energy,
    format_count,
    round_half_up,
)
from .events import SimulationEvent, SimulationEventType
from .outcome import comparison_probability, estimate_success_probability

if TYPE_CHECKING:
    from .orchestrator import MissionOrchestrator


# =============================================================================
# CONSTANTS
# =============================================================================

REPORT_WIDTH = 60
SEPARATOR_CHAR = "="

# Results screen figures
LIVES_PER_SQUARE_KM = 1000
MISS_DISTANCE_PER_DEFLECTION_PERCENT = 0.01

EVENT_DESCRIPTIONS: dict[SimulationEventType, str] = {
    SimulationEventType.SPACE_AMBIENCE_START: "Mission control online",
    SimulationEventType.SPACE_AMBIENCE_STOP: "Mission control offline",
    SimulationEventType.LAUNCH: "Defense spacecraft launched",
    SimulationEventType.LASER_BEAM_START: "Ablation laser engaged",
    SimulationEventType.LASER_BEAM_STOP: "Ablation laser disengaged",
    SimulationEventType.IMPACT: "Impact",
    SimulationEventType.NUCLEAR_EXPLOSION: "Nuclear device detonated",
    SimulationEventType.SUCCESS: "Threat neutralized",
    SimulationEventType.FAILURE: "Intercept failed",
    SimulationEventType.ATMOSPHERIC_ENTRY: "Atmospheric entry",
    SimulationEventType.EXPLOSION: "Airburst and ground explosion",
    SimulationEventType.RUMBLE: "Seismic shock",
    SimulationEventType.OUTCOME_RESOLVED: "Intercept outcome determined",
    SimulationEventType.VISUAL_FADE: "Aftermath fades",
    SimulationEventType.SHOW_IMPACT: "Impact trajectory confirmed",
    SimulationEventType.DAMAGE_READY: "Damage assessment complete",
    SimulationEventType.IMPACT_COMPLETE: "Impact sequence complete",
    SimulationEventType.MISSION_COMPLETE: "Mission complete",
}


# =============================================================================
# TIMELINE
# =============================================================================

@dataclass
class TimelineEntry:
    """
    One line of the mission timeline.

    Attributes:
        timestamp: Run clock when the event occurred (seconds).
        source: Emitting stage.
        phase: Phase at emission.
        event_name: Event type name.
        description: Human-readable description.
        data: JSON-safe event data.
    """
    timestamp: float
    source: str
    phase: str
    event_name: str
    description: str
    data: dict = field(default_factory=dict)

    def format_timestamp(self) -> str:
        """Format timestamp as MM:SS.s."""
        minutes = int(self.timestamp // 60)
        seconds = self.timestamp - minutes * 60
        return f"{minutes:02d}:{seconds:04.1f}"


def _describe(event: SimulationEvent) -> str:
    description = EVENT_DESCRIPTIONS.get(event.event_type, event.event_type.name.replace("_", " ").title())
    if event.event_type == SimulationEventType.PHASE_CHANGED:
        return f"Phase: {event.data.get('phase', event.phase)}"
    if event.event_type == SimulationEventType.OUTCOME_RESOLVED:
        return f"{description}: {'success' if event.data.get('success') else 'failure'}"
    if event.event_type == SimulationEventType.MISSION_COMPLETE and "deflection_amount" in event.data:
        return f"{description} ({event.data['deflection_amount']:.1f}% deflection)"
    return description


def _json_safe(data: dict) -> dict:
    safe = {}
    for key, value in data.items():
        if isinstance(value, DamageAssessment):
            safe[key] = value.to_dict()
        elif isinstance(value, (str, int, float, bool)) or value is None:
            safe[key] = value
        else:
            safe[key] = str(value)
    return safe


def build_timeline(events: list[SimulationEvent]) -> list[TimelineEntry]:
    """Timeline entries for recorded events, in emission order."""
    return [
        TimelineEntry(
            timestamp=event.timestamp,
            source=event.source,
            phase=event.phase,
            event_name=event.event_type.name,
            description=_describe(event),
            data=_json_safe(event.data),
        )
        for event in events
    ]


# =============================================================================
# MISSION REPORT
# =============================================================================

@dataclass
class MissionReport:
    """
    Results of one mission run.

    Attributes:
        asteroid_name: Target name.
        strategy_name: Strategy name.
        strategy_code: Strategy mission code.
        success: Whether the threat was neutralized.
        deflection_amount: Narrative trajectory change (percent).
        impact_energy_mt: Impact energy the asteroid carried.
        damage_radius_km: Destruction radius had it struck.
        lives_protected: Estimated lives protected (0 on failure).
        energy_redirected_mt: Energy diverted by the deflection.
        original_miss_distance: Catalog distance before the mission.
        new_miss_distance: Distance after the deflection.
        assessment: Damage assessment when the asteroid struck.
        timeline: Recorded events.
    """
    asteroid_name: str
    strategy_name: str
    strategy_code: str
    success: bool
    deflection_amount: float
    impact_energy_mt: float
    damage_radius_km: float
    lives_protected: int
    energy_redirected_mt: float
    original_miss_distance: float
    new_miss_distance: float
    assessment: Optional[DamageAssessment] = None
    timeline: list[TimelineEntry] = field(default_factory=list)

    @property
    def status(self) -> str:
        """Headline status."""
        return "THREAT NEUTRALIZED" if self.success else "IMPACT OCCURRED"

    @property
    def duration_seconds(self) -> float:
        """Run length according to the timeline."""
        if not self.timeline:
            return 0.0
        return self.timeline[-1].timestamp

    # -------------------------------------------------------------------------
    # Text Output Format
    # -------------------------------------------------------------------------

    def to_text(self) -> str:
        """
        Generate human-readable mission summary.

        Returns:
            Formatted text report.
        """
        lines = []

        lines.append(SEPARATOR_CHAR * REPORT_WIDTH)
        lines.append("MISSION REPORT".center(REPORT_WIDTH))
        lines.append(SEPARATOR_CHAR * REPORT_WIDTH)

        lines.append(f"Target: {self.asteroid_name}")
        lines.append(f"Strategy: {self.strategy_name} [{self.strategy_code}]")
        lines.append(f"Status: {self.status}")
        lines.append("")

        lines.append("RESULTS:")
        lines.append(f"  Deflection:          {self.deflection_amount:.1f}%")
        lines.append(f"  Impact energy:       {self.impact_energy_mt:.2f} MT")
        lines.append(f"  Energy redirected:   {self.energy_redirected_mt:.1f} MT")
        lines.append(f"  Damage radius:       {self.damage_radius_km:.2f} km")
        lines.append(
            f"  Miss distance:       {self.original_miss_distance:.3f} -> {self.new_miss_distance:.3f} AU"
        )
        lines.append(f"  Lives protected:     {format_count(self.lives_protected)}")
        lines.append("")

        if self.assessment is not None:
            casualties = self.assessment.casualties
            lines.append("DAMAGE ASSESSMENT:")
            lines.append(f"  Classification:      {casualties.label}")
            lines.append(
                f"  Casualties:          {format_count(casualties.min)} - {format_count(casualties.max)}"
            )
            lines.append(f"  Crater diameter:     {self.assessment.crater_diameter_km:.2f} km")
            lines.append(f"  Fireball radius:     {self.assessment.fireball_radius_km:.2f} km")
            lines.append(f"  Equivalent weapons:  {format_count(self.assessment.equivalent_nukes)}")
            if self.assessment.tsunami_height_m is not None:
                lines.append(f"  Tsunami height:      {self.assessment.tsunami_height_m:.0f} m")
            for effect in self.assessment.environmental_effects:
                lines.append(f"    - {effect}")
            lines.append("")

        if self.timeline:
            lines.append("TIMELINE:")
            for entry in self.timeline:
                if entry.event_name == SimulationEventType.PHASE_CHANGED.name:
                    continue
                lines.append(f"  {entry.format_timestamp()} - {entry.description}")
            lines.append("")

        lines.append(SEPARATOR_CHAR * REPORT_WIDTH)
        return "\n".join(lines)

    # -------------------------------------------------------------------------
    # JSON Output Format
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Structured report data."""
        return {
            "asteroid_name": self.asteroid_name,
            "strategy": {
                "name": self.strategy_name,
                "code": self.strategy_code,
            },
            "success": self.success,
            "status": self.status,
            "deflection_amount": self.deflection_amount,
            "impact_energy_mt": self.impact_energy_mt,
            "damage_radius_km": self.damage_radius_km,
            "lives_protected": self.lives_protected,
            "energy_redirected_mt": self.energy_redirected_mt,
            "miss_distance": {
                "original": self.original_miss_distance,
                "new": self.new_miss_distance,
            },
            "assessment": self.assessment.to_dict() if self.assessment is not None else None,
            "duration_seconds": self.duration_seconds,
            "timeline": [
                {
                    "timestamp": entry.timestamp,
                    "time": entry.format_timestamp(),
                    "source": entry.source,
                    "phase": entry.phase,
                    "event": entry.event_name,
                    "description": entry.description,
                    "data": entry.data,
                }
                for entry in self.timeline
            ],
        }

    def to_json(self) -> str:
        """
        Generate structured JSON report.

        Returns:
            JSON string with complete mission data.
        """
        return json.dumps(self.to_dict(), indent=2)


def create_mission_report(
    asteroid: Asteroid,
    strategy: DefenseStrategy,
    success: bool,
    deflection_amount: float,
    events: Optional[list[SimulationEvent]] = None,
    assessment: Optional[DamageAssessment] = None
) -> MissionReport:
    """
    Build the results report for a finished run.

    Args:
        asteroid: Target asteroid.
        strategy: Strategy used.
        success: Run outcome.
        deflection_amount: Narrative deflection (percent).
        events: Recorded events for the timeline.
        assessment: Damage assessment if the asteroid struck.

    Returns:
        MissionReport with derived figures.
    """
    energy = calculate_impact_energy(asteroid.mass_kg, asteroid.velocity_kps)
    radius = calculate_damage_radius(energy)

    return MissionReport(
        asteroid_name=asteroid.name,
        strategy_name=strategy.name,
        strategy_code=strategy.code,
        success=success,
        deflection_amount=deflection_amount,
        impact_energy_mt=energy,
        damage_radius_km=radius,
        lives_protected=round_half_up(radius * radius * LIVES_PER_SQUARE_KM) if success else 0,
        energy_redirected_mt=energy * deflection_amount / 100.0,
        original_miss_distance=asteroid.distance,
        new_miss_distance=asteroid.distance + deflection_amount * MISS_DISTANCE_PER_DEFLECTION_PERCENT,
        assessment=assessment,
        timeline=build_timeline(events or []),
    )


def create_report_from_orchestrator(orchestrator: MissionOrchestrator) -> MissionReport:
    """
    Build the results report from a completed orchestrator run.

    Raises:
        ValueError: If the run has not completed.
    """
    if orchestrator.success is None or orchestrator.deflection_amount is None:
        raise ValueError("Run has not completed; no report available")
    return create_mission_report(
        orchestrator.asteroid,
        orchestrator.strategy,
        orchestrator.success,
        orchestrator.deflection_amount,
        events=orchestrator.events,
        assessment=orchestrator.assessment,
    )


# =============================================================================
# THREAT ASSESSMENT
# =============================================================================

@dataclass(frozen=True)
class ThreatAssessment:
    """
    Pre-mission briefing figures for one asteroid.

    Attributes:
        asteroid_name: Asteroid name.
        impact_energy_mt: Kinetic energy at impact.
        damage_radius_km: Destruction radius.
        affected_area_km2: Area inside the destruction radius.
        torino_scale: Torino level.
        torino_description: Public description of the Torino level.
        torino_band: Colour band (none, normal, attention, threatening, certain).
        palermo_scale: Palermo rating.
        palermo_summary: Palermo rating relative to background hazard.
        impact_odds: N for "1 in N" odds, None when probability is zero.
    """
    asteroid_name: str
    impact_energy_mt: float
    damage_radius_km: float
    affected_area_km2: float
    torino_scale: int
    torino_description: str
    torino_band: str
    palermo_scale: float
    palermo_summary: str
    impact_odds: Optional[int]


def assess_threat(asteroid: Asteroid) -> ThreatAssessment:
    """Briefing figures for an asteroid."""
    energy = calculate_impact_energy(asteroid.mass_kg, asteroid.velocity_kps)
    radius = calculate_damage_radius(energy)

    if asteroid.palermo_scale > 0:
        palermo_summary = "Threat level exceeds background risk"
    else:
        palermo_summary = f"{abs(asteroid.palermo_scale):.1f}x below background hazard level"

    odds = None
    if asteroid.impact_probability > 0:
        odds = round_half_up(1 / asteroid.impact_probability)

    return ThreatAssessment(
        asteroid_name=asteroid.name,
        impact_energy_mt=energy,
        damage_radius_km=radius,
        affected_area_km2=math.pi * radius * radius,
        torino_scale=asteroid.torino_scale,
        torino_description=get_torino_description(asteroid.torino_scale),
        torino_band=torino_band(asteroid.torino_scale),
        palermo_scale=asteroid.palermo_scale,
        palermo_summary=palermo_summary,
        impact_odds=odds,
    )


# =============================================================================
# STRATEGY COMPARISON
# =============================================================================

@dataclass(frozen=True)
class StrategyComparison:
    """
    One strategy measured against one asteroid.

    Attributes:
        strategy_id: Strategy id.
        strategy_code: Mission code.
        effectiveness: Effectiveness for the asteroid's size class.
        success_probability: success_rate * effectiveness (0-1).
        display_probability: Mission HUD estimate (percent).
        baseline_casualties: Casualties if the asteroid strikes.
        reduced_casualties: Expected casualties with this strategy.
        lives_protected: Baseline minus reduced, per bound.
    """
    strategy_id: str
    strategy_code: str
    effectiveness: float
    success_probability: float
    display_probability: float
    baseline_casualties: CasualtyEstimate
    reduced_casualties: CasualtyEstimate
    lives_protected: CasualtyEstimate


def compare_strategy(strategy: DefenseStrategy, asteroid: Asteroid) -> StrategyComparison:
    """Compare one strategy against an asteroid."""
    casualties = assess(asteroid.mass_kg, asteroid.velocity_kps).casualties
    probability = comparison_probability(strategy, asteroid)

    reduced = CasualtyEstimate(
        min=round_half_up(casualties.min * (1 - probability)),
        max=round_half_up(casualties.max * (1 - probability)),
        label=casualties.label,
    )
    protected = CasualtyEstimate(
        min=casualties.min - reduced.min,
        max=casualties.max - reduced.max,
        label=casualties.label,
    )

    return StrategyComparison(
        strategy_id=strategy.strategy_id,
        strategy_code=strategy.code,
        effectiveness=strategy.effectiveness_for(asteroid.size_class),
        success_probability=probability,
        display_probability=estimate_success_probability(strategy, asteroid),
        baseline_casualties=casualties,
        reduced_casualties=reduced,
        lives_protected=protected,
    )


def compare_strategies(
    strategies: list[DefenseStrategy],
    asteroid: Asteroid
) -> list[StrategyComparison]:
    """All strategies compared against an asteroid, best first."""
    comparisons = [compare_strategy(strategy, asteroid) for strategy in strategies]
    return sorted(comparisons, key=lambda c: c.success_probability, reverse=True)
